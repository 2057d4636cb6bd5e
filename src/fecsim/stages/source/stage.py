from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from fecsim.engine.module import Module
from fecsim.stages import selector


@dataclass(frozen=True)
class Config:
    """
    Source stage config.

    module: source module name (e.g. "uniform")
    module_cfg: instance of that module's Config (or None -> defaults)
    """
    module: str = "uniform"
    module_cfg: Any = None


def available_modules() -> List[str]:
    return selector.list_modules(__package__)


def build(cfg: Config, *, K: int) -> Module:
    """
    Build a source emitting K information bits per frame on generate::U_K.
    """
    mod, module_cfg = selector.resolve(__package__, cfg)
    return mod.build(module_cfg, K=K)
