from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from fecsim.engine.module import Module
from fecsim.stages import selector


@dataclass(frozen=True)
class Config:
    """
    Channel stage config.

    module: "awgn" or "noiseless"
    module_cfg: instance of that module's Config (or None -> defaults)
    """
    module: str = "awgn"
    module_cfg: Any = None


def available_modules() -> List[str]:
    return selector.list_modules(__package__)


def build(cfg: Config, *, N: int) -> Module:
    """
    Build a channel carrying N real samples per frame on add_noise::X_N -> Y_N.
    """
    mod, module_cfg = selector.resolve(__package__, cfg)
    return mod.build(module_cfg, N=N)
