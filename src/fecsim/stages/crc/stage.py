from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from fecsim.engine.module import Module
from fecsim.stages import selector


@dataclass(frozen=True)
class Config:
    """
    CRC stage: `module` picks stages/crc/modules/<module>.py; `module_cfg` is its
    Config, None for defaults.
    """
    module: str = "poly"
    module_cfg: Any = None


def available_modules() -> List[str]:
    return selector.list_modules(__package__)


def build(cfg: Config, *, K: int) -> Module:
    """
    Build a CRC module protecting K bits (build: K -> K+width, extract: K+width -> K).
    """
    mod, module_cfg = selector.resolve(__package__, cfg)
    return mod.build(module_cfg, K=K)
