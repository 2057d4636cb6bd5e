from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from fecsim.engine.module import Module
from fecsim.stages import selector


@dataclass(frozen=True)
class Config:
    """Modem stage config (module name + that module's Config, None -> defaults)."""
    module: str = "bpsk"
    module_cfg: Any = None


def available_modules() -> List[str]:
    return selector.list_modules(__package__)


def build(cfg: Config, *, N: int) -> Module:
    """
    Build a modem for N-bit frames (modulate: bits -> symbols, demodulate: samples -> LLRs).
    """
    mod, module_cfg = selector.resolve(__package__, cfg)
    return mod.build(module_cfg, N=N)
