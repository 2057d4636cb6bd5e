from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from fecsim.stages import selector


@dataclass(frozen=True)
class Config:
    """
    Codec stage config.

    module: codec module name (e.g. "conv_k7_r12")
    module_cfg: instance of that module's Config (or None -> defaults)
    """
    module: str = "conv_k7_r12"
    module_cfg: Any = None


def available_modules() -> List[str]:
    return selector.list_modules(__package__)


def build(cfg: Config, *, K: int):
    """
    Build a codec for K information bits per frame.

    Returns the module's Codec object (encoder, decoder, puncturer and optional
    interleaver, plus K / N_cw / N / rate).
    """
    mod, module_cfg = selector.resolve(__package__, cfg)
    return mod.build(module_cfg, K=K)
