from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


@dataclass(frozen=True)
class Config:
    """
    Equiprobable random bits.

    seed: seed of the numpy Generator (None -> fresh OS entropy).
    """
    seed: Optional[int] = 0


class Source(Module):
    def __init__(self, K: int, cfg: Any, name: str = "source"):
        super().__init__(name)
        self.K = K
        self._rng = np.random.default_rng(_get_seed(cfg))

        t = self.create_task("generate", self._generate)
        t.create_socket_out("U_K", K, ElementType.INT32)

    def _generate(self, u_k: np.ndarray) -> None:
        u_k[:] = self._rng.integers(0, 2, size=u_k.size, dtype=np.int32)


def _get_seed(cfg: Any) -> Optional[int]:
    if not hasattr(cfg, "seed"):
        raise AttributeError("cfg missing required attribute: seed")
    seed = cfg.seed
    if seed is not None and not isinstance(seed, int):
        raise TypeError("cfg.seed must be int or None")
    return seed


def build(cfg: Any, *, K: int) -> Source:
    return Source(K, cfg)
