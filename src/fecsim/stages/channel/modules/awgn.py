from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


@dataclass(frozen=True)
class Config:
    """
    Additive white Gaussian noise, std = current Noise.sigma.

    seed: seed of the numpy Generator (None -> fresh OS entropy).
    """
    seed: Optional[int] = 0


class Channel(Module):
    def __init__(self, N: int, cfg: Any, name: str = "channel"):
        super().__init__(name)
        seed = getattr(cfg, "seed", None)
        if seed is not None and not isinstance(seed, int):
            raise TypeError("cfg.seed must be int or None")
        self.N = N
        self._rng = np.random.default_rng(seed)

        t = self.create_task("add_noise", self._add_noise)
        t.create_socket_in("X_N", N, ElementType.FLOAT32)
        t.create_socket_out("Y_N", N, ElementType.FLOAT32)

    def _add_noise(self, x_n: np.ndarray, y_n: np.ndarray) -> None:
        if self.noise is None:
            raise RuntimeError(f"{self.name}: add_noise needs set_noise() first")
        y_n[:] = x_n + self._rng.normal(0.0, self.noise.sigma, size=x_n.size)


def build(cfg: Any, *, N: int) -> Channel:
    return Channel(N, cfg)
