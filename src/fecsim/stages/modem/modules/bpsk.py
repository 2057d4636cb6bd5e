from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


@dataclass(frozen=True)
class Config:
    """
    BPSK modem: bit b -> symbol 1 - 2b (unit energy, 1 bit per symbol).

    Demodulation outputs LLR = log(P(b=0)/P(b=1)) = 2*y / sigma^2.
    """
    bps: int = 1


class Modem(Module):
    def __init__(self, N: int, cfg: Any, name: str = "modem"):
        super().__init__(name)
        bps = getattr(cfg, "bps", None)
        if bps != 1:
            raise ValueError(f"bpsk: cfg.bps must be 1, got {bps!r}")
        self.N = N
        self.bps = bps

        t = self.create_task("modulate", self._modulate)
        t.create_socket_in("X_N1", N, ElementType.INT32)
        t.create_socket_out("X_N2", N, ElementType.FLOAT32)

        t = self.create_task("demodulate", self._demodulate)
        t.create_socket_in("Y_N1", N, ElementType.FLOAT32)
        t.create_socket_out("Y_N2", N, ElementType.FLOAT32)

    def _modulate(self, x_n1: np.ndarray, x_n2: np.ndarray) -> None:
        x_n2[:] = 1.0 - 2.0 * x_n1

    def _demodulate(self, y_n1: np.ndarray, y_n2: np.ndarray) -> None:
        if self.noise is None:
            raise RuntimeError(f"{self.name}: demodulate needs set_noise() first")
        y_n2[:] = y_n1 * (2.0 / (self.noise.sigma * self.noise.sigma))


def build(cfg: Any, *, N: int) -> Modem:
    return Modem(N, cfg)
