from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


def puncture_mask(N_cw: int, pattern: Optional[Sequence[int]]) -> np.ndarray:
    """
    Keep-mask of length N_cw: `pattern` repeated over the codeword (1 = sent).
    None keeps every bit.
    """
    if pattern is None:
        return np.ones(N_cw, dtype=bool)
    p = np.asarray(pattern, dtype=np.int64).reshape(-1)
    if p.size == 0 or np.any((p != 0) & (p != 1)):
        raise ValueError(f"puncture pattern must be a non-empty 0/1 sequence, got {tuple(pattern)}")
    reps = -(-N_cw // p.size)
    mask = np.tile(p, reps)[:N_cw].astype(bool)
    if not mask.any():
        raise ValueError(f"puncture pattern {tuple(pattern)} removes every bit of an {N_cw}-bit codeword")
    return mask


class Puncturer(Module):
    """
    puncture:   X_N1[N_cw] int32 -> X_N2[N] int32
    depuncture: Y_N1[N] float32 -> Y_N2[N_cw] float32 (erased positions get LLR 0)
    """

    def __init__(self, N_cw: int, pattern: Optional[Sequence[int]] = None, name: str = "puncturer"):
        super().__init__(name)
        self.mask = puncture_mask(N_cw, pattern)
        self.N_cw = N_cw
        self.N = int(self.mask.sum())

        t = self.create_task("puncture", self._puncture)
        t.create_socket_in("X_N1", N_cw, ElementType.INT32)
        t.create_socket_out("X_N2", self.N, ElementType.INT32)

        t = self.create_task("depuncture", self._depuncture)
        t.create_socket_in("Y_N1", self.N, ElementType.FLOAT32)
        t.create_socket_out("Y_N2", N_cw, ElementType.FLOAT32)

    def _puncture(self, x_n1: np.ndarray, x_n2: np.ndarray) -> None:
        x_n2[:] = x_n1[self.mask]

    def _depuncture(self, y_n1: np.ndarray, y_n2: np.ndarray) -> None:
        y_n2[:] = 0.0
        y_n2[self.mask] = y_n1
