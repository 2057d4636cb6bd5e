from __future__ import annotations

from typing import Optional

import numpy as np

KINDS = ("block", "random")


def pick_block_depth(size: int, desired_max: int = 8) -> int:
    # largest divisor <= desired_max; fallback to 1 (identity)
    for d in range(desired_max, 1, -1):
        if size % d == 0:
            return d
    return 1


def _block_permutation(size: int, depth: int) -> np.ndarray:
    """
    Rectangular block interleaver as a permutation:
    write row-major into [depth][width], read column-major.
    """
    if size % depth != 0:
        raise ValueError(f"block interleaver: size {size} not divisible by depth={depth}")
    width = size // depth
    pi = np.empty(size, dtype=np.int64)
    k = 0
    for c in range(width):
        for r in range(depth):
            pi[k] = r * width + c
            k += 1
    return pi


class Interleaver:
    """
    Fixed permutation over a codeword of `size` elements.

    init() must run before the first interleave/deinterleave; the permutation
    is then frozen for the lifetime of the codec.
    """

    def __init__(self, size: int, kind: str = "block", *, depth: int = 8, seed: int = 0):
        if kind not in KINDS:
            raise ValueError(f"interleaver kind must be one of {KINDS}, got {kind!r}")
        if depth <= 0:
            raise ValueError("interleaver depth must be > 0")
        self.size = size
        self.kind = kind
        self.depth = pick_block_depth(size, desired_max=depth)
        self.seed = seed
        self.pi: Optional[np.ndarray] = None
        self._pi_inv: Optional[np.ndarray] = None

    @property
    def is_initialized(self) -> bool:
        return self.pi is not None

    def init(self) -> None:
        if self.kind == "block":
            pi = _block_permutation(self.size, self.depth)
        else:
            pi = np.random.default_rng(self.seed).permutation(self.size)
        self.pi = pi
        self._pi_inv = np.argsort(pi)

    def _require_init(self) -> None:
        if self.pi is None:
            raise RuntimeError(f"{self.kind} interleaver ({self.size}) used before init()")

    def interleave(self, x: np.ndarray) -> np.ndarray:
        self._require_init()
        return x[self.pi]

    def deinterleave(self, y: np.ndarray) -> np.ndarray:
        self._require_init()
        return y[self._pi_inv]
