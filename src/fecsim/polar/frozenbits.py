"""
Frozen-bit selection for polar codes by Gaussian-approximation density evolution.

Each bit-channel is tracked by the mean m of its (consistent Gaussian) LLR.
The BPSK/AWGN channel starts at m = 2 / sigma^2. One polarization step maps m to

  worse  (check-node):    phi^-1(1 - (1 - phi(m))^2)
  better (variable-node): 2 * m

with Chung's two-piece approximation of phi. After log2(N) steps the N leaf
means rank the bit-channels; the N-K smallest are frozen.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from fecsim.engine.errors import FrozenBitsConfigError
from fecsim.tools.noise import Noise

# phi(x) ~ exp(ALPHA * x**GAMMA + BETA) for 0 < x < X_SPLIT, capped at 1 (BETA > 0 overshoots near 0)
ALPHA = -0.4527
BETA = 0.0218
GAMMA = 0.86
X_SPLIT = 10.0
Y_SPLIT = math.exp(ALPHA * X_SPLIT ** GAMMA + BETA)

_BISECT_ITERS = 200


def phi(x: float) -> float:
    if x <= 0.0:
        return 1.0
    if x < X_SPLIT:
        return min(1.0, math.exp(ALPHA * x ** GAMMA + BETA))
    return math.sqrt(math.pi / x) * math.exp(-x / 4.0) * (1.0 - 10.0 / (7.0 * x))


def phi_inv(y: float) -> float:
    if y >= 1.0:
        return 0.0
    if y <= 0.0:
        return math.inf
    if y >= Y_SPLIT:
        return ((math.log(y) - BETA) / ALPHA) ** (1.0 / GAMMA)

    # Asymptotic branch has no closed-form inverse; it is decreasing on [X_SPLIT, inf).
    lo, hi = X_SPLIT, 2.0 * X_SPLIT
    while phi(hi) > y:
        lo, hi = hi, 2.0 * hi
    for _ in range(_BISECT_ITERS):
        mid = 0.5 * (lo + hi)
        if mid == lo or mid == hi:
            break
        if phi(mid) > y:
            lo = mid
        else:
            hi = mid
    return 0.5 * (lo + hi)


def _check_node(m: float) -> float:
    p = phi(m)
    if p == 0.0:
        # phi underflowed; for large m, phi(m) ~ exp(-m/4) so doubling it costs 4*ln2.
        return m - 4.0 * math.log(2.0)
    return min(phi_inv(p * (2.0 - p)), m)


def _validate(N: int, K: int) -> None:
    if not isinstance(N, int) or not isinstance(K, int):
        raise FrozenBitsConfigError(f"N and K must be ints, got N={N!r}, K={K!r}")
    if N < 2 or (N & (N - 1)) != 0:
        raise FrozenBitsConfigError(f"code length N must be a power of two >= 2, got N={N}")
    if K <= 0:
        raise FrozenBitsConfigError(f"dimension K must be > 0, got K={K} (N={N})")
    if K >= N:
        raise FrozenBitsConfigError(f"dimension K must be < N, got K={K}, N={N}")


def reliabilities(N: int, sigma: float) -> np.ndarray:
    """
    Mean LLR of each of the N bit-channels, in natural bit order.

    Computed in place over a single length-N array: at level l, the block of
    stride 2**(m-l+1) starting at each t*stride holds the parent metric, which
    splits into the worse child (same slot) and the better child (half a
    stride further).
    """
    if N < 1 or (N & (N - 1)) != 0:
        raise FrozenBitsConfigError(f"code length N must be a power of two, got N={N}")
    if not (sigma > 0.0) or not math.isfinite(sigma):
        raise FrozenBitsConfigError(f"sigma must be a positive finite float, got {sigma!r}")

    m = N.bit_length() - 1
    z = np.full(N, 2.0 / (sigma * sigma), dtype=np.float64)

    for level in range(1, m + 1):
        stride = 1 << (m - level + 1)
        half = stride >> 1
        for t in range(1 << (level - 1)):
            parent = z[t * stride]
            z[t * stride] = _check_node(parent)
            z[t * stride + half] = 2.0 * parent
    return z


def ranking(z: np.ndarray) -> np.ndarray:
    """
    Positions ordered from least to most reliable. Stable: equal metrics keep
    ascending position order, so the result is a strict total order.
    """
    return np.argsort(z, kind="stable")


def frozen_bits(N: int, K: int, sigma: float) -> np.ndarray:
    """
    Boolean mask of length N, True at the N-K least reliable positions.
    """
    _validate(N, K)
    order = ranking(reliabilities(N, sigma))
    mask = np.zeros(N, dtype=bool)
    mask[order[: N - K]] = True
    return mask


class FrozenBitsGA:
    """
    Stateful wrapper: configure (K, N) once, set the design noise, generate.

    best_channels holds positions from most to least reliable after generate().
    """

    def __init__(self, K: int, N: int):
        _validate(N, K)
        self.K = K
        self.N = N
        self.noise: Optional[Noise] = None
        self.best_channels: Optional[np.ndarray] = None

    def set_noise(self, noise: Noise) -> None:
        self.noise = noise
        self.best_channels = None

    def generate(self) -> np.ndarray:
        if self.noise is None:
            raise RuntimeError("FrozenBitsGA.generate: set_noise() must be called first")
        order = ranking(reliabilities(self.N, self.noise.sigma))
        self.best_channels = order[::-1].copy()
        mask = np.zeros(self.N, dtype=bool)
        mask[order[: self.N - self.K]] = True
        return mask
