from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class Noise:
    """
    Noise parameter set for one SNR point. Immutable; shared by reference
    between every module that consumes it.
    """
    sigma: float
    ebn0: float
    esn0: float


def ebn0_to_esn0(ebn0: float, rate: float, bps: int = 1) -> float:
    """
    Es/N0 (dB) = Eb/N0 (dB) + 10*log10(R * bits_per_symbol)
    """
    if not (0.0 < rate <= 1.0):
        raise ValueError(f"rate must be in (0, 1], got {rate}")
    if bps <= 0:
        raise ValueError(f"bps must be > 0, got {bps}")
    return ebn0 + 10.0 * math.log10(rate * bps)


def esn0_to_sigma(esn0: float, upsample: int = 1) -> float:
    """
    Per-real-dimension noise standard deviation for unit-energy symbols.
    """
    return math.sqrt(upsample / (2.0 * 10.0 ** (esn0 / 10.0)))


def from_ebn0(ebn0: float, rate: float, bps: int = 1) -> Noise:
    esn0 = ebn0_to_esn0(ebn0, rate, bps)
    return Noise(sigma=esn0_to_sigma(esn0), ebn0=ebn0, esn0=esn0)
