from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


@dataclass(frozen=True)
class Config:
    """
    Non-reflected CRC over a bit sequence (MSB-first, no final XOR).

    Defaults are CRC-16/CCITT-FALSE:
      width=16 poly=0x1021 init=0xFFFF
      Check(bits of "123456789") = 0x29B1
    """
    width: int = 16
    poly: int = 0x1021
    init: int = 0xFFFF


def crc_bits(bits: Sequence[int], *, width: int, poly: int, init: int) -> int:
    mask = (1 << width) - 1
    top = 1 << (width - 1)
    crc = init & mask

    for b in bits:
        crc ^= (int(b) & 1) << (width - 1)
        if crc & top:
            crc = ((crc << 1) ^ poly) & mask
        else:
            crc = (crc << 1) & mask
    return crc


def _int_to_bits_msb(x: int, width: int) -> np.ndarray:
    return np.array([(x >> i) & 1 for i in range(width - 1, -1, -1)], dtype=np.int32)


class CRC(Module):
    """
    Tasks:
      build:   U_K1[K] -> U_K2[K+width]   (append CRC)
      extract: V_K1[K+width] -> V_K2[K]   (drop CRC)
      check:   V_K[K+width] -> ok[1]      (1 if the CRC matches)
    """

    def __init__(self, K: int, cfg: Any, name: str = "crc"):
        super().__init__(name)
        self.width, self.poly, self.init = _get_params(cfg)
        self.K = K
        w = self.width

        t = self.create_task("build", self._build)
        t.create_socket_in("U_K1", K, ElementType.INT32)
        t.create_socket_out("U_K2", K + w, ElementType.INT32)

        t = self.create_task("extract", self._extract)
        t.create_socket_in("V_K1", K + w, ElementType.INT32)
        t.create_socket_out("V_K2", K, ElementType.INT32)

        t = self.create_task("check", self._check)
        t.create_socket_in("V_K", K + w, ElementType.INT32)
        t.create_socket_out("ok", 1, ElementType.INT8)

    @property
    def size(self) -> int:
        return self.width

    def compute(self, bits: Sequence[int]) -> int:
        return crc_bits(bits, width=self.width, poly=self.poly, init=self.init)

    def check(self, bits_with_crc: np.ndarray) -> bool:
        data = bits_with_crc[: self.K]
        return bool(np.array_equal(bits_with_crc[self.K:], _int_to_bits_msb(self.compute(data), self.width)))

    def _build(self, u_k1: np.ndarray, u_k2: np.ndarray) -> None:
        u_k2[: self.K] = u_k1
        u_k2[self.K:] = _int_to_bits_msb(self.compute(u_k1), self.width)

    def _extract(self, v_k1: np.ndarray, v_k2: np.ndarray) -> None:
        v_k2[:] = v_k1[: self.K]

    def _check(self, v_k: np.ndarray, ok: np.ndarray) -> None:
        ok[0] = 1 if self.check(v_k) else 0


def _get_params(cfg: Any) -> tuple[int, int, int]:
    vals = []
    for name in ("width", "poly", "init"):
        v = getattr(cfg, name, None)
        if v is None:
            raise AttributeError(f"cfg missing required attribute: {name}")
        if not isinstance(v, int):
            raise TypeError(f"cfg.{name} must be int")
        vals.append(v)

    width, poly, init = vals
    if not (1 <= width <= 64):
        raise ValueError("cfg.width must be in [1,64]")
    if poly <= 0 or poly >= (1 << width):
        raise ValueError(f"cfg.poly must fit in {width} bits and be non-zero")
    if init < 0 or init >= (1 << width):
        raise ValueError(f"cfg.init must fit in {width} bits")
    return width, poly, init


def build(cfg: Any, *, K: int) -> CRC:
    return CRC(K, cfg)
