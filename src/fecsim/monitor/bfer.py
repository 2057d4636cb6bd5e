from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


@dataclass(frozen=True)
class Config:
    """
    Bit/frame error monitor.

    max_fe: stop the SNR point once this many erroneous frames were seen (> 0).
    max_frames: also stop after this many frames; 0 means no frame cap.
    """
    max_fe: int = 100
    max_frames: int = 0


class State(Enum):
    RUNNING = "running"
    LIMIT_REACHED = "limit_reached"


@dataclass(frozen=True)
class Snapshot:
    K: int
    n_frames: int
    n_bit_errors: int
    n_frame_errors: int

    @property
    def ber(self) -> float:
        n_bits = self.n_frames * self.K
        return self.n_bit_errors / n_bits if n_bits else 0.0

    @property
    def fer(self) -> float:
        return self.n_frame_errors / self.n_frames if self.n_frames else 0.0


class MonitorBFER(Module):
    """
    Counts bit/frame errors between reference bits U and decoded bits V.

    The stopping predicate is evaluated right after each check_errors, so the
    transition to LIMIT_REACHED happens on the exact frame that satisfies it.
    """

    def __init__(self, K: int, cfg: Config, name: str = "monitor"):
        super().__init__(name)
        _validate(cfg)
        self.K = K
        self.cfg = cfg
        self._handlers: List[Callable[[], None]] = []

        t = self.create_task("check_errors", self._check_errors)
        t.create_socket_in("U", K, ElementType.INT32)
        t.create_socket_in("V", K, ElementType.INT32)

        self.reset()

    def reset(self) -> None:
        self.n_frames = 0
        self.n_bit_errors = 0
        self.n_frame_errors = 0
        self.state = State.RUNNING

    def add_handler_check(self, fn: Callable[[], None]) -> None:
        """Register a callback run after every check_errors."""
        self._handlers.append(fn)

    def _check_errors(self, u: np.ndarray, v: np.ndarray) -> None:
        be = int(np.count_nonzero(u != v))
        self.n_bit_errors += be
        if be:
            self.n_frame_errors += 1
        self.n_frames += 1

        if self.state is State.RUNNING and self._limit_predicate():
            self.state = State.LIMIT_REACHED

        for fn in self._handlers:
            fn()

    def _limit_predicate(self) -> bool:
        if self.n_frame_errors >= self.cfg.max_fe:
            return True
        return self.cfg.max_frames > 0 and self.n_frames >= self.cfg.max_frames

    def fe_limit_achieved(self) -> bool:
        return self.n_frame_errors >= self.cfg.max_fe

    def frame_limit_achieved(self) -> bool:
        return self.cfg.max_frames > 0 and self.n_frames >= self.cfg.max_frames

    def is_done(self) -> bool:
        return self.state is State.LIMIT_REACHED

    def snapshot(self) -> Snapshot:
        return Snapshot(
            K=self.K,
            n_frames=self.n_frames,
            n_bit_errors=self.n_bit_errors,
            n_frame_errors=self.n_frame_errors,
        )


def _validate(cfg: Config) -> None:
    if not isinstance(cfg.max_fe, int) or cfg.max_fe <= 0:
        raise ValueError(f"monitor cfg.max_fe must be a positive int, got {cfg.max_fe!r}")
    if not isinstance(cfg.max_frames, int) or cfg.max_frames < 0:
        raise ValueError(f"monitor cfg.max_frames must be an int >= 0, got {cfg.max_frames!r}")


def build(cfg: Config, *, K: int) -> MonitorBFER:
    return MonitorBFER(K, cfg)
