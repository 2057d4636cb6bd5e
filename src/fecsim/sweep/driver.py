from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from fecsim.engine.sequence import Sequence
from fecsim.monitor.bfer import MonitorBFER, Snapshot
from fecsim.tools import noise as noise_tools
from fecsim.tools.interrupt import Interrupt
from fecsim.tools.noise import Noise
from fecsim.tools.terminal import Terminal

logger = logging.getLogger(__name__)

# Absorbs float error in (max - min) / step so 0.0 -> 2.1 by 0.1 gives 21 points, not 22.
_STEP_EPS = 1e-9


@dataclass(frozen=True)
class Config:
    """
    SNR sweep over [ebn0_min, ebn0_max) in ebn0_step increments (all dB).

    report_frequency_s: period of the in-progress terminal line; 0 disables it.
    catch_sigint: route Ctrl-C into the sweep interrupt instead of raising.
    """
    ebn0_min: float = 0.0
    ebn0_max: float = 2.1
    ebn0_step: float = 0.1
    report_frequency_s: float = 1.0
    catch_sigint: bool = True


@dataclass(frozen=True)
class PointResult:
    noise: Noise
    counters: Snapshot
    elapsed_s: float
    aborted: bool

    @property
    def ebn0(self) -> float:
        return self.noise.ebn0

    @property
    def ber(self) -> float:
        return self.counters.ber

    @property
    def fer(self) -> float:
        return self.counters.fer


def snr_points(ebn0_min: float, ebn0_max: float, ebn0_step: float) -> List[float]:
    """
    Ascending SNR values in [ebn0_min, ebn0_max). Empty when min >= max.
    Values are min + i*step (no accumulated addition drift).
    """
    if not ebn0_step > 0:
        raise ValueError(f"ebn0_step must be > 0, got {ebn0_step}")
    if ebn0_min >= ebn0_max:
        return []
    n = math.ceil((ebn0_max - ebn0_min) / ebn0_step - _STEP_EPS)
    return [round(ebn0_min + i * ebn0_step, 10) for i in range(max(n, 0))]


class Sweep:
    """
    Outer simulation loop.

    For each SNR point:
      1. derive the Noise set from Eb/N0 and the code rate
      2. hand it to every noise consumer (anything with set_noise)
      3. execute frames until the monitor reaches its limit or the interrupt fires
      4. emit the final report; stop everything if interrupted
    """

    def __init__(
        self,
        cfg: Config,
        sequence: Sequence,
        monitor: MonitorBFER,
        *,
        rate: float,
        noise_consumers: Iterable[Any] = (),
        terminal: Optional[Terminal] = None,
        interrupt: Optional[Interrupt] = None,
    ):
        if not (0.0 < rate <= 1.0):
            raise ValueError(f"Sweep: code rate must be in (0, 1], got {rate}")
        self.cfg = cfg
        self.sequence = sequence
        self.monitor = monitor
        self.rate = rate
        self.noise_consumers = list(noise_consumers)
        self.terminal = terminal
        self.interrupt = interrupt if interrupt is not None else Interrupt()
        self.points = snr_points(cfg.ebn0_min, cfg.ebn0_max, cfg.ebn0_step)
        self.results: List[PointResult] = []

    def reset(self) -> None:
        """Reset every scheduled module (the monitor included)."""
        for m in self.sequence.modules:
            m.reset()
        if all(m is not self.monitor for m in self.sequence.modules):
            self.monitor.reset()

    def run(self) -> List[PointResult]:
        self.results = []
        if self.terminal is not None:
            self.terminal.legend()

        self.interrupt.arm(install_signal=self.cfg.catch_sigint)
        try:
            for ebn0 in self.points:
                res = self.run_point(ebn0)
                self.results.append(res)
                if res.aborted:
                    logger.warning("sweep aborted at Eb/N0=%.2f dB", ebn0)
                    break
        finally:
            self.interrupt.disarm()
        return self.results

    def run_point(self, ebn0: float) -> PointResult:
        noise = noise_tools.from_ebn0(ebn0, self.rate)
        self.reset()
        for c in self.noise_consumers:
            c.set_noise(noise)

        logger.info("Eb/N0=%.2f dB (Es/N0=%.2f dB, sigma=%.4f): start", noise.ebn0, noise.esn0, noise.sigma)

        if self.terminal is not None:
            self.terminal.init()
            self.terminal.start_temp_report(self.cfg.report_frequency_s)

        t0 = time.perf_counter()
        aborted = False
        try:
            while not self.monitor.is_done():
                if self.interrupt.is_set():
                    aborted = True
                    break
                self.sequence.execute_frame()
        finally:
            if self.terminal is not None:
                self.terminal.stop_temp_report()
        elapsed = time.perf_counter() - t0
        aborted = aborted or self.interrupt.is_set()

        if self.terminal is not None:
            self.terminal.final_report(aborted=aborted)

        counters = self.monitor.snapshot()
        logger.info(
            "Eb/N0=%.2f dB: frames=%d be=%d fe=%d ber=%.3e fer=%.3e",
            noise.ebn0, counters.n_frames, counters.n_bit_errors, counters.n_frame_errors,
            counters.ber, counters.fer,
        )
        return PointResult(noise=noise, counters=counters, elapsed_s=elapsed, aborted=aborted)
