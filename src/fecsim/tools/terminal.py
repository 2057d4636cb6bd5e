from __future__ import annotations

import sys
import threading
import time
from typing import List, Optional, Sequence, TextIO, Tuple

from fecsim.monitor.bfer import MonitorBFER
from fecsim.tools.noise import Noise


class Reporter:
    """
    Pulls values from a collaborator and formats them as table cells.
    Subclasses define `title`, `columns` and `values()`.
    """
    title = ""
    columns: Sequence[Tuple[str, str]] = ()

    def init(self) -> None:
        pass

    def values(self) -> List[str]:
        raise NotImplementedError


class NoiseReporter(Reporter):
    title = "Signal Noise Ratio"
    columns = (("Eb/N0", "(dB)"), ("Es/N0", "(dB)"), ("Sigma", ""))

    def __init__(self) -> None:
        self.noise: Optional[Noise] = None

    def set_noise(self, noise: Noise) -> None:
        self.noise = noise

    def values(self) -> List[str]:
        n = self.noise
        if n is None:
            return ["-", "-", "-"]
        return [f"{n.ebn0:.2f}", f"{n.esn0:.2f}", f"{n.sigma:.4f}"]


class BFERReporter(Reporter):
    title = "Bit Error Rate (BER) and Frame Error Rate (FER)"
    columns = (("FRA", ""), ("BE", ""), ("FE", ""), ("BER", ""), ("FER", ""))

    def __init__(self, monitor: MonitorBFER) -> None:
        self.monitor = monitor

    def values(self) -> List[str]:
        # Read while the simulation thread may be mid-frame; approximate is fine.
        s = self.monitor.snapshot()
        return [
            str(s.n_frames),
            str(s.n_bit_errors),
            str(s.n_frame_errors),
            f"{s.ber:.2e}",
            f"{s.fer:.2e}",
        ]


class ThroughputReporter(Reporter):
    title = "Global throughput and elapsed time"
    columns = (("SIM_THR", "(Mb/s)"), ("ET", "(s)"))

    def __init__(self, monitor: MonitorBFER) -> None:
        self.monitor = monitor
        self._t0 = time.perf_counter()

    def init(self) -> None:
        self._t0 = time.perf_counter()

    def elapsed(self) -> float:
        return time.perf_counter() - self._t0

    def throughput_mbps(self) -> float:
        dt = self.elapsed()
        if dt <= 0.0:
            return 0.0
        return (self.monitor.n_frames * self.monitor.K) / dt / 1e6

    def values(self) -> List[str]:
        return [f"{self.throughput_mbps():.4f}", f"{self.elapsed():.2f}"]


class Terminal:
    """
    Table-style console output.

    The core calls legend() once before the sweep and final_report() after each
    SNR point. start_temp_report() spawns a daemon thread that periodically
    rewrites the current line with in-progress values until stop_temp_report().
    """

    COL_WIDTH = 11

    def __init__(self, reporters: Sequence[Reporter], stream: Optional[TextIO] = None):
        self.reporters = list(reporters)
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _write(self, text: str) -> None:
        with self._lock:
            self.stream.write(text)
            self.stream.flush()

    def _cells(self, values: Sequence[str]) -> str:
        return " ".join(f"{v:>{self.COL_WIDTH}}" for v in values)

    def legend(self) -> None:
        groups, names, units = [], [], []
        for r in self.reporters:
            width = len(r.columns) * (self.COL_WIDTH + 1) - 1
            groups.append(f"{r.title[:width]:^{width}}")
            names.extend(c[0] for c in r.columns)
            units.extend(c[1] for c in r.columns)
        rule = "# " + "|".join("-" * len(g) for g in groups)
        self._write(
            "\n".join([
                rule,
                "# " + "|".join(groups),
                rule,
                "# " + self._row(names),
                "# " + self._row(units),
                rule,
            ]) + "\n"
        )

    def _row(self, values: Sequence[str]) -> str:
        parts, i = [], 0
        for r in self.reporters:
            n = len(r.columns)
            parts.append(self._cells(values[i:i + n]))
            i += n
        return "|".join(parts)

    def _values(self) -> List[str]:
        out: List[str] = []
        for r in self.reporters:
            out.extend(r.values())
        return out

    def init(self) -> None:
        for r in self.reporters:
            r.init()

    def temp_report(self) -> None:
        self._write("\r  " + self._row(self._values()) + " *")

    def start_temp_report(self, frequency_s: float) -> None:
        if frequency_s <= 0:
            return
        self.stop_temp_report()
        self._stop.clear()

        def loop() -> None:
            while not self._stop.wait(frequency_s):
                self.temp_report()

        self._thread = threading.Thread(target=loop, daemon=True)
        self._thread.start()

    def stop_temp_report(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def final_report(self, aborted: bool = False) -> None:
        self.stop_temp_report()
        suffix = " x" if aborted else ""
        self._write("\r  " + self._row(self._values()) + suffix + "\n")
