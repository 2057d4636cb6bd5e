from __future__ import annotations

import logging
import signal
import threading
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Interrupt:
    """
    Cooperative cancellation state for a sweep.

    Lifecycle:
      arm()     -> cleared; optionally installs a SIGINT handler (main thread only)
      trigger() -> set from anywhere (signal handler, another thread, a test)
      is_set()  -> polled once per frame by the sweep driver, lock-free
      disarm()  -> restores the previous SIGINT handler

    Usable as a context manager: `with Interrupt() as it: ...` arms with the
    SIGINT handler and disarms on exit.
    """

    def __init__(self) -> None:
        self._flag = threading.Event()
        self._prev_handler: Any = None
        self._installed = False

    def arm(self, *, install_signal: bool = True) -> "Interrupt":
        self._flag.clear()
        if (
            install_signal
            and not self._installed
            and threading.current_thread() is threading.main_thread()
        ):
            self._prev_handler = signal.signal(signal.SIGINT, self._on_sigint)
            self._installed = True
        return self

    def disarm(self) -> None:
        if self._installed:
            signal.signal(signal.SIGINT, self._prev_handler)
            self._installed = False
            self._prev_handler = None

    def __enter__(self) -> "Interrupt":
        return self.arm()

    def __exit__(self, *exc: Any) -> None:
        self.disarm()

    def trigger(self) -> None:
        self._flag.set()

    def is_set(self) -> bool:
        return self._flag.is_set()

    def _on_sigint(self, signum: int, frame: Optional[Any]) -> None:
        logger.warning("interrupt received (signal %d); finishing current frame", signum)
        self.trigger()
