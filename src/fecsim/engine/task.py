from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, List, Optional

import numpy as np

from fecsim.engine.errors import UnboundRequiredInput
from fecsim.engine.socket import Direction, ElementType, Socket
from fecsim.tools.stats import TaskStats

if TYPE_CHECKING:
    from fecsim.engine.module import Module

logger = logging.getLogger(__name__)

Codelet = Callable[..., None]


class Task:
    """
    Atomic unit of computation.

    The codelet receives the socket buffers positionally, in declaration
    order, and must write its outputs in place (out[:] = ...). Replacing an
    output array would break the aliasing established by bind().

    Per-task flags:
      - fast: skip buffer shape/dtype validation around the codelet
      - debug: log the first `debug_limit` elements of every socket
      - stats: time every call into `self.stats`
    """

    def __init__(self, module: "Module", name: str, codelet: Optional[Codelet] = None):
        self.module = module
        self.name = name
        self.codelet = codelet
        self.sockets: List[Socket] = []

        self.fast = False
        self.debug = False
        self.debug_limit = 16
        self.stats_enabled = False
        self.stats = TaskStats(name=self.full_name)

    @property
    def full_name(self) -> str:
        return f"{self.module.name}::{self.name}"

    @property
    def inputs(self) -> List[Socket]:
        return [s for s in self.sockets if s.direction is Direction.IN]

    @property
    def outputs(self) -> List[Socket]:
        return [s for s in self.sockets if s.direction is Direction.OUT]

    def create_socket_in(self, name: str, count: int, etype: ElementType) -> Socket:
        return self._add_socket(name, Direction.IN, count, etype)

    def create_socket_out(self, name: str, count: int, etype: ElementType) -> Socket:
        return self._add_socket(name, Direction.OUT, count, etype)

    def _add_socket(self, name: str, direction: Direction, count: int, etype: ElementType) -> Socket:
        if any(s.name == name for s in self.sockets):
            raise ValueError(f"task {self.full_name}: duplicate socket name '{name}'")
        s = Socket(self, name, direction, etype, count)
        self.sockets.append(s)
        return s

    def __getitem__(self, name: str) -> Socket:
        for s in self.sockets:
            if s.name == name:
                return s
        raise KeyError(f"task {self.full_name} has no socket '{name}'")

    def check_bound(self) -> None:
        for s in self.inputs:
            if s.bound_to is None:
                raise UnboundRequiredInput(
                    f"{s.full_name} ({s.etype.value}[{s.count}]) is not bound to any output"
                )

    def exec(self) -> None:
        self.check_bound()
        if self.codelet is None:
            raise RuntimeError(f"task {self.full_name} has no codelet")

        if not self.fast:
            self._validate_buffers("before")

        if self.stats_enabled:
            t0 = time.perf_counter()
            self.codelet(*[s.data for s in self.sockets])
            self.stats.record(time.perf_counter() - t0)
        else:
            self.codelet(*[s.data for s in self.sockets])

        if not self.fast:
            self._validate_buffers("after")

        if self.debug:
            self._dump()

    def _validate_buffers(self, when: str) -> None:
        for s in self.sockets:
            if s.direction is Direction.IN and s.data is not s.bound_to.data:
                raise RuntimeError(
                    f"{s.full_name}: producer {s.bound_to.full_name} replaced its buffer after binding"
                )
            d = s.data
            if not isinstance(d, np.ndarray) or d.shape != (s.count,) or d.dtype != s.etype.dtype:
                got = f"{d.dtype}{list(d.shape)}" if isinstance(d, np.ndarray) else type(d).__name__
                raise RuntimeError(
                    f"{s.full_name}: buffer {when} exec is {got}, "
                    f"declared {s.etype.value}[{s.count}]"
                )

    def _dump(self) -> None:
        n = self.debug_limit
        for s in self.sockets:
            head = s.data[:n]
            more = " ..." if s.count > n else ""
            logger.debug("%s %s: %s%s", s.direction.value.upper(), s.full_name, np.array2string(head), more)

    def reset_stats(self) -> None:
        self.stats = TaskStats(name=self.full_name)

    def __repr__(self) -> str:
        return f"Task({self.full_name}, sockets={[s.name for s in self.sockets]})"
