from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from fecsim.engine.errors import ProducerAfterConsumer
from fecsim.engine.module import Module
from fecsim.engine.task import Task


class Sequence:
    """
    Per-frame scheduler over a fixed, user-declared task order.

    Construction validates the whole graph once:
      - every input socket of every task is bound
      - a producer scheduled in this sequence runs before its consumers

    Producers outside the sequence are allowed (their buffers are read as-is).
    """

    def __init__(self, tasks: Iterable[Task]):
        self.tasks: List[Task] = list(tasks)
        if not self.tasks:
            raise ValueError("Sequence needs at least one task")
        self.n_frames = 0
        self._validate()

    def _validate(self) -> None:
        position: Dict[int, int] = {}
        for i, t in enumerate(self.tasks):
            if id(t) in position:
                raise ValueError(f"Sequence: task {t.full_name} is scheduled twice")
            position[id(t)] = i

        for i, t in enumerate(self.tasks):
            t.check_bound()
            for s in t.inputs:
                producer = s.bound_to.task
                j = position.get(id(producer))
                if j is not None and j >= i:
                    raise ProducerAfterConsumer(
                        f"{s.full_name} reads {s.bound_to.full_name}, but {producer.full_name} "
                        f"is scheduled at position {j}, after {t.full_name} at position {i}"
                    )

    @property
    def modules(self) -> List[Module]:
        out: List[Module] = []
        for t in self.tasks:
            if all(m is not t.module for m in out):
                out.append(t.module)
        return out

    def configure(
        self,
        *,
        fast: Optional[bool] = None,
        debug: Optional[bool] = None,
        debug_limit: Optional[int] = None,
        stats: Optional[bool] = None,
    ) -> None:
        """Apply the same flags to every scheduled task."""
        configure_tasks(self.tasks, fast=fast, debug=debug, debug_limit=debug_limit, stats=stats)

    def execute_frame(self) -> None:
        for t in self.tasks:
            t.exec()
        self.n_frames += 1


def configure_tasks(
    tasks: Iterable[Task],
    *,
    fast: Optional[bool] = None,
    debug: Optional[bool] = None,
    debug_limit: Optional[int] = None,
    stats: Optional[bool] = None,
) -> None:
    """
    Set per-task flags on `tasks`, scheduled or not. Flags left as None are untouched.
    """
    for t in tasks:
        if debug is not None:
            t.debug = debug
        if debug_limit is not None:
            t.debug_limit = debug_limit
        if stats is not None:
            t.stats_enabled = stats
        if fast is not None:
            t.fast = fast
