from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, TYPE_CHECKING

if TYPE_CHECKING:
    from fecsim.engine.module import Module


@dataclass
class TaskStats:
    """
    Timing accumulated by one task (only while its `stats_enabled` flag is set).
    Durations are seconds.
    """
    name: str
    n_calls: int = 0
    total_s: float = 0.0
    min_s: float = float("inf")
    max_s: float = 0.0

    def record(self, duration_s: float) -> None:
        self.n_calls += 1
        self.total_s += duration_s
        if duration_s < self.min_s:
            self.min_s = duration_s
        if duration_s > self.max_s:
            self.max_s = duration_s

    @property
    def avg_s(self) -> float:
        return self.total_s / self.n_calls if self.n_calls else 0.0


def collect(modules: Iterable["Module"], ordered: bool = True) -> List[TaskStats]:
    out = [t.stats for m in modules for t in m.tasks if t.stats.n_calls > 0]
    if ordered:
        out.sort(key=lambda s: s.total_s, reverse=True)
    return out


def show_stats(modules: Iterable["Module"], ordered: bool = True) -> str:
    """
    Render a per-task timing table. `ordered` sorts by total time, largest first.
    """
    rows = collect(modules, ordered=ordered)
    if not rows:
        return "# (no task statistics collected)"

    grand = sum(s.total_s for s in rows) or 1.0
    lines = [
        "# " + "-" * 78,
        f"# {'task':<32}{'calls':>9}{'total(s)':>11}{'share':>8}{'avg(us)':>10}{'max(us)':>10}",
        "# " + "-" * 78,
    ]
    for s in rows:
        lines.append(
            f"# {s.name:<32}{s.n_calls:>9}{s.total_s:>11.4f}"
            f"{100.0 * s.total_s / grand:>7.1f}%{s.avg_s * 1e6:>10.1f}{s.max_s * 1e6:>10.1f}"
        )
    return "\n".join(lines)
