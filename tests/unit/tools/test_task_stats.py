from __future__ import annotations

import pytest

from fecsim.engine.sequence import Sequence
from fecsim.tools.stats import TaskStats, collect, show_stats
from tests.conftest import linear_pipeline


def test_record_tracks_min_max_avg():
    s = TaskStats(name="m::t")
    assert s.avg_s == 0.0
    for d in (0.2, 0.1, 0.3):
        s.record(d)
    assert s.n_calls == 3
    assert s.min_s == pytest.approx(0.1)
    assert s.max_s == pytest.approx(0.3)
    assert s.avg_s == pytest.approx(0.2)


def test_show_stats_lists_every_timed_task():
    modules, tasks, _ = linear_pipeline(3)
    seq = Sequence(tasks)
    seq.configure(stats=True)
    for _ in range(4):
        seq.execute_frame()

    rows = collect(modules)
    assert [r.n_calls for r in rows] == [4, 4, 4]
    assert rows == sorted(rows, key=lambda r: r.total_s, reverse=True)

    table = show_stats(modules, ordered=False)
    for t in tasks:
        assert t.full_name in table
    assert all(line.startswith("#") for line in table.splitlines())


def test_show_stats_without_data():
    modules, _, _ = linear_pipeline(2)
    assert "no task statistics" in show_stats(modules)
