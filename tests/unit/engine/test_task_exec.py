from __future__ import annotations

import logging

import numpy as np
import pytest

from fecsim.engine.errors import UnboundRequiredInput
from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType


def _consumer(calls: list):
    m = Module("cons")

    def codelet(inp, out):
        calls.append("run")
        out[:] = inp * 2

    t = m.create_task("double", codelet)
    t.create_socket_in("in", 4, ElementType.FLOAT32)
    t.create_socket_out("out", 4, ElementType.FLOAT32)
    return t


def _producer(values):
    m = Module("prod")

    def codelet(out):
        out[:] = values

    t = m.create_task("make", codelet)
    t.create_socket_out("out", 4, ElementType.FLOAT32)
    return t


def test_exec_with_unbound_input_fails_before_codelet():
    calls: list = []
    t = _consumer(calls)
    with pytest.raises(UnboundRequiredInput) as ei:
        t.exec()
    assert "cons::double::in" in str(ei.value)
    assert calls == []
    assert t["out"].data.tolist() == [0, 0, 0, 0]


@pytest.mark.parametrize("fast", [True, False])
def test_exec_reads_latest_producer_values(fast: bool):
    calls: list = []
    p = _producer([1.0, 2.0, 3.0, 4.0])
    c = _consumer(calls)
    c["in"].bind(p["out"])
    c.fast = fast

    p.exec()
    c.exec()
    assert c["out"].data.tolist() == [2.0, 4.0, 6.0, 8.0]

    p["out"].data[:] = 0.5
    c.exec()
    assert c["out"].data.tolist() == [1.0, 1.0, 1.0, 1.0]
    assert calls == ["run", "run"]


def test_checked_mode_detects_replaced_buffer():
    p = _producer([1.0, 2.0, 3.0, 4.0])
    c = _consumer([])
    c["in"].bind(p["out"])

    p["out"].data = np.zeros(4, dtype=np.float32)
    c.fast = False
    with pytest.raises(RuntimeError) as ei:
        c.exec()
    assert "prod::make::out" in str(ei.value)

    # fast mode skips validation and silently reads the stale alias
    c.fast = True
    c.exec()


def test_checked_mode_detects_codelet_reshaping_output():
    m = Module("bad")
    t = m.create_task("grow", lambda out: None)
    s = t.create_socket_out("out", 4, ElementType.INT32)

    def codelet(out):
        s.data = np.zeros(5, dtype=np.int32)

    t.codelet = codelet
    with pytest.raises(RuntimeError) as ei:
        t.exec()
    assert "bad::grow::out" in str(ei.value) and "int32[4]" in str(ei.value)


def test_stats_flag_records_timing():
    p = _producer([0.0] * 4)
    p.exec()
    assert p.stats.n_calls == 0

    p.stats_enabled = True
    for _ in range(3):
        p.exec()
    assert p.stats.n_calls == 3
    assert p.stats.total_s >= 0.0
    assert p.stats.min_s <= p.stats.max_s

    p.reset_stats()
    assert p.stats.n_calls == 0


def test_debug_flag_dumps_sockets(caplog):
    p = _producer([1.0, 2.0, 3.0, 4.0])
    p.debug = True
    p.debug_limit = 2
    with caplog.at_level(logging.DEBUG, logger="fecsim.engine.task"):
        p.exec()
    assert any("prod::make::out" in r.getMessage() and "..." in r.getMessage() for r in caplog.records)


def test_task_without_codelet_raises():
    t = Module("m").create_task("noop")
    with pytest.raises(RuntimeError):
        t.exec()
