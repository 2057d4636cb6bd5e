from __future__ import annotations

import numpy as np
import pytest

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType
from fecsim.monitor.bfer import Config, MonitorBFER, State, build


def _wired_monitor(K: int = 4, **cfg_kw):
    mon = build(Config(**cfg_kw), K=K)
    ref = Module("ref").create_task("make")
    dec = Module("dec").create_task("make")
    u = ref.create_socket_out("U", K, ElementType.INT32)
    v = dec.create_socket_out("V", K, ElementType.INT32)
    mon["check_errors::U"].bind(u)
    mon["check_errors::V"].bind(v)
    return mon, u, v


def test_counts_bit_and_frame_errors():
    mon, u, v = _wired_monitor(K=4, max_fe=10)
    u.data[:] = [0, 1, 0, 1]
    v.data[:] = [0, 1, 0, 1]
    mon["check_errors"].exec()
    v.data[:] = [1, 0, 0, 1]
    mon["check_errors"].exec()

    s = mon.snapshot()
    assert (s.n_frames, s.n_bit_errors, s.n_frame_errors) == (2, 2, 1)
    assert s.ber == pytest.approx(2 / 8)
    assert s.fer == pytest.approx(0.5)


@pytest.mark.parametrize("max_fe", [1, 3, 7])
def test_limit_reached_on_exact_frame(max_fe: int):
    mon, u, v = _wired_monitor(K=2, max_fe=max_fe)
    u.data[:] = 0
    v.data[:] = [1, 0]

    for i in range(1, max_fe):
        mon["check_errors"].exec()
        assert mon.state is State.RUNNING, f"limit reached early at frame {i}"
        assert not mon.is_done()

    mon["check_errors"].exec()
    assert mon.state is State.LIMIT_REACHED
    assert mon.fe_limit_achieved()
    assert mon.n_frame_errors == max_fe


def test_error_free_frames_do_not_advance_toward_fe_limit():
    mon, u, v = _wired_monitor(K=2, max_fe=1)
    u.data[:] = 1
    v.data[:] = 1
    for _ in range(50):
        mon["check_errors"].exec()
    assert mon.state is State.RUNNING


def test_frame_cap_ends_point():
    mon, u, v = _wired_monitor(K=2, max_fe=100, max_frames=3)
    for _ in range(3):
        assert not mon.is_done()
        mon["check_errors"].exec()
    assert mon.is_done()
    assert mon.frame_limit_achieved()
    assert not mon.fe_limit_achieved()


def test_reset_is_idempotent_from_any_state():
    mon, u, v = _wired_monitor(K=2, max_fe=1)
    mon.reset()
    assert mon.state is State.RUNNING and mon.n_frames == 0

    v.data[:] = 1
    mon["check_errors"].exec()
    assert mon.is_done()

    for _ in range(2):
        mon.reset()
        assert mon.state is State.RUNNING
        assert (mon.n_frames, mon.n_bit_errors, mon.n_frame_errors) == (0, 0, 0)


def test_check_handlers_run_after_every_frame():
    mon, u, v = _wired_monitor(K=2)
    seen = []
    mon.add_handler_check(lambda: seen.append(mon.n_frames))
    for _ in range(3):
        mon["check_errors"].exec()
    assert seen == [1, 2, 3]


@pytest.mark.parametrize("kw", [{"max_fe": 0}, {"max_fe": -1}, {"max_frames": -1}, {"max_fe": 1.5}])
def test_invalid_config_rejected(kw):
    with pytest.raises(ValueError):
        MonitorBFER(4, Config(**kw))


def test_snapshot_rates_with_no_frames():
    mon, _, _ = _wired_monitor()
    s = mon.snapshot()
    assert s.ber == 0.0 and s.fer == 0.0
    assert isinstance(s.n_frames, int)
    assert np.isfinite(s.ber)
