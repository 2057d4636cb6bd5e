from __future__ import annotations

import math

import numpy as np
import pytest

from fecsim.engine.errors import FrozenBitsConfigError
from fecsim.polar.frozenbits import (
    FrozenBitsGA,
    X_SPLIT,
    Y_SPLIT,
    frozen_bits,
    phi,
    phi_inv,
    ranking,
    reliabilities,
)
from fecsim.tools import noise as noise_tools


def _sigma(ebn0: float, K: int, N: int) -> float:
    return noise_tools.from_ebn0(ebn0, K / N).sigma


def test_n8_k4_reference_pattern():
    gen = FrozenBitsGA(K=4, N=8)
    gen.set_noise(noise_tools.from_ebn0(2.0, 0.5))
    frozen = gen.generate()

    assert frozen.dtype == bool
    assert frozen.sum() == 4
    assert frozen.tolist() == [True, True, True, False, True, False, False, False]
    assert gen.best_channels[0] == 7


def test_deterministic_for_identical_inputs():
    s = _sigma(1.5, 4, 8)
    a = frozen_bits(8, 4, s)
    b = frozen_bits(8, 4, s)
    assert np.array_equal(a, b)

    big_a = frozen_bits(256, 128, _sigma(1.0, 128, 256))
    big_b = frozen_bits(256, 128, _sigma(1.0, 128, 256))
    assert np.array_equal(big_a, big_b)


@pytest.mark.parametrize("N,K", [(8, 1), (8, 7), (64, 32), (1024, 512), (128, 100)])
@pytest.mark.parametrize("ebn0", [-2.0, 0.0, 3.0, 10.0])
def test_frozen_count_and_extremes(N: int, K: int, ebn0: float):
    frozen = frozen_bits(N, K, _sigma(ebn0, K, N))
    assert frozen.shape == (N,)
    assert int(frozen.sum()) == N - K
    # first bit-channel is the worst, last the best, at every noise level
    assert frozen[0]
    assert not frozen[-1]


@pytest.mark.parametrize("sigma", [0.3, 0.8, 1.5, 4.0])
def test_ranking_is_a_total_order(sigma: float):
    z = reliabilities(256, sigma)
    order = ranking(z)
    assert sorted(order.tolist()) == list(range(256))
    assert np.all(np.diff(z[order]) >= 0)


def test_ties_break_by_lower_index():
    z = np.array([1.0, 0.5, 1.0, 0.5])
    assert ranking(z).tolist() == [1, 3, 0, 2]


def test_noisier_channel_lowers_every_reliability():
    z_good = reliabilities(64, 0.5)
    z_bad = reliabilities(64, 1.0)
    assert np.all(z_bad < z_good)


def test_better_child_is_twice_parent_and_worse_child_is_lower():
    sigma = 0.9
    m0 = 2.0 / sigma ** 2
    z = reliabilities(2, sigma)
    assert z[1] == pytest.approx(2.0 * m0)
    assert 0.0 < z[0] < m0


def test_phi_and_inverse_are_consistent():
    for x in [0.05, 0.5, 1.0, 3.0, 9.5, 12.0, 40.0, 200.0]:
        assert phi_inv(phi(x)) == pytest.approx(x, rel=1e-6)
    assert phi(0.0) == 1.0
    assert phi_inv(1.0) == 0.0
    assert phi_inv(0.0) == math.inf
    assert phi(X_SPLIT - 1e-9) == pytest.approx(Y_SPLIT)


def test_phi_inv_is_monotone_across_split():
    ys = np.linspace(0.001, 0.999, 500)
    xs = [phi_inv(float(y)) for y in ys]
    assert all(a >= b for a, b in zip(xs, xs[1:]))


def test_very_reliable_channels_stay_finite():
    z = reliabilities(1024, 0.05)
    assert np.all(np.isfinite(z))
    assert np.all(z > 0)


@pytest.mark.parametrize(
    "N,K",
    [(8, 8), (8, 9), (8, 0), (8, -1), (12, 4), (1, 0), (0, 0), (6, 2)],
)
def test_invalid_dimensions_rejected(N: int, K: int):
    with pytest.raises(FrozenBitsConfigError) as ei:
        FrozenBitsGA(K=K, N=N)
    assert str(N) in str(ei.value)
    with pytest.raises(FrozenBitsConfigError):
        frozen_bits(N, K, 1.0)


@pytest.mark.parametrize("sigma", [0.0, -1.0, float("inf"), float("nan")])
def test_invalid_sigma_rejected(sigma: float):
    with pytest.raises(FrozenBitsConfigError):
        frozen_bits(8, 4, sigma)


def test_generate_requires_noise():
    gen = FrozenBitsGA(K=4, N=8)
    with pytest.raises(RuntimeError):
        gen.generate()


def test_phi_never_exceeds_one_near_zero():
    for x in [1e-6, 1e-4, 1e-2, 0.029]:
        assert phi(x) <= 1.0


@pytest.mark.parametrize("sigma", [8.0, 9.0, 20.0, 100.0])
def test_worse_child_never_beats_parent_at_high_noise(sigma: float):
    m0 = 2.0 / sigma ** 2
    z = reliabilities(2, sigma)
    assert z[0] <= m0
    assert z[0] <= z[1]


def test_high_noise_still_freezes_the_worst_position():
    assert frozen_bits(2, 1, 20.0).tolist() == [True, False]
    frozen = frozen_bits(8, 4, 20.0)
    assert int(frozen.sum()) == 4
    assert frozen[0] and not frozen[-1]
