import pytest
import numpy as np
from arch.univariate import GARCH

from garch.volatility import ShiftedAVGARCH


@pytest.fixture
def process():
    return ShiftedAVGARCH()


@pytest.fixture
def resids():
    return np.random.default_rng(7).standard_normal(1500)


def _one_step(process, parameters, resids):
    sigma2 = np.zeros_like(resids)
    return process.compute_variance(
        np.asarray(parameters, dtype=float), resids, sigma2,
        process.backcast(resids), process.variance_bounds(resids)
    )


def test_parameter_layout(process):
    assert process.num_params == 4
    assert process.parameter_names() == ['omega', 'alpha[1]', 'eta[1]', 'beta[1]']
    a, b = process.constraints()
    assert a.shape == (4, 4)
    assert b.shape == (4,)
    assert len(process.bounds(np.ones(10))) == 4


def test_constraints_reject_explosive_parameters(process):
    a, b = process.constraints()
    assert (a.dot([0.05, 0.1, 0.5, 0.85]) - b >= 0).all()
    assert not (a.dot([0.05, 0.3, 0.5, 0.85]) - b >= 0).all()


def test_zero_shift_matches_avgarch(process, resids):
    """Without a shift the recursion is the absolute-value GARCH(1,1)"""
    params = [0.05, 0.1, 0.0, 0.85]
    shifted = _one_step(process, params, resids)

    avgarch = GARCH(p=1, o=0, q=1, power=1.0)
    reference = np.zeros_like(resids)
    avgarch.compute_variance(
        np.array([0.05, 0.1, 0.85]), resids, reference,
        avgarch.backcast(resids), avgarch.variance_bounds(resids)
    )

    np.testing.assert_allclose(shifted[500:], reference[500:], rtol=1e-6)


def test_positive_shift_favours_negative_shocks(process):
    params = np.array([0.05, 0.1, 0.5, 0.85])
    bounds = np.array([[1e-8, 1e8]] * 2)

    def next_sigma2(shock):
        sigma2 = np.zeros(2)
        process.compute_variance(params, np.array([shock, 0.0]), sigma2, 1.0, bounds)
        return sigma2[1]

    assert next_sigma2(-1.0) > next_sigma2(1.0)
    assert np.isclose(next_sigma2(0.0), (0.05 + 0.1 * 0.5 + 0.85) ** 2)


def test_expected_impact():
    assert np.isclose(ShiftedAVGARCH.expected_impact(0.0), np.sqrt(2.0 / np.pi))
    assert ShiftedAVGARCH.expected_impact(0.5) > ShiftedAVGARCH.expected_impact(0.0)


def test_starting_values_are_feasible(process, resids):
    sv = process.starting_values(resids)
    a, b = process.constraints()
    assert sv.shape == (4,)
    assert (a.dot(sv) - b >= 0).all()
    for value, (lower, upper) in zip(sv, process.bounds(resids)):
        assert lower <= value <= upper


def test_simulate(process):
    rng = np.random.default_rng(3)
    data, sigma2 = process.simulate([0.05, 0.1, 0.3, 0.8], 1000, rng.standard_normal)
    assert data.shape == sigma2.shape == (1000,)
    assert (sigma2 > 0).all()
    assert np.isfinite(data).all()


def test_multi_step_forecast_not_supported(process):
    with pytest.raises(NotImplementedError):
        process._check_forecasting_method('analytic', 5)
    with pytest.raises(NotImplementedError):
        process._check_forecasting_method('simulation', 1)
