import pytest
import numpy as np
import pandas as pd

from settings import MODEL_SPECS, PANDEMIC_START
from garch.dcc import DCCEstimator
from garch.models import UnivariateFit, UnivariateSelection


def _fit(index_id, z):
    return UnivariateFit(
        index_id=index_id,
        spec=MODEL_SPECS[0],
        params={},
        std_errors={},
        loglikelihood=0.0,
        aic=0.0,
        bic=0.0,
        nobs=len(z),
        conditional_volatility=pd.Series(1.0, index=z.index, name=index_id),
        std_resid=z.rename(index_id),
    )


@pytest.fixture(scope='module')
def residual_fits():
    """Standardized residuals whose correlation jumps from 0.2 to 0.7 at the pandemic start"""
    rng = np.random.default_rng(11)
    dates = pd.bdate_range('2015-01-01', '2022-06-30')
    rho = np.where(dates >= PANDEMIC_START, 0.7, 0.2)
    common = rng.standard_normal(len(dates))
    fits = {}
    for name in ['PX', 'SPX', 'WIG']:
        z = np.sqrt(rho) * common + np.sqrt(1 - rho) * rng.standard_normal(len(dates))
        series = pd.Series(z, index=dates)
        series.iloc[0] = np.nan  # undefined first residual, as with an AR(1) mean
        fits[name] = _fit(name, series)
    return fits


@pytest.fixture(scope='module')
def estimator():
    return DCCEstimator()


@pytest.fixture(scope='module')
def px_spx(estimator, residual_fits):
    return estimator.fit_pair(residual_fits['PX'], residual_fits['SPX'])


def test_correlation_bounds(px_spx):
    assert px_spx.correlation.between(-1, 1).all()
    assert px_spx.correlation.notna().all()


def test_stationary_parameters(px_spx):
    assert px_spx.params['alpha'] >= 0
    assert px_spx.params['beta'] >= 0
    assert px_spx.persistence < 1
    assert 'gamma' not in px_spx.params
    assert not px_spx.asymmetric


def test_common_dates(px_spx, residual_fits):
    assert px_spx.nobs == len(residual_fits['PX'].std_resid) - 1
    assert px_spx.correlation.index[0] == residual_fits['PX'].std_resid.index[1]
    assert px_spx.name == 'PX-SPX'


def test_tracks_correlation_break(px_spx):
    corr = px_spx.correlation
    before = corr[corr.index < PANDEMIC_START - pd.Timedelta(days=90)].mean()
    after = corr[corr.index > PANDEMIC_START + pd.Timedelta(days=90)].mean()
    assert after - before > 0.25


def test_constant_correlation_path():
    rng = np.random.default_rng(3)
    z = rng.standard_normal((500, 2))
    rho = DCCEstimator.correlation_path(z, 0.0, 0.0)
    qbar = z.T @ z / len(z)
    np.testing.assert_allclose(rho, qbar[0, 1] / np.sqrt(qbar[0, 0] * qbar[1, 1]))


def test_fit_all_pairs(estimator, residual_fits):
    selections = {
        k: UnivariateSelection(index_id=k, best=fit, candidates=(fit,))
        for k, fit in residual_fits.items()
    }
    fits = estimator.fit_all(selections)
    assert list(fits) == [('PX', 'SPX'), ('PX', 'WIG'), ('SPX', 'WIG')]

    table = DCCEstimator.parameter_table(fits)
    assert list(table['pair']) == ['PX-SPX', 'PX-WIG', 'SPX-WIG']
    assert (table['persistence'] < 1).all()


def test_asymmetry_test(estimator, residual_fits):
    result = estimator.asymmetry_test(residual_fits['PX'], residual_fits['WIG'])
    assert result['pair'] == 'PX-WIG'
    assert result['lr_stat'] >= 0
    assert 0 <= result['pvalue'] <= 1
    assert result['gamma'] >= 0


def test_too_few_observations(estimator, residual_fits):
    short = {k: _fit(k, f.std_resid.iloc[:6]) for k, f in residual_fits.items()}
    with pytest.raises(ValueError):
        estimator.fit_pair(short['PX'], short['SPX'])
