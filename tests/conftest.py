import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import matplotlib
matplotlib.use('Agg')

import pytest
import numpy as np
import pandas as pd

from settings import CRISIS_WINDOW, PANDEMIC_START

INDEXES = ['BUX', 'PX', 'WIG', 'SPX']


def simulate_prices(start='2007-01-01', end='2022-06-30', columns=INDEXES, seed=7):
    """
    Price levels whose returns follow GARCH(1,1) with Student's t shocks.

    Shocks share one common factor, so every pair has the same correlation:
    0.2 in calm periods, 0.45 inside the crisis window and 0.7 from the
    pandemic start on.
    """
    rng = np.random.default_rng(seed)
    dates = pd.bdate_range(start, end)
    n, k = len(dates), len(columns)

    rho = np.full(n, 0.2)
    rho[(dates >= CRISIS_WINDOW[0]) & (dates <= CRISIS_WINDOW[1])] = 0.45
    rho[dates >= PANDEMIC_START] = 0.7

    unit_t = np.sqrt(4.0 / 6.0)
    factor = rng.standard_t(6, size=n) * unit_t
    idio = rng.standard_t(6, size=(n, k)) * unit_t
    u = np.sqrt(rho)[:, None] * factor[:, None] + np.sqrt(1.0 - rho)[:, None] * idio

    omega, alpha, beta = 0.02, 0.08, 0.9
    sigma2 = np.full(k, omega / (1.0 - alpha - beta))
    shocks = np.empty((n, k))
    for t in range(n):
        shocks[t] = np.sqrt(sigma2) * u[t]
        sigma2 = omega + alpha * shocks[t] ** 2 + beta * sigma2

    log_returns = shocks / 100.0
    prices = 1000.0 * np.exp(np.cumsum(log_returns, axis=0))
    return pd.DataFrame(prices, index=pd.DatetimeIndex(dates, name='date'), columns=columns)


@pytest.fixture(scope='session')
def synthetic_prices():
    """Aligned prices for four indexes covering both stress periods"""
    return simulate_prices()


@pytest.fixture(scope='session')
def synthetic_returns(synthetic_prices):
    return np.log(synthetic_prices).diff().iloc[1:]


def write_price_csv(path, series: pd.Series):
    """Write a series in the Date,Open,High,Low,Close layout of the remote files"""
    frame = pd.DataFrame({
        'Date': series.index.strftime('%Y-%m-%d'),
        'Open': series.values,
        'High': series.values,
        'Low': series.values,
        'Close': series.values,
    })
    frame.to_csv(path, index=False)
    return path
