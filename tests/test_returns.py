import pytest
import numpy as np
import pandas as pd

from garch.data_prep import ReturnTransformer


@pytest.fixture
def transformer():
    return ReturnTransformer()


@pytest.fixture
def prices():
    dates = pd.bdate_range('2021-01-04', periods=6)
    return pd.DataFrame({
        'BUX': [100.0, 101.0, 99.5, 102.0, 102.0, 103.5],
        'SPX': [3700.0, 3726.0, 3748.0, 3803.0, 3824.0, 3799.0],
    }, index=dates)


def test_one_row_fewer(transformer, prices):
    returns = transformer.log_returns(prices)
    assert len(returns) == len(prices) - 1
    assert returns.index.equals(prices.index[1:])
    assert list(returns.columns) == list(prices.columns)


def test_values_are_log_differences(transformer, prices):
    returns = transformer.log_returns(prices)
    assert returns['BUX'].iloc[0] == pytest.approx(np.log(101.0 / 100.0))
    assert returns['BUX'].iloc[3] == pytest.approx(0.0)


def test_reconstruct_prices(transformer, prices):
    returns = transformer.log_returns(prices)
    rebuilt = transformer.reconstruct_prices(returns, prices.iloc[0])
    np.testing.assert_allclose(rebuilt.values, prices.values)
    assert rebuilt.index.equals(prices.index)


@pytest.mark.parametrize("bad", [0.0, -5.0, np.nan])
def test_invalid_prices_raise(transformer, prices, bad):
    prices = prices.copy()
    prices.iloc[2, 0] = bad
    with pytest.raises(ValueError):
        transformer.log_returns(prices)


def test_single_row_raises(transformer, prices):
    with pytest.raises(ValueError):
        transformer.log_returns(prices.iloc[:1])
