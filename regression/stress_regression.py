"""Regressions of conditional correlations on stress indicators and volatility levels"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import numpy as np
import pandas as pd
import statsmodels.api as sm

from settings import CRISIS_WINDOW, PANDEMIC_START, USA_INDEX

logger = logging.getLogger(__name__)


def crisis_indicator(dates: pd.DatetimeIndex,
                     window: Tuple[pd.Timestamp, pd.Timestamp] = CRISIS_WINDOW) -> pd.Series:
    """1 for dates inside the crisis window (both ends inclusive), else 0"""
    dates = pd.DatetimeIndex(dates)
    start, end = window
    flag = (dates >= start) & (dates <= end)
    return pd.Series(flag.astype(int), index=dates, name='crisis')


def pandemic_indicator(dates: pd.DatetimeIndex,
                       start: pd.Timestamp = PANDEMIC_START) -> pd.Series:
    """1 for dates on or after the pandemic start, else 0"""
    dates = pd.DatetimeIndex(dates)
    return pd.Series((dates >= start).astype(int), index=dates, name='pandemic')


def weights_quadratic_spectral(bandwidth: float) -> Callable[[int], np.ndarray]:
    """Quadratic spectral kernel weights for lags 0..nlags at the given bandwidth"""
    def weights(nlags: int) -> np.ndarray:
        x = np.arange(nlags + 1) / bandwidth
        w = np.ones(nlags + 1)
        z = 6.0 * np.pi * x[1:] / 5.0
        w[1:] = 25.0 / (12.0 * np.pi ** 2 * x[1:] ** 2) * (np.sin(z) / z - np.cos(z))
        return w
    return weights


def andrews_bandwidth(resid: np.ndarray) -> float:
    """AR(1) plug-in bandwidth of Andrews (1991) for the quadratic spectral kernel"""
    resid = np.asarray(resid)
    rho = np.dot(resid[1:], resid[:-1]) / np.dot(resid[:-1], resid[:-1])
    rho = float(np.clip(rho, -0.99, 0.99))
    alpha2 = 4.0 * rho ** 2 / (1.0 - rho) ** 4
    return 1.3221 * (alpha2 * len(resid)) ** 0.2


def newey_west_lags(nobs: int) -> int:
    """Lag truncation floor(4 (T/100)^(2/9))"""
    return int(np.floor(4.0 * (nobs / 100.0) ** (2.0 / 9.0)))


@dataclass(frozen=True)
class RegressionResult:
    """Coefficients, robust standard errors and fit statistics of one regression"""
    name: str
    family: str
    pair: Tuple[str, str]
    params: Dict[str, float]
    std_errors: Dict[str, float]
    tvalues: Dict[str, float]
    pvalues: Dict[str, float]
    rsquared: float
    rsquared_adj: float
    nobs: int
    cov_type: str
    maxlags: int
    dropped: Tuple[str, ...] = field(default_factory=tuple)

    def significance(self) -> Dict[str, str]:
        """Conventional star codes for each coefficient"""
        stars = {}
        for name, p in self.pvalues.items():
            if p < 0.01:
                stars[name] = '***'
            elif p < 0.05:
                stars[name] = '**'
            elif p < 0.1:
                stars[name] = '*'
            else:
                stars[name] = ''
        return stars

    def to_frame(self) -> pd.DataFrame:
        stars = self.significance()
        return pd.DataFrame({
            'regression': self.name,
            'variable': list(self.params.keys()),
            'coefficient': list(self.params.values()),
            'std_error': [self.std_errors[k] for k in self.params],
            't_stat': [self.tvalues[k] for k in self.params],
            'p_value': [self.pvalues[k] for k in self.params],
            'sig': [stars[k] for k in self.params],
        })


class StressRegression:
    """OLS of conditional correlation paths with HAC standard errors"""

    def __init__(self, usa_index: str = USA_INDEX):
        self.usa_index = usa_index

    def _fit(self, y: pd.Series, X: pd.DataFrame, cov_kwds: dict):
        X = sm.add_constant(X, has_constant='add')
        model = sm.OLS(y, X)
        return model.fit(cov_type='HAC', cov_kwds=cov_kwds)

    @staticmethod
    def _package(name: str, family: str, pair: Tuple[str, str], results,
                 cov_type: str, maxlags: int, dropped: Tuple[str, ...] = ()) -> RegressionResult:
        return RegressionResult(
            name=name,
            family=family,
            pair=pair,
            params={k: float(v) for k, v in results.params.items()},
            std_errors={k: float(v) for k, v in results.bse.items()},
            tvalues={k: float(v) for k, v in results.tvalues.items()},
            pvalues={k: float(v) for k, v in results.pvalues.items()},
            rsquared=float(results.rsquared),
            rsquared_adj=float(results.rsquared_adj),
            nobs=int(results.nobs),
            cov_type=cov_type,
            maxlags=maxlags,
            dropped=dropped,
        )

    def fit_indicators(self, corr_fit) -> RegressionResult:
        """
        Family A: correlation on crisis and pandemic indicators

        Standard errors use the quadratic spectral kernel with an
        automatically selected bandwidth.
        """
        y = corr_fit.correlation.dropna()
        X = pd.concat([crisis_indicator(y.index), pandemic_indicator(y.index)], axis=1)

        # An indicator that never switches on in the sample is not identified
        dropped = tuple(c for c in X.columns if X[c].nunique() < 2)
        if dropped:
            logger.warning(f"{corr_fit.name}: dropping constant indicators {list(dropped)}")
            X = X.drop(columns=list(dropped))

        try:
            ols = sm.OLS(y, sm.add_constant(X, has_constant='add')).fit()
            bandwidth = andrews_bandwidth(ols.resid.values)
            maxlags = int(min(len(y) - 1, np.ceil(3.0 * bandwidth)))
            results = self._fit(y, X, {
                'maxlags': maxlags,
                'weights_func': weights_quadratic_spectral(bandwidth),
            })
        except Exception as e:
            logger.error(f"Error in indicator regression for {corr_fit.name}: {str(e)}")
            raise

        result = self._package(
            f"{corr_fit.name} ~ crisis + pandemic", 'A', corr_fit.pair, results,
            cov_type=f"HAC quadratic spectral (bandwidth {bandwidth:.1f})",
            maxlags=maxlags, dropped=dropped
        )
        logger.info(self._describe(result))
        return result

    def fit_volatility(self, corr_fit, volatilities: Dict[str, pd.Series]) -> RegressionResult:
        """
        Family B: correlation with the USA index on both conditional standard deviations

        Args:
            corr_fit: Correlation fit of a pair that includes the USA index
            volatilities: Conditional standard deviation path per index
        """
        if self.usa_index not in corr_fit.pair:
            raise ValueError(f"Pair {corr_fit.name} does not include {self.usa_index}")

        other = corr_fit.pair[0] if corr_fit.pair[1] == self.usa_index else corr_fit.pair[1]
        y = corr_fit.correlation.dropna()
        X = pd.concat(
            [volatilities[other].rename(f"sd_{other}"),
             volatilities[self.usa_index].rename(f"sd_{self.usa_index}")],
            axis=1, join='inner'
        ).reindex(y.index).dropna()
        y = y.loc[X.index]

        maxlags = newey_west_lags(len(y))
        try:
            results = self._fit(y, X, {'maxlags': maxlags, 'use_correction': True})
        except Exception as e:
            logger.error(f"Error in volatility regression for {corr_fit.name}: {str(e)}")
            raise

        result = self._package(
            f"{corr_fit.name} ~ sd_{other} + sd_{self.usa_index}", 'B', corr_fit.pair, results,
            cov_type=f"Newey-West ({maxlags} lags)", maxlags=maxlags
        )
        logger.info(self._describe(result))
        return result

    def run_all(self, corr_fits: dict, selections: dict) -> List[RegressionResult]:
        """Family A for every pair, Family B for every pair with the USA index"""
        volatilities = {k: s.best.conditional_volatility for k, s in selections.items()}

        results = [self.fit_indicators(fit) for fit in corr_fits.values()]
        for fit in corr_fits.values():
            if self.usa_index in fit.pair:
                results.append(self.fit_volatility(fit, volatilities))
        return results

    @staticmethod
    def summary_table(results: List[RegressionResult], family: Optional[str] = None) -> pd.DataFrame:
        """Stacked coefficient tables, optionally restricted to one family"""
        selected = [r for r in results if family is None or r.family == family]
        if not selected:
            return pd.DataFrame()
        return pd.concat([r.to_frame() for r in selected], ignore_index=True)

    @staticmethod
    def _describe(result: RegressionResult) -> str:
        lines = [f"{result.name} [{result.cov_type}] R2={result.rsquared:.3f} n={result.nobs}"]
        stars = result.significance()
        for k, v in result.params.items():
            lines.append(
                f"  {k:>10}: {v: .4f} (se {result.std_errors[k]:.4f}, p {result.pvalues[k]:.4f}){stars[k]}"
            )
        return "\n".join(lines)
