"""
Bivariate dynamic conditional correlation (DCC) estimation.

Second stage of the two-step estimator: the univariate models selected by
the estimator provide standardized residuals z_t, and the correlation
dynamics are fitted on them by Gaussian quasi maximum likelihood:

    Q_t = (1 - a - b) Qbar - g Nbar + a z_{t-1} z_{t-1}' + g n_{t-1} n_{t-1}' + b Q_{t-1}
    rho_t = Q_12,t / sqrt(Q_11,t Q_22,t)

where n_t = min(z_t, 0). The symmetric model fixes g = 0.
"""

from itertools import combinations, product
from typing import Dict, List, Optional, Tuple
import logging
import numpy as np
import pandas as pd
from scipy import linalg, stats
from scipy.optimize import minimize
from scipy.signal import lfilter

from settings import ASYMMETRIC_CORRELATION
from exceptions import ConvergenceError
from .models import UnivariateFit, UnivariateSelection, CorrelationFit

logger = logging.getLogger(__name__)

_PENALTY = 1e6
_STATIONARITY_MARGIN = 1e-6


class DCCEstimator:
    """Estimates pairwise DCC(1,1) correlation paths"""

    def __init__(self, asymmetric: bool = ASYMMETRIC_CORRELATION,
                 maxiter: int = 1000, ftol: float = 1e-8):
        self.asymmetric = asymmetric
        self.maxiter = maxiter
        self.ftol = ftol
        self.logger = logging.getLogger('garch.dcc')

    @staticmethod
    def standardized_residuals(first: UnivariateFit, second: UnivariateFit) -> pd.DataFrame:
        """Standardized residuals of both models on their common defined dates"""
        z = pd.concat([first.std_resid, second.std_resid], axis=1, join='inner').dropna()
        z.columns = [first.index_id, second.index_id]
        return z

    @staticmethod
    def _parse(params: np.ndarray, asymmetric: bool) -> Tuple[float, float, float]:
        if asymmetric:
            alpha, gamma, beta = params
        else:
            alpha, beta = params
            gamma = 0.0
        return float(alpha), float(beta), float(gamma)

    @staticmethod
    def asymmetry_scale(z: np.ndarray) -> float:
        """Largest eigenvalue of Qbar^-1/2 Nbar Qbar^-1/2, bounds the gamma term"""
        n = np.minimum(z, 0.0)
        qbar = z.T @ z / len(z)
        nbar = n.T @ n / len(z)
        return float(np.max(linalg.eigh(nbar, qbar, eigvals_only=True)))

    @staticmethod
    def correlation_path(z: np.ndarray, alpha: float, beta: float,
                         gamma: float = 0.0) -> np.ndarray:
        """Run the Q_t recursion and return the implied correlations"""
        t_obs = len(z)
        qbar = z.T @ z / t_obs
        n = np.minimum(z, 0.0)
        nbar = n.T @ n / t_obs

        q = {}
        for i, j in ((0, 0), (1, 1), (0, 1)):
            intercept = (1.0 - alpha - beta) * qbar[i, j] - gamma * nbar[i, j]
            shocks = intercept + alpha * z[:-1, i] * z[:-1, j] + gamma * n[:-1, i] * n[:-1, j]
            path, _ = lfilter([1.0], [1.0, -beta], shocks, zi=[beta * qbar[i, j]])
            q[(i, j)] = np.concatenate([[qbar[i, j]], path])

        with np.errstate(invalid='ignore', divide='ignore'):
            rho = q[(0, 1)] / np.sqrt(q[(0, 0)] * q[(1, 1)])
        return rho

    @staticmethod
    def _loglikelihood(z: np.ndarray, rho: np.ndarray) -> float:
        """Correlation component of the bivariate normal log-likelihood"""
        one_minus = 1.0 - rho ** 2
        quad = (z[:, 0] ** 2 + z[:, 1] ** 2 - 2.0 * rho * z[:, 0] * z[:, 1]) / one_minus
        return float(-0.5 * np.sum(np.log(one_minus) + quad - z[:, 0] ** 2 - z[:, 1] ** 2))

    def _objective(self, params: np.ndarray, z: np.ndarray, asymmetric: bool) -> float:
        alpha, beta, gamma = self._parse(params, asymmetric)
        rho = self.correlation_path(z, alpha, beta, gamma)
        if not np.all(np.isfinite(rho)) or np.any(np.abs(rho) >= 1.0):
            return _PENALTY
        return -self._loglikelihood(z, rho) / len(z)

    def _starting_values(self, z: np.ndarray, asymmetric: bool) -> np.ndarray:
        alphas = [0.01, 0.03, 0.05, 0.1]
        gammas = [0.01, 0.03] if asymmetric else [0.0]
        persistences = [0.99, 0.97, 0.95]

        best, best_value = None, np.inf
        for alpha, gamma, persistence in product(alphas, gammas, persistences):
            beta = persistence - alpha - gamma
            sv = np.array([alpha, gamma, beta]) if asymmetric else np.array([alpha, beta])
            value = self._objective(sv, z, asymmetric)
            if value < best_value:
                best, best_value = sv, value
        return best

    def _estimate(self, z: np.ndarray, asymmetric: bool, target: str):
        delta = self.asymmetry_scale(z) if asymmetric else 0.0

        def stationarity(params):
            alpha, beta, gamma = self._parse(params, asymmetric)
            return 1.0 - _STATIONARITY_MARGIN - (alpha + beta + delta * gamma)

        n_params = 3 if asymmetric else 2
        x0 = self._starting_values(z, asymmetric)
        kwargs = dict(
            args=(z, asymmetric),
            method='SLSQP',
            bounds=[(0.0, 1.0)] * n_params,
            constraints=[{'type': 'ineq', 'fun': stationarity}],
            options={'maxiter': self.maxiter, 'ftol': self.ftol},
        )
        result = minimize(self._objective, x0, **kwargs)

        if not result.success:
            self.logger.warning(
                f"DCC for {target} stopped with '{result.message}', restarting from last estimates"
            )
            result = minimize(self._objective, np.clip(result.x, 0.0, 1.0), **kwargs)

        if not result.success:
            self.logger.error(f"DCC for {target} failed: {result.message}")
            raise ConvergenceError('ADCC(1,1)' if asymmetric else 'DCC(1,1)', target, result.status)

        return result

    def fit_pair(self, first: UnivariateFit, second: UnivariateFit,
                 asymmetric: Optional[bool] = None) -> CorrelationFit:
        """
        Jointly estimate the correlation dynamics of two fitted series

        Args:
            first: Selected univariate fit of the first index
            second: Selected univariate fit of the second index
            asymmetric: Include the asymmetric term; defaults to the estimator setting

        Returns:
            CorrelationFit with the conditional correlation path on common dates
        """
        asymmetric = self.asymmetric if asymmetric is None else asymmetric
        target = f"{first.index_id}-{second.index_id}"

        z_frame = self.standardized_residuals(first, second)
        if len(z_frame) < 10:
            raise ValueError(f"Too few common observations for {target}: {len(z_frame)}")
        z = z_frame.values

        result = self._estimate(z, asymmetric, target)
        alpha, beta, gamma = self._parse(result.x, asymmetric)
        rho = np.clip(self.correlation_path(z, alpha, beta, gamma), -1.0, 1.0)
        loglik = self._loglikelihood(z, rho)

        params = {'alpha': alpha, 'beta': beta}
        if asymmetric:
            params['gamma'] = gamma

        self.logger.info(
            f"{'ADCC' if asymmetric else 'DCC'} {target}: alpha={alpha:.4f} beta={beta:.4f}"
            + (f" gamma={gamma:.4f}" if asymmetric else "")
            + f" loglik={loglik:.2f} mean corr={rho.mean():.3f}"
        )

        return CorrelationFit(
            pair=(first.index_id, second.index_id),
            params=params,
            loglikelihood=loglik,
            nobs=len(z),
            asymmetric=asymmetric,
            correlation=pd.Series(rho, index=z_frame.index, name=target),
        )

    def fit_all(self, selections: Dict[str, UnivariateSelection]) -> Dict[Tuple[str, str], CorrelationFit]:
        """Fit every unordered pair of indexes, in column order"""
        fits = {}
        for left, right in combinations(list(selections.keys()), 2):
            try:
                fits[(left, right)] = self.fit_pair(selections[left].best, selections[right].best)
            except Exception as e:
                self.logger.error(f"Error estimating DCC for {left}-{right}: {str(e)}")
                raise
        return fits

    def asymmetry_test(self, first: UnivariateFit, second: UnivariateFit) -> Dict[str, float]:
        """
        Likelihood ratio test of the asymmetric term for one pair.

        gamma = 0 lies on the boundary of the parameter space, so the
        statistic is compared with a 50:50 mixture of chi2(0) and chi2(1).
        """
        symmetric = self.fit_pair(first, second, asymmetric=False)
        asymmetric = self.fit_pair(first, second, asymmetric=True)
        lr = max(2.0 * (asymmetric.loglikelihood - symmetric.loglikelihood), 0.0)
        return {
            'pair': symmetric.name,
            'gamma': asymmetric.params['gamma'],
            'loglik_dcc': symmetric.loglikelihood,
            'loglik_adcc': asymmetric.loglikelihood,
            'lr_stat': lr,
            'pvalue': float(0.5 * stats.chi2.sf(lr, df=1)) if lr > 0 else 1.0,
        }

    @staticmethod
    def parameter_table(fits: Dict[Tuple[str, str], CorrelationFit]) -> pd.DataFrame:
        """DCC parameters and correlation summary per pair"""
        rows: List[dict] = []
        for fit in fits.values():
            row = {'pair': fit.name, **fit.params}
            row.update({
                'persistence': fit.persistence,
                'loglikelihood': fit.loglikelihood,
                'mean_corr': float(fit.correlation.mean()),
                'min_corr': float(fit.correlation.min()),
                'max_corr': float(fit.correlation.max()),
                'nobs': fit.nobs,
            })
            rows.append(row)
        return pd.DataFrame(rows)
