"""
Absolute-deviation GARCH with a shifted news impact curve.

    sigma_t = omega + alpha * |e_{t-1} - eta * sigma_{t-1}| + beta * sigma_{t-1}

Equivalently alpha * sigma_{t-1} * |z_{t-1} - eta|. A positive shift eta makes
negative shocks raise volatility more than positive shocks of the same size
without a separate leverage coefficient. eta = 0 gives the plain AVGARCH(1,1).
"""

from typing import List, Tuple
import itertools
import numpy as np
from scipy import stats
from arch.univariate.volatility import VolatilityProcess, VarianceForecast


class ShiftedAVGARCH(VolatilityProcess):
    """AVGARCH(1,1) with a shift in the absolute-value news impact"""

    _updatable = False

    def __init__(self):
        super().__init__()
        self._num_params = 4
        self._name = "Shifted AVGARCH"

    def __str__(self) -> str:
        return f"{self.name}(p: 1, q: 1)"

    def parameter_names(self) -> List[str]:
        return ['omega', 'alpha[1]', 'eta[1]', 'beta[1]']

    def bounds(self, resids) -> List[Tuple[float, float]]:
        v = float(np.mean(np.absolute(resids)))
        return [(1e-8 * v, 10.0 * v), (0.0, 1.0), (-2.0, 2.0), (0.0, 1.0)]

    def constraints(self) -> Tuple[np.ndarray, np.ndarray]:
        # omega, alpha, beta >= 0 and alpha + beta <= 1; eta is free within its bounds
        a = np.array([
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
            [0.0, -1.0, 0.0, -1.0],
        ])
        b = np.array([0.0, 0.0, 0.0, -1.0])
        return a, b

    @staticmethod
    def expected_impact(eta: float) -> float:
        """E|z - eta| for standard normal z"""
        return float(eta * (2.0 * stats.norm.cdf(eta) - 1.0) + 2.0 * stats.norm.pdf(eta))

    def compute_variance(self, parameters, resids, sigma2, backcast, var_bounds):
        omega, alpha, eta, beta = (float(x) for x in parameters)
        e = np.asarray(resids, dtype=float).tolist()
        lower = np.sqrt(var_bounds[:, 0]).tolist()
        upper = np.sqrt(var_bounds[:, 1]).tolist()

        sigma = float(np.sqrt(backcast))
        for t in range(len(e)):
            if t > 0:
                sigma = omega + alpha * abs(e[t - 1] - eta * sigma) + beta * sigma
            if sigma < lower[t]:
                sigma = lower[t]
            elif sigma > upper[t]:
                sigma = upper[t] + np.log(sigma / upper[t]) if np.isfinite(sigma) else upper[t] + 1000
            sigma2[t] = sigma * sigma

        return sigma2

    def starting_values(self, resids) -> np.ndarray:
        resids = np.asarray(resids, dtype=float)
        target = float(np.sqrt(np.mean(resids ** 2)))
        backcast = self.backcast(resids)
        var_bounds = self.variance_bounds(resids)

        best, best_llf = None, -np.inf
        for alpha, eta, beta in itertools.product([0.05, 0.1, 0.2], [0.0, 0.25, 0.5], [0.75, 0.85]):
            if alpha + beta >= 1.0:
                continue
            omega = target * (1.0 - alpha * self.expected_impact(eta) - beta)
            sv = np.array([max(omega, 1e-6 * target), alpha, eta, beta])
            llf = self._gaussian_loglikelihood(sv, resids, backcast, var_bounds)
            if llf > best_llf:
                best, best_llf = sv, llf
        return best

    def simulate(self, parameters, nobs, rng, burn=500, initial_value=None):
        omega, alpha, eta, beta = (float(x) for x in parameters)
        errors = rng(nobs + burn)

        if initial_value is None:
            persistence = alpha * self.expected_impact(eta) + beta
            sigma = omega / (1.0 - persistence) if persistence < 1.0 else omega
        else:
            sigma = float(np.sqrt(initial_value))

        data = np.zeros(nobs + burn)
        sigma2 = np.zeros(nobs + burn)
        for t in range(nobs + burn):
            if t > 0:
                sigma = omega + alpha * sigma * abs(errors[t - 1] - eta) + beta * sigma
            sigma2[t] = sigma ** 2
            data[t] = errors[t] * sigma

        return data[burn:], sigma2[burn:]

    def _check_forecasting_method(self, method, horizon):
        if method != 'analytic' or horizon > 1:
            raise NotImplementedError(
                f"{self.name} only supports one-step analytic forecasts"
            )

    def _analytic_forecast(self, parameters, resids, backcast, var_bounds, start, horizon):
        _, forecasts = self._one_step_forecast(
            parameters, np.asarray(resids, dtype=float), backcast, var_bounds, horizon, start
        )
        return VarianceForecast(forecasts)

    def _simulation_forecast(self, parameters, resids, backcast, var_bounds, start,
                             horizon, simulations, rng):
        raise NotImplementedError(f"{self.name} only supports one-step analytic forecasts")
