from typing import Dict, List, Optional, Sequence
import logging
import numpy as np
import pandas as pd
from arch import arch_model
from arch.univariate import ARX, GeneralizedError, Normal, SkewStudent, StudentsT

from settings import MODEL_SPECS, RETURN_SCALE, ModelSpec
from exceptions import ConvergenceError
from utils.progress import ProgressMonitor
from .models import UnivariateFit, UnivariateSelection
from .volatility import ShiftedAVGARCH

logger = logging.getLogger(__name__)

# arch_model names of the innovation distributions
_DISTRIBUTIONS = {
    'normal': Normal,
    'studentst': StudentsT,
    'skewt': SkewStudent,
    'ged': GeneralizedError,
}


class UnivariateEstimator:
    """Fits competing AR-GARCH specifications and selects one by BIC"""

    def __init__(self,
                 specs: Sequence[ModelSpec] = MODEL_SPECS,
                 scale: float = RETURN_SCALE,
                 maxiter: int = 1000,
                 hybrid_maxiter: int = 5000):
        """
        Initialize estimator

        Args:
            specs: Candidate model specifications, in reporting order
            scale: Multiplier applied to returns before estimation
            maxiter: Iteration budget of the first optimizer run
            hybrid_maxiter: Iteration budget of the restart for 'hybrid' specs
        """
        if not specs:
            raise ValueError("At least one model specification is required")
        self.specs = tuple(specs)
        self.scale = scale
        self.maxiter = maxiter
        self.hybrid_maxiter = hybrid_maxiter
        self.logger = logging.getLogger('garch.estimator')

    def _build_model(self, returns: pd.Series, spec: ModelSpec):
        if spec.shift:
            if spec.power != 1.0 or spec.o != 0 or (spec.p, spec.q) != (1, 1):
                raise ValueError(f"Shifted news impact requires AVGARCH(1,0,1), got {spec.label}")
            return ARX(
                returns * self.scale,
                lags=spec.lags,
                volatility=ShiftedAVGARCH(),
                distribution=_DISTRIBUTIONS[spec.distribution](),
                rescale=False
            )
        return arch_model(
            returns * self.scale,
            mean=spec.mean,
            lags=spec.lags,
            vol='GARCH',
            p=spec.p,
            o=spec.o,
            q=spec.q,
            power=spec.power,
            dist=spec.distribution,
            rescale=False
        )

    def _optimize(self, model, maxiter: int, starting_values: Optional[np.ndarray] = None):
        return model.fit(
            starting_values=starting_values,
            disp='off',
            show_warning=False,
            options={'maxiter': maxiter},
            update_freq=0
        )

    def fit_spec(self, returns: pd.Series, spec: ModelSpec, index_id: str) -> UnivariateFit:
        """
        Estimate one specification by maximum likelihood

        Raises:
            ConvergenceError: If the optimizer does not converge
        """
        returns = returns.dropna()
        model = self._build_model(returns, spec)
        result = self._optimize(model, self.maxiter)

        if result.convergence_flag != 0 and spec.solver == 'hybrid':
            self.logger.warning(
                f"{spec.label} for {index_id} did not converge "
                f"(flag {result.convergence_flag}), restarting from last estimates"
            )
            result = self._optimize(
                model, self.hybrid_maxiter, starting_values=result.params.values
            )

        if result.convergence_flag != 0:
            self.logger.error(
                f"{spec.label} for {index_id} failed with flag {result.convergence_flag}"
            )
            raise ConvergenceError(spec.label, index_id, result.convergence_flag)

        self.logger.info(
            f"{index_id} {spec.label}: loglik={result.loglikelihood:.2f} "
            f"AIC={result.aic:.2f} BIC={result.bic:.2f}"
        )

        return UnivariateFit(
            index_id=index_id,
            spec=spec,
            params={k: float(v) for k, v in result.params.items()},
            std_errors={k: float(v) for k, v in result.std_err.items()},
            loglikelihood=float(result.loglikelihood),
            aic=float(result.aic),
            bic=float(result.bic),
            nobs=int(result.nobs),
            conditional_volatility=result.conditional_volatility.rename(index_id),
            std_resid=result.std_resid.rename(index_id),
        )

    def select(self, returns: pd.Series, index_id: str,
               monitor: Optional[ProgressMonitor] = None) -> UnivariateSelection:
        """Fit every candidate and keep the one with the smallest BIC"""
        candidates = []
        for spec in self.specs:
            candidates.append(self.fit_spec(returns, spec, index_id))
            if monitor is not None:
                monitor.update(status=f"{index_id} {spec.name}")

        bics = np.array([fit.bic for fit in candidates])
        best = candidates[int(np.argmin(bics))]
        if np.sum(bics == bics.min()) > 1:
            self.logger.warning(
                f"BIC tie for {index_id}, keeping {best.spec.label} by specification order"
            )

        self.logger.info(f"Selected {best.spec.label} for {index_id} (BIC={best.bic:.2f})")
        return UnivariateSelection(index_id=index_id, best=best, candidates=tuple(candidates))

    def fit_all(self, returns: pd.DataFrame) -> Dict[str, UnivariateSelection]:
        """Run model selection for every return column"""
        monitor = ProgressMonitor(
            total=len(returns.columns) * len(self.specs),
            desc="Fitting univariate models",
            logger=self.logger
        )
        selections = {}
        try:
            for column in returns.columns:
                selections[column] = self.select(returns[column], column, monitor)
        except Exception as e:
            self.logger.error(f"Error estimating univariate models: {str(e)}")
            raise
        finally:
            monitor.close()
        return selections

    @staticmethod
    def criteria_table(selections: Dict[str, UnivariateSelection]) -> pd.DataFrame:
        """Information criterion comparison across all indexes"""
        return pd.concat(
            [selection.criteria_table() for selection in selections.values()],
            ignore_index=True
        )

    @staticmethod
    def parameter_table(selections: Dict[str, UnivariateSelection]) -> pd.DataFrame:
        """Estimated parameters and standard errors of the selected models"""
        rows: List[dict] = []
        for index_id, selection in selections.items():
            best = selection.best
            for name, value in best.params.items():
                rows.append({
                    'index_id': index_id,
                    'model': best.spec.label,
                    'parameter': name,
                    'estimate': value,
                    'std_error': best.std_errors.get(name, np.nan),
                })
        return pd.DataFrame(rows)
