from dataclasses import dataclass, field
from typing import Dict, Tuple
import pandas as pd

from settings import ModelSpec


@dataclass(frozen=True)
class UnivariateFit:
    """Container for one fitted AR-GARCH specification"""
    index_id: str
    spec: ModelSpec
    params: Dict[str, float]
    std_errors: Dict[str, float]
    loglikelihood: float
    aic: float
    bic: float
    nobs: int
    conditional_volatility: pd.Series  # percent, aligned to return dates
    std_resid: pd.Series


@dataclass(frozen=True)
class UnivariateSelection:
    """All candidate fits for one index and the minimum-BIC winner"""
    index_id: str
    best: UnivariateFit
    candidates: Tuple[UnivariateFit, ...] = field(default_factory=tuple)

    def criteria_table(self) -> pd.DataFrame:
        """Information criteria of every candidate, in specification order"""
        rows = []
        for fit in self.candidates:
            rows.append({
                'index_id': self.index_id,
                'model': fit.spec.label,
                'loglikelihood': fit.loglikelihood,
                'aic': fit.aic,
                'bic': fit.bic,
                'selected': fit is self.best,
            })
        return pd.DataFrame(rows)


@dataclass(frozen=True)
class CorrelationFit:
    """Fitted bivariate dynamic conditional correlation model"""
    pair: Tuple[str, str]
    params: Dict[str, float]
    loglikelihood: float
    nobs: int
    asymmetric: bool
    correlation: pd.Series  # conditional correlation on common dates

    @property
    def name(self) -> str:
        return f"{self.pair[0]}-{self.pair[1]}"

    @property
    def persistence(self) -> float:
        return self.params['alpha'] + self.params['beta']
