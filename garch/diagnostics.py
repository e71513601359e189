"""Descriptive statistics and pre-estimation tests for return series"""

import logging
from typing import Dict
import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tsa.stattools import adfuller
from statsmodels.stats.diagnostic import acorr_ljungbox, het_arch

from settings import LJUNG_BOX_LAGS, ARCH_LM_LAGS, ADF_REGRESSION, ADF_AUTOLAG
from .models import UnivariateSelection

logger = logging.getLogger(__name__)


class ReturnDiagnostics:
    """Read-only reporting of return distribution and dependence properties"""

    def __init__(self,
                 ljung_box_lags: int = LJUNG_BOX_LAGS,
                 arch_lm_lags: int = ARCH_LM_LAGS):
        self.ljung_box_lags = ljung_box_lags
        self.arch_lm_lags = arch_lm_lags

    def describe_series(self, series: pd.Series) -> Dict[str, float]:
        """Moments, unit root, normality, autocorrelation and ARCH tests for one series"""
        x = series.dropna().values

        adf_stat, adf_pvalue, adf_lags, _, _, _ = adfuller(
            x, regression=ADF_REGRESSION, autolag=ADF_AUTOLAG
        )
        _, jb_pvalue = stats.jarque_bera(x)
        lb = acorr_ljungbox(x, lags=[self.ljung_box_lags], return_df=True)
        _, arch_pvalue, _, _ = het_arch(x, nlags=self.arch_lm_lags)

        return {
            'mean': float(np.mean(x)),
            'std': float(np.std(x, ddof=1)),
            'skewness': float(stats.skew(x)),
            'excess_kurtosis': float(stats.kurtosis(x, fisher=True)),
            'min': float(np.min(x)),
            'max': float(np.max(x)),
            'nobs': int(len(x)),
            'adf_stat': float(adf_stat),
            'adf_pvalue': float(adf_pvalue),
            'adf_lags': int(adf_lags),
            'jb_pvalue': float(jb_pvalue),
            'ljung_box_pvalue': float(lb['lb_pvalue'].iloc[0]),
            'arch_lm_pvalue': float(arch_pvalue),
        }

    def describe(self, returns: pd.DataFrame) -> pd.DataFrame:
        """Diagnostics table with one row per return column"""
        rows = {}
        for column in returns.columns:
            rows[column] = self.describe_series(returns[column])
            logger.info(
                f"{column}: mean={rows[column]['mean']:.6f} std={rows[column]['std']:.6f} "
                f"ADF={rows[column]['adf_stat']:.2f} "
                f"LB({self.ljung_box_lags}) p={rows[column]['ljung_box_pvalue']:.4f} "
                f"ARCH({self.arch_lm_lags}) p={rows[column]['arch_lm_pvalue']:.4f}"
            )
        return pd.DataFrame.from_dict(rows, orient='index')

    def correlation_matrix(self, returns: pd.DataFrame) -> pd.DataFrame:
        """Unconditional Pearson correlation of the return columns"""
        return returns.corr()

    def residual_checks(self, selection: UnivariateSelection) -> Dict[str, float]:
        """Ljung-Box p-values of standardized and squared standardized residuals"""
        z = selection.best.std_resid.dropna().values
        lb = acorr_ljungbox(z, lags=[self.ljung_box_lags], return_df=True)
        lb_sq = acorr_ljungbox(z ** 2, lags=[self.ljung_box_lags], return_df=True)
        return {
            'model': selection.best.spec.label,
            'lb_resid_pvalue': float(lb['lb_pvalue'].iloc[0]),
            'lb_squared_pvalue': float(lb_sq['lb_pvalue'].iloc[0]),
        }
