"""
GARCH modeling package for volatility and correlation analysis.
Implements return preparation, diagnostics, univariate GARCH-family
selection and bivariate DCC estimation.
"""

from .models import UnivariateFit, UnivariateSelection, CorrelationFit
from .data_prep import ReturnTransformer
from .diagnostics import ReturnDiagnostics
from .volatility import ShiftedAVGARCH
from .estimator import UnivariateEstimator
from .dcc import DCCEstimator

__all__ = [
    'UnivariateFit',
    'UnivariateSelection',
    'CorrelationFit',
    'ReturnTransformer',
    'ReturnDiagnostics',
    'ShiftedAVGARCH',
    'UnivariateEstimator',
    'DCCEstimator',
]
