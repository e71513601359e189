"""Stress-period and volatility regressions of conditional correlations"""

from .stress_regression import (
    StressRegression,
    RegressionResult,
    crisis_indicator,
    pandemic_indicator,
)

__all__ = [
    'StressRegression',
    'RegressionResult',
    'crisis_indicator',
    'pandemic_indicator',
]
