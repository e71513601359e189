"""
Validation of daily closing price files.
"""

import logging
from typing import List, Tuple
import pandas as pd

from exceptions import DataLoadError

logger = logging.getLogger(__name__)


class DataValidator:
    """Validates raw price tables before alignment"""

    def __init__(self, date_column: str = 'date', price_column: str = 'close'):
        self.date_column = date_column
        self.price_column = price_column

        # Price bounds for index levels
        self.validation_bounds = {'min': 0.0, 'max': 1e7}

    def _find_column(self, df: pd.DataFrame, wanted: str) -> str:
        for col in df.columns:
            if str(col).strip().lower() == wanted:
                return col
        raise KeyError(wanted)

    def validate_data(self, df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """
        Validates a raw price table.

        Args:
            df: DataFrame read from one price file

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        issues = []

        if df.empty:
            return False, ["File contains no rows"]

        try:
            date_col = self._find_column(df, self.date_column)
            price_col = self._find_column(df, self.price_column)
        except KeyError as e:
            return False, [f"Missing required column: {e.args[0]}"]

        dates = pd.to_datetime(df[date_col], errors='coerce')
        bad_dates = dates.isna().sum()
        if bad_dates > 0:
            issues.append(f"{bad_dates} unparseable dates (first at row {dates[dates.isna()].index[0]})")

        prices = pd.to_numeric(df[price_col], errors='coerce')
        bad_prices = prices.isna().sum()
        if bad_prices > 0:
            issues.append(
                f"{bad_prices} missing or non-numeric closes (first at row {prices[prices.isna()].index[0]})"
            )

        issues.extend(self._validate_bounds(prices.dropna(), 'close'))

        duplicated = dates[dates.duplicated() & dates.notna()]
        if not duplicated.empty:
            issues.append(f"{len(duplicated)} duplicated dates (first {duplicated.iloc[0]:%Y-%m-%d})")

        return len(issues) == 0, issues

    def _validate_bounds(self, series: pd.Series, name: str) -> List[str]:
        """Validates that values fall within expected bounds."""
        issues = []

        below_min = series[series <= self.validation_bounds['min']]
        if not below_min.empty:
            issues.append(
                f"{name}: {len(below_min)} values at or below {self.validation_bounds['min']} "
                f"(first occurrence at row {below_min.index[0]})"
            )

        above_max = series[series > self.validation_bounds['max']]
        if not above_max.empty:
            issues.append(
                f"{name}: {len(above_max)} values above {self.validation_bounds['max']} "
                f"(first occurrence at row {above_max.index[0]})"
            )

        return issues

    def validate_prices(self, df: pd.DataFrame, name: str) -> pd.Series:
        """
        Validate a raw table and return its closes as a date-indexed series.

        Raises:
            DataLoadError: If any row is missing or malformed
        """
        is_valid, issues = self.validate_data(df)
        if not is_valid:
            for issue in issues:
                logger.error(f"{name}: {issue}")
            raise DataLoadError(name, f"{len(issues)} validation issue(s)", "\n".join(issues))

        date_col = self._find_column(df, self.date_column)
        price_col = self._find_column(df, self.price_column)
        series = pd.Series(
            pd.to_numeric(df[price_col]).astype(float).values,
            index=pd.DatetimeIndex(pd.to_datetime(df[date_col]), name='date'),
            name=name,
        )
        return series.sort_index()
