"""
Data loader for daily index closing prices.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence
import pandas as pd

from settings import PriceSource, PRICE_SOURCES, START_DATE, STOOQ_URL, USA_INDEX
from exceptions import DataLoadError
from data_manager.data_validator import DataValidator

logger = logging.getLogger(__name__)


class DataLoader:
    def __init__(self, url_template: str = STOOQ_URL):
        """Initialize data loader with the remote CSV endpoint."""
        self.url_template = url_template
        self.validator = DataValidator()

    def _location(self, source: PriceSource) -> str:
        if source.path is not None:
            return str(source.path)
        if source.symbol is None:
            raise DataLoadError(source.name, "source has neither a symbol nor a path")
        return self.url_template.format(symbol=source.symbol)

    def load_series(self, source: PriceSource,
                    start_date: pd.Timestamp = START_DATE) -> pd.Series:
        """Read, validate and date-filter the closes of one source."""
        location = self._location(source)
        logger.info(f"Reading {source.name} prices from: {location}")

        try:
            raw = pd.read_csv(location)
        except Exception as e:
            logger.error(f"Error reading {source.name}: {str(e)}")
            raise DataLoadError(source.name, "could not read price file", str(e)) from e

        series = self.validator.validate_prices(raw, source.name)
        series = series[series.index >= pd.Timestamp(start_date)]
        if series.empty:
            raise DataLoadError(source.name, f"no observations on or after {start_date:%Y-%m-%d}")

        logger.info(
            f"{source.name}: {len(series)} rows from {series.index[0]:%Y-%m-%d} "
            f"to {series.index[-1]:%Y-%m-%d}"
        )
        return series

    def align(self, series_by_name: Dict[str, pd.Series]) -> pd.DataFrame:
        """Inner-join the series on date; only dates present in every series survive."""
        if not series_by_name:
            raise DataLoadError("all", "no price series to align")

        prices = pd.concat(series_by_name, axis=1, join='inner').sort_index()
        prices.index.name = 'date'

        if prices.empty:
            raise DataLoadError(", ".join(series_by_name), "no common dates across series")
        if not prices.index.is_monotonic_increasing or prices.index.has_duplicates:
            raise DataLoadError(", ".join(series_by_name), "aligned dates are not strictly increasing")

        self._print_data_quality_summary(series_by_name, prices)
        return prices

    def load_prices(self, sources: Sequence[PriceSource] = PRICE_SOURCES,
                    start_date: pd.Timestamp = START_DATE,
                    spx_file: Optional[Path] = None) -> pd.DataFrame:
        """
        Load every source and return one aligned closing price table.

        Args:
            sources: Price sources, one column each in this order
            start_date: Drop observations before this date
            spx_file: Optional replacement file for the USA index

        Returns:
            DataFrame indexed by date with one column per source
        """
        series_by_name = {}
        for source in sources:
            if spx_file is not None and source.name == USA_INDEX:
                source = PriceSource(name=source.name, path=Path(spx_file))
            series_by_name[source.name] = self.load_series(source, start_date)
        return self.align(series_by_name)

    def _print_data_quality_summary(self, series_by_name: Dict[str, pd.Series],
                                    prices: pd.DataFrame):
        """Log how many rows each series loses to alignment."""
        logger.info(
            f"Aligned {len(prices.columns)} series: {len(prices):,} common dates "
            f"from {prices.index[0]:%Y-%m-%d} to {prices.index[-1]:%Y-%m-%d}"
        )
        for name, series in series_by_name.items():
            dropped = len(series) - len(prices)
            logger.info(f"  {name}: {len(series):,} rows, {dropped:,} not shared by all series")
