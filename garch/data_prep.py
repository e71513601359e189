"""
Prepare log returns for GARCH estimation.
"""

import logging
import pandas as pd
import numpy as np

logger = logging.getLogger(__name__)


class ReturnTransformer:
    """Converts aligned price levels into log returns."""

    def log_returns(self, prices: pd.DataFrame) -> pd.DataFrame:
        """
        Log-difference every price column and drop the undefined first row.

        Args:
            prices: Aligned price table, one column per index

        Returns:
            Return table with the same columns and one row fewer

        Raises:
            ValueError: If any price is missing or non-positive
        """
        if len(prices) < 2:
            raise ValueError(f"At least two price rows are required, got {len(prices)}")

        if prices.isna().any().any():
            missing = prices.columns[prices.isna().any()].tolist()
            raise ValueError(f"Missing prices in columns: {missing}")

        non_positive = (prices <= 0).any()
        if non_positive.any():
            columns = prices.columns[non_positive].tolist()
            raise ValueError(f"Non-positive prices in columns: {columns}")

        returns = np.log(prices.astype(float)).diff().iloc[1:]

        logger.info(
            f"Computed log returns for {list(returns.columns)}: "
            f"{len(returns)} observations from {returns.index[0]:%Y-%m-%d} "
            f"to {returns.index[-1]:%Y-%m-%d}"
        )
        return returns

    def reconstruct_prices(self, returns: pd.DataFrame, base: pd.Series) -> pd.DataFrame:
        """Rebuild price levels from log returns and the first price row (base.name is its date)"""
        rebuilt = np.exp(returns.cumsum()) * base
        first = pd.DataFrame([base.values], columns=base.index, index=pd.DatetimeIndex([base.name]))
        return pd.concat([first, rebuilt])
