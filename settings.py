"""
Fixed analysis settings for the index co-movement report.
All values are immutable; stages receive them as arguments or read them here.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import pandas as pd


@dataclass(frozen=True)
class PriceSource:
    """Where the daily closing prices of one index come from"""
    name: str
    symbol: Optional[str] = None  # remote symbol, None for local files
    path: Optional[Path] = None


@dataclass(frozen=True)
class ModelSpec:
    """AR(1) mean with a first-order GARCH-family variance equation"""
    name: str
    o: int = 0  # leverage term order
    power: float = 2.0  # 2.0 variance, 1.0 absolute deviation
    shift: bool = False  # shifted absolute-value news impact, power 1.0 only
    mean: str = 'AR'
    lags: int = 1
    p: int = 1
    q: int = 1
    distribution: str = 'studentst'
    solver: str = 'default'  # 'default' or 'hybrid'

    @property
    def label(self) -> str:
        return f"AR({self.lags})-{self.name}({self.p},{self.o},{self.q})"


STOOQ_URL = "https://stooq.com/q/d/l/?s={symbol}&i=d"

START_DATE = pd.Timestamp('2001-01-01')

USA_INDEX = 'SPX'

DEFAULT_SPX_FILE = Path(__file__).parent / "data_manager" / "data" / "spx.csv"

PRICE_SOURCES = (
    PriceSource(name='BUX', symbol='^bux'),
    PriceSource(name='PX', symbol='^px'),
    PriceSource(name='WIG', symbol='^wig'),
    PriceSource(name=USA_INDEX, path=DEFAULT_SPX_FILE),
)

# Lehman collapse to the end of the euro-area sovereign stress peak
CRISIS_WINDOW = (pd.Timestamp('2008-09-15'), pd.Timestamp('2011-11-11'))

# WHO pandemic declaration
PANDEMIC_START = pd.Timestamp('2020-03-11')

# Diagnostics
LJUNG_BOX_LAGS = 8
ARCH_LM_LAGS = 4
ADF_REGRESSION = 'n'
ADF_AUTOLAG = 'AIC'

# Returns are estimated in percent
RETURN_SCALE = 100.0

MODEL_SPECS = (
    ModelSpec(name='GARCH', o=0, power=2.0),
    ModelSpec(name='GJR', o=1, power=2.0),
    ModelSpec(name='AVGARCH', o=0, power=1.0, shift=True),
    ModelSpec(name='TARCH', o=1, power=1.0, solver='hybrid'),
)

# The asymmetric correlation term was insignificant for every pair
ASYMMETRIC_CORRELATION = False
