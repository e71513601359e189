from typing import Dict, Optional, Sequence, Tuple
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path
import logging

from settings import CRISIS_WINDOW, PANDEMIC_START

logger = logging.getLogger(__name__)

class ReportVisualizer:
    """Charts for the co-movement report"""

    def __init__(self, style: str = 'seaborn-v0_8-whitegrid', dpi: int = 120):
        """
        Initialize visualizer

        Parameters:
        -----------
        style : str
            Matplotlib style to use. Available styles can be listed with
            `plt.style.available`
        dpi : int
            Resolution of saved figures
        """
        try:
            plt.style.use(style)
        except OSError:
            plt.style.use('default')
            logger.warning(f"Style '{style}' not found, using default style")

        self.dpi = dpi
        self.colors = plt.rcParams['axes.prop_cycle'].by_key()['color']

    def _facet(self, n_panels: int, ncols: int = 2, height: float = 3.0):
        nrows = int(np.ceil(n_panels / ncols))
        fig, axes = plt.subplots(nrows, ncols, figsize=(12, height * nrows),
                                 sharex=True, squeeze=False)
        axes = axes.ravel()
        for ax in axes[n_panels:]:
            ax.set_visible(False)
        return fig, axes

    def _finish(self, fig: plt.Figure, title: Optional[str], save_path: Optional[Path]) -> plt.Figure:
        if title:
            fig.suptitle(title)
        fig.tight_layout()
        if save_path:
            fig.savefig(save_path, dpi=self.dpi, bbox_inches='tight')
        return fig

    def shade_stress_periods(self, ax: plt.Axes, dates: pd.DatetimeIndex):
        """Shade the crisis window and the pandemic period where they overlap the sample"""
        start, end = CRISIS_WINDOW
        if dates[0] <= end and dates[-1] >= start:
            ax.axvspan(max(start, dates[0]), min(end, dates[-1]), color='grey', alpha=0.2, lw=0)
        if dates[-1] >= PANDEMIC_START:
            ax.axvspan(max(PANDEMIC_START, dates[0]), dates[-1], color='red', alpha=0.1, lw=0)

    def plot_series_facet(self,
                          frame: pd.DataFrame,
                          ylabel: str,
                          title: Optional[str] = None,
                          normalize: bool = False,
                          save_path: Optional[Path] = None) -> plt.Figure:
        """
        One panel per column (price levels, returns or conditional volatility)

        Parameters:
        -----------
        frame : DataFrame
            Date-indexed values, one column per index
        ylabel : str
            Y-axis label
        normalize : bool
            Rebase every column to 100 at its first value
        """
        if frame.empty:
            raise ValueError("Empty input data")

        if normalize:
            frame = 100 * frame / frame.iloc[0]

        fig, axes = self._facet(len(frame.columns))
        for i, (ax, column) in enumerate(zip(axes, frame.columns)):
            ax.plot(frame.index, frame[column], color=self.colors[i % len(self.colors)], lw=0.8)
            ax.set_title(column)
            ax.set_ylabel(ylabel)

        return self._finish(fig, title, save_path)

    def plot_correlations(self,
                          correlations: Dict[Tuple[str, str], pd.Series],
                          title: Optional[str] = None,
                          save_path: Optional[Path] = None) -> plt.Figure:
        """Conditional correlation paths per pair with stress periods shaded"""
        if not correlations:
            raise ValueError("Empty input data")

        fig, axes = self._facet(len(correlations))
        for i, (ax, (pair, corr)) in enumerate(zip(axes, correlations.items())):
            ax.plot(corr.index, corr.values, color=self.colors[i % len(self.colors)], lw=0.8)
            self.shade_stress_periods(ax, corr.index)
            ax.axhline(y=corr.mean(), color='k', linestyle='--', alpha=0.5)
            ax.set_title(f"{pair[0]} - {pair[1]}")
            ax.set_ylabel('Correlation')

        return self._finish(fig, title, save_path)

    def plot_correlation_heatmap(self,
                                 corr: pd.DataFrame,
                                 title: Optional[str] = None,
                                 save_path: Optional[Path] = None) -> plt.Figure:
        """Heatmap of an unconditional correlation matrix"""
        fig, ax = plt.subplots(figsize=(6, 5))
        sns.heatmap(corr, annot=True, fmt='.2f', cmap='RdBu_r', vmin=-1, vmax=1,
                    square=True, ax=ax)
        return self._finish(fig, title, save_path)

    def plot_report_figures(self,
                            prices: pd.DataFrame,
                            returns: pd.DataFrame,
                            volatilities: pd.DataFrame,
                            correlations: Dict[Tuple[str, str], pd.Series],
                            return_corr: pd.DataFrame,
                            output_path: Path) -> Dict[str, Path]:
        """Render every report chart into output_path and return the file paths"""
        output_path.mkdir(parents=True, exist_ok=True)
        figures = {
            'prices': output_path / 'prices.png',
            'returns': output_path / 'returns.png',
            'volatility': output_path / 'conditional_volatility.png',
            'correlation': output_path / 'conditional_correlation.png',
            'heatmap': output_path / 'return_correlation.png',
        }
        try:
            self.plot_series_facet(prices, 'Index (start = 100)', 'Price levels',
                                   normalize=True, save_path=figures['prices'])
            self.plot_series_facet(returns, 'Log return', 'Daily log returns',
                                   save_path=figures['returns'])
            self.plot_series_facet(volatilities, 'Percent', 'Conditional standard deviation',
                                   save_path=figures['volatility'])
            self.plot_correlations(correlations, 'DCC conditional correlations',
                                   save_path=figures['correlation'])
            self.plot_correlation_heatmap(return_corr, 'Unconditional return correlation',
                                          save_path=figures['heatmap'])
        except Exception as e:
            logger.error(f"Error plotting report figures: {str(e)}")
            raise
        finally:
            self.close_all()

        logger.info(f"Saved {len(figures)} figures to {output_path}")
        return figures

    def close_all(self):
        """Close all open figures"""
        plt.close('all')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_all()
