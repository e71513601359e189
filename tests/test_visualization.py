import pytest
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from utils.visualization import ReportVisualizer


@pytest.fixture
def visualizer():
    """Create visualizer instance"""
    viz = ReportVisualizer()
    yield viz
    viz.close_all()


@pytest.fixture
def sample_paths():
    dates = pd.date_range('2007-01-05', '2021-12-31', freq='W-FRI')
    rng = np.random.default_rng(2)
    prices = pd.DataFrame(
        100 * np.exp(np.cumsum(rng.normal(0, 0.02, (len(dates), 3)), axis=0)),
        index=dates, columns=['BUX', 'PX', 'SPX']
    )
    correlations = {
        ('BUX', 'PX'): pd.Series(0.4 + 0.1 * np.sin(np.arange(len(dates)) / 30), index=dates),
        ('BUX', 'SPX'): pd.Series(0.3 + 0.1 * np.cos(np.arange(len(dates)) / 30), index=dates),
    }
    return prices, correlations


def test_plot_series_facet(visualizer, sample_paths, tmp_path):
    prices, _ = sample_paths
    save_path = tmp_path / "prices.png"
    fig = visualizer.plot_series_facet(prices, 'Index', normalize=True, save_path=save_path)

    assert isinstance(fig, plt.Figure)
    assert save_path.exists()
    visible = [ax for ax in fig.axes if ax.get_visible()]
    assert [ax.get_title() for ax in visible] == ['BUX', 'PX', 'SPX']


def test_empty_frame_raises(visualizer):
    with pytest.raises(ValueError):
        visualizer.plot_series_facet(pd.DataFrame(), 'Index')


def test_plot_correlations(visualizer, sample_paths, tmp_path):
    _, correlations = sample_paths
    save_path = tmp_path / "corr.png"
    fig = visualizer.plot_correlations(correlations, save_path=save_path)

    assert save_path.exists()
    assert fig.axes[0].get_title() == 'BUX - PX'
    # crisis and pandemic shading
    assert len(fig.axes[0].patches) == 2


def test_plot_report_figures(visualizer, sample_paths, tmp_path):
    prices, correlations = sample_paths
    returns = np.log(prices).diff().iloc[1:]
    figures = visualizer.plot_report_figures(
        prices=prices,
        returns=returns,
        volatilities=returns.abs() * 100,
        correlations=correlations,
        return_corr=returns.corr(),
        output_path=tmp_path / "figures",
    )

    assert set(figures) == {'prices', 'returns', 'volatility', 'correlation', 'heatmap'}
    for path in figures.values():
        assert path.exists()
        assert path.stat().st_size > 0
    assert plt.get_fignums() == []
