#!/usr/bin/env python
"""
Full pipeline for the Central European index co-movement report.
Coordinates data loading, diagnostics, GARCH selection, DCC estimation,
stress-period regressions and report rendering.
"""
import sys
import argparse
from pathlib import Path
import logging
from datetime import datetime
from typing import Dict, Any, Optional, Sequence
import time
import traceback
import pandas as pd
import psutil

from settings import START_DATE, USA_INDEX, CRISIS_WINDOW, PANDEMIC_START
from data_manager.data_loader import DataLoader
from garch.data_prep import ReturnTransformer
from garch.diagnostics import ReturnDiagnostics
from garch.estimator import UnivariateEstimator
from garch.dcc import DCCEstimator
from regression.stress_regression import StressRegression
from utils.visualization import ReportVisualizer
from utils.report import ReportBuilder

class PipelineMonitor:
    """Tracks and reports duration and memory of pipeline stages"""
    def __init__(self):
        self.start_time = time.time()
        self.last_checkpoint = self.start_time
        self.checkpoints = {}

    def checkpoint(self, name: str):
        """Record timing for a checkpoint"""
        now = time.time()
        duration = now - self.last_checkpoint
        self.checkpoints[name] = {
            'duration': duration,
            'memory': psutil.Process().memory_info().rss / 1024 / 1024  # MB
        }
        self.last_checkpoint = now

    def report(self):
        """Generate checkpoint report"""
        total_time = time.time() - self.start_time
        report = ["Performance Report:", "-----------------"]

        for name, stats in self.checkpoints.items():
            report.append(f"{name}:")
            report.append(f"  Duration: {stats['duration']:.2f} seconds")
            report.append(f"  Memory: {stats['memory']:.2f} MB")

        report.append("-----------------")
        report.append(f"Total Time: {total_time:.2f} seconds")
        return "\n".join(report)

def setup_logging(output_dir: Path, verbose: bool = False) -> logging.Logger:
    """
    Configure logging with both file and console handlers

    Parameters:
    -----------
    output_dir : Path
        Directory for log file
    verbose : bool
        Log DEBUG messages to the console

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    log_dir = output_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"report_{timestamp}.log"

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(message)s'))

    # Package loggers propagate to the root logger
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    for noisy in ('matplotlib', 'PIL', 'urllib3'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("report_pipeline")

def initialize_components(logger: Optional[logging.Logger] = None) -> Dict:
    """Initialize all analysis components"""
    if logger is None:
        logger = logging.getLogger('report_pipeline')

    logger.info("Creating analysis components...")
    return {
        'transformer': ReturnTransformer(),
        'diagnostics': ReturnDiagnostics(),
        'estimator': UnivariateEstimator(),
        'dcc': DCCEstimator(),
        'regression': StressRegression(),
        'visualizer': ReportVisualizer(),
    }

def run_analysis(components: Dict, prices: pd.DataFrame, output_dir: Path,
                 logger: logging.Logger, monitor: Optional[PipelineMonitor] = None,
                 check_asymmetry: bool = False) -> Dict[str, Any]:
    """Run every stage after data loading and write the report"""
    logger.info("Starting analysis pipeline...")
    monitor = monitor or PipelineMonitor()

    try:
        returns = components['transformer'].log_returns(prices)
        monitor.checkpoint('returns')

        diagnostics = components['diagnostics'].describe(returns)
        return_corr = components['diagnostics'].correlation_matrix(returns)
        monitor.checkpoint('diagnostics')

        selections = components['estimator'].fit_all(returns)
        residual_checks = pd.DataFrame.from_dict(
            {k: components['diagnostics'].residual_checks(s) for k, s in selections.items()},
            orient='index'
        )
        monitor.checkpoint('univariate models')

        correlations = components['dcc'].fit_all(selections)
        asymmetry = None
        if check_asymmetry:
            logger.info("Testing the asymmetric correlation term for every pair...")
            asymmetry = pd.DataFrame([
                components['dcc'].asymmetry_test(selections[a].best, selections[b].best)
                for a, b in correlations
            ])
        monitor.checkpoint('correlation models')

        regressions = components['regression'].run_all(correlations, selections)
        monitor.checkpoint('regressions')

        results = {
            'prices': prices,
            'returns': returns,
            'diagnostics': diagnostics,
            'return_corr': return_corr,
            'selections': selections,
            'residual_checks': residual_checks,
            'correlations': correlations,
            'asymmetry': asymmetry,
            'regressions': regressions,
        }
        results['report_path'] = build_report(components, results, output_dir)
        monitor.checkpoint('report')

        logger.info("Pipeline completed successfully")
        return results

    except Exception as e:
        logger.error(f"Error in analysis pipeline: {str(e)}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        raise

def build_report(components: Dict, results: Dict[str, Any], output_dir: Path) -> Path:
    """Render figures and tables into output_dir/report.html"""
    selections = results['selections']
    correlations = results['correlations']
    regressions = results['regressions']

    volatilities = pd.concat(
        [s.best.conditional_volatility for s in selections.values()], axis=1
    )
    figures = components['visualizer'].plot_report_figures(
        prices=results['prices'],
        returns=results['returns'],
        volatilities=volatilities,
        correlations={pair: fit.correlation for pair, fit in correlations.items()},
        return_corr=results['return_corr'],
        output_path=output_dir / "figures",
    )

    prices = results['prices']
    report = ReportBuilder("Stock market co-movement: BUX, PX, WIG and the S&P 500")
    report.add_text(
        "Sample",
        f"{len(prices)} common trading days from {prices.index[0]:%Y-%m-%d} "
        f"to {prices.index[-1]:%Y-%m-%d}; {len(results['returns'])} log returns."
    )
    report.add_figure("Price levels", figures['prices'], output_dir)
    report.add_figure("Log returns", figures['returns'], output_dir)
    report.add_table(
        "Descriptive statistics and tests", results['diagnostics'],
        note="ADF without deterministic terms, lag order by AIC; Jarque-Bera normality; "
             "Ljung-Box at lag 8; ARCH-LM at lag 4. Test columns are p-values."
    )
    report.add_table("Return correlation matrix", results['return_corr'])
    report.add_figure("Return correlation heatmap", figures['heatmap'], output_dir)
    report.add_table(
        "Information criteria", UnivariateEstimator.criteria_table(selections), index=False,
        note="The specification with the smallest BIC is selected for each index."
    )
    report.add_table(
        "Selected univariate models", UnivariateEstimator.parameter_table(selections), index=False
    )
    report.add_table(
        "Standardized residual checks", results['residual_checks'],
        note="Ljung-Box p-values at lag 8 for standardized and squared standardized residuals."
    )
    report.add_figure("Conditional standard deviations", figures['volatility'], output_dir)
    report.add_table(
        "DCC parameters", DCCEstimator.parameter_table(correlations), index=False,
        note="Symmetric DCC(1,1) under joint normality for every pair."
    )
    if results.get('asymmetry') is not None:
        report.add_table(
            "Asymmetric correlation term", results['asymmetry'], index=False,
            note="Likelihood ratio test of ADCC against DCC; reported only."
        )
    report.add_figure(
        "Conditional correlations", figures['correlation'], output_dir,
        caption=f"Grey: {CRISIS_WINDOW[0]:%Y-%m-%d} to {CRISIS_WINDOW[1]:%Y-%m-%d}; "
                f"red: from {PANDEMIC_START:%Y-%m-%d}."
    )
    report.add_table(
        "Correlation on stress indicators", StressRegression.summary_table(regressions, 'A'),
        index=False, note="OLS with HAC (quadratic spectral kernel) standard errors."
    )
    report.add_table(
        f"Correlation with {USA_INDEX} on conditional volatility",
        StressRegression.summary_table(regressions, 'B'), index=False,
        note="OLS with Newey-West standard errors."
    )
    return report.write(output_dir / "report.html")

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the index co-movement report")
    parser.add_argument('--output-dir', type=Path, default=Path(__file__).parent / "results",
                        help="Directory for the report, figures and logs")
    parser.add_argument('--spx-file', type=Path, default=None,
                        help="Local CSV with Date and Close columns for the S&P 500")
    parser.add_argument('--start-date', type=pd.Timestamp, default=START_DATE,
                        help="First date kept in the sample (YYYY-MM-DD)")
    parser.add_argument('--check-correlation-asymmetry', action='store_true',
                        help="Also report a likelihood ratio test of the ADCC term")
    parser.add_argument('--verbose', action='store_true', help="Log debug messages")
    return parser.parse_args(argv)

def main(argv: Optional[Sequence[str]] = None):
    """Main entry point with configuration and setup"""
    args = parse_args(argv)
    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    logger = setup_logging(output_dir, verbose=args.verbose)
    logger.info("Starting report pipeline...")
    monitor = PipelineMonitor()

    try:
        prices = DataLoader().load_prices(start_date=args.start_date, spx_file=args.spx_file)
        monitor.checkpoint('data loading')

        components = initialize_components(logger)
        results = run_analysis(
            components, prices, output_dir, logger, monitor,
            check_asymmetry=args.check_correlation_asymmetry
        )

        logger.info(monitor.report())
        logger.info(f"Report available at {results['report_path']}")
        return results

    except Exception as e:
        logger.error(f"Pipeline failed: {str(e)}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        raise

if __name__ == '__main__':
    main()
