"""Progress, plotting and report utilities"""

from .progress import ProgressMonitor
from .visualization import ReportVisualizer
from .report import ReportBuilder

__all__ = ['ProgressMonitor', 'ReportVisualizer', 'ReportBuilder']
