"""
Data management package for the index co-movement report.
Handles price loading, validation, and alignment.
"""

from .data_loader import DataLoader
from .data_validator import DataValidator

__all__ = ['DataLoader', 'DataValidator']
