"""
Exceptions raised by the analysis pipeline.

Hierarchy:
    AnalysisError
    ├── DataLoadError      (also a ValueError)
    └── ConvergenceError   (also a RuntimeError)
"""

from typing import Optional


class AnalysisError(Exception):
    """Base exception for all pipeline errors"""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class DataLoadError(AnalysisError, ValueError):
    """Price data could not be loaded, validated or aligned"""

    def __init__(self, source: str, reason: str, details: Optional[str] = None):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load prices for {source}: {reason}", details)


class ConvergenceError(AnalysisError, RuntimeError):
    """Maximum likelihood estimation did not converge"""

    def __init__(self, model: str, target: str, flag: Optional[int] = None):
        self.model = model
        self.target = target
        self.flag = flag
        details = f"Optimizer exit flag: {flag}" if flag is not None else None
        super().__init__(f"{model} did not converge for {target}", details)
