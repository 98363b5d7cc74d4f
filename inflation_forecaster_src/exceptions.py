# inflation_forecaster_src/exceptions.py

"""
Pipeline error taxonomy.

Every stage of the fetch -> transform -> split -> fit -> evaluate pipeline is
all-or-nothing: a failure raises the stage's exception and aborts the run.
The CLI reports ``stage`` and message, then exits non-zero.
"""

from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base exception for fatal pipeline failures."""

    stage = "pipeline"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class FetchError(PipelineError):
    """Raised when a series cannot be retrieved or is not monthly."""

    stage = "fetch"


class TransformError(PipelineError):
    """Raised when the stationarity transform cannot produce a usable table."""

    stage = "transform"


class SplitConfigurationError(PipelineError):
    """Raised when the train/test cutoff leaves either window empty."""

    stage = "split"


class FitError(PipelineError):
    """Raised when a regression cannot be estimated (rank-deficient design)."""

    stage = "fit"


class EvaluationError(PipelineError):
    """Raised when forecasts cannot be produced for an evaluation window."""

    stage = "evaluate"
