"""
Data Fetchers for the Phillips-curve inflation forecaster

This module provides the FRED fetching used by the pipeline:
- Monthly price, labour-market, expectations and production series
- Long-format output (month, series_id, value)
"""

from .fred_series import (
    FredSeriesFetcher,
    fetch_phillips_series,
    PHILLIPS_SERIES,
    DEFAULT_START_DATE,
)

__all__ = [
    'FredSeriesFetcher',
    'fetch_phillips_series',
    'PHILLIPS_SERIES',
    'DEFAULT_START_DATE',
]
