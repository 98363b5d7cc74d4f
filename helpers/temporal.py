# -*- coding: utf-8 -*-
"""
Temporal utilities for monthly series.

Functions
---------
- to_monthly_period_index(series): Re-index a daily-stamped monthly series by
  calendar month (PeriodIndex, freq 'M'). Raises if two observations fall in
  the same month, which means the series is not monthly.
- parse_month(value): Parse a year-month literal ('2018-12') into a Period.
- is_contiguous_monthly(index): True when a monthly PeriodIndex has no gaps.
"""

from __future__ import annotations

from typing import Union

import pandas as pd


class FrequencyError(ValueError):
    """Raised when a series is not at monthly frequency."""


def to_monthly_period_index(series: pd.Series) -> pd.Series:
    """
    Convert a series with DatetimeIndex (or PeriodIndex) to a monthly PeriodIndex.

    Parameters
    ----------
    series : pd.Series
        Observations stamped at any day within their month (FRED stamps the
        first day of the month).

    Returns
    -------
    pd.Series
        Same values, index converted to ``Period[M]`` named 'month', sorted.

    Raises
    ------
    FrequencyError
        If more than one observation maps to the same calendar month.
    TypeError
        If the index is neither DatetimeIndex nor PeriodIndex.
    """
    if not isinstance(series, pd.Series):
        raise TypeError("series must be a pandas Series")

    s = series.copy()
    if isinstance(s.index, pd.PeriodIndex):
        s.index = s.index.asfreq("M")
    elif isinstance(s.index, pd.DatetimeIndex):
        s.index = s.index.to_period("M")
    else:
        raise TypeError("to_monthly_period_index expects a Series with DatetimeIndex or PeriodIndex.")

    if s.index.has_duplicates:
        dupes = s.index[s.index.duplicated()].unique()
        raise FrequencyError(
            f"Series {series.name!r} has multiple observations per month "
            f"(first duplicate: {dupes[0]}); expected monthly frequency."
        )

    s.index.name = "month"
    return s.sort_index()


def parse_month(value: Union[str, pd.Period, pd.Timestamp]) -> pd.Period:
    """
    Parse a year-month literal into a monthly Period.

    >>> parse_month("2018-12")
    Period('2018-12', 'M')
    """
    if isinstance(value, pd.Period):
        return value.asfreq("M")
    return pd.Period(value, freq="M")


def is_contiguous_monthly(index: pd.PeriodIndex) -> bool:
    """Check that consecutive months differ by exactly one month."""
    if len(index) < 2:
        return True
    expected = pd.period_range(start=index[0], periods=len(index), freq="M")
    return bool((index == expected).all())
