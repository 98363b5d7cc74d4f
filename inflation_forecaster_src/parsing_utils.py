# inflation_forecaster_src/parsing_utils.py

from typing import List, Optional, Union
import logging

import pandas as pd

from helpers.temporal import parse_month

logger = logging.getLogger(__name__)


def parse_series_list(s: Optional[Union[str, List[str]]], default: List[str]) -> List[str]:
    """
    Parse a comma-separated list of FRED series ids.

    Parameters
    ----------
    s : str or list, optional
        e.g. "PCEPI,UNRATE" or a list from the configuration file
    default : List[str]
        Returned when ``s`` is empty

    Returns
    -------
    List[str]
        Upper-cased ids, order preserved, duplicates removed

    Examples
    --------
    >>> parse_series_list("pcepi, UNRATE,,pcepi", default=[])
    ['PCEPI', 'UNRATE']
    """
    if not s:
        return list(default)
    items = s if isinstance(s, list) else s.split(",")
    out: List[str] = []
    for item in items:
        sid = str(item).strip().upper()
        if sid and sid not in out:
            out.append(sid)
    return out or list(default)


def validate_cutoff(cutoff: Union[str, pd.Period]) -> str:
    """
    Validate a train/test cutoff month and normalize it to 'YYYY-MM'.

    Raises
    ------
    ValueError
        If the value is not a parseable year-month
    """
    try:
        return str(parse_month(cutoff))
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid cutoff month '{cutoff}'. Expected YYYY-MM.") from e


def validate_date(value: Optional[str]) -> Optional[str]:
    """Validate an optional YYYY-MM-DD date and return it in ISO form."""
    if value is None or value == "":
        return None
    try:
        return pd.Timestamp(value).strftime("%Y-%m-%d")
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD.") from e


def validate_interval_level(level: Union[int, float, str]) -> float:
    """
    Validate a forecast interval coverage given in percent.

    >>> validate_interval_level("80")
    80.0
    """
    try:
        val = float(level)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid interval level '{level}'") from e
    if not 0.0 < val < 100.0:
        raise ValueError(f"Interval level must be between 0 and 100, got {val}")
    return val


def validate_log_level(log_level: str) -> str:
    """
    Validate and normalize a logging level.

    Parameters
    ----------
    log_level : str
        Logging level to validate

    Returns
    -------
    str
        Validated logging level

    Raises
    ------
    ValueError
        If the logging level is not supported
    """
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = log_level.upper()
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level '{log_level}'. Must be one of: {valid_levels}")
    return level_upper
