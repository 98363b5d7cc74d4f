# inflation_forecaster_src/transform_utils.py

import pandas as pd
import numpy as np
from typing import Dict
import logging

from helpers.temporal import is_contiguous_monthly
from .exceptions import TransformError

logger = logging.getLogger(__name__)

# Annualize a monthly log change as a percentage: 100 * 12 months
ANNUALIZE = 1200.0

RAW_SERIES = ["PCEPI", "UNRATE", "EXPINF1YR", "MICH", "INDPRO"]
TRANSFORMED_COLUMNS = ["dinfl", "dinfl12", "unrate", "expinf1yr", "mich", "indpro"]
LOG_SERIES = ["PCEPI", "INDPRO"]


def observations_to_wide(observations: pd.DataFrame) -> pd.DataFrame:
    """
    Pivot long-format observations into one column per series.

    Parameters
    ----------
    observations : pd.DataFrame
        Columns ['month', 'series_id', 'value'].

    Returns
    -------
    pd.DataFrame
        Index: monthly PeriodIndex named 'month' covering every month present
        in any series (months missing for a series are NaN). Columns: series ids.
    """
    if observations.duplicated(subset=["month", "series_id"]).any():
        raise TransformError("Observations contain more than one value per (month, series_id)")

    wide = observations.pivot(index="month", columns="series_id", values="value")
    wide.columns.name = None
    wide.index = pd.PeriodIndex(wide.index, freq="M", name="month")
    wide = wide.sort_index()

    # Fill any interior months absent from every series so shifts stay positional
    full_index = pd.period_range(wide.index.min(), wide.index.max(), freq="M", name="month")
    return wide.reindex(full_index)


def log_diff(series: pd.Series, periods: int = 1, scale: float = ANNUALIZE) -> pd.Series:
    """
    Scaled natural-log difference: ``scale * ln(x_t / x_{t-periods})``.

    >>> s = pd.Series([100.0, 101.0])
    >>> round(log_diff(s).iloc[1], 4)
    11.9404
    """
    return scale * np.log(series / series.shift(periods))


def validate_wide_for_transform(wide: pd.DataFrame) -> None:
    """
    Check a wide raw table before transforming it.

    Raises
    ------
    TransformError
        If a required series is missing or a log-transformed series has
        non-positive values.
    """
    missing = [c for c in RAW_SERIES if c not in wide.columns]
    if missing:
        raise TransformError(f"Raw table is missing required series: {missing}")

    for col in LOG_SERIES:
        s = wide[col].dropna()
        if (s <= 0).any():
            raise TransformError(f"Log transform of {col} requires all positive values")


def transform_to_stationary(wide: pd.DataFrame) -> pd.DataFrame:
    """
    Derive the stationary series used by the Phillips-curve models.

    Rules (natural logs; 1200 annualizes a monthly log change in percent):

    - infl      = 1200 * ln(PCEPI_t / PCEPI_{t-1})            (intermediate)
    - dinfl     = infl_t - infl_{t-1}
    - dinfl12   = 100 * ln(PCEPI_t / PCEPI_{t-12}) - infl_{t-12}
    - unrate    = UNRATE_t - UNRATE_{t-1}
    - expinf1yr = EXPINF1YR_t - EXPINF1YR_{t-1}
    - mich      = MICH_t - MICH_{t-1}
    - indpro    = 1200 * ln(INDPRO_t / INDPRO_{t-1})

    Parameters
    ----------
    wide : pd.DataFrame
        Raw series by month (see ``observations_to_wide``). Not modified.

    Returns
    -------
    pd.DataFrame
        New table with columns ``TRANSFORMED_COLUMNS``. Rows with any
        undefined value are dropped, so complete raw history loses exactly
        its first 13 months.

    Raises
    ------
    TransformError
        If inputs are invalid, nothing survives the row drop, or the
        surviving months are not contiguous.
    """
    validate_wide_for_transform(wide)

    infl = log_diff(wide["PCEPI"], 1)
    out = pd.DataFrame(index=wide.index.copy())
    out["dinfl"] = infl - infl.shift(1)
    out["dinfl12"] = log_diff(wide["PCEPI"], 12, scale=100.0) - infl.shift(12)
    out["unrate"] = wide["UNRATE"].diff()
    out["expinf1yr"] = wide["EXPINF1YR"].diff()
    out["mich"] = wide["MICH"].diff()
    out["indpro"] = log_diff(wide["INDPRO"], 1)

    _len_before = len(out)
    out = out.dropna()
    logger.info("Stationarity transform: dropped %d of %d rows with undefined values", _len_before - len(out), _len_before)

    if out.empty:
        raise TransformError("Transformed table is empty: insufficient history for the lag-12 transforms")

    if not is_contiguous_monthly(out.index):
        raise TransformError(
            f"Transformed table has gaps between {out.index[0]} and {out.index[-1]}; "
            "raw series must share a contiguous monthly history"
        )

    return out[TRANSFORMED_COLUMNS]


def get_transform_descriptions() -> Dict[str, str]:
    """
    Human-readable description of each derived column.

    Returns
    -------
    Dict[str, str]
        Column name -> description, in output column order.
    """
    return {
        "dinfl": "Change in annualized monthly PCE inflation (1200*dlog PCEPI, first difference)",
        "dinfl12": "12-month PCE inflation minus annualized monthly inflation 12 months earlier",
        "unrate": "Change in the unemployment rate",
        "expinf1yr": "Change in 1-year expected inflation",
        "mich": "Change in Michigan survey inflation expectations",
        "indpro": "Annualized monthly growth of industrial production (1200*dlog INDPRO)",
    }
