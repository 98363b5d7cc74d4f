# inflation_forecaster_src/data_utils.py

import pandas as pd
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union
import logging

from helpers.temporal import FrequencyError, parse_month, to_monthly_period_index
from .exceptions import FetchError, SplitConfigurationError

logger = logging.getLogger(__name__)

LONG_COLUMNS = ["month", "series_id", "value"]


def load_observations_csv(path: Path) -> pd.DataFrame:
    """
    Load raw observations from a long-format CSV.

    The CSV needs a date column ('month' or 'date', anything pandas can parse
    into a month), a 'series_id' column and a 'value' column. This is the
    offline counterpart of the FRED fetch and returns the same table shape.

    Parameters
    ----------
    path : Path
        CSV file to read.

    Returns
    -------
    pd.DataFrame
        Columns ['month', 'series_id', 'value'] with 'month' as Period[M],
        sorted by series then month.

    Raises
    ------
    FetchError
        If the file is missing, lacks the required columns, has no valid rows,
        or holds more than one value per (month, series_id).
    """
    if not path.exists():
        raise FetchError(f"Observations CSV not found: {path}")

    logger.info("Loading observations from: %s", path)
    df = pd.read_csv(path)

    date_col = "month" if "month" in df.columns else "date"
    missing = [c for c in (date_col, "series_id", "value") if c not in df.columns]
    if missing:
        raise FetchError(f"Observations CSV must contain 'month' (or 'date'), 'series_id' and 'value'; missing {missing}")

    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    df[date_col] = pd.to_datetime(df[date_col], errors="coerce")
    df = df.dropna(subset=[date_col, "series_id", "value"])
    if df.empty:
        raise FetchError("No valid rows found in observations CSV after parsing.")

    frames = []
    for series_id, grp in df.groupby("series_id", sort=False):
        s = pd.Series(grp["value"].values, index=pd.DatetimeIndex(grp[date_col]), name=series_id)
        try:
            s = to_monthly_period_index(s)
        except FrequencyError as e:
            raise FetchError(str(e), details={"series_id": series_id}) from e
        frames.append(pd.DataFrame({"month": s.index, "series_id": series_id, "value": s.values}))

    out = pd.concat(frames, ignore_index=True)[LONG_COLUMNS]
    logger.info("Loaded %d observations for %d series", len(out), out["series_id"].nunique())
    return out


def filter_observations(observations: pd.DataFrame,
                        series_ids: Optional[Iterable[str]] = None,
                        start_date: Optional[str] = None,
                        end_date: Optional[str] = None) -> pd.DataFrame:
    """
    Restrict a long-format table to the requested series and month range.

    Returns a new table; every requested series must be present.
    """
    out = observations
    if series_ids is not None:
        wanted = list(series_ids)
        absent = sorted(set(wanted) - set(out["series_id"].unique()))
        if absent:
            raise FetchError(f"Observations are missing series: {absent}")
        out = out.loc[out["series_id"].isin(wanted)]
    if start_date:
        out = out.loc[out["month"] >= parse_month(start_date)]
    if end_date:
        out = out.loc[out["month"] <= parse_month(end_date)]
    return out.reset_index(drop=True)


def save_observations_csv(observations: pd.DataFrame, path: Path) -> None:
    """Write a long-format observations table with ISO month strings."""
    path.parent.mkdir(parents=True, exist_ok=True)
    out = observations.loc[:, LONG_COLUMNS].copy()
    out["month"] = out["month"].astype(str)
    out.to_csv(path, index=False)
    logger.info("Saved %d observations to %s", len(out), path)


@dataclass(frozen=True, eq=False)
class TrainTestSplit:
    """Chronological partition of the transformed table at ``cutoff``."""

    train: pd.DataFrame
    test: pd.DataFrame
    cutoff: pd.Period

    @property
    def full(self) -> pd.DataFrame:
        """Train and test rejoined in month order."""
        return pd.concat([self.train, self.test])


def split_train_test(table: pd.DataFrame, cutoff: Union[str, pd.Period]) -> TrainTestSplit:
    """
    Split a monthly table into training and test windows.

    Parameters
    ----------
    table : pd.DataFrame
        Transformed table indexed by a monthly PeriodIndex.
    cutoff : str or pd.Period
        Last training month, e.g. '2018-12'. Rows after it form the test window.

    Returns
    -------
    TrainTestSplit
        ``train`` holds months <= cutoff and ``test`` months > cutoff. Both
        are copies; the input table is left untouched.

    Raises
    ------
    SplitConfigurationError
        If the cutoff cannot be parsed or leaves either window empty.
    """
    try:
        cut = parse_month(cutoff)
    except (ValueError, TypeError) as e:
        raise SplitConfigurationError(f"Invalid cutoff month {cutoff!r}: {e}") from e

    if not isinstance(table.index, pd.PeriodIndex):
        raise SplitConfigurationError("Table must be indexed by a monthly PeriodIndex")

    mask = table.index <= cut
    train = table.loc[mask].copy()
    test = table.loc[~mask].copy()

    if train.empty or test.empty:
        first = table.index.min() if len(table) else None
        last = table.index.max() if len(table) else None
        raise SplitConfigurationError(
            f"Cutoff {cut} leaves an empty {'training' if train.empty else 'test'} window "
            f"(data covers {first} to {last})",
            details={"train_rows": len(train), "test_rows": len(test)},
        )

    logger.info("Split at %s: train=%d rows (%s..%s), test=%d rows (%s..%s)",
                cut, len(train), train.index[0], train.index[-1],
                len(test), test.index[0], test.index[-1])
    return TrainTestSplit(train=train, test=test, cutoff=cut)
