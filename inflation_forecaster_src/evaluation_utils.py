# inflation_forecaster_src/evaluation_utils.py

"""
Forecast evaluation for the model bank.

Produces test-window forecasts and in-sample fitted values for the four
Phillips-curve models and their ensemble, then scores them. The two accuracy
tables (in-sample, out-of-sample) are plain DataFrames indexed by model name
and ordered by ascending MAPE, ready for CSV export or report rendering.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import pandas as pd

from .data_utils import TrainTestSplit
from .exceptions import EvaluationError, SplitConfigurationError
from .forecasting_utils import TARGET, ModelBank
from .metrics_utils import ACCURACY_COLUMNS, compute_accuracy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EvaluationResult:
    """Forecasts, fitted values and both accuracy tables."""

    in_sample: pd.DataFrame
    out_of_sample: pd.DataFrame
    forecasts: pd.DataFrame
    fitted: pd.DataFrame
    intervals: Optional[Dict[str, pd.DataFrame]] = None


def forecast_table(bank: ModelBank, test: pd.DataFrame) -> pd.DataFrame:
    """
    Test-window forecasts for every model plus the actual target.

    Returns
    -------
    pd.DataFrame
        Index: test months. Columns: 'actual' followed by one column per model
        ('mUN', 'mEXPINF', 'mMICH', 'mINDPRO', 'ensem').
    """
    if test.empty:
        raise SplitConfigurationError("Test window is empty; out-of-sample accuracy cannot be computed")

    columns = {"actual": test[TARGET]}
    for name, model in bank.all_models().items():
        columns[name] = model.forecast(test)
    return pd.DataFrame(columns, index=test.index)


def fitted_table(bank: ModelBank) -> pd.DataFrame:
    """In-sample fitted values for every model plus the actual training target."""
    columns = {}
    for name, model in bank.all_models().items():
        columns[name] = model.fitted_values()
    fitted = pd.DataFrame(columns)
    train = next(iter(bank.models.values())).training_window
    fitted.insert(0, "actual", train[TARGET].reindex(fitted.index))
    return fitted


def interval_table(bank: ModelBank, test: pd.DataFrame, level: float = 95.0) -> Optional[Dict[str, pd.DataFrame]]:
    """
    Forecast intervals at ``level`` percent for every model, keyed by model name.

    Returns None, with a warning, when the injected regression does not
    provide prediction intervals.
    """
    try:
        return {name: model.forecast_interval(test, level=level) for name, model in bank.all_models().items()}
    except NotImplementedError as e:
        logger.warning("Skipping forecast intervals: %s", e)
        return None


def accuracy_table(predictions: pd.DataFrame,
                   y_train: pd.Series,
                   window: str,
                   m: int = 12) -> pd.DataFrame:
    """
    Score every model column of ``predictions`` against its 'actual' column.

    Parameters
    ----------
    predictions : pd.DataFrame
        Output of ``forecast_table`` or ``fitted_table``.
    y_train : pd.Series
        Training target used to scale MASE/RMSSE.
    window : str
        Label stored in the 'window' column ('in_sample' or 'out_of_sample').
    m : int, default=12
        Seasonal period for the scaled metrics.

    Returns
    -------
    pd.DataFrame
        One row per model, sorted by ascending MAPE (NaN last).
    """
    if "actual" not in predictions.columns:
        raise EvaluationError("Predictions table has no 'actual' column")

    rows = {}
    actual = predictions["actual"]
    for name in predictions.columns.drop("actual"):
        rows[name] = compute_accuracy(actual, predictions[name], y_train, m=m)

    table = pd.DataFrame.from_dict(rows, orient="index", columns=ACCURACY_COLUMNS)
    table.index.name = "model"
    table.insert(0, "window", window)

    flagged = table.loc[table["n_excluded"] > 0]
    for name, row in flagged.iterrows():
        logger.warning("%s %s: %d point(s) with zero actual excluded from MAPE", window, name, int(row["n_excluded"]))

    return table.sort_values("MAPE", ascending=True, na_position="last", kind="mergesort")


def evaluate_models(bank: ModelBank,
                    split: TrainTestSplit,
                    interval_level: Optional[float] = None,
                    m: int = 12) -> EvaluationResult:
    """
    Forecast the test window and score all five models in and out of sample.

    Parameters
    ----------
    bank : ModelBank
        Fitted models and ensemble.
    split : TrainTestSplit
        The split the bank was fitted on.
    interval_level : float, optional
        When given, also compute forecast intervals at this coverage.
    m : int, default=12
        Seasonal period for MASE/RMSSE scaling.

    Raises
    ------
    SplitConfigurationError
        If the test window is empty.
    """
    if split.test.empty:
        raise SplitConfigurationError("Test window is empty; out-of-sample accuracy cannot be computed")

    y_train = split.train[TARGET]
    fitted = fitted_table(bank)
    forecasts = forecast_table(bank, split.test)

    in_sample = accuracy_table(fitted, y_train, "in_sample", m=m)
    out_of_sample = accuracy_table(forecasts, y_train, "out_of_sample", m=m)
    logger.info("Best in-sample MAPE: %s (%.3f); best out-of-sample MAPE: %s (%.3f)",
                in_sample.index[0], in_sample["MAPE"].iloc[0],
                out_of_sample.index[0], out_of_sample["MAPE"].iloc[0])

    intervals = interval_table(bank, split.test, level=interval_level) if interval_level else None

    return EvaluationResult(
        in_sample=in_sample,
        out_of_sample=out_of_sample,
        forecasts=forecasts,
        fitted=fitted,
        intervals=intervals,
    )
