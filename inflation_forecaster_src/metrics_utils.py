# inflation_forecaster_src/metrics_utils.py

import math
import numpy as np
import pandas as pd
from typing import Dict, List, Tuple, Union
import logging

logger = logging.getLogger(__name__)

ArrayLike = Union[List[float], np.ndarray, pd.Series]

ACCURACY_COLUMNS = ["ME", "RMSE", "MAE", "MPE", "MAPE", "MASE", "RMSSE", "ACF1", "n", "n_excluded"]


def to_1d_array(x: ArrayLike) -> np.ndarray:
    """
    Convert input to 1D numpy array, filtering out non-finite values.

    Parameters
    ----------
    x : Union[List[float], np.ndarray, pd.Series]
        Input data to convert

    Returns
    -------
    np.ndarray
        1D array containing only finite values
    """
    arr = np.asarray(x, dtype=float).ravel()
    return arr[np.isfinite(arr)]


def paired_arrays(y_true: ArrayLike, y_hat: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Align actuals and forecasts, keeping only positions where both are finite.

    Series inputs are aligned on their index first; other inputs must have
    equal length.
    """
    if isinstance(y_true, pd.Series) and isinstance(y_hat, pd.Series):
        y_true, y_hat = y_true.align(y_hat, join="inner")
    yt = np.asarray(y_true, dtype=float).ravel()
    yh = np.asarray(y_hat, dtype=float).ravel()
    if len(yt) != len(yh):
        raise ValueError(f"Actuals and forecasts differ in length: {len(yt)} vs {len(yh)}")
    keep = np.isfinite(yt) & np.isfinite(yh)
    return yt[keep], yh[keep]


def forecast_errors(y_true: ArrayLike, y_hat: ArrayLike) -> np.ndarray:
    """Errors ``e_t = y_t - yhat_t``."""
    yt, yh = paired_arrays(y_true, y_hat)
    return yt - yh


def percentage_errors(y_true: ArrayLike, y_hat: ArrayLike) -> Tuple[np.ndarray, int]:
    """
    Percentage errors ``p_t = 100 * e_t / y_t`` with zero actuals excluded.

    Points where the actual is exactly zero have no defined percentage error;
    they are dropped rather than coerced, and their count is returned for the
    caller to report.

    Returns
    -------
    Tuple[np.ndarray, int]
        (percentage errors over the valid points, number of excluded points)
    """
    yt, yh = paired_arrays(y_true, y_hat)
    zero = yt == 0.0
    n_excluded = int(zero.sum())
    logger.debug("Percentage errors: %d of %d points with zero actual excluded", n_excluded, len(yt))
    p = 100.0 * (yt[~zero] - yh[~zero]) / yt[~zero]
    return p, n_excluded


def me(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """Mean error (bias); positive means forecasts are too low."""
    e = forecast_errors(y_true, y_hat)
    return float(np.mean(e)) if e.size else float("nan")


def mae(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """
    Calculate Mean Absolute Error.

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        True values
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Predicted values

    Returns
    -------
    float
        Mean absolute error, or NaN if no valid data
    """
    e = forecast_errors(y_true, y_hat)
    return float(np.mean(np.abs(e))) if e.size else float("nan")


def rmse(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """
    Calculate Root Mean Square Error.

    RMSE penalizes large errors more heavily than MAE, making it useful when
    large errors are particularly undesirable.

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        True values
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Predicted values

    Returns
    -------
    float
        Root mean square error, or NaN if no valid data
    """
    e = forecast_errors(y_true, y_hat)
    return float(np.sqrt(np.mean(e ** 2))) if e.size else float("nan")


def mpe(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """Mean percentage error over points with non-zero actuals."""
    p, _ = percentage_errors(y_true, y_hat)
    return float(np.mean(p)) if p.size else float("nan")


def mape(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """
    Calculate Mean Absolute Percentage Error.

    ``MAPE = mean(|100 * (y_t - yhat_t) / y_t|)`` over the window. Points with
    a zero actual are excluded (see ``percentage_errors``); if every point is
    excluded the result is NaN, never zero.

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        True values
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Predicted values

    Returns
    -------
    float
        MAPE as percentage (0-100+), or NaN if no valid data
    """
    p, _ = percentage_errors(y_true, y_hat)
    return float(np.mean(np.abs(p))) if p.size else float("nan")


def _naive_scale(y_train: ArrayLike, m: int, power: int) -> float:
    tr = to_1d_array(y_train)
    if len(tr) <= m:
        return float("nan")
    d = np.abs(tr[m:] - tr[:-m]) ** power
    denom = float(np.mean(d))
    if not np.isfinite(denom) or denom <= 0.0:
        return float("nan")
    return denom


def mase_metric(y_true: ArrayLike,
                y_hat: ArrayLike,
                y_train: ArrayLike,
                m: int = 12) -> float:
    """
    Calculate Mean Absolute Scaled Error.

    MASE scales the MAE by the MAE of a naive seasonal forecast on the
    training data.

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        True values
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Predicted values
    y_train : Union[List[float], np.ndarray, pd.Series]
        Training data for scaling reference
    m : int, default=12
        Seasonal period for naive forecast (12 for monthly data)

    Returns
    -------
    float
        MASE value, or NaN if computation is not possible

    Notes
    -----
    Values < 1 indicate the forecast is better than naive seasonal forecast.
    """
    denom = _naive_scale(y_train, m, power=1)
    num = mae(y_true, y_hat)
    if not np.isfinite(denom) or not np.isfinite(num):
        return float("nan")
    return float(num / denom)


def rmsse_metric(y_true: ArrayLike,
                 y_hat: ArrayLike,
                 y_train: ArrayLike,
                 m: int = 12) -> float:
    """Root Mean Squared Scaled Error: squared-error analogue of MASE."""
    denom = _naive_scale(y_train, m, power=2)
    e = forecast_errors(y_true, y_hat)
    if not np.isfinite(denom) or e.size == 0:
        return float("nan")
    return float(math.sqrt(float(np.mean(e ** 2)) / denom))


def acf1(errors: ArrayLike) -> float:
    """Lag-1 autocorrelation of a forecast error sequence."""
    e = to_1d_array(errors)
    if e.size < 2:
        return float("nan")
    d = e - e.mean()
    denom = float(np.sum(d * d))
    if denom <= 0.0:
        return float("nan")
    return float(np.sum(d[1:] * d[:-1]) / denom)


def compute_accuracy(y_true: ArrayLike,
                     y_hat: ArrayLike,
                     y_train: ArrayLike,
                     m: int = 12) -> Dict[str, float]:
    """
    Compute the accuracy metrics reported for each model and window.

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        Actual values for the window
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Forecasts (or fitted values) for the same points
    y_train : Union[List[float], np.ndarray, pd.Series]
        Training target, used to scale MASE and RMSSE
    m : int, default=12
        Seasonal period for the scaled metrics

    Returns
    -------
    Dict[str, float]
        Keys: ME, RMSE, MAE, MPE, MAPE, MASE, RMSSE, ACF1, n, n_excluded.
        ``n_excluded`` counts points dropped from MPE/MAPE for a zero actual.
    """
    yt, yh = paired_arrays(y_true, y_hat)
    p, n_excluded = percentage_errors(yt, yh)

    return {
        "ME": me(yt, yh),
        "RMSE": rmse(yt, yh),
        "MAE": mae(yt, yh),
        "MPE": float(np.mean(p)) if p.size else float("nan"),
        "MAPE": float(np.mean(np.abs(p))) if p.size else float("nan"),
        "MASE": mase_metric(yt, yh, y_train, m=m),
        "RMSSE": rmsse_metric(yt, yh, y_train, m=m),
        "ACF1": acf1(yt - yh),
        "n": int(len(yt)),
        "n_excluded": n_excluded,
    }
