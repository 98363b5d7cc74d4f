import math

import numpy as np
import pandas as pd

import pytest

from inflation_forecaster_src.metrics_utils import (
    ACCURACY_COLUMNS,
    acf1,
    compute_accuracy,
    mae,
    mape,
    mase_metric,
    me,
    mpe,
    rmse,
)


def test_error_metrics_known_values():
    y = [1.0, 2.0, 3.0]
    yhat = [0.0, 2.0, 5.0]  # e = y - yhat = [1, 0, -2]

    assert me(y, yhat) == pytest.approx(-1.0 / 3.0)
    assert mae(y, yhat) == pytest.approx(1.0)
    assert rmse(y, yhat) == pytest.approx(math.sqrt(5.0 / 3.0))


def test_mape_and_mpe_known_values():
    y = [100.0, 200.0]
    yhat = [90.0, 220.0]

    assert mape(y, yhat) == pytest.approx(10.0)
    assert mpe(y, yhat) == pytest.approx(0.0)


def test_mape_is_non_negative():
    rng = np.random.default_rng(0)
    y = rng.standard_normal(50)
    yhat = y + rng.standard_normal(50)
    assert mape(y, yhat) >= 0.0


def test_zero_actuals_are_excluded_not_coerced():
    out = compute_accuracy([0.0, 100.0], [1.0, 90.0], y_train=np.arange(30.0))

    assert out["MAPE"] == pytest.approx(10.0)
    assert out["n"] == 2
    assert out["n_excluded"] == 1
    # Scale-dependent metrics still use every point
    assert out["MAE"] == pytest.approx(5.5)


def test_all_zero_actuals_give_nan_mape():
    assert np.isnan(mape([0.0, 0.0], [1.0, -1.0]))


def test_series_are_aligned_on_index():
    idx = pd.period_range("2019-01", periods=3, freq="M")
    y = pd.Series([10.0, 20.0, 40.0], index=idx)
    yhat = pd.Series([20.0, 30.0], index=idx[1:])

    assert mae(y, yhat) == pytest.approx(5.0)


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        mae([1.0, 2.0], [1.0])


def test_mase_uses_seasonal_naive_scale():
    # Seasonal naive errors on arange(24) with m=12 are all 12
    y_train = np.arange(24.0)
    assert mase_metric([0.0, 0.0], [6.0, -6.0], y_train, m=12) == pytest.approx(0.5)
    assert np.isnan(mase_metric([0.0], [1.0], np.arange(12.0), m=12))


def test_acf1_alternating():
    assert acf1([1.0, -1.0, 1.0, -1.0]) == pytest.approx(-0.75)
    assert np.isnan(acf1([1.0]))


def test_compute_accuracy_keys():
    out = compute_accuracy([1.0, 2.0, 3.0], [1.1, 1.9, 3.2], np.arange(30.0))
    assert list(out) == ACCURACY_COLUMNS
