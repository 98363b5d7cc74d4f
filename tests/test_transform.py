import numpy as np
import pandas as pd

import pytest

from inflation_forecaster_src.exceptions import TransformError
from inflation_forecaster_src.transform_utils import (
    TRANSFORMED_COLUMNS,
    log_diff,
    observations_to_wide,
    transform_to_stationary,
)

from conftest import make_raw_observations


def test_observations_to_wide_shape(raw_observations):
    wide = observations_to_wide(raw_observations)

    assert isinstance(wide.index, pd.PeriodIndex)
    assert wide.index.name == "month"
    assert len(wide) == 192
    assert sorted(wide.columns) == sorted(["PCEPI", "UNRATE", "EXPINF1YR", "MICH", "INDPRO"])


def test_observations_to_wide_rejects_duplicates(raw_observations):
    dup = pd.concat([raw_observations, raw_observations.iloc[[0]]], ignore_index=True)
    with pytest.raises(TransformError):
        observations_to_wide(dup)


def test_transform_drops_first_thirteen_months(raw_observations):
    wide = observations_to_wide(raw_observations)
    out = transform_to_stationary(wide)

    assert list(out.columns) == TRANSFORMED_COLUMNS
    assert len(out) == len(wide) - 13
    assert out.index[0] == pd.Period("1991-02", freq="M")
    assert out.index[-1] == wide.index[-1]
    assert not out.isna().any().any()


def test_transform_is_deterministic_and_leaves_input_untouched(raw_observations):
    wide = observations_to_wide(raw_observations)
    before = wide.copy()

    first = transform_to_stationary(wide)
    second = transform_to_stationary(wide)

    pd.testing.assert_frame_equal(first, second)
    pd.testing.assert_frame_equal(wide, before)


def test_transform_values_by_hand():
    months = pd.period_range("2000-01", periods=30, freq="M", name="month")
    g = 0.003
    wide = pd.DataFrame({
        # Constant monthly growth: inflation is flat, so both differentials vanish
        "PCEPI": 100.0 * np.exp(g * np.arange(30)),
        "UNRATE": np.arange(30) * 0.5,
        "EXPINF1YR": np.full(30, 2.0),
        "MICH": np.arange(30, dtype=float) ** 2,
        "INDPRO": 50.0 * np.exp(0.01 * np.arange(30)),
    }, index=months)

    out = transform_to_stationary(wide)

    assert np.allclose(out["dinfl"], 0.0, atol=1e-9)
    assert np.allclose(out["dinfl12"], 0.0, atol=1e-9)
    assert np.allclose(out["unrate"], 0.5)
    assert np.allclose(out["expinf1yr"], 0.0)
    assert np.allclose(out["indpro"], 12.0)
    # MICH_t - MICH_{t-1} = 2t - 1 at position t
    assert out.loc[pd.Period("2001-02", freq="M"), "mich"] == pytest.approx(2 * 13 - 1)


def test_log_diff_annualizes_monthly_change():
    s = pd.Series([100.0, 101.0])
    assert log_diff(s).iloc[1] == pytest.approx(1200.0 * np.log(1.01))
    assert np.isnan(log_diff(s).iloc[0])


def test_transform_requires_all_series(raw_observations):
    wide = observations_to_wide(raw_observations).drop(columns=["MICH"])
    with pytest.raises(TransformError, match="MICH"):
        transform_to_stationary(wide)


def test_transform_rejects_non_positive_price_index(raw_observations):
    wide = observations_to_wide(raw_observations)
    wide.iloc[50, wide.columns.get_loc("PCEPI")] = 0.0
    with pytest.raises(TransformError):
        transform_to_stationary(wide)


def test_transform_too_short_history():
    wide = observations_to_wide(make_raw_observations(periods=13))
    with pytest.raises(TransformError):
        transform_to_stationary(wide)


def test_transform_rejects_interior_gap(raw_observations):
    gap = raw_observations.loc[
        ~((raw_observations["series_id"] == "UNRATE")
          & (raw_observations["month"] == pd.Period("1998-06", freq="M")))
    ]
    with pytest.raises(TransformError, match="gaps"):
        transform_to_stationary(observations_to_wide(gap))
