import pandas as pd
import numpy as np

import pytest

from helpers.temporal import FrequencyError, is_contiguous_monthly, parse_month, to_monthly_period_index


def test_to_monthly_period_index_basic():
    # FRED stamps monthly observations on the first day of the month
    idx = pd.date_range("2020-01-01", periods=3, freq="MS")
    s = pd.Series([1.0, 2.0, 3.0], index=idx, name="UNRATE")
    out = to_monthly_period_index(s)

    assert isinstance(out.index, pd.PeriodIndex)
    assert out.index.freqstr.startswith("M")
    assert out.index.name == "month"
    assert list(out.index.astype(str)) == ["2020-01", "2020-02", "2020-03"]
    assert np.allclose(out.values, [1.0, 2.0, 3.0])


def test_to_monthly_period_index_sorts_mid_month_stamps():
    idx = pd.to_datetime(["2020-03-15", "2020-01-31", "2020-02-10"])
    s = pd.Series([3.0, 1.0, 2.0], index=idx, name="X")
    out = to_monthly_period_index(s)

    assert list(out.index.astype(str)) == ["2020-01", "2020-02", "2020-03"]
    assert np.allclose(out.values, [1.0, 2.0, 3.0])


def test_to_monthly_period_index_rejects_sub_monthly():
    idx = pd.to_datetime(["2020-01-01", "2020-01-15", "2020-02-01"])
    s = pd.Series([1.0, 2.0, 3.0], index=idx, name="WEEKLY")

    with pytest.raises(FrequencyError):
        to_monthly_period_index(s)


def test_to_monthly_period_index_requires_time_index():
    with pytest.raises(TypeError):
        to_monthly_period_index(pd.Series([1.0, 2.0]))


def test_parse_month():
    assert parse_month("2018-12") == pd.Period("2018-12", freq="M")
    assert parse_month(pd.Timestamp("2018-12-31")) == pd.Period("2018-12", freq="M")
    assert parse_month(pd.Period("2018Q4", freq="Q")) == pd.Period("2018-12", freq="M")


def test_is_contiguous_monthly():
    idx = pd.period_range("2019-11", periods=4, freq="M")
    assert is_contiguous_monthly(idx)
    assert not is_contiguous_monthly(idx.delete(1))
    assert is_contiguous_monthly(idx[:1])
