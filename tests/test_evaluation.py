import logging

import numpy as np
import pandas as pd

import pytest

from inflation_forecaster_src.data_utils import split_train_test
from inflation_forecaster_src.evaluation_utils import accuracy_table, evaluate_models
from inflation_forecaster_src.exceptions import SplitConfigurationError
from inflation_forecaster_src.forecasting_utils import ENSEMBLE_NAME, PREDICTORS, fit_model_bank
from inflation_forecaster_src.metrics_utils import ACCURACY_COLUMNS

MODELS = list(PREDICTORS) + [ENSEMBLE_NAME]


def test_evaluate_models_tables(transformed):
    split = split_train_test(transformed, "2002-12")
    bank = fit_model_bank(split.train)
    result = evaluate_models(bank, split, interval_level=80.0)

    assert list(result.forecasts.columns) == ["actual"] + MODELS
    assert result.forecasts.index.equals(split.test.index)
    assert result.fitted.index.equals(split.train.index[23:])

    for table, window in ((result.in_sample, "in_sample"), (result.out_of_sample, "out_of_sample")):
        assert sorted(table.index) == sorted(MODELS)
        assert list(table.columns) == ["window"] + ACCURACY_COLUMNS
        assert (table["window"] == window).all()
        assert table["MAPE"].is_monotonic_increasing
        assert (table["MAPE"] >= 0).all()

    assert (result.out_of_sample["n"] == len(split.test)).all()
    assert (result.in_sample["n"] == len(split.train) - 23).all()
    assert sorted(result.intervals) == sorted(MODELS)


def test_evaluate_models_without_intervals(transformed):
    split = split_train_test(transformed, "2002-12")
    result = evaluate_models(fit_model_bank(split.train), split)
    assert result.intervals is None


def test_evaluate_models_rejects_empty_test(transformed):
    split = split_train_test(transformed, "2002-12")
    bank = fit_model_bank(split.train)
    empty = type(split)(train=split.train, test=split.test.iloc[:0], cutoff=split.cutoff)

    with pytest.raises(SplitConfigurationError):
        evaluate_models(bank, empty)


def test_accuracy_table_ordering_and_zero_actuals():
    idx = pd.period_range("2020-01", periods=3, freq="M")
    predictions = pd.DataFrame({
        "actual": [10.0, 20.0, 40.0],
        "a": [1.0, 1.0, 1.0],
        "worse": [5.0, 10.0, 20.0],
        "better": [9.0, 19.0, 39.0],
    }, index=idx)

    table = accuracy_table(predictions, np.arange(30.0), "out_of_sample")
    assert list(table.index) == ["better", "worse", "a"]
    assert table.loc["worse", "MAPE"] == pytest.approx(50.0)

    # Every actual zero: MAPE undefined for all models, flagged rather than zero
    table = accuracy_table(predictions.assign(actual=0.0), np.arange(30.0), "out_of_sample")
    assert table["MAPE"].isna().all()
    assert (table["n_excluded"] == 3).all()


def test_zero_actual_warning_once_per_model(caplog: pytest.LogCaptureFixture):
    idx = pd.period_range("2020-01", periods=4, freq="M")
    predictions = pd.DataFrame({
        "actual": [0.0, 2.0, 0.0, 4.0],
        "a": [1.0, 1.0, 1.0, 1.0],
        "b": [0.5, 2.5, 0.5, 3.5],
        "c": [0.0, 2.0, 0.0, 4.0],
    }, index=idx)

    with caplog.at_level(logging.DEBUG):
        table = accuracy_table(predictions, np.arange(30.0), "in_sample")

    assert (table["n_excluded"] == 2).all()
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 3
    assert all(r.name == "inflation_forecaster_src.evaluation_utils" for r in warnings)
    assert sorted(r.getMessage().split()[1].rstrip(":") for r in warnings) == ["a", "b", "c"]
