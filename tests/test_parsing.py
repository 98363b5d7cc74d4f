import pytest

from inflation_forecaster_src.parsing_utils import (
    parse_series_list,
    validate_cutoff,
    validate_date,
    validate_interval_level,
    validate_log_level,
)


def test_parse_series_list():
    assert parse_series_list("pcepi, UNRATE,,pcepi", default=[]) == ["PCEPI", "UNRATE"]
    assert parse_series_list(["mich", "INDPRO"], default=[]) == ["MICH", "INDPRO"]
    assert parse_series_list(None, default=["PCEPI"]) == ["PCEPI"]
    assert parse_series_list(" , ", default=["PCEPI"]) == ["PCEPI"]


def test_validate_cutoff():
    assert validate_cutoff("2018-12") == "2018-12"
    assert validate_cutoff("2018-12-31") == "2018-12"
    with pytest.raises(ValueError):
        validate_cutoff("not-a-month")


def test_validate_date():
    assert validate_date(None) is None
    assert validate_date("") is None
    assert validate_date("1982-01-01") == "1982-01-01"
    with pytest.raises(ValueError):
        validate_date("not-a-date")


@pytest.mark.parametrize("level, expected", [(95, 95.0), ("80", 80.0), (50.5, 50.5)])
def test_validate_interval_level(level, expected):
    assert validate_interval_level(level) == expected


@pytest.mark.parametrize("level", [0, 100, 150, "wide"])
def test_validate_interval_level_rejects(level):
    with pytest.raises(ValueError):
        validate_interval_level(level)


def test_validate_log_level():
    assert validate_log_level("debug") == "DEBUG"
    with pytest.raises(ValueError):
        validate_log_level("verbose")
