import types
from pathlib import Path

import pytest

from inflation_forecaster_src import config_utils
from inflation_forecaster_src.config_utils import (
    ConfigurationError,
    ConfigurationManager,
    get_config_value,
    initialize_config,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_dotted_lookup(tmp_path: Path):
    cfg = _write(tmp_path / "pipeline.yaml", "pipeline:\n  cutoff: '2015-06'\n  interval_level: 80\n")
    manager = ConfigurationManager(cfg)

    assert manager.get("pipeline.cutoff") == "2015-06"
    assert manager.get("pipeline.interval_level") == 80
    assert manager.get("pipeline.missing", "dflt") == "dflt"
    assert manager.get("pipeline.cutoff.deeper") is None
    assert manager.validate_configuration() == {}


def test_missing_file_is_empty(tmp_path: Path):
    manager = ConfigurationManager(tmp_path / "nope.yaml")
    assert manager.get("pipeline.cutoff", "2018-12") == "2018-12"


def test_invalid_yaml_raises(tmp_path: Path):
    cfg = _write(tmp_path / "bad.yaml", "pipeline: [unclosed\n")
    with pytest.raises(ConfigurationError):
        ConfigurationManager(cfg)

    # initialize_config logs and falls back to defaults
    initialize_config(cfg)
    assert config_utils.config_manager is None


def test_validation_flags_bad_values(tmp_path: Path):
    cfg = _write(tmp_path / "pipeline.yaml",
                 "pipeline:\n  interval_level: 150\n  cutoff: 2018\ndata_sources:\n  fred:\n    series: PCEPI\n")
    errors = ConfigurationManager(cfg).validate_configuration()

    assert set(errors) == {"pipeline", "data_sources"}
    assert len(errors["pipeline"]) == 2


def test_precedence_cli_then_config_then_default(tmp_path: Path):
    cfg = _write(tmp_path / "pipeline.yaml", "pipeline:\n  cutoff: '2015-06'\n")
    initialize_config(cfg)

    args = types.SimpleNamespace(cutoff="2010-01")
    assert get_config_value("pipeline.cutoff", "2018-12", args, "cutoff") == "2010-01"

    args = types.SimpleNamespace(cutoff=None)
    assert get_config_value("pipeline.cutoff", "2018-12", args, "cutoff") == "2015-06"
    assert get_config_value("pipeline.interval_level", 95) == 95


def test_env_var_selects_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    cfg = _write(tmp_path / "alt.yaml", "output:\n  dir: elsewhere\n")
    monkeypatch.setenv(config_utils.CONFIG_ENV_VAR, str(cfg))

    initialize_config()
    assert get_config_value("output.dir") == "elsewhere"


def test_shipped_config_is_valid():
    manager = ConfigurationManager(config_utils.DEFAULT_CONFIG_PATH)
    assert manager.validate_configuration() == {}
    assert manager.get("pipeline.cutoff") == "2018-12"
    assert manager.get("data_sources.fred.series") == ["PCEPI", "UNRATE", "EXPINF1YR", "MICH", "INDPRO"]


def test_validation_flags_non_mapping_cov_kwds(tmp_path: Path):
    cfg = _write(tmp_path / "pipeline.yaml", "model:\n  cov_type: HAC\n  cov_kwds: 12\n")
    errors = ConfigurationManager(cfg).validate_configuration()
    assert errors == {"model": ["cov_kwds must be a mapping"]}

    cfg = _write(tmp_path / "pipeline.yaml", "model:\n  cov_type: HAC\n  cov_kwds: {maxlags: 6}\n")
    assert ConfigurationManager(cfg).validate_configuration() == {}
