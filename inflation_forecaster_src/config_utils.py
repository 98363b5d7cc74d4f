# inflation_forecaster_src/config_utils.py

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "pipeline.yaml"
CONFIG_ENV_VAR = "PHILLIPS_CONFIG"

# Initialize the global configuration manager
config_manager = None


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


class ConfigurationManager:
    """
    YAML-backed configuration with dotted-key access.

    Parameters
    ----------
    config_path : Path
        YAML file to load. A missing file yields an empty configuration.
    """

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        if not self.config_path.is_file():
            logger.info("No configuration file at %s - using defaults", self.config_path)
            self._data = {}
            return
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self.config_path}")
        self._data = data
        logger.info("Loaded configuration from %s", self.config_path)

    def get(self, key_path: str, default=None):
        """Look up a dotted key such as ``pipeline.cutoff``."""
        node: Any = self._data
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def validate_configuration(self) -> Dict[str, List[str]]:
        """
        Check the known keys for obviously wrong types.

        Returns
        -------
        Dict[str, List[str]]
            Section name -> list of problems. Empty when the file is valid.
        """
        errors: Dict[str, List[str]] = {}

        series = self.get("data_sources.fred.series")
        if series is not None and not (isinstance(series, list) and all(isinstance(s, str) for s in series)):
            errors.setdefault("data_sources", []).append("fred.series must be a list of series ids")

        level = self.get("pipeline.interval_level")
        if level is not None and not (isinstance(level, (int, float)) and 0 < level < 100):
            errors.setdefault("pipeline", []).append("interval_level must be between 0 and 100")

        cutoff = self.get("pipeline.cutoff")
        if cutoff is not None and not isinstance(cutoff, str):
            errors.setdefault("pipeline", []).append("cutoff must be a 'YYYY-MM' string")

        cov_kwds = self.get("model.cov_kwds")
        if cov_kwds is not None and not isinstance(cov_kwds, dict):
            errors.setdefault("model", []).append("cov_kwds must be a mapping")

        return errors


def resolve_config_path() -> Path:
    """Configuration file location: ``$PHILLIPS_CONFIG`` or ``config/pipeline.yaml``."""
    override = os.getenv(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def initialize_config(config_path: Optional[Path] = None) -> None:
    """
    Initializes the global configuration manager.

    Loads and validates the project's YAML configuration. If the file fails to
    parse, the error is logged and the pipeline proceeds with default settings.
    """
    global config_manager
    path = Path(config_path) if config_path else resolve_config_path()
    try:
        config_manager = ConfigurationManager(path)
        validation_errors = config_manager.validate_configuration()
        if validation_errors:
            logger.warning("Configuration validation warnings: %s", validation_errors)
    except ConfigurationError as e:
        logger.error("Failed to initialize configuration: %s. Using defaults.", e)
        config_manager = None


def reset_config() -> None:
    """Drop the loaded configuration (used by tests)."""
    global config_manager
    config_manager = None


def get_config_value(key_path: str, default=None, args=None, cli_param=None):
    """
    Retrieves a configuration value, providing support for command-line overrides.
    The function prioritizes values in the following order:
    1. CLI argument (if provided)
    2. Configuration file
    3. Default value
    """
    # First priority: CLI argument
    if args and cli_param and hasattr(args, cli_param):
        cli_value = getattr(args, cli_param)
        if cli_value is not None:
            return cli_value

    # Second priority: Configuration file
    if config_manager:
        config_value = config_manager.get(key_path, default)
        if config_value is not None:
            return config_value

    # Third priority: Default value
    return default
