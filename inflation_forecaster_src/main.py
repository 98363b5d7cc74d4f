# inflation_forecaster_src/main.py

"""
Phillips-curve inflation forecasts on monthly US data (FRED, 1982 onward).

This is the main entry point of the forecaster. A run is a single batch pass
in which each stage takes the previous stage's output and returns a new table:

    fetch -> transform -> split -> fit -> evaluate

Purpose
-------
- Fetch PCEPI, UNRATE, EXPINF1YR, MICH and INDPRO from FRED (or load a saved
  long-format CSV of the same observations)
- Transform them into stationary monthly series (log differences, first
  differences, 12-month inflation differential)
- Split chronologically at a cutoff month (default 2018-12)
- Fit four Stock-Watson style Phillips-curve regressions of dinfl12 on lags
  12-23 of dinfl and of one alternating predictor, plus their mean ensemble
- Report in-sample and out-of-sample accuracy (MAPE, RMSE, ...) per model

Configuration-Driven Workflow
-----------------------------
Defaults live in config/pipeline.yaml; CLI arguments override configuration
values where applicable. Any stage failure aborts the run without writing a
partial report.
"""

import argparse
import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import pandas as pd

from fetchers import DEFAULT_START_DATE, PHILLIPS_SERIES, FredSeriesFetcher

from .config_utils import initialize_config, get_config_value
from .data_utils import (
    TrainTestSplit, filter_observations, load_observations_csv, save_observations_csv, split_train_test
)
from .evaluation_utils import EvaluationResult, evaluate_models
from .exceptions import PipelineError
from .file_utils import build_report_markdown, ensure_dir, resolve_path, write_table_csv
from .forecasting_utils import ENSEMBLE_NAME, TARGET, LinearRegressor, ModelBank, OLSRegressor, fit_model_bank
from .parsing_utils import (
    parse_series_list, validate_cutoff, validate_date, validate_interval_level, validate_log_level
)
from .transform_utils import get_transform_descriptions, observations_to_wide, transform_to_stationary

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF = "2018-12"
DEFAULT_INTERVAL_LEVEL = 95.0
PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class PipelineConfig:
    """Inputs of one run. These are constants of the report, not tuning knobs."""

    series_ids: List[str] = field(default_factory=lambda: list(PHILLIPS_SERIES))
    start_date: Optional[str] = DEFAULT_START_DATE
    end_date: Optional[str] = None
    cutoff: str = DEFAULT_CUTOFF
    interval_level: Optional[float] = DEFAULT_INTERVAL_LEVEL
    output_dir: Path = PROJECT_ROOT / "output"
    observations_csv: Optional[Path] = None
    save_observations: Optional[Path] = None
    api_key: Optional[str] = None
    cov_type: str = "nonrobust"
    cov_kwds: Optional[dict] = None
    check_frequency: bool = False


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Every stage's output, in pipeline order."""

    observations: pd.DataFrame
    transformed: pd.DataFrame
    split: TrainTestSplit
    bank: ModelBank
    evaluation: EvaluationResult


def fetch_stage(config: PipelineConfig, fetcher: Optional[FredSeriesFetcher] = None) -> pd.DataFrame:
    """Stage 1: raw long-format observations from CSV or FRED."""
    if config.observations_csv is not None:
        observations = load_observations_csv(config.observations_csv)
        return filter_observations(observations, config.series_ids, config.start_date, config.end_date)

    fetcher = fetcher or FredSeriesFetcher(config.api_key, check_frequency=config.check_frequency)
    return fetcher.fetch_observations(config.series_ids, start_date=config.start_date, end_date=config.end_date)


def run_pipeline(config: PipelineConfig,
                 fetcher: Optional[FredSeriesFetcher] = None,
                 regressor: Optional[LinearRegressor] = None) -> PipelineResult:
    """
    Execute fetch -> transform -> split -> fit -> evaluate.

    Parameters
    ----------
    config : PipelineConfig
        Run inputs.
    fetcher : FredSeriesFetcher, optional
        Source of observations; built from ``config.api_key`` if omitted.
    regressor : LinearRegressor, optional
        Fitting capability; ``OLSRegressor(config.cov_type, config.cov_kwds)`` if omitted.

    Returns
    -------
    PipelineResult

    Raises
    ------
    PipelineError
        Subclass naming the failing stage. Nothing is recovered.
    """
    logger.info("Stage fetch: %s from %s to %s", ",".join(config.series_ids),
                config.start_date, config.end_date or "latest")
    observations = fetch_stage(config, fetcher)
    if config.save_observations is not None:
        save_observations_csv(observations, config.save_observations)

    logger.info("Stage transform: %d raw observations", len(observations))
    transformed = transform_to_stationary(observations_to_wide(observations))
    logger.info("Transformed table: %d rows (%s..%s)", len(transformed),
                transformed.index[0], transformed.index[-1])

    logger.info("Stage split at %s", config.cutoff)
    split = split_train_test(transformed, config.cutoff)

    logger.info("Stage fit")
    bank = fit_model_bank(split.train, regressor or OLSRegressor(cov_type=config.cov_type, cov_kwds=config.cov_kwds))

    logger.info("Stage evaluate")
    evaluation = evaluate_models(bank, split, interval_level=config.interval_level)

    return PipelineResult(
        observations=observations,
        transformed=transformed,
        split=split,
        bank=bank,
        evaluation=evaluation,
    )


def write_outputs(result: PipelineResult, output_dir: Path, make_figures: bool = True) -> List[Path]:
    """
    Export the structured results and the markdown report.

    Writes accuracy_in_sample.csv, accuracy_out_of_sample.csv, forecasts.csv,
    coefficients.csv, report.md and, if ``make_figures``, raw_series.png and
    forecasts_vs_actual.png.
    """
    ensure_dir(output_dir)
    ev = result.evaluation
    written = [
        write_table_csv(ev.in_sample, output_dir / "accuracy_in_sample.csv"),
        write_table_csv(ev.out_of_sample, output_dir / "accuracy_out_of_sample.csv"),
        write_table_csv(ev.forecasts, output_dir / "forecasts.csv"),
        write_table_csv(result.bank.coefficient_table(), output_dir / "coefficients.csv"),
    ]

    if ev.intervals:
        frames = {name: iv.add_prefix(f"{name}_") for name, iv in ev.intervals.items()}
        written.append(write_table_csv(pd.concat(frames.values(), axis=1), output_dir / "forecast_intervals.csv"))

    report = build_report_markdown(
        ev.in_sample, ev.out_of_sample, result.bank.coefficient_table(),
        get_transform_descriptions(), str(result.split.cutoff),
    )
    report_path = output_dir / "report.md"
    report_path.write_text(report, encoding="utf-8")
    logger.info("Saved report: %s", report_path)
    written.append(report_path)

    if make_figures:
        from .plotting_utils import plot_forecast_comparison, plot_raw_series
        raw_path = output_dir / "raw_series.png"
        plot_raw_series(observations_to_wide(result.observations), raw_path)
        written.append(raw_path)

        fig_path = output_dir / "forecasts_vs_actual.png"
        plot_forecast_comparison(
            ev.forecasts,
            fig_path,
            history=result.split.train[TARGET].iloc[-36:],
            interval=(ev.intervals or {}).get(ENSEMBLE_NAME),
        )
        written.append(fig_path)

    return written


def build_pipeline_config(args: argparse.Namespace) -> PipelineConfig:
    """
    Resolve run inputs with precedence CLI > config/pipeline.yaml > defaults.

    Raises
    ------
    ValueError
        If a supplied value is malformed.
    """
    series = parse_series_list(
        get_config_value("data_sources.fred.series", None, args, "series"), default=list(PHILLIPS_SERIES)
    )
    start = validate_date(get_config_value("data_sources.fred.start_date", DEFAULT_START_DATE, args, "start_date"))
    end = validate_date(get_config_value("data_sources.fred.end_date", None, args, "end_date"))
    cutoff = validate_cutoff(get_config_value("pipeline.cutoff", DEFAULT_CUTOFF, args, "cutoff"))

    level = get_config_value("pipeline.interval_level", DEFAULT_INTERVAL_LEVEL, args, "interval_level")
    level = None if getattr(args, "no_intervals", False) else validate_interval_level(level)

    cov_kwds = get_config_value("model.cov_kwds", None)
    if cov_kwds is not None and not isinstance(cov_kwds, dict):
        raise ValueError(f"model.cov_kwds must be a mapping, got {cov_kwds!r}")

    out_dir = resolve_path(str(get_config_value("output.dir", "output", args, "output_dir")), PROJECT_ROOT)
    obs_csv = getattr(args, "observations_csv", None)
    save_obs = getattr(args, "save_observations", None)

    return PipelineConfig(
        series_ids=series,
        start_date=start,
        end_date=end,
        cutoff=cutoff,
        interval_level=level,
        output_dir=out_dir,
        observations_csv=resolve_path(obs_csv, PROJECT_ROOT) if obs_csv else None,
        save_observations=resolve_path(save_obs, PROJECT_ROOT) if save_obs else None,
        api_key=get_config_value("data_sources.fred.api_key", None),
        cov_type=str(get_config_value("model.cov_type", "nonrobust")),
        cov_kwds=cov_kwds,
        check_frequency=bool(get_config_value("data_sources.fred.check_frequency", False)),
    )


def setup_cli_parser() -> argparse.ArgumentParser:
    """
    Create the command-line interface.

    Returns
    -------
    argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Phillips-curve inflation forecasts: fetch, transform, fit and score four OLS models and their ensemble."
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML configuration file (default: $PHILLIPS_CONFIG or config/pipeline.yaml)."
    )
    parser.add_argument(
        "--series", type=str, default=None,
        help="Comma-separated FRED series ids. Uses config default if not specified."
    )
    parser.add_argument("--start-date", type=str, default=None, help="First observation date (YYYY-MM-DD).")
    parser.add_argument("--end-date", type=str, default=None, help="Last observation date (YYYY-MM-DD).")
    parser.add_argument(
        "--cutoff", type=str, default=None,
        help="Last training month (YYYY-MM). The test window starts the month after."
    )
    parser.add_argument(
        "--observations-csv", type=str, default=None,
        help="Load raw observations from a long-format CSV (month,series_id,value) instead of FRED."
    )
    parser.add_argument(
        "--save-observations", type=str, default=None,
        help="Write the fetched raw observations to this CSV."
    )
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for tables, report and figures.")
    parser.add_argument("--interval-level", type=float, default=None, help="Forecast interval coverage in percent.")
    parser.add_argument("--no-intervals", action="store_true", help="Skip forecast intervals.")
    parser.add_argument("--no-figures", action="store_true", help="Skip the forecast figure.")
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    return parser


def setup_logging(log_level: str) -> None:
    """
    Configure logging with specified level and warning filters.

    Parameters
    ----------
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = validate_log_level(log_level)
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Configure warnings based on log level
    if level == "DEBUG":
        warnings.resetwarnings()
        warnings.filterwarnings("default")
    else:
        warnings.filterwarnings("ignore", category=FutureWarning)
        warnings.filterwarnings("ignore", category=UserWarning, module="statsmodels")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the Phillips-curve forecaster.

    Parses CLI arguments, resolves configuration, runs the pipeline and
    writes its outputs. A pipeline failure is logged with its stage and the
    process exits with status 1.
    """
    parser = setup_cli_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level)
    except ValueError as e:
        parser.error(str(e))

    initialize_config(Path(args.config) if args.config else None)

    try:
        config = build_pipeline_config(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        result = run_pipeline(config)
        write_outputs(result, config.output_dir, make_figures=not args.no_figures)
    except PipelineError as e:
        logger.error("Stage '%s' failed: %s", e.stage, e.args[0] if e.args else e)
        raise SystemExit(1)

    logger.info("Run completed; outputs in %s", config.output_dir)


if __name__ == "__main__":
    main()
