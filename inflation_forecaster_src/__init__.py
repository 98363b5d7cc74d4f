# inflation_forecaster_src/__init__.py

"""
Phillips-curve inflation forecaster - monthly OLS models and their ensemble.

Key Components
--------------
- config_utils: YAML configuration and CLI override support
- data_utils: Observation loading/saving and the chronological train/test split
- parsing_utils: Command-line argument validation
- transform_utils: Stationarity transforms (annualized log differences, first differences)
- forecasting_utils: Lagged design matrices, OLS model bank and the ensemble
- metrics_utils: Forecast accuracy metrics (ME, RMSE, MAE, MPE, MAPE, MASE, ...)
- evaluation_utils: Forecast tables and in/out-of-sample accuracy tables
- plotting_utils: Forecast-vs-actual figure
- file_utils: CSV export, paths and the markdown report
- exceptions: Stage-tagged pipeline errors
- main: Main entry point and workflow orchestration

Usage
-----
    # Command-line usage
    python -m inflation_forecaster_src.main --cutoff 2018-12

    # Programmatic usage
    from inflation_forecaster_src import transform_to_stationary, fit_model_bank
"""

__version__ = "1.0.0"
__author__ = "Phillips Forecaster Development Team"

# main is not imported here: it pulls in fetchers, which import from this package
from .config_utils import initialize_config, get_config_value
from .data_utils import load_observations_csv, split_train_test
from .transform_utils import observations_to_wide, transform_to_stationary
from .forecasting_utils import fit_model_bank, OLSRegressor
from .evaluation_utils import evaluate_models
from .metrics_utils import compute_accuracy
from .exceptions import PipelineError

__all__ = [
    # Core functionality
    "initialize_config",
    "get_config_value",
    "load_observations_csv",
    "split_train_test",
    "observations_to_wide",
    "transform_to_stationary",
    "fit_model_bank",
    "OLSRegressor",
    "evaluate_models",
    "compute_accuracy",
    "PipelineError",
    # Version info
    "__version__",
    "__author__"
]
