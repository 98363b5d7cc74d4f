import numpy as np
import pandas as pd

import pytest

from inflation_forecaster_src import config_utils


def make_raw_observations(start: str = "1990-01", periods: int = 192, seed: int = 7) -> pd.DataFrame:
    """Synthetic long-format FRED observations for the five Phillips-curve series."""
    rng = np.random.default_rng(seed)
    months = pd.period_range(start, periods=periods, freq="M", name="month")

    raw = {
        "PCEPI": 100.0 * np.exp(np.cumsum(0.002 + 0.001 * rng.standard_normal(periods))),
        "UNRATE": 5.0 + np.cumsum(0.1 * rng.standard_normal(periods)),
        "EXPINF1YR": 2.5 + np.cumsum(0.05 * rng.standard_normal(periods)),
        "MICH": 3.0 + np.cumsum(0.1 * rng.standard_normal(periods)),
        "INDPRO": 90.0 * np.exp(np.cumsum(0.001 + 0.008 * rng.standard_normal(periods))),
    }
    frames = [pd.DataFrame({"month": months, "series_id": sid, "value": vals}) for sid, vals in raw.items()]
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def raw_observations() -> pd.DataFrame:
    return make_raw_observations()


@pytest.fixture
def transformed(raw_observations):
    from inflation_forecaster_src.transform_utils import observations_to_wide, transform_to_stationary
    return transform_to_stationary(observations_to_wide(raw_observations))


@pytest.fixture(autouse=True)
def _clean_config():
    config_utils.reset_config()
    yield
    config_utils.reset_config()
