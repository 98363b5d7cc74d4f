# inflation_forecaster_src/plotting_utils.py

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
from pathlib import Path
from typing import Optional
import logging

from .file_utils import ensure_dir

logger = logging.getLogger(__name__)


def plot_forecast_comparison(forecasts: pd.DataFrame,
                             out_path: Path,
                             history: Optional[pd.Series] = None,
                             interval: Optional[pd.DataFrame] = None,
                             title: str = "Forecasts vs actual: dinfl12") -> None:
    """
    Plot actual values against each model's forecasts over the test window.

    Parameters
    ----------
    forecasts : pd.DataFrame
        Output of ``forecast_table``: an 'actual' column plus one column per model,
        indexed by month.
    out_path : Path
        Output file path for the plot
    history : pd.Series, optional
        Recent training-window actuals drawn ahead of the test window
    interval : pd.DataFrame, optional
        Ensemble interval with 'lower'/'upper' columns, shaded if given
    title : str
        Plot title

    Returns
    -------
    None
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(10, 5))

    def _x(index):
        return index.to_timestamp() if isinstance(index, pd.PeriodIndex) else index

    if history is not None and not history.empty:
        ax.plot(_x(history.index), history.values, color="grey", linewidth=1, label="actual (train)")

    ax.plot(_x(forecasts.index), forecasts["actual"].values, color="black", linewidth=1.5, label="actual")

    colors = ["tab:red", "tab:blue", "tab:green", "tab:orange", "tab:purple"]
    for i, method in enumerate(c for c in forecasts.columns if c != "actual"):
        ax.plot(_x(forecasts.index), forecasts[method].values,
                color=colors[i % len(colors)], linestyle="--", label=method)

    if interval is not None:
        ax.fill_between(_x(interval.index), interval["lower"].values, interval["upper"].values,
                        color="tab:purple", alpha=0.15, label="ensem interval")

    ax.set_ylabel("dinfl12 (pp)")
    ax.set_title(title)
    ax.legend(fontsize=8)
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    logger.info("Saved figure: %s", out_path)


def plot_raw_series(wide: pd.DataFrame, out_path: Path) -> None:
    """
    Render and save one panel per raw FRED series for visual inspection.

    Parameters
    ----------
    wide : pd.DataFrame
        Raw series by month (output of ``observations_to_wide``)
    out_path : Path
        File path to save the PNG (parents are created if missing)
    """
    ensure_dir(out_path.parent)
    cols = list(wide.columns)
    nrows = (len(cols) + 1) // 2
    fig, axes = plt.subplots(nrows=nrows, ncols=2, figsize=(11, 2.2 * nrows), squeeze=False)
    x = wide.index.to_timestamp() if isinstance(wide.index, pd.PeriodIndex) else wide.index
    for ax, col in zip(axes.flatten(), cols):
        ax.plot(x, wide[col].values, color="black", linewidth=1)
        ax.set_title(col)
        ax.spines["top"].set_alpha(0)
        ax.tick_params(labelsize=6)
    for ax in axes.flatten()[len(cols):]:
        ax.set_visible(False)
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    logger.info("Saved figure: %s", out_path)
