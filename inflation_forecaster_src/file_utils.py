# inflation_forecaster_src/file_utils.py

import pandas as pd
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    """
    Create directory if it doesn't exist, including all parent directories.

    Parameters
    ----------
    path : Path
        Directory path to create
    """
    path.mkdir(parents=True, exist_ok=True)


def resolve_path(path_str: str, base_dir: Path) -> Path:
    """Absolute paths are kept; relative ones are resolved against ``base_dir``."""
    p = Path(path_str)
    return p if p.is_absolute() else (base_dir / p).resolve()


def format_cell(value, float_fmt: str = "{:.3f}") -> str:
    if isinstance(value, (float, np.floating)):
        return "NaN" if not np.isfinite(value) else float_fmt.format(value)
    return str(value)


def md_table_from_df(df: pd.DataFrame,
                     max_rows: int = 10,
                     columns: Optional[List[str]] = None,
                     index: bool = True) -> str:
    """
    Convert a DataFrame to markdown table format.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to convert
    max_rows : int, default=10
        Maximum number of rows to include
    columns : Optional[List[str]]
        Specific columns to include (None for all)
    index : bool, default=True
        Whether to render the index as the first column

    Returns
    -------
    str
        Markdown table string, or empty string for a table without columns
    """
    if columns is not None:
        keep = [c for c in columns if c in df.columns]
        if keep:
            df = df.loc[:, keep]

    df_disp = df.head(max_rows)
    cols = list(df_disp.columns)
    if not cols:
        return ""

    head_cols = ([df_disp.index.name or ""] if index else []) + [str(c) for c in cols]
    header = "| " + " | ".join(head_cols) + " |"
    separator = "| " + " | ".join("---" for _ in head_cols) + " |"

    rows = []
    # itertuples keeps per-column dtypes (iterrows would upcast ints to float)
    for idx, *values in df_disp.itertuples(index=True, name=None):
        vals = ([str(idx)] if index else []) + [format_cell(v) for v in values]
        rows.append("| " + " | ".join(vals) + " |")

    return "\n".join([header, separator] + rows)


def write_table_csv(df: pd.DataFrame, path: Path) -> Path:
    """Write a result table to CSV, stringifying a PeriodIndex as YYYY-MM."""
    ensure_dir(path.parent)
    out = df.copy()
    if isinstance(out.index, pd.PeriodIndex):
        out.index = out.index.astype(str)
    out.to_csv(path)
    logger.info("Saved %s", path)
    return path


def build_report_markdown(in_sample: pd.DataFrame,
                          out_of_sample: pd.DataFrame,
                          coefficients: pd.DataFrame,
                          transform_descriptions: Dict[str, str],
                          cutoff: str) -> str:
    """
    Assemble the markdown summary of a pipeline run.

    Parameters
    ----------
    in_sample, out_of_sample : pd.DataFrame
        Accuracy tables ordered by MAPE.
    coefficients : pd.DataFrame
        Coefficients by regressor and model.
    transform_descriptions : Dict[str, str]
        Column -> description of the stationarity transform.
    cutoff : str
        Last training month.
    """
    ts = datetime.now(timezone.utc).isoformat()
    metric_cols = ["MAPE", "RMSE", "MAE", "ME", "MPE", "MASE", "n", "n_excluded"]
    parts = [
        "# Phillips-curve inflation forecasts",
        f"_generated: {ts}_",
        "",
        "## Transformed series",
        "\n".join(f"- `{k}`: {v}" for k, v in transform_descriptions.items()),
        "",
        f"## In-sample accuracy (through {cutoff})",
        md_table_from_df(in_sample, max_rows=len(in_sample), columns=metric_cols),
        "",
        f"## Out-of-sample accuracy (after {cutoff})",
        md_table_from_df(out_of_sample, max_rows=len(out_of_sample), columns=metric_cols),
        "",
        "## Coefficients",
        md_table_from_df(coefficients, max_rows=len(coefficients)),
        "",
    ]
    return "\n".join(parts)
