"""
trend_model.py
Illustrative straight-line fit of incident count against an ordinal-encoded
category. Descriptive only: no significance test, no held-out data.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

log = logging.getLogger(__name__)


@dataclass
class TrendFit:
    encoding: dict[str, int]
    slope: float
    intercept: float
    table: pd.DataFrame
    correlation: float


def encode_ordinal(categories) -> dict[str, int]:
    """Alphabetical label → position. Same labels always give the same codes."""
    return {label: i for i, label in enumerate(sorted(set(map(str, categories))))}


def pearson_r(x, y) -> float:
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    # Undefined for a constant series; report no correlation
    if np.isclose(x.std(), 0) or np.isclose(y.std(), 0):
        return 0.0
    r = np.corrcoef(x, y)[0, 1]
    return float(np.clip(r, -1.0, 1.0))


def fit_trend(
    aggregation: pd.DataFrame,
    category_col: str,
    count_col: str = "count",
) -> TrendFit:
    """
    Least-squares line `count ≈ slope * ordinal + intercept` over an
    aggregation table, plus the Pearson r between actual and predicted counts.
    """
    if aggregation[category_col].duplicated().any():
        raise ValueError(f"Categories in '{category_col}' must be unique")
    if len(aggregation) < 2:
        raise ValueError("Need at least two categories to fit a trend line")

    encoding = encode_ordinal(aggregation[category_col])
    table = aggregation[[category_col, count_col]].copy()
    table[category_col] = table[category_col].astype(str)
    table["ordinal"] = table[category_col].map(encoding)
    table = table.sort_values("ordinal").reset_index(drop=True)

    x = table["ordinal"].to_numpy(dtype=float)
    y = table[count_col].to_numpy(dtype=float)
    slope, intercept = np.polyfit(x, y, deg=1)

    table["predicted_count"] = slope * x + intercept
    r = pearson_r(y, table["predicted_count"])

    log.info(f"Trend fit: count ≈ {slope:.2f}·ordinal + {intercept:.2f} (r = {r:.3f})")
    return TrendFit(
        encoding=encoding,
        slope=float(slope),
        intercept=float(intercept),
        table=table,
        correlation=r,
    )
