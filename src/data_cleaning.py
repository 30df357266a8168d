"""
data_cleaning.py
Cleaning pipeline for the NYPD Shooting Incident data

Design principles:
- Every transformation is logged with before/after counts
- No silent data loss: rows are never dropped here, bad dates become NaT
- Functions return a new frame, the caller's frame is left untouched
- A single `run_pipeline()` call reproduces the cleaned table end-to-end
"""

import pandas as pd
import numpy as np
import logging
import json
from pathlib import Path

from data_collection import DATA_URL, load_raw_data

# ── Logging Setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# Jurisdiction and coordinate fields; nothing downstream reads them
DROP_COLUMNS = [
    "JURISDICTION_CODE",
    "X_COORD_CD",
    "Y_COORD_CD",
    "Latitude",
    "Longitude",
    "Lon_Lat",
]

DATE_COLUMN = "OCCUR_DATE"
DATE_FORMAT = "%m/%d/%Y"


# ── Audit Trail ───────────────────────────────────────────────────────────────

class AuditTrail:
    """Tracks every cleaning decision with before/after row counts and change stats."""

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        self.steps: list[dict] = []

    def record(self, step: str, description: str, changed: int, detail: str = ""):
        changed = int(changed)
        pct = changed / self.total_rows * 100 if self.total_rows else 0.0
        self.steps.append({
            "step": step,
            "description": description,
            "rows_affected": changed,
            "pct_affected": round(pct, 2),
            "detail": detail,
        })
        log.info(f"[{step}] {description} → {changed:,} rows affected ({pct:.1f}%) {detail}")

    def save(self, path: str):
        class _NumpyEncoder(json.JSONEncoder):
            """Convert numpy int/float types to native Python before serialising."""
            def default(self, obj):
                if isinstance(obj, np.integer):
                    return int(obj)
                if isinstance(obj, np.floating):
                    return float(obj)
                if isinstance(obj, np.ndarray):
                    return obj.tolist()
                return super().default(obj)

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump({"total_rows": self.total_rows, "steps": self.steps}, f,
                      indent=2, cls=_NumpyEncoder)
        log.info(f"Audit trail saved → {path}")

    def summary(self):
        print("\n" + "=" * 65)
        print("CLEANING AUDIT SUMMARY")
        print("=" * 65)
        print(f"{'Step':<22} {'Affected':>10} {'%':>7}  Description")
        print("-" * 65)
        for s in self.steps:
            print(f"{s['step']:<22} {s['rows_affected']:>10,} {s['pct_affected']:>6.1f}%  {s['description']}")
        print("=" * 65)


# ── Step 1: Drop Unused Columns ───────────────────────────────────────────────

def drop_unused_columns(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    cols_to_drop = [c for c in DROP_COLUMNS if c in df.columns]
    df = df.drop(columns=cols_to_drop)
    audit.record("Columns dropped", "Jurisdiction/coordinate fields removed", 0,
                 f"({cols_to_drop})")
    return df


# ── Step 2: Parse Occurrence Date ─────────────────────────────────────────────

def parse_occurrence_date(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    """
    OCCUR_DATE is free text in MM/DD/YYYY. Anything that doesn't match becomes
    NaT; the row itself is kept.
    """
    df = df.copy()
    before_nulls = df[DATE_COLUMN].isna().sum()
    df[DATE_COLUMN] = pd.to_datetime(df[DATE_COLUMN], format=DATE_FORMAT, errors="coerce")
    new_nulls = df[DATE_COLUMN].isna().sum() - before_nulls
    audit.record(f"Date parse: {DATE_COLUMN}", "Unparseable values → NaT", new_nulls)
    return df


def clean_data(df: pd.DataFrame, audit: AuditTrail | None = None) -> pd.DataFrame:
    """Drop unused columns and parse dates. Row count and order are preserved."""
    if audit is None:
        audit = AuditTrail(total_rows=len(df))

    df = drop_unused_columns(df, audit)
    df = parse_occurrence_date(df, audit)

    log.info(f"Cleaned shape: {df.shape[0]:,} rows × {df.shape[1]} columns")
    return df


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_pipeline(
    source: str = DATA_URL,
    audit_path: str | None = None,
) -> tuple[pd.DataFrame, AuditTrail]:
    """
    Load and clean in one call.

    Parameters
    ----------
    source     : URL or local path of the raw CSV
    audit_path : optional path for a JSON audit log

    Returns
    -------
    (cleaned DataFrame, AuditTrail)
    """
    log.info("=" * 60)
    log.info("NYPD SHOOTING DATA — CLEANING PIPELINE START")
    log.info("=" * 60)

    df = load_raw_data(source)
    audit = AuditTrail(total_rows=len(df))
    df = clean_data(df, audit)

    if audit_path:
        audit.save(audit_path)
    return df, audit


if __name__ == "__main__":
    cleaned, trail = run_pipeline()
    trail.summary()
