"""
data_collection.py
Raw data loader for the NYPD Shooting Incident report

Pulls the historic shooting-incident CSV from NYC Open Data (or reads a local
copy) into a DataFrame. A failed fetch or a malformed file aborts the run.
"""

import io
import logging
from pathlib import Path

import pandas as pd
import requests

log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

DATA_URL = (
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv"
    "?accessType=DOWNLOAD"
)

# Seconds; the full historic export is ~10 MB
FETCH_TIMEOUT = 60

REQUIRED_COLUMNS = {"OCCUR_DATE", "OCCUR_TIME", "PERP_AGE_GROUP"}


def _is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def fetch_csv_text(url: str, timeout: float = FETCH_TIMEOUT) -> str:
    log.info(f"Fetching: {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        log.error(f"Download failed: {e}")
        raise
    log.info(f"Downloaded {len(response.content):,} bytes")
    return response.text


def validate_columns(df: pd.DataFrame, required: set = REQUIRED_COLUMNS) -> pd.DataFrame:
    missing_cols = set(required) - set(df.columns)
    if missing_cols:
        raise ValueError(f"Dataset is missing expected columns: {sorted(missing_cols)}")
    return df


def load_raw_data(source: str = DATA_URL, timeout: float = FETCH_TIMEOUT) -> pd.DataFrame:
    """
    Load the raw incident table from a URL or a local CSV path.

    Every column is read as text so category codes such as ``1020`` stay labels
    instead of being coerced to numbers. Blank cells become NaN.
    """
    if _is_url(source):
        buffer = io.StringIO(fetch_csv_text(source, timeout=timeout))
        df = pd.read_csv(buffer, dtype=str)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {source}")
        log.info(f"Loading: {source}")
        df = pd.read_csv(path, dtype=str)

    log.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns")
    return validate_columns(df)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    df = load_raw_data()
    print(f"Columns: {list(df.columns)}")
    print(df.head())
