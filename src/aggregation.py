"""
aggregation.py
Descriptive counts over the cleaned shooting table

Two views:
- incidents per time-of-day range (fixed semantic order)
- incidents per perpetrator age group, raw and with known-garbage labels removed
"""

import logging
from datetime import time

import pandas as pd

from data_cleaning import AuditTrail

log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

TIME_COLUMN = "OCCUR_TIME"
TIME_FORMAT = "%H:%M:%S"
AGE_GROUP_COLUMN = "PERP_AGE_GROUP"

# Half-open [lower, upper) hour ranges; together they cover 00:00–24:00 once
TIME_RANGE_ORDER  = ["late-night", "morning", "afternoon", "evening"]

# Sentinels and data-entry garbage found in PERP_AGE_GROUP
INVALID_AGE_GROUPS = frozenset({"UNKNOWN", "(null)", "1020", "224", "940", "1028"})

# The bracket labels NYPD actually publishes
KNOWN_AGE_GROUPS = ("<18", "18-24", "25-44", "45-64", "65+")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _non_blank(series: pd.Series) -> pd.Series:
    """Drop NaN and whitespace-only values; survivors come back stripped."""
    series = series.dropna().astype(str).str.strip()
    return series[series != ""]


def _record(audit: AuditTrail | None, step: str, description: str, changed: int):
    if audit is not None:
        audit.record(step, description, changed)


# ── Time of Day ───────────────────────────────────────────────────────────────

def classify_time_range(value: time) -> str:
    """Bucket a single time of day. Boundary instants belong to the later range."""
    hour = value.hour
    if 6  <= hour < 12: return "morning"
    if 12 <= hour < 18: return "afternoon"
    if 18 <= hour < 24: return "evening"
    return "late-night"


def parse_occurrence_time(df: pd.DataFrame, audit: AuditTrail | None = None) -> pd.Series:
    """
    Parse OCCUR_TIME to datetimes (date part is irrelevant). Missing, blank and
    unparseable values are dropped; the index of survivors is kept.
    """
    raw = _non_blank(df[TIME_COLUMN])
    parsed = pd.to_datetime(raw, format=TIME_FORMAT, errors="coerce").dropna()

    excluded = len(df) - len(parsed)
    _record(audit, "Time parse", "Blank/unparseable OCCUR_TIME excluded from time ranges", excluded)
    return parsed


def assign_time_range(times: pd.Series) -> pd.Series:
    """`classify_time_range` over a datetime Series, as an ordered categorical."""
    return pd.Series(
        pd.Categorical(times.map(classify_time_range), categories=TIME_RANGE_ORDER, ordered=True),
        index=times.index,
    )


def count_by_time_range(df: pd.DataFrame, audit: AuditTrail | None = None) -> pd.DataFrame:
    """
    Incident counts per time range, always all four ranges, in the order
    late-night → morning → afternoon → evening.
    """
    ranges = assign_time_range(parse_occurrence_time(df, audit))
    counts = (
        ranges.astype(str)
        .value_counts()
        .reindex(TIME_RANGE_ORDER, fill_value=0)
        .astype(int)
    )
    result = pd.DataFrame({"time_range": TIME_RANGE_ORDER, "count": counts.values})
    log.info(f"Time-of-day aggregation over {int(result['count'].sum()):,} incidents")
    return result


# ── Categorical ───────────────────────────────────────────────────────────────

def count_by_category(
    df: pd.DataFrame,
    column: str = AGE_GROUP_COLUMN,
    exclude: frozenset | set | None = None,
    audit: AuditTrail | None = None,
) -> pd.DataFrame:
    """
    Count incidents per value of `column` (surrounding whitespace stripped),
    most frequent first.

    Blank and missing values are always dropped; values in `exclude` are
    dropped as well. Ties are ordered by label so the output is deterministic.
    """
    values = _non_blank(df[column])
    _record(audit, f"Blank {column}", "Missing/blank values excluded", len(df) - len(values))

    if exclude:
        keep = ~values.isin(exclude)
        _record(audit, f"Denylist {column}", "Known-invalid labels excluded", int((~keep).sum()))
        values = values[keep]

    counts = values.groupby(values).size()
    counts = counts.sort_values(ascending=False, kind="stable")
    result = pd.DataFrame({column: counts.index.astype(str), "count": counts.values.astype(int)})
    return result.reset_index(drop=True)


def count_valid_age_groups(df: pd.DataFrame, audit: AuditTrail | None = None) -> pd.DataFrame:
    """Second pass over PERP_AGE_GROUP with the denylisted labels removed."""
    return count_by_category(df, AGE_GROUP_COLUMN, exclude=INVALID_AGE_GROUPS, audit=audit)


def find_nonconforming_categories(
    aggregation: pd.DataFrame,
    column: str = AGE_GROUP_COLUMN,
    known: tuple = KNOWN_AGE_GROUPS,
) -> list[str]:
    """
    Labels in an aggregation that are not part of the published label set.
    The denylist only catches garbage someone has already seen; this catches
    the rest. Reported, not removed.
    """
    unexpected = [c for c in aggregation[column] if c not in known]
    if unexpected:
        log.warning(f"{column}: {len(unexpected)} label(s) outside {list(known)}: {unexpected}")
    return unexpected
