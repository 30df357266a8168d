"""
eda.py
NYPD Shooting Incident report

Sections:
- Preview of the cleaned table
- Shootings by time of day
- Shootings by perpetrator age group, raw and with garbage labels removed
- Linear trend of count vs. age group, with its correlation

Every chart is saved under FIG_DIR with a numbered, descriptive name.
"""

import logging

import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import seaborn as sns
from pathlib import Path

from data_collection import DATA_URL
from data_cleaning import run_pipeline
from aggregation import (
    AGE_GROUP_COLUMN,
    count_by_category,
    count_by_time_range,
    count_valid_age_groups,
    find_nonconforming_categories,
)
from trend_model import TrendFit, fit_trend, pearson_r

log = logging.getLogger(__name__)

# ── Style ─────────────────────────────────────────────────────────────────────
ACCENT   = "#D62728"   # red: fit line, garbage labels
NEUTRAL  = "#4C72B0"   # blue: standard bars
BG_GRAY  = "#F7F7F7"
FIG_DIR  = Path("reports/figures")
SOURCE   = "Source: NYPD Shooting Incident Data (Historic) / data.cityofnewyork.us"

plt.rcParams.update({
    "figure.facecolor": BG_GRAY,
    "axes.facecolor":   BG_GRAY,
    "axes.spines.top":  False,
    "axes.spines.right": False,
    "axes.labelsize":   11,
    "axes.titlesize":   13,
    "axes.titleweight": "bold",
    "xtick.labelsize":  9,
    "ytick.labelsize":  9,
    "font.family":      "sans-serif",
})


# ── Helpers ───────────────────────────────────────────────────────────────────

def _save(fig: plt.Figure, name: str, fig_dir: Path = FIG_DIR) -> Path:
    fig_dir = Path(fig_dir)
    fig_dir.mkdir(parents=True, exist_ok=True)
    path = fig_dir / f"{name}.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"  ✓ Saved → {path}")
    return path


def _source_note(ax, note=SOURCE):
    ax.annotate(note, xy=(0, -0.18), xycoords="axes fraction",
                fontsize=7, color="gray")


def _banner(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def fmt_thousands(ax, axis="y"):
    fmt = mticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    if axis == "y":
        ax.yaxis.set_major_formatter(fmt)
    else:
        ax.xaxis.set_major_formatter(fmt)


def _count_bar(ax, labels, counts, colors, title: str, xlabel: str):
    ax.bar(range(len(labels)), counts, color=colors, edgecolor="white")
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=0)
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Number of Shootings")
    fmt_thousands(ax)
    for i, v in enumerate(counts):
        ax.text(i, v, f"{v:,}", ha="center", va="bottom", fontsize=8)


# ── Report 1: Cleaned Table Preview ───────────────────────────────────────────

def report_preview(df: pd.DataFrame, rows: int = 5) -> pd.DataFrame:
    _banner("REPORT 1 | CLEANED DATA PREVIEW")
    preview = df.head(rows)
    print(preview.to_string())
    print(f"\n  {len(df):,} rows × {df.shape[1]} columns")
    if "OCCUR_DATE" in df.columns:
        print(f"  Unparseable dates: {df['OCCUR_DATE'].isna().sum():,}")
    return preview


# ── Report 2: Time of Day ─────────────────────────────────────────────────────

def report_time_of_day(time_counts: pd.DataFrame, fig_dir: Path = FIG_DIR) -> Path:
    """
    Q: At what time of day do shootings happen?
    """
    _banner("REPORT 2 | SHOOTINGS BY TIME OF DAY")
    print(time_counts.to_string(index=False))

    fig, ax = plt.subplots(figsize=(8, 5))
    peak = time_counts["count"].idxmax()
    colors = [ACCENT if i == peak else NEUTRAL for i in range(len(time_counts))]
    _count_bar(ax, time_counts["time_range"], time_counts["count"].tolist(), colors,
               "Shootings by Time of Day\n(Peak range highlighted)", "Time Range")
    _source_note(ax)
    plt.tight_layout()
    path = _save(fig, "01_time_of_day", fig_dir)

    print(f"  Peak range: {time_counts.loc[peak, 'time_range']} "
          f"({time_counts.loc[peak, 'count']:,} shootings)")
    return path


# ── Report 3: Perpetrator Age Group ───────────────────────────────────────────

def report_age_groups(
    raw_counts: pd.DataFrame,
    valid_counts: pd.DataFrame,
    fig_dir: Path = FIG_DIR,
) -> list[Path]:
    """
    Q: Which perpetrator age groups account for the most shootings?
    The raw chart is kept on purpose: it shows how much garbage is in the column.
    """
    _banner("REPORT 3 | SHOOTINGS BY PERPETRATOR AGE GROUP")
    print("Raw labels:")
    print(raw_counts.to_string(index=False))
    print("\nAfter removing invalid labels:")
    print(valid_counts.to_string(index=False))

    valid_labels = set(valid_counts[AGE_GROUP_COLUMN])
    paths = []

    fig, ax = plt.subplots(figsize=(10, 5))
    colors = [NEUTRAL if c in valid_labels else ACCENT for c in raw_counts[AGE_GROUP_COLUMN]]
    _count_bar(ax, raw_counts[AGE_GROUP_COLUMN], raw_counts["count"].tolist(), colors,
               "Shootings by Perpetrator Age Group (raw)\nRed = invalid label", "Age Group")
    _source_note(ax)
    plt.tight_layout()
    paths.append(_save(fig, "02_age_group_raw", fig_dir))

    fig, ax = plt.subplots(figsize=(8, 5))
    _count_bar(ax, valid_counts[AGE_GROUP_COLUMN], valid_counts["count"].tolist(),
               [NEUTRAL] * len(valid_counts),
               "Shootings by Perpetrator Age Group\n(invalid labels removed)", "Age Group")
    _source_note(ax)
    plt.tight_layout()
    paths.append(_save(fig, "03_age_group_filtered", fig_dir))

    removed = int(raw_counts["count"].sum() - valid_counts["count"].sum())
    print(f"  Rows removed as invalid: {removed:,}")
    find_nonconforming_categories(valid_counts)
    return paths


# ── Report 4: Trend Model ─────────────────────────────────────────────────────

def report_trend(trend: TrendFit, category_col: str = AGE_GROUP_COLUMN,
                 fig_dir: Path = FIG_DIR) -> Path:
    """
    Q: Does shooting count move linearly across age groups?
    Illustrative only. The ordinal encoding is alphabetical, not an age scale.
    """
    _banner("REPORT 4 | LINEAR TREND: COUNT vs AGE GROUP")
    table = trend.table
    print(table.to_string(index=False))

    fig, ax = plt.subplots(figsize=(8, 5))
    sns.scatterplot(data=table, x="ordinal", y="count", ax=ax, color=NEUTRAL, s=80,
                    label="Actual")
    ax.plot(table["ordinal"], table["predicted_count"], color=ACCENT, linewidth=2,
            label=f"Fit: {trend.slope:,.1f}·x + {trend.intercept:,.1f}")
    ax.set_xticks(table["ordinal"])
    ax.set_xticklabels(table[category_col])
    direction = "rising" if trend.slope >= 0 else "falling"
    ax.set_title(f"Shootings vs Age Group (ordinal)\n"
                 f"Fit r = {trend.correlation:.3f}, slope {trend.slope:+,.1f} ({direction})")
    ax.set_xlabel("Age Group")
    ax.set_ylabel("Number of Shootings")
    ax.legend(fontsize=8)
    fmt_thousands(ax)
    _source_note(ax)
    plt.tight_layout()
    path = _save(fig, "04_age_group_trend", fig_dir)

    print(f"\n  Correlation (actual vs predicted): {trend.correlation:.4f}")
    print(f"  Correlation (ordinal vs count):    "
          f"{pearson_r(table['ordinal'], table['count']):.4f}")
    return path


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_report(source: str = DATA_URL, fig_dir: Path = FIG_DIR,
               audit_path: str | None = None) -> dict:
    """
    Run the full report in one call: load, clean, aggregate, fit, render.
    Returns the intermediate tables so callers can inspect them.
    """
    df, audit = run_pipeline(source)

    time_counts  = count_by_time_range(df, audit)
    # Blank labels are recorded once, by the filtered pass
    raw_counts   = count_by_category(df, AGE_GROUP_COLUMN)
    valid_counts = count_valid_age_groups(df, audit)

    try:
        trend = fit_trend(valid_counts, AGE_GROUP_COLUMN)
    except ValueError as e:
        trend = None
        log.warning(f"Trend model skipped: {e}")

    if audit_path:
        audit.save(audit_path)

    report_preview(df)
    figures = [report_time_of_day(time_counts, fig_dir)]
    figures += report_age_groups(raw_counts, valid_counts, fig_dir)
    if trend is not None:
        figures.append(report_trend(trend, AGE_GROUP_COLUMN, fig_dir))
    audit.summary()

    print("\n" + "=" * 60)
    print(f"✓ REPORT COMPLETE — {len(figures)} figures saved to {fig_dir}/")
    print("=" * 60)

    return {
        "cleaned": df,
        "time_of_day": time_counts,
        "age_group_raw": raw_counts,
        "age_group_valid": valid_counts,
        "trend": trend,
        "figures": figures,
        "audit": audit,
    }


# ── Entry Point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    run_report()
