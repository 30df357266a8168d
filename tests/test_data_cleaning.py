"""
Cleaner tests: column removal, date parsing, audit trail.
"""

import json

import pandas as pd

from data_cleaning import (
    DROP_COLUMNS,
    AuditTrail,
    clean_data,
    drop_unused_columns,
    parse_occurrence_date,
    run_pipeline,
)


class TestDropUnusedColumns:
    def test_geographic_columns_removed(self, raw_df):
        out = drop_unused_columns(raw_df, AuditTrail(len(raw_df)))
        assert not set(DROP_COLUMNS) & set(out.columns)
        assert {"OCCUR_DATE", "OCCUR_TIME", "PERP_AGE_GROUP", "BORO"} <= set(out.columns)

    def test_row_identity_and_order_kept(self, raw_df):
        out = drop_unused_columns(raw_df, AuditTrail(len(raw_df)))
        assert list(out["INCIDENT_KEY"]) == list(raw_df["INCIDENT_KEY"])

    def test_absent_columns_ignored(self):
        df = pd.DataFrame({"OCCUR_DATE": ["01/01/2020"], "Latitude": ["40.7"]})
        out = drop_unused_columns(df, AuditTrail(len(df)))
        assert list(out.columns) == ["OCCUR_DATE"]


class TestParseOccurrenceDate:
    def test_month_day_year(self, raw_df):
        out = parse_occurrence_date(raw_df, AuditTrail(len(raw_df)))
        assert out.loc[0, "OCCUR_DATE"] == pd.Timestamp(2006, 5, 27)
        assert out.loc[5, "OCCUR_DATE"] == pd.Timestamp(2020, 2, 29)

    def test_bad_dates_become_nat_not_dropped(self, raw_df):
        out = parse_occurrence_date(raw_df, AuditTrail(len(raw_df)))
        assert len(out) == len(raw_df)
        # 13/45/2010, missing, and 02/29/2021 (not a leap year)
        assert out["OCCUR_DATE"].isna().tolist() == [False, False, True, True, False, False, True]

    def test_input_not_mutated(self, raw_df):
        before = raw_df["OCCUR_DATE"].copy()
        parse_occurrence_date(raw_df, AuditTrail(len(raw_df)))
        pd.testing.assert_series_equal(raw_df["OCCUR_DATE"], before)

    def test_audit_counts_only_new_failures(self, raw_df):
        audit = AuditTrail(len(raw_df))
        parse_occurrence_date(raw_df, audit)
        assert audit.steps[-1]["rows_affected"] == 2


class TestCleanData:
    def test_same_row_count(self, raw_df):
        out = clean_data(raw_df)
        assert len(out) == len(raw_df)
        assert pd.api.types.is_datetime64_any_dtype(out["OCCUR_DATE"])

    def test_run_pipeline_from_file(self, raw_df, tmp_path):
        src = tmp_path / "raw.csv"
        raw_df.to_csv(src, index=False)
        audit_path = tmp_path / "audit" / "cleaning_audit.json"

        df, audit = run_pipeline(str(src), audit_path=str(audit_path))

        assert len(df) == len(raw_df)
        saved = json.loads(audit_path.read_text())
        assert saved["total_rows"] == len(raw_df)
        assert [s["step"] for s in saved["steps"]] == [s["step"] for s in audit.steps]


class TestAuditTrail:
    def test_record_percentages(self):
        audit = AuditTrail(total_rows=200)
        audit.record("Step", "desc", 50)
        assert audit.steps[0]["pct_affected"] == 25.0

    def test_zero_rows(self):
        audit = AuditTrail(total_rows=0)
        audit.record("Step", "desc", 0)
        assert audit.steps[0]["pct_affected"] == 0.0

    def test_summary_prints_steps(self, capsys):
        audit = AuditTrail(total_rows=10)
        audit.record("Date parse", "Unparseable values → NaT", 3)
        audit.summary()
        assert "Date parse" in capsys.readouterr().out
