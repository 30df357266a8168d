import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


def make_raw(rows: list[dict]) -> pd.DataFrame:
    """Raw frame as the loader returns it: every column text, blanks as NaN."""
    base = {
        "INCIDENT_KEY": "0",
        "OCCUR_DATE": "01/01/2022",
        "OCCUR_TIME": "12:00:00",
        "BORO": "BRONX",
        "JURISDICTION_CODE": "0",
        "PERP_AGE_GROUP": "25-44",
        "X_COORD_CD": "1000000",
        "Y_COORD_CD": "250000",
        "Latitude": "40.8",
        "Longitude": "-73.9",
        "Lon_Lat": "POINT (-73.9 40.8)",
    }
    return pd.DataFrame([{**base, "INCIDENT_KEY": str(i), **row} for i, row in enumerate(rows)])


@pytest.fixture
def raw_df() -> pd.DataFrame:
    return make_raw([
        {"OCCUR_DATE": "05/27/2006", "OCCUR_TIME": "05:59:59", "PERP_AGE_GROUP": "25-44"},
        {"OCCUR_DATE": "07/04/2010", "OCCUR_TIME": "06:00:00", "PERP_AGE_GROUP": "25-44"},
        {"OCCUR_DATE": "13/45/2010", "OCCUR_TIME": "11:59:59", "PERP_AGE_GROUP": "UNKNOWN"},
        {"OCCUR_DATE": None,         "OCCUR_TIME": "23:59:59", "PERP_AGE_GROUP": "1020"},
        {"OCCUR_DATE": "12/31/2021", "OCCUR_TIME": None,       "PERP_AGE_GROUP": "18-24"},
        {"OCCUR_DATE": "02/29/2020", "OCCUR_TIME": "  ",       "PERP_AGE_GROUP": None},
        {"OCCUR_DATE": "02/29/2021", "OCCUR_TIME": "25:61:00", "PERP_AGE_GROUP": " "},
    ])
