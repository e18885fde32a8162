"""
Shared pytest fixtures for the cleaning and scoring tests.

Wide exports are built as all-text DataFrames, the way
src/cleaning/reshape.load_survey_export reads them (dtype=str,
keep_default_na=False), so blanks arrive as "" rather than NaN.
"""

from __future__ import annotations

import pandas as pd
import pytest

from src.scoring.rubric import Rubric, RubricItem


# ---------------------------------------------------------------------------
# Wide export builders
# ---------------------------------------------------------------------------

def make_wide_export(rows: list[dict], items: list[str]) -> pd.DataFrame:
    """
    Build a wide export with identity and metadata columns filled in.

    Each row dict needs ResponseId and SID; ExternalReference defaults to ""
    and every item not given defaults to "".
    """
    columns = ["StartDate", "ResponseId", "SID", "ExternalReference", *items]
    records = []
    for row in rows:
        record = {"StartDate": "2024-03-01 09:00:00", "ExternalReference": ""}
        record.update({item: "" for item in items})
        record.update(row)
        records.append(record)
    return pd.DataFrame(records, columns=columns).astype(str)


def make_long_rows(
    subject_id: str,
    values: dict[str, object],
    survey_name: str = "Mood Wave 1",
    response_id: str | None = None,
    wave: int | None = 1,
) -> list[dict]:
    """Build clean long-table rows for one response."""
    response_id = response_id or f"R_{subject_id}"
    return [
        {
            "response_id": response_id,
            "survey_name": survey_name,
            "subject_id": subject_id,
            "wave": wave,
            "item_name": item,
            "value": value,
        }
        for item, value in values.items()
    ]


def make_long_df(rows: list[dict]) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    df["wave"] = df["wave"].astype("Int64")
    return df


# ---------------------------------------------------------------------------
# Export fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mood_export():
    """Three participants, one test account, one non-participant ID."""
    return make_wide_export(
        [
            {"ResponseId": "R_1", "SID": "FP001", "M1": "4", "M2": "2", "M3": "5"},
            {"ResponseId": "R_2", "SID": "FP002", "M1": "4", "M2": "", "M3": "2"},
            {"ResponseId": "R_3", "SID": "", "ExternalReference": "FP010",
             "M1": "1", "M2": "1", "M3": "1"},
            {"ResponseId": "R_4", "SID": "FP999", "M1": "3", "M2": "3", "M3": "3"},
            {"ResponseId": "R_5", "SID": "pilot", "M1": "3", "M2": "3", "M3": "3"},
        ],
        items=["M1", "M2", "M3"],
    )


# ---------------------------------------------------------------------------
# Rubric fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mood_rubric():
    """MOOD: mean of M1-M3, one missing item tolerated."""
    return Rubric(
        scale_name="MOOD",
        items=(RubricItem("M1"), RubricItem("M2"), RubricItem("M3")),
        method="mean",
        min_value=1,
        max_value=5,
        missing_tolerance=1,
    )


@pytest.fixture
def mood_rubric_df():
    """Flat rubric table equivalent to ``mood_rubric``."""
    return pd.DataFrame([
        {"scale_name": "MOOD", "item_name": "M1", "method": "mean",
         "min_value": "1", "max_value": "5", "missing_tolerance": "1"},
        {"scale_name": "MOOD", "item_name": "M2", "method": "", "min_value": "",
         "max_value": "", "missing_tolerance": ""},
        {"scale_name": "MOOD", "item_name": "M3", "method": "", "min_value": "",
         "max_value": "", "missing_tolerance": ""},
    ])
