"""
Unit tests for src/scoring/engine.py.

Covers:
- score_partition: every method, missing tolerance, reverse coding,
  uncoercible values counted as missing.
- score_subject: one row per partition, declared order.
- score_responses: per-survey application, wave carried through,
  residual duplicates, empty inputs.
- pivot_scores: wide view column naming.
"""

from __future__ import annotations

import pandas as pd
import pytest

from src.scoring.config import SCORED_COLUMNS
from src.scoring.engine import (
    pivot_scores,
    score_partition,
    score_responses,
    score_subject,
)
from src.scoring.rubric import Rubric, RubricItem

from .conftest import make_long_df, make_long_rows


ITEMS = ["M1", "M2", "M3"]


# ---------------------------------------------------------------------------
# Class: score_partition
# ---------------------------------------------------------------------------

class TestScorePartition:

    def test_mean_with_one_missing(self, mood_rubric):
        score, n_missing = score_partition({"M1": "4", "M2": pd.NA, "M3": "2"}, ITEMS, mood_rubric)
        assert score == 3.0
        assert n_missing == 1

    def test_null_when_tolerance_exceeded(self, mood_rubric):
        score, n_missing = score_partition({"M3": "2"}, ITEMS, mood_rubric)
        assert score is None
        assert n_missing == 2

    def test_all_missing_is_null(self):
        rubric = Rubric("R", tuple(RubricItem(i) for i in ITEMS), "sum", missing_tolerance=5)
        score, n_missing = score_partition({}, ITEMS, rubric)
        assert score is None
        assert n_missing == 3

    def test_uncoercible_counts_as_missing(self, mood_rubric):
        score, n_missing = score_partition({"M1": "4", "M2": "four", "M3": "2"}, ITEMS, mood_rubric)
        assert score == 3.0
        assert n_missing == 1

    def test_sum(self):
        rubric = Rubric("R", tuple(RubricItem(i) for i in ITEMS), "sum")
        score, n_missing = score_partition({"M1": "1", "M2": "2", "M3": "3.5"}, ITEMS, rubric)
        assert score == 6.5
        assert isinstance(score, float)
        assert n_missing == 0

    def test_count(self):
        rubric = Rubric("R", tuple(RubricItem(i) for i in ITEMS), "count", missing_tolerance=2)
        score, n_missing = score_partition({"M1": "0", "M3": "1"}, ITEMS, rubric)
        assert score == 2
        assert n_missing == 1

    def test_reverse_coding(self):
        rubric = Rubric(
            "R", (RubricItem("M1"), RubricItem("M2", reverse=True)), "sum",
            min_value=1, max_value=5,
        )
        score, _ = score_partition({"M1": "4", "M2": "2"}, ["M1", "M2"], rubric)
        assert score == 8.0  # 4 + (6 - 2)

    def test_reverse_zero_based(self):
        rubric = Rubric("PSS", (RubricItem("P1", reverse=True),), "sum", min_value=0, max_value=4)
        score, _ = score_partition({"P1": "1"}, ["P1"], rubric)
        assert score == 3.0

    def test_sum_single_item_after_correction(self):
        """FP007's CVS_1 was corrected to "18"; a one-item sum scale scores 18."""
        rubric = Rubric("CVS", (RubricItem("CVS_1"),), "sum")
        score, n_missing = score_partition({"CVS_1": "18"}, ["CVS_1"], rubric)
        assert score == 18
        assert n_missing == 0

    def test_proportion_tolerance(self):
        items = [f"Q{i}" for i in range(1, 11)]
        rubric = Rubric("Q", (RubricItem("Q*"),), "mean", missing_tolerance=0.2)
        values = {item: "1" for item in items[:8]}
        assert score_partition(values, items, rubric) == (1.0, 2)
        values.pop("Q8")
        assert score_partition(values, items, rubric) == (None, 3)

    def test_empty_partition(self, mood_rubric):
        assert score_partition({"M1": "4"}, [], mood_rubric) == (None, 0)

    def test_passthrough_single(self):
        rubric = Rubric("AGE", (RubricItem("AGE"),), "passthrough")
        assert score_partition({"AGE": "34"}, ["AGE"], rubric) == ("34", 0)

    def test_passthrough_multiple_joined(self):
        rubric = Rubric("DEMO", (RubricItem("D1"), RubricItem("D2")), "passthrough")
        assert score_partition({"D1": "a", "D2": "b"}, ["D1", "D2"], rubric) == ("a; b", 0)

    def test_passthrough_missing(self):
        rubric = Rubric("AGE", (RubricItem("AGE"),), "passthrough")
        assert score_partition({"AGE": pd.NA}, ["AGE"], rubric) == (None, 1)


# ---------------------------------------------------------------------------
# Class: score_subject
# ---------------------------------------------------------------------------

class TestScoreSubject:

    def test_one_row_per_partition_in_order(self):
        rubric = Rubric(
            scale_name="BIG",
            items=(
                RubricItem("E1", subscales=("extraversion",)),
                RubricItem("N1", subscales=("neuroticism",)),
            ),
            method="sum",
            subscales=("extraversion", "neuroticism"),
            include_total=True,
        )
        available = ["N1", "E1"]
        rows = score_subject({"E1": "3", "N1": "2"}, rubric, rubric.partitions(available))
        assert [r["scored_scale"] for r in rows] == ["BIG", "extraversion", "neuroticism"]
        assert [r["score"] for r in rows] == [5.0, 3.0, 2.0]
        assert all(r["scale_name"] == "BIG" for r in rows)
        assert rows[0]["n_items"] == 2


# ---------------------------------------------------------------------------
# Class: score_responses
# ---------------------------------------------------------------------------

def _two_wave_df() -> pd.DataFrame:
    return make_long_df(
        make_long_rows("FP001", {"M1": "4", "M2": pd.NA, "M3": "2", "AGE": "34"})
        + make_long_rows("FP002", {"M1": pd.NA, "M2": pd.NA, "M3": "2", "AGE": "29"})
        + make_long_rows("FP001", {"M1": "5", "M2": "5", "M3": "5"},
                         survey_name="Mood Wave 2", response_id="R_w2", wave=2)
    )


class TestScoreResponses:

    def test_schema(self, mood_rubric):
        scored = score_responses(_two_wave_df(), {"MOOD": mood_rubric})
        assert list(scored.columns) == SCORED_COLUMNS
        assert scored["wave"].dtype == "Int64"

    def test_scores_and_nulls(self, mood_rubric):
        scored = score_responses(_two_wave_df(), {"MOOD": mood_rubric})
        wave1 = scored[scored["survey_name"] == "Mood Wave 1"].set_index("subject_id")
        assert wave1.loc["FP001", "score"] == 3.0
        assert wave1.loc["FP001", "n_missing"] == 1
        assert pd.isna(wave1.loc["FP002", "score"])
        assert wave1.loc["FP002", "n_missing"] == 2

    def test_surveys_scored_separately(self, mood_rubric):
        scored = score_responses(_two_wave_df(), {"MOOD": mood_rubric})
        fp001 = scored[scored["subject_id"] == "FP001"].set_index("wave")
        assert fp001.loc[1, "score"] == 3.0
        assert fp001.loc[2, "score"] == 5.0
        assert len(scored) == 3

    def test_rubric_only_where_items_appear(self, mood_rubric):
        age = Rubric("AGE", (RubricItem("AGE"),), "passthrough")
        scored = score_responses(_two_wave_df(), {"MOOD": mood_rubric, "AGE": age})
        age_rows = scored[scored["scale_name"] == "AGE"]
        assert set(age_rows["survey_name"]) == {"Mood Wave 1"}
        assert age_rows.set_index("subject_id").loc["FP002", "score"] == "29"

    def test_rows_follow_rubric_order(self, mood_rubric):
        age = Rubric("AGE", (RubricItem("AGE"),), "passthrough")
        scored = score_responses(_two_wave_df(), {"AGE": age, "MOOD": mood_rubric})
        first_subject = scored[scored["subject_id"] == "FP001"].iloc[:2]
        assert first_subject["scale_name"].tolist() == ["AGE", "MOOD"]

    def test_items_absent_from_survey_count_as_missing(self, mood_rubric):
        """M2 and M3 appear for no subject; they are still part of the scale."""
        df = make_long_df(make_long_rows("FP001", {"M1": "4"}))
        scored = score_responses(df, {"MOOD": mood_rubric})
        row = scored.iloc[0]
        assert row["n_items"] == 3
        assert row["n_missing"] == 2
        assert pd.isna(row["score"])

    def test_result_independent_of_other_subjects(self, mood_rubric):
        alone = make_long_df(make_long_rows("FP001", {"M1": "4"}))
        together = make_long_df(
            make_long_rows("FP001", {"M1": "4"})
            + make_long_rows("FP002", {"M1": "1", "M2": "2", "M3": "3"})
        )
        cols = ["score", "n_items", "n_missing"]
        first = score_responses(alone, {"MOOD": mood_rubric})[cols].iloc[0]
        second = score_responses(together, {"MOOD": mood_rubric})[cols].iloc[0]
        assert pd.isna(first["score"]) and pd.isna(second["score"])
        assert (first["n_items"], first["n_missing"]) == (second["n_items"], second["n_missing"])

    def test_residual_duplicate_last_value_wins(self, mood_rubric, capsys):
        df = make_long_df(
            make_long_rows("FP001", {"M1": "1", "M2": "1", "M3": "1"}, response_id="R_a")
            + make_long_rows("FP001", {"M1": "5", "M2": "5", "M3": "5"}, response_id="R_b")
        )
        scored = score_responses(df, {"MOOD": mood_rubric})
        assert scored["score"].tolist() == [5.0]
        assert "WARNING" in capsys.readouterr().out

    def test_no_wave(self, mood_rubric):
        df = make_long_df(make_long_rows("FP001", {"M1": "1", "M2": "2", "M3": "3"},
                                         survey_name="Mood", wave=None))
        scored = score_responses(df, {"MOOD": mood_rubric})
        assert scored["wave"].isna().all()
        assert scored["score"].tolist() == [2.0]

    def test_empty_inputs(self, mood_rubric):
        assert list(score_responses(pd.DataFrame(), {"MOOD": mood_rubric}).columns) == SCORED_COLUMNS
        assert score_responses(_two_wave_df(), {}).empty


# ---------------------------------------------------------------------------
# Class: pivot_scores
# ---------------------------------------------------------------------------

class TestPivotScores:

    def test_columns_per_partition(self):
        scored = pd.DataFrame([
            {"subject_id": "FP001", "survey_name": "S", "wave": 1, "scale_name": "MOOD",
             "scored_scale": "MOOD", "score": 3.0, "n_items": 3, "n_missing": 0, "method": "mean"},
            {"subject_id": "FP001", "survey_name": "S", "wave": 1, "scale_name": "BIG",
             "scored_scale": "extraversion", "score": 7.0, "n_items": 2, "n_missing": 0,
             "method": "sum"},
            {"subject_id": "FP002", "survey_name": "S", "wave": 1, "scale_name": "MOOD",
             "scored_scale": "MOOD", "score": None, "n_items": 3, "n_missing": 2, "method": "mean"},
        ])
        wide = pivot_scores(scored)
        assert list(wide.columns) == ["survey_name", "subject_id", "MOOD", "BIG_extraversion"]
        row = wide.set_index("subject_id").loc["FP001"]
        assert row["MOOD"] == 3.0
        assert row["BIG_extraversion"] == 7.0
        assert pd.isna(wide.set_index("subject_id").loc["FP002", "BIG_extraversion"])

    def test_empty(self):
        assert pivot_scores(pd.DataFrame(columns=SCORED_COLUMNS)).empty
