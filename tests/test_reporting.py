"""
Unit tests for src/reporting.

Covers:
- t_confidence_interval: matches the textbook t interval; degenerate cases.
- summarize_scores: counts, nulls, passthrough partitions.
- plot_score_distributions / plot_wave_trajectories: files written, scales
  without numeric scores or a single wave skipped.
- run_reporting: end-to-end from a scored_results.csv.
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from src.reporting.plots import plot_score_distributions, plot_wave_trajectories
from src.reporting.runner import run_reporting
from src.reporting.summary import summarize_scores, t_confidence_interval
from src.scoring.config import SCORED_COLUMNS


def _scored_row(subject_id, scale, score, wave=1, scored_scale=None, method="mean",
                survey="Mood Wave 1") -> dict:
    return {
        "subject_id": subject_id,
        "survey_name": survey,
        "wave": wave,
        "scale_name": scale,
        "scored_scale": scored_scale or scale,
        "score": score,
        "n_items": 3,
        "n_missing": 0,
        "method": method,
    }


@pytest.fixture
def scored_df():
    rows = [
        _scored_row("FP001", "MOOD", 3.0),
        _scored_row("FP002", "MOOD", 4.0),
        _scored_row("FP003", "MOOD", 5.0),
        _scored_row("FP004", "MOOD", None),
        _scored_row("FP001", "AGE", "34", method="passthrough"),
        _scored_row("FP002", "AGE", "29", method="passthrough"),
        _scored_row("FP001", "MOOD", 4.0, wave=2, survey="Mood Wave 2"),
        _scored_row("FP002", "MOOD", 5.0, wave=2, survey="Mood Wave 2"),
    ]
    df = pd.DataFrame(rows, columns=SCORED_COLUMNS)
    df["wave"] = df["wave"].astype("Int64")
    return df


class TestConfidenceInterval:

    def test_matches_t_interval(self):
        values = np.array([3.0, 4.0, 5.0])
        lo, hi = t_confidence_interval(values)
        margin = stats.t.ppf(0.975, 2) * np.std(values, ddof=1) / math.sqrt(3)
        assert lo == pytest.approx(4.0 - margin)
        assert hi == pytest.approx(4.0 + margin)

    def test_single_value_is_nan(self):
        lo, hi = t_confidence_interval(np.array([3.0]))
        assert math.isnan(lo) and math.isnan(hi)

    def test_constant_values(self):
        assert t_confidence_interval(np.array([2.0, 2.0, 2.0])) == (2.0, 2.0)


class TestSummarizeScores:

    def test_counts_and_stats(self, scored_df):
        summary = summarize_scores(scored_df)
        mood = summary[(summary["survey_name"] == "Mood Wave 1") & (summary["scale_name"] == "MOOD")]
        row = mood.iloc[0]
        assert row["n_subjects"] == 4
        assert row["n_scored"] == 3
        assert row["n_null"] == 1
        assert row["mean"] == 4.0
        assert row["sd"] == 1.0
        assert row["ci_lower_95"] < 4.0 < row["ci_upper_95"]

    def test_passthrough_counts_only(self, scored_df):
        summary = summarize_scores(scored_df)
        age = summary[summary["scale_name"] == "AGE"].iloc[0]
        assert age["n_scored"] == 2
        assert pd.isna(age["mean"])

    def test_one_row_per_survey_partition(self, scored_df):
        assert len(summarize_scores(scored_df)) == 3

    def test_empty(self):
        assert summarize_scores(pd.DataFrame(columns=SCORED_COLUMNS)).empty


class TestPlots:

    def test_distribution_per_numeric_scale(self, scored_df, tmp_path):
        paths = plot_score_distributions(scored_df, tmp_path)
        assert [p.name for p in paths] == ["MOOD_distribution.png"]
        assert paths[0].stat().st_size > 0

    def test_subscale_file_names(self, tmp_path):
        df = pd.DataFrame([
            _scored_row("FP001", "BIG 5", 3.0, scored_scale="extraversion", method="sum"),
        ], columns=SCORED_COLUMNS)
        paths = plot_score_distributions(df, tmp_path)
        assert [p.name for p in paths] == ["BIG_5_extraversion_distribution.png"]

    def test_trajectory_needs_two_waves(self, scored_df, tmp_path):
        paths = plot_wave_trajectories(scored_df, tmp_path)
        assert [p.name for p in paths] == ["MOOD_by_wave.png"]

    def test_single_wave_no_chart(self, scored_df, tmp_path):
        single = scored_df[scored_df["wave"] == 1]
        assert plot_wave_trajectories(single, tmp_path / "charts") == []
        assert not (tmp_path / "charts").exists()


class TestRunReporting:

    def test_end_to_end(self, scored_df, tmp_path):
        scored_path = tmp_path / "scored_results.csv"
        scored_df.to_csv(scored_path, index=False)

        outputs = run_reporting(
            scored_results_path=scored_path,
            summary_path=tmp_path / "reports" / "score_summary.csv",
            charts_dir=tmp_path / "reports" / "charts",
        )

        assert outputs["summary_path"].exists()
        assert len(outputs["summary"]) == 3
        assert len(outputs["distribution_charts"]) == 1
        assert len(outputs["trajectory_charts"]) == 1

    def test_missing_scored_results(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="scoring.pipeline"):
            run_reporting(scored_results_path=tmp_path / "absent.csv")
