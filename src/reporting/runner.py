"""
Reporting runner: scored_results.csv → summary table + charts.

Usage (from project root):
    python -m src.reporting.runner

Or programmatically:
    from src.reporting.runner import run_reporting
    outputs = run_reporting()
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .config import CHARTS_DIR, SCORE_SUMMARY_PATH, SCORED_RESULTS_PATH
from .plots import plot_score_distributions, plot_wave_trajectories
from .summary import summarize_scores


def _load_scored_results(path: Path) -> pd.DataFrame:
    """Load the Scored Result table written by the scoring pipeline."""
    if not path.exists():
        raise FileNotFoundError(
            f"Scored results not found at {path}. "
            "Run `python -m src.scoring.pipeline` first."
        )
    df = pd.read_csv(path, dtype={"subject_id": str, "survey_name": str})
    df["wave"] = df["wave"].astype("Int64")
    print(f"Loaded scored results: {len(df)} rows from {path.name}")
    return df


def run_reporting(
    scored_results_path: Path = SCORED_RESULTS_PATH,
    summary_path: Path = SCORE_SUMMARY_PATH,
    charts_dir: Path = CHARTS_DIR,
) -> dict:
    """
    Summarize and chart a completed scoring run.

    Args:
        scored_results_path: Scored Result CSV to report on.
        summary_path: Output path for the summary table.
        charts_dir: Output directory for PNG charts.

    Returns:
        Dict with keys: summary (DataFrame), summary_path, distribution_charts,
        trajectory_charts.
    """
    sep = "=" * 70
    print(f"\n{sep}")
    print("SCORE REPORTING")
    print(f"{sep}")

    scored_df = _load_scored_results(scored_results_path)

    summary_df = summarize_scores(scored_df)
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    summary_df.to_csv(summary_path, index=False)
    print(f"Score summary saved: {summary_path} ({len(summary_df)} rows)")

    distribution_charts = plot_score_distributions(scored_df, charts_dir)
    trajectory_charts = plot_wave_trajectories(scored_df, charts_dir)

    print(f"\n{sep}")
    print("REPORTING COMPLETE")
    print(f"  Summary rows:        {len(summary_df)}")
    print(f"  Distribution charts: {len(distribution_charts)}")
    print(f"  Trajectory charts:   {len(trajectory_charts)}")
    print(f"{sep}\n")

    return {
        "summary": summary_df,
        "summary_path": summary_path,
        "distribution_charts": distribution_charts,
        "trajectory_charts": trajectory_charts,
    }


if __name__ == "__main__":
    run_reporting()
