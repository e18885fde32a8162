"""
Charts of scored scales: score distributions and wave trajectories.

Rendering uses the non-interactive Agg backend.  Every function returns the
list of PNG paths written.
"""

from __future__ import annotations

import re
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from src.scoring.config import METHOD_PASSTHROUGH  # noqa: E402

from .config import CHARTS_DIR, FIGURE_DPI, FIGURE_SIZE, HISTOGRAM_BINS  # noqa: E402


def _chart_label(scale_name: str, scored_scale: str) -> str:
    if scored_scale == scale_name:
        return scale_name
    return f"{scale_name} — {scored_scale}"


def _chart_filename(scale_name: str, scored_scale: str, suffix: str) -> str:
    stem = scale_name if scored_scale == scale_name else f"{scale_name}_{scored_scale}"
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "_", stem).strip("_")
    return f"{stem}_{suffix}.png"


def _numeric_scores(scored_df: pd.DataFrame) -> pd.DataFrame:
    """Non-passthrough rows with a score, score cast to float."""
    scored_df = scored_df[scored_df["method"] != METHOD_PASSTHROUGH]
    numeric = scored_df.assign(score=pd.to_numeric(scored_df["score"], errors="coerce"))
    return numeric.dropna(subset=["score"])


def plot_score_distributions(
    scored_df: pd.DataFrame,
    output_dir: Path = CHARTS_DIR,
) -> list[Path]:
    """
    Write one histogram per scored scale, pooling surveys.

    Partitions with no numeric scores (passthrough, all null) are skipped.

    Args:
        scored_df: Scored Result table.
        output_dir: Directory for PNG files (created if needed).

    Returns:
        Paths of the written charts, in table order.
    """
    numeric = _numeric_scores(scored_df)
    if numeric.empty:
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []

    for (scale_name, scored_scale), group in numeric.groupby(
        ["scale_name", "scored_scale"], sort=False
    ):
        fig, ax = plt.subplots(figsize=FIGURE_SIZE)
        ax.hist(group["score"], bins=HISTOGRAM_BINS, edgecolor="black", alpha=0.8)
        ax.set_title(f"{_chart_label(scale_name, scored_scale)} (N = {len(group)})")
        ax.set_xlabel("Score")
        ax.set_ylabel("Subjects")
        ax.grid(axis="y", linestyle="--", alpha=0.6)
        fig.tight_layout()

        path = output_dir / _chart_filename(scale_name, scored_scale, "distribution")
        fig.savefig(path, dpi=FIGURE_DPI)
        plt.close(fig)
        paths.append(path)

    print(f"Distribution charts written: {len(paths)} → {output_dir}")
    return paths


def plot_wave_trajectories(
    scored_df: pd.DataFrame,
    output_dir: Path = CHARTS_DIR,
) -> list[Path]:
    """
    Write a mean-score-by-wave line chart per scored scale.

    Only scales scored in more than one wave are charted; rows without a
    wave are ignored.

    Args:
        scored_df: Scored Result table.
        output_dir: Directory for PNG files (created if needed).

    Returns:
        Paths of the written charts, in table order.
    """
    numeric = _numeric_scores(scored_df).dropna(subset=["wave"])
    if numeric.empty:
        return []

    paths: list[Path] = []
    for (scale_name, scored_scale), group in numeric.groupby(
        ["scale_name", "scored_scale"], sort=False
    ):
        by_wave = group.groupby("wave")["score"].agg(["mean", "sem", "count"]).sort_index()
        if len(by_wave) < 2:
            continue

        output_dir.mkdir(parents=True, exist_ok=True)
        waves = by_wave.index.astype(int)
        fig, ax = plt.subplots(figsize=FIGURE_SIZE)
        ax.errorbar(waves, by_wave["mean"], yerr=by_wave["sem"].fillna(0),
                    marker="o", capsize=4)
        ax.set_xticks(list(waves))
        ax.set_title(f"{_chart_label(scale_name, scored_scale)} by wave")
        ax.set_xlabel("Wave")
        ax.set_ylabel("Mean score (± SE)")
        ax.grid(linestyle="--", alpha=0.6)
        fig.tight_layout()

        path = output_dir / _chart_filename(scale_name, scored_scale, "by_wave")
        fig.savefig(path, dpi=FIGURE_DPI)
        plt.close(fig)
        paths.append(path)

    print(f"Wave trajectory charts written: {len(paths)}")
    return paths
