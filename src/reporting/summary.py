"""
Descriptive summaries of scored scales.

One row per (survey, scale, scored_scale) with subject counts, the number of
null scores, mean, standard deviation, and a two-sided t confidence interval
for the mean.  Passthrough partitions have no numeric scores, so their
statistics are NaN while the counts are still reported.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats

from src.scoring.config import METHOD_PASSTHROUGH

from .config import CONFIDENCE_LEVEL, SUMMARY_COLUMNS, SUMMARY_KEYS


def t_confidence_interval(
    values: np.ndarray,
    confidence: float = CONFIDENCE_LEVEL,
) -> tuple[float, float]:
    """
    Student-t confidence interval for the mean of ``values``.

    Args:
        values: Finite numeric observations.
        confidence: Confidence level (default 0.95).

    Returns:
        Tuple of (lower_bound, upper_bound); (nan, nan) when fewer than two
        observations are given.
    """
    n = len(values)
    if n < 2:
        return (np.nan, np.nan)

    mean = float(np.mean(values))
    sem = float(stats.sem(values))
    if sem == 0:
        return (mean, mean)

    lo, hi = stats.t.interval(confidence, n - 1, loc=mean, scale=sem)
    return (float(lo), float(hi))


def summarize_scores(
    scored_df: pd.DataFrame,
    confidence: float = CONFIDENCE_LEVEL,
) -> pd.DataFrame:
    """
    Summarize the Scored Result table per (survey, scale, scored_scale).

    Args:
        scored_df: Scored Result table (as returned by score_responses or
            read back from scored_results.csv).
        confidence: Confidence level for the interval columns.

    Returns:
        DataFrame with SUMMARY_COLUMNS, groups in table order.
    """
    if scored_df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    records: list[dict] = []
    for (survey_name, scale_name, scored_scale), group in scored_df.groupby(
        SUMMARY_KEYS, sort=False
    ):
        scored = group["score"].notna()
        numeric_rows = scored & (group["method"] != METHOD_PASSTHROUGH)
        numeric = pd.to_numeric(group.loc[numeric_rows, "score"], errors="coerce").dropna()
        values = numeric.to_numpy(dtype=float)
        ci_lo, ci_hi = t_confidence_interval(values, confidence)

        records.append({
            "survey_name": survey_name,
            "scale_name": scale_name,
            "scored_scale": scored_scale,
            "n_subjects": int(group["subject_id"].nunique()),
            "n_scored": int(scored.sum()),
            "n_null": int((~scored).sum()),
            "mean": round(float(values.mean()), 4) if len(values) else np.nan,
            "sd": round(float(values.std(ddof=1)), 4) if len(values) > 1 else np.nan,
            "ci_lower_95": round(ci_lo, 4),
            "ci_upper_95": round(ci_hi, 4),
        })

    return pd.DataFrame(records, columns=SUMMARY_COLUMNS)
