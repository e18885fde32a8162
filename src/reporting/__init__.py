"""
src/reporting — Descriptive summaries and charts of scored scales.

Module layout
-------------
config.py   — Input/output paths, confidence level, chart settings
summary.py  — Per-(survey, scale, scored_scale) counts, mean, SD, t-interval
plots.py    — Score histograms and mean-by-wave trajectories (matplotlib)
runner.py   — Loads scored_results.csv, writes summary + charts

Public interface
----------------
    run_reporting()
"""

from .plots import plot_score_distributions, plot_wave_trajectories
from .runner import run_reporting
from .summary import summarize_scores, t_confidence_interval

__all__ = [
    "summarize_scores",
    "t_confidence_interval",
    "plot_score_distributions",
    "plot_wave_trajectories",
    "run_reporting",
]
