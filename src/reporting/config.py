"""
Reporting-layer configuration: input/output paths and chart settings.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR    = PROJECT_ROOT / "data"
SCORED_DIR  = DATA_DIR / "scored"
REPORTS_DIR = DATA_DIR / "reports"
CHARTS_DIR  = REPORTS_DIR / "charts"

# Input written by src.scoring.pipeline
SCORED_RESULTS_PATH = SCORED_DIR / "scored_results.csv"

# Outputs
SCORE_SUMMARY_PATH = REPORTS_DIR / "score_summary.csv"

# ---------------------------------------------------------------------------
# Summary statistics
# ---------------------------------------------------------------------------

CONFIDENCE_LEVEL = 0.95

SUMMARY_KEYS = ["survey_name", "scale_name", "scored_scale"]

SUMMARY_COLUMNS = SUMMARY_KEYS + [
    "n_subjects",
    "n_scored",
    "n_null",
    "mean",
    "sd",
    "ci_lower_95",
    "ci_upper_95",
]

# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------

FIGURE_SIZE = (8, 5)
FIGURE_DPI = 150
HISTOGRAM_BINS = 20
