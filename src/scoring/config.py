"""
Scoring-layer configuration: rubric conventions, scoring methods, output
schema, and path constants.

All constants used across the rubric and engine modules are centralized
here so that configuration is separated from logic.
"""

from pathlib import Path

from config.pipeline_params import (  # noqa: F401  (re-exported)
    DEFAULT_MISSING_TOLERANCE,
    MISSING_TOLERANCE_OVERRIDES,
)

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = PROJECT_ROOT / "data"
RUBRICS_DIR = DATA_DIR / "rubrics"
SCORED_DIR = DATA_DIR / "scored"

# Output file paths
SCORED_RESULTS_PATH = SCORED_DIR / "scored_results.csv"
SCORED_WIDE_PATH = SCORED_DIR / "scored_wide.csv"

# ---------------------------------------------------------------------------
# Rubric files
# ---------------------------------------------------------------------------

# <measure>_scoring_rubric.csv / .tsv
RUBRIC_FILE_SUFFIX = "_scoring_rubric"
RUBRIC_FILE_EXTENSIONS: dict[str, str] = {".csv": ",", ".tsv": "\t"}

RUBRIC_REQUIRED_COLUMNS: list[str] = ["scale_name", "item_name", "method"]

# Scale-level columns: every row of a scale must agree (blank cells inherit).
RUBRIC_SCALE_COLUMNS: list[str] = [
    "method", "min_value", "max_value", "missing_tolerance", "include_total",
]

# Cell values read as True in the reverse / include_total columns.
TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "y", "x", "r", "reverse"})
FALSE_VALUES: frozenset[str] = frozenset({"", "0", "false", "no", "n"})

# Separator for items that belong to more than one subscale.
SUBSCALE_SEPARATOR = ";"

# Prefix marking an item entry as a regular expression rather than a name
# or shell-style wildcard.
REGEX_ITEM_PREFIX = "re:"

# ---------------------------------------------------------------------------
# Scoring methods
# ---------------------------------------------------------------------------

METHOD_SUM = "sum"
METHOD_MEAN = "mean"
METHOD_COUNT = "count"
METHOD_PASSTHROUGH = "passthrough"

METHODS: frozenset[str] = frozenset({METHOD_SUM, METHOD_MEAN, METHOD_COUNT, METHOD_PASSTHROUGH})

# "identity" is accepted in rubric files as a synonym for passthrough.
METHOD_ALIASES: dict[str, str] = {"identity": METHOD_PASSTHROUGH, "total": METHOD_SUM, "average": METHOD_MEAN}

# Joins the raw values of a multi-item passthrough partition.
PASSTHROUGH_SEPARATOR = "; "

# ---------------------------------------------------------------------------
# Scored Result schema
# ---------------------------------------------------------------------------

SCORED_COLUMNS: list[str] = [
    "subject_id",
    "survey_name",
    "wave",
    "scale_name",
    "scored_scale",
    "score",
    "n_items",
    "n_missing",
    "method",
]
