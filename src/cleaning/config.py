"""
Cleaning-layer configuration: path constants, output column names, and the
pipeline parameters re-exported from config/pipeline_params.py.

All constants used across the cleaning modules are centralized here so that
configuration is separated from logic.
"""

from pathlib import Path

import pandas as pd

from config.pipeline_params import (  # noqa: F401  (re-exported)
    DUPLICATE_RESPONSE_DROP_LIST,
    EXCLUSION_ID_PATTERN,
    EXPECTED_RESPONSES_PER_SUBJECT,
    FALLBACK_ID_COLUMN,
    IDENTITY_COLUMNS,
    INCLUSION_ID_PATTERN,
    MANUAL_CORRECTIONS,
    NON_ITEM_COLUMNS,
    RESPONSE_ID_COLUMN,
    SUBJECT_ID_COLUMN,
    WAVE_PATTERN,
)

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = PROJECT_ROOT / "data"
RAW_EXPORTS_DIR = DATA_DIR / "raw"
CLEAN_DIR = DATA_DIR / "clean"
MANUAL_CORRECTIONS_PATH = DATA_DIR / "manual_corrections.csv"

# Output file paths
LONG_RESPONSES_PATH = CLEAN_DIR / "long_responses.csv"
COERCION_AUDIT_PATH = CLEAN_DIR / "coercion_audit.csv"
DUPLICATE_REPORT_PATH = CLEAN_DIR / "duplicate_report.csv"

# ---------------------------------------------------------------------------
# Long-format schema
# ---------------------------------------------------------------------------

# Explicit missing marker for blank answers.  Distinct from "" and "0".
MISSING_VALUE = pd.NA

RESPONSE_ID = "response_id"
SURVEY_NAME = "survey_name"
SUBJECT_ID = "subject_id"
WAVE = "wave"
ITEM_NAME = "item_name"
VALUE = "value"

# Column order of the clean long table.  Extra identity columns follow
# SUBJECT_ID in the order they are configured.
LONG_COLUMNS: list[str] = [RESPONSE_ID, SURVEY_NAME, SUBJECT_ID, WAVE, ITEM_NAME, VALUE]

COERCION_AUDIT_COLUMNS: list[str] = [ITEM_NAME, VALUE, "n_records", "subject_ids"]
DUPLICATE_REPORT_COLUMNS: list[str] = [SURVEY_NAME, SUBJECT_ID, "n_responses", "response_ids"]

# Survey platforms append two extra header rows to CSV exports: the question
# text and a JSON ImportId row.  Both are recognised by these markers.
EXPORT_HEADER_MARKERS: tuple[str, ...] = ("{\"ImportId\"", "Response ID", "Start Date")
