"""
Cleaning and scoring parameters for the survey pipeline.

This is the AUTHORITATIVE source for pipeline parameters.
src/cleaning/config.py and src/scoring/config.py import from here — do not
maintain parallel copies.

BEFORE EACH RUN:
1. Check the identity columns against the header of the newest export.
2. Review coercion_audit.csv from the previous run and add any free-text
   entry errors to MANUAL_CORRECTIONS.
3. Review duplicate_report.csv and add the response IDs to discard to
   DUPLICATE_RESPONSE_DROP_LIST.  Duplicates are never resolved
   automatically.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Identity columns (kept wide through the melt)
# ---------------------------------------------------------------------------

RESPONSE_ID_COLUMN: str = "ResponseId"
SUBJECT_ID_COLUMN: str = "SID"

# Used when SUBJECT_ID_COLUMN is blank (participant skipped the ID question
# but arrived through a personalised panel link).
FALLBACK_ID_COLUMN: str = "ExternalReference"

IDENTITY_COLUMNS: list[str] = [
    RESPONSE_ID_COLUMN,
    SUBJECT_ID_COLUMN,
    FALLBACK_ID_COLUMN,
]

# ---------------------------------------------------------------------------
# Non-item columns — dropped before the melt
# ---------------------------------------------------------------------------
#
# Platform metadata and directly identifying fields.  Anything not listed
# here and not an identity column is treated as a survey item.

NON_ITEM_COLUMNS: list[str] = [
    "StartDate", "EndDate", "Status", "IPAddress", "Progress",
    "Duration (in seconds)", "Finished", "RecordedDate",
    "RecipientLastName", "RecipientFirstName", "RecipientEmail",
    "LocationLatitude", "LocationLongitude", "DistributionChannel",
    "UserLanguage",
]

# ---------------------------------------------------------------------------
# Subject ID patterns
# ---------------------------------------------------------------------------

# Inclusion: the study's participant ID format (FP + 3 digits).
INCLUSION_ID_PATTERN: str | None = r"^FP\d{3}$"

# Exclusion: placeholder/test accounts, applied after inclusion.
EXCLUSION_ID_PATTERN: str | None = r"^FP000$|^FP999$"

# ---------------------------------------------------------------------------
# Wave marker
# ---------------------------------------------------------------------------

# Captures the wave number from a survey name: "Follow-up Wave 2",
# "mood_w3", "Baseline T1".
WAVE_PATTERN: str = r"(?i)(?:\bwave|\bw|\bt|_w|_t)\s*_?(\d+)\b"

# ---------------------------------------------------------------------------
# Manual value corrections (applied before the coercion audit)
# ---------------------------------------------------------------------------
#
# Ordered point fixes: (subject_id, item_name, corrected_value) or
# (subject_id, item_name, corrected_value, survey_name).  A fix without a
# survey_name applies in every survey.  Later entries win for the same key.

MANUAL_CORRECTIONS: list[tuple] = [
    # ("FP007", "CVS_1", "18"),
]

# ---------------------------------------------------------------------------
# Duplicate resolution
# ---------------------------------------------------------------------------

EXPECTED_RESPONSES_PER_SUBJECT: int = 1

# Response IDs hand-picked for removal after reviewing duplicate_report.csv.
DUPLICATE_RESPONSE_DROP_LIST: list[str] = []

# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

# Used when a rubric table gives no missing_tolerance.  0 = no missing items.
DEFAULT_MISSING_TOLERANCE: float = 0

# Per-scale overrides: scale_name → tolerance (count, or proportion < 1).
MISSING_TOLERANCE_OVERRIDES: dict[str, float] = {}
