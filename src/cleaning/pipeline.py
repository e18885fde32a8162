"""
Reshape & Clean stage: raw wide exports → clean long Response Records.

Stage order (each step consumes the complete output of the previous one):

  1. Identity resolution   — blank subject IDs filled from the fallback column
  2. Reshape               — wide → long, survey_name and wave attached
  3. Inclusion filter      — participant ID format
  4. Exclusion filter      — test / placeholder accounts
  5. Missing normalization — "" → MISSING_VALUE
  6. Manual corrections    — literal point fixes
  7. Drop-list             — operator-chosen duplicate responses removed
  8. Duplicate report      — remaining (survey, subject) conflicts surfaced

The coercion audit needs the numeric item set, which comes from the rubrics,
so it runs in src/scoring/pipeline.py right after this stage.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import NamedTuple

import pandas as pd

from .config import (
    DUPLICATE_RESPONSE_DROP_LIST,
    EXCLUSION_ID_PATTERN,
    EXPECTED_RESPONSES_PER_SUBJECT,
    FALLBACK_ID_COLUMN,
    IDENTITY_COLUMNS,
    INCLUSION_ID_PATTERN,
    LONG_COLUMNS,
    MANUAL_CORRECTIONS,
    NON_ITEM_COLUMNS,
    RESPONSE_ID_COLUMN,
    SUBJECT_ID,
    SUBJECT_ID_COLUMN,
    WAVE_PATTERN,
)
from .corrections import apply_manual_corrections, build_correction_table
from .duplicates import drop_responses, find_duplicate_responses
from .filters import (
    apply_exclusion_filter,
    apply_inclusion_filter,
    normalize_missing_values,
)
from .reshape import reshape_to_long, resolve_subject_ids


class CleaningResult(NamedTuple):
    """Output of :func:`clean_survey_responses`."""

    responses: pd.DataFrame
    duplicates: pd.DataFrame


def clean_survey_responses(
    exports: Mapping[str, pd.DataFrame],
    identity_columns: list[str] = IDENTITY_COLUMNS,
    non_item_columns: list[str] = NON_ITEM_COLUMNS,
    response_id_column: str = RESPONSE_ID_COLUMN,
    subject_id_column: str = SUBJECT_ID_COLUMN,
    fallback_id_column: str | None = FALLBACK_ID_COLUMN,
    inclusion_pattern: str | None = INCLUSION_ID_PATTERN,
    exclusion_pattern: str | None = EXCLUSION_ID_PATTERN,
    correction_table: Mapping | None = None,
    drop_list: Iterable[str] = DUPLICATE_RESPONSE_DROP_LIST,
    expected_responses: int = EXPECTED_RESPONSES_PER_SUBJECT,
    wave_pattern: str = WAVE_PATTERN,
) -> CleaningResult:
    """
    Run the full Reshape & Clean stage over one or more wide exports.

    Args:
        exports: survey_name → wide export DataFrame.
        identity_columns: Columns kept wide through the melt.
        non_item_columns: Metadata / identifiable columns dropped.
        response_id_column: Export column holding the response ID.
        subject_id_column: Export column holding the subject ID.
        fallback_id_column: Substitute for blank subject IDs (None = off).
        inclusion_pattern: Participant-ID regex (None = keep all).
        exclusion_pattern: Test-account regex (None = drop none).
        correction_table: Table from
            :func:`src.cleaning.corrections.build_correction_table`; defaults
            to the configured MANUAL_CORRECTIONS.
        drop_list: Response IDs to discard as resolved duplicates.
        expected_responses: Responses allowed per subject per survey.
        wave_pattern: Regex deriving the wave from the survey name.

    Returns:
        CleaningResult with the clean long table and the duplicate report.
    """
    if correction_table is None:
        correction_table = build_correction_table(MANUAL_CORRECTIONS)

    sep = "—" * 50
    print(f"\n{sep}")
    print(f"CLEANING: {len(exports)} survey export(s)")
    print(sep)

    long_frames: list[pd.DataFrame] = []
    for survey_name, wide_df in exports.items():
        print(f"\n{survey_name}")
        resolved = resolve_subject_ids(wide_df, subject_id_column, fallback_id_column)
        long_frames.append(reshape_to_long(
            resolved,
            survey_name,
            identity_columns=identity_columns,
            non_item_columns=non_item_columns,
            response_id_column=response_id_column,
            subject_id_column=subject_id_column,
            wave_pattern=wave_pattern,
        ))

    frames = [f for f in long_frames if not f.empty]
    if frames:
        long_df = pd.concat(frames, ignore_index=True)
    else:
        long_df = pd.DataFrame(columns=LONG_COLUMNS)
    print(f"\nReshaped to {len(long_df):,} long records")

    long_df = apply_inclusion_filter(long_df, inclusion_pattern)
    long_df = apply_exclusion_filter(long_df, exclusion_pattern)
    long_df = normalize_missing_values(long_df)
    long_df = apply_manual_corrections(long_df, correction_table)
    long_df = drop_responses(long_df, drop_list)
    duplicates = find_duplicate_responses(long_df, expected_responses)

    print(
        f"\nClean table: {len(long_df):,} records, "
        f"{long_df[SUBJECT_ID].nunique()} subjects"
    )
    return CleaningResult(responses=long_df, duplicates=duplicates)
