"""
Subject-ID pattern filters and missing-value normalization.

Patterns use ``re.search`` semantics, so anchor them (``^...$``) when the
whole ID must match.  A pattern of None disables the filter.
"""

from __future__ import annotations

import pandas as pd

from .coercion import is_missing
from .config import (
    EXCLUSION_ID_PATTERN,
    INCLUSION_ID_PATTERN,
    MISSING_VALUE,
    SUBJECT_ID,
    VALUE,
)


def _id_matches(long_df: pd.DataFrame, pattern: str) -> pd.Series:
    return long_df[SUBJECT_ID].astype(str).str.contains(pattern, regex=True, na=False)


def apply_inclusion_filter(
    long_df: pd.DataFrame,
    pattern: str | None = INCLUSION_ID_PATTERN,
) -> pd.DataFrame:
    """
    Keep only records whose subject ID matches the inclusion pattern.

    Args:
        long_df: Long response table.
        pattern: Regex for valid participant IDs, or None to keep all.

    Returns:
        Filtered copy of the table.
    """
    if pattern is None:
        return long_df.copy()

    keep = _id_matches(long_df, pattern)
    dropped_ids = sorted(long_df.loc[~keep, SUBJECT_ID].astype(str).unique())
    if dropped_ids:
        print(f"  Inclusion filter dropped {len(dropped_ids)} subject IDs: {dropped_ids[:10]}")
    return long_df[keep].reset_index(drop=True)


def apply_exclusion_filter(
    long_df: pd.DataFrame,
    pattern: str | None = EXCLUSION_ID_PATTERN,
) -> pd.DataFrame:
    """
    Drop records whose subject ID matches the exclusion pattern.

    Runs after :func:`apply_inclusion_filter` so test accounts that happen
    to use the participant ID format are still removed.

    Args:
        long_df: Long response table.
        pattern: Regex for test/placeholder IDs, or None to drop nothing.

    Returns:
        Filtered copy of the table.
    """
    if pattern is None:
        return long_df.copy()

    drop = _id_matches(long_df, pattern)
    dropped_ids = sorted(long_df.loc[drop, SUBJECT_ID].astype(str).unique())
    if dropped_ids:
        print(f"  Exclusion filter dropped {len(dropped_ids)} subject IDs: {dropped_ids[:10]}")
    return long_df[~drop].reset_index(drop=True)


def normalize_missing_values(long_df: pd.DataFrame) -> pd.DataFrame:
    """
    Recode blank item values to the explicit missing marker.

    Whitespace-only answers count as blank.  "0", "false" and every other
    non-blank text are left untouched.

    Args:
        long_df: Long response table.

    Returns:
        Copy with blank values replaced by MISSING_VALUE.
    """
    result_df = long_df.copy()
    blank = result_df[VALUE].map(lambda v: not is_missing(v) and str(v).strip() == "")
    result_df[VALUE] = result_df[VALUE].astype(object).mask(blank.astype(bool), MISSING_VALUE)
    return result_df
