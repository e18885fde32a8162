"""
Export loading, identity resolution, and wide ↔ long reshaping.

Raw survey exports arrive wide (one row per response, one column per item).
Everything downstream works on the long table defined in config.LONG_COLUMNS:
one row per (response, item).
"""

from __future__ import annotations

import re
from pathlib import Path

import numpy as np
import pandas as pd

from .coercion import is_missing
from .config import (
    EXPORT_HEADER_MARKERS,
    FALLBACK_ID_COLUMN,
    IDENTITY_COLUMNS,
    ITEM_NAME,
    LONG_COLUMNS,
    NON_ITEM_COLUMNS,
    RAW_EXPORTS_DIR,
    RESPONSE_ID,
    RESPONSE_ID_COLUMN,
    SUBJECT_ID,
    SUBJECT_ID_COLUMN,
    SURVEY_NAME,
    VALUE,
    WAVE,
    WAVE_PATTERN,
)


# ---------------------------------------------------------------------------
# Export loading
# ---------------------------------------------------------------------------

def _is_export_header_row(row: pd.Series) -> bool:
    return any(str(v).startswith(EXPORT_HEADER_MARKERS) for v in row.values)


def strip_export_header_rows(wide_df: pd.DataFrame) -> pd.DataFrame:
    """
    Drop the question-text and ImportId rows that follow the CSV header.

    Only the first two rows are inspected, and only rows that look like
    header rows are dropped, so exports saved without them pass through
    unchanged.

    Args:
        wide_df: Raw export as read from CSV.

    Returns:
        Copy of the DataFrame without the extra header rows.
    """
    n_header_rows = 0
    while n_header_rows < min(2, len(wide_df)) and _is_export_header_row(
        wide_df.iloc[n_header_rows]
    ):
        n_header_rows += 1
    return wide_df.iloc[n_header_rows:].reset_index(drop=True)


def load_survey_export(path: Path) -> pd.DataFrame:
    """
    Load one wide survey export with every cell kept as text.

    ``keep_default_na=False`` keeps blank answers as "" so that
    :func:`src.cleaning.filters.normalize_missing_values` sees them.

    Args:
        path: Path to the export CSV.

    Returns:
        Wide DataFrame, header rows stripped.

    Raises:
        FileNotFoundError: The file does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Survey export not found: {path}")

    wide_df = pd.read_csv(path, dtype=str, keep_default_na=False)
    wide_df = strip_export_header_rows(wide_df)
    print(f"Loaded export {path.name}: {len(wide_df)} responses, {wide_df.shape[1]} columns")
    return wide_df


def discover_survey_exports(export_dir: Path = RAW_EXPORTS_DIR) -> dict[str, Path]:
    """
    Find every CSV export in a directory, keyed by survey name (file stem).

    Args:
        export_dir: Directory containing raw exports.

    Returns:
        Dict of survey_name → path, sorted by survey name.

    Raises:
        FileNotFoundError: Directory missing or holds no CSV files.
    """
    if not export_dir.is_dir():
        raise FileNotFoundError(f"Raw export directory not found: {export_dir}")

    exports = {path.stem: path for path in sorted(export_dir.glob("*.csv"))}
    if not exports:
        raise FileNotFoundError(
            f"No survey exports found in {export_dir}.\n"
            "Expected one <survey_name>.csv per survey."
        )
    return exports


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

def _as_id(value) -> str:
    return "" if is_missing(value) else str(value).strip()


def resolve_subject_ids(
    wide_df: pd.DataFrame,
    subject_id_column: str = SUBJECT_ID_COLUMN,
    fallback_column: str | None = FALLBACK_ID_COLUMN,
) -> pd.DataFrame:
    """
    Fill blank subject IDs from the fallback identity column.

    Must run before any ID-pattern filtering: a response whose ID question
    was skipped would otherwise be dropped by the inclusion filter.

    Args:
        wide_df: Wide export.
        subject_id_column: Primary subject-ID column.
        fallback_column: Column substituted where the primary is blank, or
            None to only strip whitespace.

    Returns:
        Copy of the DataFrame with the subject-ID column resolved.

    Raises:
        ValueError: The primary subject-ID column is absent.
    """
    if subject_id_column not in wide_df.columns:
        raise ValueError(
            f"Subject ID column '{subject_id_column}' not in export. "
            f"Columns present: {list(wide_df.columns)[:10]}..."
        )

    result_df = wide_df.copy()
    primary = result_df[subject_id_column].map(_as_id)

    if fallback_column is None or fallback_column not in result_df.columns:
        result_df[subject_id_column] = primary
        return result_df

    fallback = result_df[fallback_column].map(_as_id)
    blank = primary == ""
    result_df[subject_id_column] = primary.where(~blank, fallback)

    n_filled = int((blank & (fallback != "")).sum())
    if n_filled:
        print(f"  Subject ID taken from '{fallback_column}' for {n_filled} responses")
    return result_df


def derive_wave(survey_name: str, wave_pattern: str = WAVE_PATTERN) -> int | None:
    """
    Extract the wave number from a survey name.

    Args:
        survey_name: e.g. ``"Mood Wave 2"`` or ``"mood_w2"``.
        wave_pattern: Regex whose first group captures the wave number.

    Returns:
        Wave number, or None when the name carries no wave marker.
    """
    match = re.search(wave_pattern, survey_name)
    return int(match.group(1)) if match else None


# ---------------------------------------------------------------------------
# Wide ↔ long
# ---------------------------------------------------------------------------

def reshape_to_long(
    wide_df: pd.DataFrame,
    survey_name: str,
    identity_columns: list[str] = IDENTITY_COLUMNS,
    non_item_columns: list[str] = NON_ITEM_COLUMNS,
    response_id_column: str = RESPONSE_ID_COLUMN,
    subject_id_column: str = SUBJECT_ID_COLUMN,
    wave_pattern: str = WAVE_PATTERN,
) -> pd.DataFrame:
    """
    Melt a wide export into long Response Records.

    Identity columns stay wide; non-item columns are dropped; every other
    column becomes an item.  Rows stay grouped by response, items in
    export column order.

    Args:
        wide_df: Wide export (subject IDs already resolved).
        survey_name: Name recorded on every record; the wave is derived
            from it.
        identity_columns: Columns kept wide.
        non_item_columns: Metadata / identifiable columns to drop.
        response_id_column: Export column renamed to ``response_id``.
        subject_id_column: Export column renamed to ``subject_id``.
        wave_pattern: Regex passed to :func:`derive_wave`.

    Returns:
        Long DataFrame: LONG_COLUMNS followed by any extra identity columns.

    Raises:
        ValueError: Response-ID or subject-ID column is absent.
    """
    for required in (response_id_column, subject_id_column):
        if required not in wide_df.columns:
            raise ValueError(
                f"Required identity column '{required}' not in export "
                f"for survey '{survey_name}'."
            )

    id_vars = [c for c in identity_columns if c in wide_df.columns]
    for required in (response_id_column, subject_id_column):
        if required not in id_vars:
            id_vars.append(required)
    excluded = set(id_vars) | set(non_item_columns)
    item_columns = [c for c in wide_df.columns if c not in excluded]

    extra_ids = [c for c in id_vars if c not in (response_id_column, subject_id_column)]
    out_columns = LONG_COLUMNS[:3] + extra_ids + LONG_COLUMNS[3:]

    if wide_df.empty or not item_columns:
        return pd.DataFrame(columns=out_columns)

    long_df = wide_df.melt(
        id_vars=id_vars,
        value_vars=item_columns,
        var_name=ITEM_NAME,
        value_name=VALUE,
    )

    # melt stacks item by item; regroup by response, keeping item order
    response_position = np.arange(len(long_df)) % len(wide_df)
    long_df = long_df.iloc[np.argsort(response_position, kind="stable")]
    long_df = long_df.reset_index(drop=True)

    long_df = long_df.rename(columns={
        response_id_column: RESPONSE_ID,
        subject_id_column: SUBJECT_ID,
    })
    long_df[SURVEY_NAME] = survey_name
    long_df[WAVE] = pd.array(
        [derive_wave(survey_name, wave_pattern)] * len(long_df), dtype="Int64"
    )

    return long_df[out_columns]


def pivot_to_wide(long_df: pd.DataFrame) -> pd.DataFrame:
    """
    Reverse the melt: one row per response, one column per item.

    Args:
        long_df: Long table with at most one value per (response, item).

    Returns:
        Wide DataFrame indexed by columns response_id, survey_name,
        subject_id; item columns in first-appearance order.
    """
    index = [RESPONSE_ID, SURVEY_NAME, SUBJECT_ID]
    if long_df.empty:
        return pd.DataFrame(columns=index)

    items = list(dict.fromkeys(long_df[ITEM_NAME]))
    wide_df = long_df.pivot(index=index, columns=ITEM_NAME, values=VALUE)
    wide_df = wide_df.reindex(columns=items).reset_index()
    wide_df.columns.name = None
    return wide_df
