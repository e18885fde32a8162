"""
Manual value corrections and the numeric coercion audit.

Free-text entry errors ("18 yrs", "eighteen", "1O") are not algorithmically
correctable.  Operators review the coercion audit, add literal point fixes
to the correction table, and re-run; the pipeline never guesses a fix.

Order matters: corrections are applied BEFORE the audit, so a corrected
value never appears in the uncoercible-values report.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from .coercion import flag_uncoercible
from .config import (
    COERCION_AUDIT_COLUMNS,
    ITEM_NAME,
    MANUAL_CORRECTIONS,
    SUBJECT_ID,
    SURVEY_NAME,
    VALUE,
)

CorrectionKey = tuple  # (survey_name | None, subject_id, item_name)


# ---------------------------------------------------------------------------
# Correction table
# ---------------------------------------------------------------------------

def build_correction_table(
    corrections: Iterable[tuple] = MANUAL_CORRECTIONS,
) -> MappingProxyType:
    """
    Build the immutable correction lookup from ordered point fixes.

    Each fix is ``(subject_id, item_name, corrected_value)`` or
    ``(subject_id, item_name, corrected_value, survey_name)``.  A later fix
    for the same key replaces an earlier one.

    Args:
        corrections: Ordered point fixes.

    Returns:
        Read-only mapping of (survey_name | None, subject_id, item_name)
        → corrected value (str).

    Raises:
        ValueError: A fix does not have 3 or 4 fields.
    """
    table: dict[CorrectionKey, str] = {}
    for fix in corrections:
        if len(fix) == 3:
            subject_id, item_name, corrected = fix
            survey_name = None
        elif len(fix) == 4:
            subject_id, item_name, corrected, survey_name = fix
        else:
            raise ValueError(
                f"Manual correction {fix!r} must be (subject_id, item_name, "
                "corrected_value[, survey_name])."
            )
        survey_name = survey_name or None
        table[(survey_name, str(subject_id), str(item_name))] = str(corrected)
    return MappingProxyType(table)


def load_manual_corrections(path: Path) -> MappingProxyType:
    """
    Load point fixes from a CSV with columns subject_id, item_name,
    corrected_value and optional survey_name.

    Args:
        path: Path to the corrections CSV.

    Returns:
        Correction table from :func:`build_correction_table`.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: Required columns are missing.
    """
    if not path.exists():
        raise FileNotFoundError(f"Manual corrections file not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    required = {"subject_id", "item_name", "corrected_value"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"{path.name} is missing columns: {sorted(missing)}")

    has_survey = "survey_name" in df.columns
    fixes = [
        (
            row["subject_id"],
            row["item_name"],
            row["corrected_value"],
            row["survey_name"] if has_survey else None,
        )
        for _, row in df.iterrows()
    ]
    print(f"Loaded {len(fixes)} manual corrections from {path.name}")
    return build_correction_table(fixes)


def apply_manual_corrections(
    long_df: pd.DataFrame,
    correction_table: MappingProxyType,
) -> pd.DataFrame:
    """
    Overwrite item values with their manual corrections.

    Survey-wide fixes (no survey_name) are applied first and survey-specific
    fixes second, so the more specific fix wins where both match.  A fix
    overrides a missing value too.  Fixes that match no record are printed
    for review and otherwise ignored.

    Args:
        long_df: Long response table (missing values already normalized).
        correction_table: Mapping from :func:`build_correction_table`.

    Returns:
        Corrected copy of the table.
    """
    result_df = long_df.copy()
    if not correction_table or result_df.empty:
        return result_df

    result_df[VALUE] = result_df[VALUE].astype(object)
    subject_ids = result_df[SUBJECT_ID].astype(str)
    items = result_df[ITEM_NAME].astype(str)

    ordered = sorted(correction_table.items(), key=lambda kv: kv[0][0] is not None)

    applied = 0
    unmatched: list[CorrectionKey] = []
    for (survey_name, subject_id, item_name), corrected in ordered:
        mask = (subject_ids == subject_id) & (items == item_name)
        if survey_name is not None:
            mask &= result_df[SURVEY_NAME] == survey_name
        n = int(mask.sum())
        if n == 0:
            unmatched.append((survey_name, subject_id, item_name))
            continue
        result_df.loc[mask, VALUE] = corrected
        applied += n

    print(f"  Manual corrections applied to {applied} records")
    for key in unmatched:
        print(f"  WARNING: correction matched no record: {key}")

    return result_df


# ---------------------------------------------------------------------------
# Coercion audit
# ---------------------------------------------------------------------------

def audit_numeric_coercion(
    long_df: pd.DataFrame,
    numeric_items: Iterable[str] | None = None,
) -> pd.DataFrame:
    """
    Report every (item, value) pair that is expected numeric but isn't.

    Read-only diagnostic.  The report tells an operator which values to add
    to the correction table; nothing here blocks the pipeline.

    Args:
        long_df: Long response table, corrections already applied.
        numeric_items: Item names expected to hold numbers; None audits
            every item.

    Returns:
        DataFrame with COERCION_AUDIT_COLUMNS, one row per offending
        (item_name, value) pair, sorted by item then value.
    """
    if numeric_items is None:
        subset = long_df
    else:
        subset = long_df[long_df[ITEM_NAME].isin(set(numeric_items))]

    if subset.empty:
        return pd.DataFrame(columns=COERCION_AUDIT_COLUMNS)

    bad = subset[flag_uncoercible(subset[VALUE])].copy()
    if bad.empty:
        print("  Coercion audit: all expected-numeric values parse")
        return pd.DataFrame(columns=COERCION_AUDIT_COLUMNS)

    bad[VALUE] = bad[VALUE].astype(str)
    report = (
        bad.groupby([ITEM_NAME, VALUE], sort=True)
        .agg(
            n_records=(SUBJECT_ID, "size"),
            subject_ids=(SUBJECT_ID, lambda s: ",".join(sorted(set(s.astype(str))))),
        )
        .reset_index()
    )

    print(
        f"  Coercion audit: {len(report)} uncoercible (item, value) pairs "
        f"across {int(report['n_records'].sum())} records"
    )
    return report[COERCION_AUDIT_COLUMNS]
