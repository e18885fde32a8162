"""
Duplicate-response detection and operator-driven removal.

A subject should submit each survey once.  When a (survey_name, subject_id)
group holds more response instances than that, the pipeline reports the
conflict and keeps every response: which one is "right" is a research
decision, so it is made by listing the response IDs to discard in
DUPLICATE_RESPONSE_DROP_LIST.  There is no "latest wins" rule.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from .config import (
    DUPLICATE_REPORT_COLUMNS,
    EXPECTED_RESPONSES_PER_SUBJECT,
    RESPONSE_ID,
    SUBJECT_ID,
    SURVEY_NAME,
)


def count_responses_per_subject(long_df: pd.DataFrame) -> pd.DataFrame:
    """
    Count distinct response instances per (survey_name, subject_id).

    Args:
        long_df: Long response table.

    Returns:
        DataFrame with DUPLICATE_REPORT_COLUMNS, one row per group;
        response_ids is a comma-joined, first-seen-ordered list.
    """
    if long_df.empty:
        return pd.DataFrame(columns=DUPLICATE_REPORT_COLUMNS)

    responses = long_df[[SURVEY_NAME, SUBJECT_ID, RESPONSE_ID]].drop_duplicates()
    counts = (
        responses.groupby([SURVEY_NAME, SUBJECT_ID], sort=True)
        .agg(
            n_responses=(RESPONSE_ID, "size"),
            response_ids=(RESPONSE_ID, lambda s: ",".join(s.astype(str))),
        )
        .reset_index()
    )
    return counts[DUPLICATE_REPORT_COLUMNS]


def find_duplicate_responses(
    long_df: pd.DataFrame,
    expected_responses: int = EXPECTED_RESPONSES_PER_SUBJECT,
) -> pd.DataFrame:
    """
    Report (survey_name, subject_id) groups with too many responses.

    Args:
        long_df: Long response table.
        expected_responses: Responses allowed per subject per survey.

    Returns:
        Subset of :func:`count_responses_per_subject` where n_responses
        exceeds ``expected_responses``.
    """
    counts = count_responses_per_subject(long_df)
    duplicates = counts[counts["n_responses"] > expected_responses].reset_index(drop=True)

    if duplicates.empty:
        print("  Duplicate check: no subject has more than "
              f"{expected_responses} response(s) per survey")
    else:
        print(f"  Duplicate check: {len(duplicates)} conflicts need a drop-list decision")
        for _, row in duplicates.iterrows():
            print(
                f"    {row[SURVEY_NAME]} / {row[SUBJECT_ID]}: "
                f"{row['n_responses']} responses ({row['response_ids']})"
            )
    return duplicates


def drop_responses(
    long_df: pd.DataFrame,
    response_ids: Iterable[str],
) -> pd.DataFrame:
    """
    Remove complete response instances listed in the drop-list.

    IDs not present in the table are printed and otherwise ignored, since
    a drop-list is often shared between runs over different exports.

    Args:
        long_df: Long response table.
        response_ids: Response IDs to discard.

    Returns:
        Copy of the table without any record of those responses.
    """
    drop_ids = {str(r) for r in response_ids}
    if not drop_ids:
        return long_df.copy()

    present = set(long_df[RESPONSE_ID].astype(str))
    unknown = sorted(drop_ids - present)
    for response_id in unknown:
        print(f"  WARNING: drop-list response '{response_id}' not found")

    drop = long_df[RESPONSE_ID].astype(str).isin(drop_ids)
    print(f"  Drop-list removed {len(drop_ids & present)} responses ({int(drop.sum())} records)")
    return long_df[~drop].reset_index(drop=True)
