"""
Scoring engine: clean long responses + rubrics → Scored Result rows.

Per (survey, subject, rubric):
  1. Select the subject's values for the rubric's items.
  2. Reverse-code reverse items with the rubric's bounds.
  3. Partition by subscale (whole scale when there are none).
  4. Coerce to numeric (except passthrough); failures and absences are
     missing.
  5. Aggregate by method: sum / mean / count / passthrough.
  6. Null the score when missing items exceed the rubric's tolerance.
  7. Emit one row per partition, in declared subscale order.

A rubric is only applied to surveys in which at least one of its items
appears, so a wave-1-only measure does not produce all-null rows for every
wave-2 subject.

The engine assumes at most one value per (survey, subject, item).  Residual
duplicates are reported before scoring; the last value in table order is the
one scored.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np
import pandas as pd

from src.cleaning.coercion import is_missing, parse_number
from src.cleaning.config import ITEM_NAME, SUBJECT_ID, SURVEY_NAME, VALUE, WAVE

from .config import (
    METHOD_COUNT,
    METHOD_MEAN,
    METHOD_PASSTHROUGH,
    METHOD_SUM,
    PASSTHROUGH_SEPARATOR,
    SCORED_COLUMNS,
)
from .rubric import Rubric, reverse_value


# ---------------------------------------------------------------------------
# Partition scoring
# ---------------------------------------------------------------------------

def _passthrough_score(raw_values: list) -> str | None:
    present = [str(v) for v in raw_values if not is_missing(v)]
    if not present:
        return None
    return present[0] if len(present) == 1 else PASSTHROUGH_SEPARATOR.join(present)


def score_partition(
    values: Mapping[str, object],
    items: list[str],
    rubric: Rubric,
) -> tuple[object, int]:
    """
    Score one partition (scale or subscale) for one subject.

    Args:
        values: item_name → raw value for the subject; absent items are
            missing.
        items: Concrete item names in the partition.
        rubric: Rubric supplying method, bounds, reverse items, tolerance.

    Returns:
        Tuple of (score, n_missing).  score is None when every item is
        missing or the tolerance is exceeded; a str for passthrough; an int
        for count; a float otherwise.
    """
    n_items = len(items)
    raw_values = [values.get(item) for item in items]

    if rubric.method == METHOD_PASSTHROUGH:
        n_missing = sum(1 for v in raw_values if is_missing(v))
        if rubric.exceeds_tolerance(n_missing, n_items):
            return None, n_missing
        return _passthrough_score(raw_values), n_missing

    reverse = {name for name, item in rubric.resolve_items(items).items() if item.reverse}
    numbers: list[float] = []
    for item, raw in zip(items, raw_values):
        number = parse_number(raw)
        if item in reverse and not np.isnan(number):
            number = reverse_value(number, rubric.min_value, rubric.max_value)
        numbers.append(number)

    available = [n for n in numbers if not np.isnan(n)]
    n_missing = n_items - len(available)

    if not available or rubric.exceeds_tolerance(n_missing, n_items):
        return None, n_missing

    if rubric.method == METHOD_SUM:
        return float(sum(available)), n_missing
    if rubric.method == METHOD_MEAN:
        return float(np.mean(available)), n_missing
    if rubric.method == METHOD_COUNT:
        return len(available), n_missing

    raise ValueError(f"Rubric '{rubric.scale_name}': unknown method '{rubric.method}'")


def score_subject(
    values: Mapping[str, object],
    rubric: Rubric,
    partitions: list[tuple[str, list[str]]],
) -> list[dict]:
    """
    Score every partition of one rubric for one subject.

    Args:
        values: item_name → raw value for the subject.
        rubric: The scale's rubric.
        partitions: Output of :meth:`Rubric.partitions` for the survey.

    Returns:
        One dict per partition with scale_name, scored_scale, score,
        n_items, n_missing, method.
    """
    rows: list[dict] = []
    for scored_scale, items in partitions:
        score, n_missing = score_partition(values, items, rubric)
        rows.append({
            "scale_name": rubric.scale_name,
            "scored_scale": scored_scale,
            "score": score,
            "n_items": len(items),
            "n_missing": n_missing,
            "method": rubric.method,
        })
    return rows


# ---------------------------------------------------------------------------
# Batch scoring
# ---------------------------------------------------------------------------

def _report_residual_duplicates(long_df: pd.DataFrame) -> None:
    dup = long_df.duplicated([SURVEY_NAME, SUBJECT_ID, ITEM_NAME], keep=False)
    if dup.any():
        pairs = long_df.loc[dup, [SURVEY_NAME, SUBJECT_ID]].drop_duplicates()
        print(
            f"WARNING: {int(dup.sum())} records share a (survey, subject, item) "
            f"with another record across {len(pairs)} subject/survey pairs. "
            "Resolve them with the duplicate drop-list; the last value is scored."
        )


def score_responses(
    long_df: pd.DataFrame,
    rubrics: Mapping[str, Rubric],
) -> pd.DataFrame:
    """
    Apply every rubric to every subject in every survey.

    Args:
        long_df: Clean long response table (survey_name, subject_id,
            item_name, value; wave optional).
        rubrics: scale_name → Rubric.

    Returns:
        Scored Result DataFrame with SCORED_COLUMNS.  Rows are grouped by
        survey then subject (table order), then rubric order, then
        partition order.
    """
    if long_df.empty or not rubrics:
        return pd.DataFrame(columns=SCORED_COLUMNS)

    _report_residual_duplicates(long_df)

    records: list[dict] = []
    for survey_name, survey_df in long_df.groupby(SURVEY_NAME, sort=False):
        available = list(dict.fromkeys(survey_df[ITEM_NAME]))
        applicable = [
            (rubric, rubric.partitions(available))
            for rubric in rubrics.values()
            if rubric.applies_to(available)
        ]
        if not applicable:
            continue
        wave = survey_df[WAVE].iloc[0] if WAVE in survey_df.columns else None

        for subject_id, subject_df in survey_df.groupby(SUBJECT_ID, sort=False):
            values = dict(zip(subject_df[ITEM_NAME], subject_df[VALUE]))
            for rubric, partitions in applicable:
                for row in score_subject(values, rubric, partitions):
                    records.append({
                        "subject_id": subject_id,
                        "survey_name": survey_name,
                        "wave": None if is_missing(wave) else wave,
                        **row,
                    })

    scored_df = pd.DataFrame(records, columns=SCORED_COLUMNS)
    scored_df["wave"] = scored_df["wave"].astype("Int64")

    n_null = int(scored_df["score"].isna().sum())
    print(
        f"Scored {scored_df['subject_id'].nunique()} subjects × "
        f"{scored_df['scale_name'].nunique()} scales → {len(scored_df):,} rows "
        f"({n_null} null scores)"
    )
    return scored_df


def pivot_scores(scored_df: pd.DataFrame) -> pd.DataFrame:
    """
    Wide view of the scored table: one row per (survey, subject).

    Columns are named ``<scale_name>`` for whole-scale partitions and
    ``<scale_name>_<subscale>`` for subscales.

    Args:
        scored_df: Output of :func:`score_responses`.

    Returns:
        Wide DataFrame with survey_name, subject_id, then one column per
        scored partition in first-appearance order.
    """
    index = ["survey_name", "subject_id"]
    if scored_df.empty:
        return pd.DataFrame(columns=index)

    labelled = scored_df.copy()
    labelled["column"] = np.where(
        labelled["scored_scale"] == labelled["scale_name"],
        labelled["scale_name"],
        labelled["scale_name"] + "_" + labelled["scored_scale"],
    )
    columns = list(dict.fromkeys(labelled["column"]))
    wide_df = labelled.pivot(index=index, columns="column", values="score")
    wide_df = wide_df.reindex(columns=columns).reset_index()
    wide_df.columns.name = None
    return wide_df
