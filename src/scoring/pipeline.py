"""
Orchestrates the end-to-end batch: raw exports → clean → audit → score.

This module is the single entry point for a scoring run.  It discovers the
raw exports and rubric files, runs each stage in order, and saves every
intermediate table an operator needs to review.

Pipeline steps:
  Step 1 — Load raw exports (src.cleaning.reshape)
  Step 2 — Reshape & Clean (src.cleaning.pipeline)
  Step 3 — Load rubrics (rubric module)
  Step 4 — Coercion audit over rubric-numeric items (src.cleaning.corrections)
  Step 5 — Score (engine module)

Usage (from project root):
    python -m src.scoring.pipeline
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from src.cleaning.config import (
    COERCION_AUDIT_PATH,
    DUPLICATE_REPORT_PATH,
    DUPLICATE_RESPONSE_DROP_LIST,
    ITEM_NAME,
    LONG_RESPONSES_PATH,
    MANUAL_CORRECTIONS,
    MANUAL_CORRECTIONS_PATH,
    RAW_EXPORTS_DIR,
)
from src.cleaning.corrections import (
    audit_numeric_coercion,
    build_correction_table,
    load_manual_corrections,
)
from src.cleaning.pipeline import clean_survey_responses
from src.cleaning.reshape import discover_survey_exports, load_survey_export

from .config import (
    MISSING_TOLERANCE_OVERRIDES,
    RUBRICS_DIR,
    SCORED_RESULTS_PATH,
    SCORED_WIDE_PATH,
)
from .engine import pivot_scores, score_responses
from .rubric import load_rubrics, rubric_numeric_items


def _resolve_corrections(corrections_path: Path | None) -> Mapping:
    """Configured corrections, extended by the corrections CSV if present."""
    table = dict(build_correction_table(MANUAL_CORRECTIONS))
    if corrections_path is not None and corrections_path.exists():
        table.update(load_manual_corrections(corrections_path))
    return MappingProxyType(table)


def _save(df: pd.DataFrame, path: Path, label: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    print(f"{label} saved: {path}")


def run_scoring_pipeline(
    export_dir: Path = RAW_EXPORTS_DIR,
    rubric_dir: Path = RUBRICS_DIR,
    corrections_path: Path | None = MANUAL_CORRECTIONS_PATH,
    drop_list: Iterable[str] = DUPLICATE_RESPONSE_DROP_LIST,
    tolerance_overrides: Mapping[str, float] = MISSING_TOLERANCE_OVERRIDES,
    long_responses_path: Path = LONG_RESPONSES_PATH,
    coercion_audit_path: Path = COERCION_AUDIT_PATH,
    duplicate_report_path: Path = DUPLICATE_REPORT_PATH,
    scored_results_path: Path = SCORED_RESULTS_PATH,
    scored_wide_path: Path = SCORED_WIDE_PATH,
) -> dict:
    """
    Execute the complete cleaning-and-scoring batch.

    Args:
        export_dir: Directory of raw ``<survey_name>.csv`` exports.
        rubric_dir: Directory of ``<measure>_scoring_rubric.csv`` files.
        corrections_path: Optional CSV of extra manual corrections, merged
            after the configured MANUAL_CORRECTIONS.
        drop_list: Response IDs discarded as resolved duplicates.
        tolerance_overrides: scale_name → missing tolerance.
        long_responses_path: Output path for the clean long table.
        coercion_audit_path: Output path for the coercion audit.
        duplicate_report_path: Output path for unresolved duplicates.
        scored_results_path: Output path for the Scored Result table.
        scored_wide_path: Output path for the one-row-per-subject view.

    Returns:
        Dict with summary counts and paths to output files.
    """
    pipeline_start = datetime.now()
    sep = "=" * 70

    print(f"\n{sep}")
    print("SURVEY SCORING PIPELINE — START")
    print(f"  Exports: {export_dir}")
    print(f"  Rubrics: {rubric_dir}")
    print(f"{sep}\n")

    # ------------------------------------------------------------------
    # Step 1: Load raw exports
    # ------------------------------------------------------------------
    exports = {
        survey_name: load_survey_export(path)
        for survey_name, path in discover_survey_exports(export_dir).items()
    }

    # ------------------------------------------------------------------
    # Step 2: Reshape & Clean
    # ------------------------------------------------------------------
    cleaning = clean_survey_responses(
        exports,
        correction_table=_resolve_corrections(corrections_path),
        drop_list=drop_list,
    )
    long_df = cleaning.responses
    _save(long_df, long_responses_path, "Clean long table")
    _save(cleaning.duplicates, duplicate_report_path, "Duplicate report")

    # ------------------------------------------------------------------
    # Step 3: Rubrics
    # ------------------------------------------------------------------
    print(f"\n{'—'*50}")
    print("RUBRICS")
    print(f"{'—'*50}")
    rubrics = load_rubrics(rubric_dir, tolerance_overrides)

    # ------------------------------------------------------------------
    # Step 4: Coercion audit
    # ------------------------------------------------------------------
    print(f"\n{'—'*50}")
    print("COERCION AUDIT")
    print(f"{'—'*50}")
    numeric_items = rubric_numeric_items(rubrics, long_df[ITEM_NAME].unique())
    audit_df = audit_numeric_coercion(long_df, numeric_items)
    _save(audit_df, coercion_audit_path, "Coercion audit")

    # ------------------------------------------------------------------
    # Step 5: Scoring
    # ------------------------------------------------------------------
    print(f"\n{'—'*50}")
    print("SCORING")
    print(f"{'—'*50}")
    scored_df = score_responses(long_df, rubrics)
    _save(scored_df, scored_results_path, "Scored results")
    _save(pivot_scores(scored_df), scored_wide_path, "Scored wide table")

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    duration = (datetime.now() - pipeline_start).total_seconds()

    summary = {
        "n_surveys": len(exports),
        "n_records": len(long_df),
        "n_subjects": int(long_df["subject_id"].nunique()),
        "n_duplicate_conflicts": len(cleaning.duplicates),
        "n_uncoercible_pairs": len(audit_df),
        "n_scales": len(rubrics),
        "n_scored_rows": len(scored_df),
        "n_null_scores": int(scored_df["score"].isna().sum()),
        "duration_seconds": round(duration, 1),
        "output_files": {
            "long_responses": str(long_responses_path),
            "duplicate_report": str(duplicate_report_path),
            "coercion_audit": str(coercion_audit_path),
            "scored_results": str(scored_results_path),
            "scored_wide": str(scored_wide_path),
        },
    }

    print(f"\n{sep}")
    print("SURVEY SCORING PIPELINE — COMPLETE")
    print(f"  Duration:              {duration:.1f}s")
    print(f"  Surveys:               {summary['n_surveys']}")
    print(f"  Subjects:              {summary['n_subjects']}")
    print(f"  Duplicate conflicts:   {summary['n_duplicate_conflicts']}")
    print(f"  Uncoercible values:    {summary['n_uncoercible_pairs']}")
    print(f"  Scored rows:           {summary['n_scored_rows']:,} "
          f"({summary['n_null_scores']} null)")
    print(f"{sep}\n")

    return summary


if __name__ == "__main__":
    run_scoring_pipeline()
