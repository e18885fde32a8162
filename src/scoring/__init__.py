"""
src/scoring — Rubric-driven scale scoring for clean survey responses.

Module layout
-------------
config.py    — Rubric conventions, scoring methods, output schema, paths
rubric.py    — Rubric records, rubric table parsing, rubric file discovery
engine.py    — Partition scoring, batch scoring, wide score view
pipeline.py  — Orchestrates exports → clean → audit → score end-to-end

Public interface
----------------
Run the full batch:
    run_scoring_pipeline()

Score an already-clean long table:
    rubrics = load_rubrics(rubric_dir)       # or parse_rubric_table(df)
    scored_df = score_responses(long_df, rubrics)
    wide_df = pivot_scores(scored_df)
"""

from .pipeline import run_scoring_pipeline

from .engine import (
    pivot_scores,
    score_partition,
    score_responses,
    score_subject,
)
from .rubric import (
    Rubric,
    RubricItem,
    discover_rubric_files,
    load_rubric_file,
    load_rubrics,
    parse_rubric_table,
    reverse_value,
    rubric_numeric_items,
)

__all__ = [
    # Pipeline orchestration
    "run_scoring_pipeline",
    # Engine
    "pivot_scores",
    "score_partition",
    "score_responses",
    "score_subject",
    # Rubric model
    "Rubric",
    "RubricItem",
    "discover_rubric_files",
    "load_rubric_file",
    "load_rubrics",
    "parse_rubric_table",
    "reverse_value",
    "rubric_numeric_items",
]
