"""
src/cleaning — Reshape & Clean stage for raw survey exports.

Module layout
-------------
config.py       — Path constants, long-table schema, re-exported parameters
coercion.py     — Numeric parsing shared by the audit and the scoring engine
reshape.py      — Export loading, identity resolution, wide ↔ long
filters.py      — Inclusion / exclusion ID filters, missing normalization
corrections.py  — Manual correction table, coercion audit
duplicates.py   — Duplicate detection, drop-list removal
pipeline.py     — Orchestrates the stage end-to-end

Public interface
----------------
Run the whole stage:
    clean_survey_responses(exports)

Run individual steps:
    resolve_subject_ids(wide_df)
    reshape_to_long(wide_df, survey_name)
    apply_inclusion_filter(long_df) / apply_exclusion_filter(long_df)
    normalize_missing_values(long_df)
    apply_manual_corrections(long_df, correction_table)
    drop_responses(long_df, response_ids)

Operator review reports:
    audit_numeric_coercion(long_df, numeric_items)
    find_duplicate_responses(long_df)
"""

from .pipeline import CleaningResult, clean_survey_responses

from .coercion import (
    coerce_numeric,
    flag_uncoercible,
    is_uncoercible,
    parse_number,
)
from .corrections import (
    apply_manual_corrections,
    audit_numeric_coercion,
    build_correction_table,
    load_manual_corrections,
)
from .duplicates import (
    count_responses_per_subject,
    drop_responses,
    find_duplicate_responses,
)
from .filters import (
    apply_exclusion_filter,
    apply_inclusion_filter,
    normalize_missing_values,
)
from .reshape import (
    derive_wave,
    discover_survey_exports,
    load_survey_export,
    pivot_to_wide,
    reshape_to_long,
    resolve_subject_ids,
    strip_export_header_rows,
)

__all__ = [
    # Stage orchestration
    "CleaningResult",
    "clean_survey_responses",
    # Coercion
    "coerce_numeric",
    "flag_uncoercible",
    "is_uncoercible",
    "parse_number",
    # Corrections & audit
    "apply_manual_corrections",
    "audit_numeric_coercion",
    "build_correction_table",
    "load_manual_corrections",
    # Duplicates
    "count_responses_per_subject",
    "drop_responses",
    "find_duplicate_responses",
    # Filters
    "apply_exclusion_filter",
    "apply_inclusion_filter",
    "normalize_missing_values",
    # Reshape
    "derive_wave",
    "discover_survey_exports",
    "load_survey_export",
    "pivot_to_wide",
    "reshape_to_long",
    "resolve_subject_ids",
    "strip_export_header_rows",
]
