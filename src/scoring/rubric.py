"""
Rubric model: parse flat rubric tables into per-scale Rubric records.

A rubric table has one row per (scale_name, item_name).  It is parsed once
into ``dict[scale_name, Rubric]``; the scoring engine never re-reads the
flat table.

Item entries may be:
- a literal item name:         ``MOOD_1``
- a shell-style wildcard:      ``CVS_*`` or ``M[1-3]``
- a regular expression:        ``re:PSS_(?:[1-9]|10)``

Patterns are resolved against the item names actually present in a survey
(:meth:`Rubric.resolve_items`), so the same rubric can score exports whose
item sets differ slightly between waves.
"""

from __future__ import annotations

import fnmatch
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from .config import (
    DEFAULT_MISSING_TOLERANCE,
    FALSE_VALUES,
    METHOD_ALIASES,
    METHOD_PASSTHROUGH,
    METHODS,
    MISSING_TOLERANCE_OVERRIDES,
    REGEX_ITEM_PREFIX,
    RUBRIC_FILE_EXTENSIONS,
    RUBRIC_FILE_SUFFIX,
    RUBRIC_REQUIRED_COLUMNS,
    RUBRIC_SCALE_COLUMNS,
    RUBRICS_DIR,
    SUBSCALE_SEPARATOR,
    TRUE_VALUES,
)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RubricItem:
    """One rubric row: an item name or pattern and its scoring flags."""

    pattern: str
    reverse: bool = False
    subscales: tuple[str, ...] = ()

    @property
    def is_literal(self) -> bool:
        return not self.pattern.startswith(REGEX_ITEM_PREFIX) and not any(
            ch in self.pattern for ch in "*?["
        )

    def matches(self, item_name: str) -> bool:
        if self.pattern.startswith(REGEX_ITEM_PREFIX):
            return re.fullmatch(self.pattern[len(REGEX_ITEM_PREFIX):], item_name) is not None
        if self.is_literal:
            return item_name == self.pattern
        return fnmatch.fnmatchcase(item_name, self.pattern)


@dataclass(frozen=True)
class Rubric:
    """Scoring rules for one scale."""

    scale_name: str
    items: tuple[RubricItem, ...]
    method: str
    subscales: tuple[str, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    missing_tolerance: float = DEFAULT_MISSING_TOLERANCE
    include_total: bool = False

    @property
    def reverse_items(self) -> tuple[str, ...]:
        return tuple(item.pattern for item in self.items if item.reverse)

    @property
    def is_numeric(self) -> bool:
        return self.method != METHOD_PASSTHROUGH

    def numeric_item_patterns(self) -> tuple[str, ...]:
        """Item entries whose values must parse as numbers (none for passthrough)."""
        if not self.is_numeric:
            return ()
        return tuple(item.pattern for item in self.items)

    def resolve_items(self, available: Iterable[str]) -> dict[str, RubricItem]:
        """
        Map concrete item names to the rubric row that claims them.

        Literal item names always resolve, present in the survey or not, so
        an absent item is scored as missing.  Wildcard and regex entries
        resolve to the matching names in ``available``, in that order.
        Output follows rubric row order; an item matched by several rows is
        claimed by the first.

        Args:
            available: Item names present in the survey.

        Returns:
            Ordered dict of item_name → RubricItem.
        """
        names = list(dict.fromkeys(available))
        resolved: dict[str, RubricItem] = {}
        for rubric_item in self.items:
            if rubric_item.is_literal:
                resolved.setdefault(rubric_item.pattern, rubric_item)
                continue
            for name in names:
                if name not in resolved and rubric_item.matches(name):
                    resolved[name] = rubric_item
        return resolved

    def applies_to(self, available: Iterable[str]) -> bool:
        """True when at least one rubric entry matches an item in ``available``."""
        names = list(dict.fromkeys(available))
        return any(item.matches(name) for item in self.items for name in names)

    def partitions(self, available: Iterable[str]) -> list[tuple[str, list[str]]]:
        """
        Split the resolved items into scored partitions.

        Without subscales the whole scale is the only partition.  With
        subscales there is one partition per subscale in declaration order,
        preceded by the whole scale when ``include_total`` is set.

        Args:
            available: Item names present in the survey.

        Returns:
            List of (scored_scale, item_names).
        """
        resolved = self.resolve_items(available)
        if not self.subscales:
            return [(self.scale_name, list(resolved))]

        parts: list[tuple[str, list[str]]] = []
        if self.include_total:
            parts.append((self.scale_name, list(resolved)))
        for subscale in self.subscales:
            parts.append((
                subscale,
                [name for name, item in resolved.items() if subscale in item.subscales],
            ))
        return parts

    def exceeds_tolerance(self, n_missing: int, n_items: int) -> bool:
        """
        Decide whether a partition has too many missing items to score.

        A tolerance below 1 is a proportion of the partition's items;
        otherwise it is a count.
        """
        tolerance = self.missing_tolerance
        if 0 < tolerance < 1:
            return n_missing > tolerance * n_items
        return n_missing > tolerance


def reverse_value(value: float, min_value: float, max_value: float) -> float:
    """
    Reverse-code a value on a [min_value, max_value] scale.

    ``(max + min) - value`` is its own inverse for fixed bounds.

    Args:
        value: Numeric item value.
        min_value: Lowest response option.
        max_value: Highest response option.

    Returns:
        Reverse-coded value.
    """
    return (max_value + min_value) - value


# ---------------------------------------------------------------------------
# Table parsing
# ---------------------------------------------------------------------------

def _cell(value) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).strip()


def _parse_flag(raw: str, column: str, scale_name: str) -> bool:
    token = raw.lower()
    if token in TRUE_VALUES:
        return True
    if token in FALSE_VALUES:
        return False
    raise ValueError(
        f"Rubric '{scale_name}': cannot read {column} value '{raw}' as yes/no."
    )


def _parse_float(raw: str, column: str, scale_name: str) -> float | None:
    if raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            f"Rubric '{scale_name}': {column} value '{raw}' is not a number."
        ) from None


def _scale_level_value(scale_rows: pd.DataFrame, column: str, scale_name: str) -> str:
    """Single non-blank value of a scale-level column ("" if absent)."""
    if column not in scale_rows.columns:
        return ""
    values = list(dict.fromkeys(v for v in scale_rows[column].map(_cell) if v != ""))
    if len(values) > 1:
        raise ValueError(
            f"Rubric '{scale_name}': conflicting {column} values {values}. "
            "Scale-level columns must agree on every row."
        )
    return values[0] if values else ""


def _normalize_method(raw: str, scale_name: str) -> str:
    method = raw.lower()
    method = METHOD_ALIASES.get(method, method)
    if method not in METHODS:
        raise ValueError(
            f"Rubric '{scale_name}': unknown method '{raw}'. "
            f"Expected one of {sorted(METHODS)}."
        )
    return method


def _validate_tolerance(tolerance: float, scale_name: str) -> float:
    if tolerance < 0 or (tolerance > 1 and not float(tolerance).is_integer()):
        raise ValueError(
            f"Rubric '{scale_name}': missing_tolerance {tolerance} must be a "
            "proportion below 1 or a whole number of items."
        )
    return tolerance


def _build_rubric(
    scale_name: str,
    scale_rows: pd.DataFrame,
    tolerance_override: float | None,
) -> Rubric:
    scale_values = {
        column: _scale_level_value(scale_rows, column, scale_name)
        for column in RUBRIC_SCALE_COLUMNS
    }

    method_raw = scale_values["method"]
    if not method_raw:
        raise ValueError(f"Rubric '{scale_name}': no scoring method given.")
    method = _normalize_method(method_raw, scale_name)

    min_value = _parse_float(scale_values["min_value"], "min_value", scale_name)
    max_value = _parse_float(scale_values["max_value"], "max_value", scale_name)
    if min_value is not None and max_value is not None and min_value >= max_value:
        raise ValueError(
            f"Rubric '{scale_name}': min_value {min_value} must be below max_value {max_value}."
        )

    if tolerance_override is not None:
        tolerance = float(tolerance_override)
    else:
        tolerance = _parse_float(
            scale_values["missing_tolerance"], "missing_tolerance", scale_name
        )
        if tolerance is None:
            tolerance = DEFAULT_MISSING_TOLERANCE
    tolerance = _validate_tolerance(tolerance, scale_name)

    include_total = _parse_flag(scale_values["include_total"], "include_total", scale_name)

    items: list[RubricItem] = []
    subscales: list[str] = []
    seen: set[str] = set()
    for _, row in scale_rows.iterrows():
        pattern = _cell(row["item_name"])
        if not pattern:
            raise ValueError(f"Rubric '{scale_name}': row with blank item_name.")
        if pattern in seen:
            raise ValueError(f"Rubric '{scale_name}': item '{pattern}' listed twice.")
        seen.add(pattern)

        reverse = _parse_flag(_cell(row.get("reverse", "")), "reverse", scale_name)
        item_subscales = tuple(
            s.strip()
            for s in _cell(row.get("subscale", "")).split(SUBSCALE_SEPARATOR)
            if s.strip()
        )
        for subscale in item_subscales:
            if subscale == scale_name:
                raise ValueError(
                    f"Rubric '{scale_name}': subscale '{subscale}' has the same name "
                    "as its scale."
                )
            if subscale not in subscales:
                subscales.append(subscale)
        items.append(RubricItem(pattern=pattern, reverse=reverse, subscales=item_subscales))

    if any(item.reverse for item in items):
        if method == METHOD_PASSTHROUGH:
            raise ValueError(
                f"Rubric '{scale_name}': passthrough scales cannot reverse-code items."
            )
        if min_value is None or max_value is None:
            raise ValueError(
                f"Rubric '{scale_name}': reverse-coded items need min_value and max_value."
            )

    return Rubric(
        scale_name=scale_name,
        items=tuple(items),
        method=method,
        subscales=tuple(subscales),
        min_value=min_value,
        max_value=max_value,
        missing_tolerance=tolerance,
        include_total=include_total,
    )


def parse_rubric_table(
    rubric_df: pd.DataFrame,
    tolerance_overrides: Mapping[str, float] = MISSING_TOLERANCE_OVERRIDES,
) -> dict[str, Rubric]:
    """
    Parse a flat rubric table into one Rubric per scale.

    Column names are matched case-insensitively.  Optional columns:
    reverse, subscale, min_value, max_value, missing_tolerance,
    include_total.

    Args:
        rubric_df: One row per (scale_name, item_name).
        tolerance_overrides: scale_name → missing tolerance, replacing the
            table's value.

    Returns:
        Dict of scale_name → Rubric, in first-appearance order.

    Raises:
        ValueError: Required columns missing, or a scale's rows are
            inconsistent or invalid.
    """
    table = rubric_df.copy()
    table.columns = [str(c).strip().lower() for c in table.columns]

    missing = [c for c in RUBRIC_REQUIRED_COLUMNS if c not in table.columns]
    if missing:
        raise ValueError(
            f"Rubric table is missing required columns: {missing}. "
            f"Columns present: {list(table.columns)}"
        )

    table["scale_name"] = table["scale_name"].map(_cell)
    if (table["scale_name"] == "").any():
        raise ValueError("Rubric table has rows with a blank scale_name.")

    rubrics: dict[str, Rubric] = {}
    for scale_name in table["scale_name"].unique():
        scale_rows = table[table["scale_name"] == scale_name]
        rubrics[scale_name] = _build_rubric(
            scale_name, scale_rows, tolerance_overrides.get(scale_name)
        )
    return rubrics


# ---------------------------------------------------------------------------
# Rubric files
# ---------------------------------------------------------------------------

def discover_rubric_files(rubric_dir: Path = RUBRICS_DIR) -> list[Path]:
    """
    Find ``<measure>_scoring_rubric.csv|.tsv`` files in a directory.

    Args:
        rubric_dir: Directory containing rubric files.

    Returns:
        Sorted list of rubric file paths.

    Raises:
        FileNotFoundError: Directory missing or holds no rubric files.
    """
    if not rubric_dir.is_dir():
        raise FileNotFoundError(f"Rubric directory not found: {rubric_dir}")

    paths = sorted(
        path
        for ext in RUBRIC_FILE_EXTENSIONS
        for path in rubric_dir.glob(f"*{RUBRIC_FILE_SUFFIX}{ext}")
    )
    if not paths:
        raise FileNotFoundError(
            f"No rubric files found in {rubric_dir}.\n"
            f"Expected: <measure>{RUBRIC_FILE_SUFFIX}.csv"
        )
    return paths


def load_rubric_file(
    path: Path,
    tolerance_overrides: Mapping[str, float] = MISSING_TOLERANCE_OVERRIDES,
) -> dict[str, Rubric]:
    """
    Load and parse one rubric file.

    A single-scale file may omit the scale_name column; the measure name
    from the file name is used instead.

    Args:
        path: Rubric CSV or TSV.
        tolerance_overrides: Passed to :func:`parse_rubric_table`.

    Returns:
        Dict of scale_name → Rubric.
    """
    sep = RUBRIC_FILE_EXTENSIONS.get(path.suffix.lower(), ",")
    rubric_df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False)

    if "scale_name" not in {str(c).strip().lower() for c in rubric_df.columns}:
        rubric_df["scale_name"] = path.stem.removesuffix(RUBRIC_FILE_SUFFIX)

    try:
        return parse_rubric_table(rubric_df, tolerance_overrides)
    except ValueError as exc:
        raise ValueError(f"{path.name}: {exc}") from exc


def load_rubrics(
    rubric_dir: Path = RUBRICS_DIR,
    tolerance_overrides: Mapping[str, float] = MISSING_TOLERANCE_OVERRIDES,
) -> dict[str, Rubric]:
    """
    Load every rubric file in a directory into one scale → Rubric mapping.

    Args:
        rubric_dir: Directory containing rubric files.
        tolerance_overrides: Passed to :func:`parse_rubric_table`.

    Returns:
        Dict of scale_name → Rubric across all files.

    Raises:
        ValueError: The same scale is defined in two files.
    """
    rubrics: dict[str, Rubric] = {}
    for path in discover_rubric_files(rubric_dir):
        for scale_name, rubric in load_rubric_file(path, tolerance_overrides).items():
            if scale_name in rubrics:
                raise ValueError(
                    f"Scale '{scale_name}' is defined in more than one rubric file "
                    f"(second definition in {path.name})."
                )
            rubrics[scale_name] = rubric
        print(f"Rubric loaded: {path.name}")

    print(f"  Scales: {len(rubrics)} ({', '.join(rubrics)})")
    return rubrics


def rubric_numeric_items(
    rubrics: Mapping[str, Rubric],
    available: Iterable[str],
) -> list[str]:
    """
    Item names that some non-passthrough rubric expects to be numeric.

    Args:
        rubrics: scale_name → Rubric.
        available: Item names present in the response table.

    Returns:
        Sorted list of item names.
    """
    names = list(dict.fromkeys(available))
    numeric: set[str] = set()
    for rubric in rubrics.values():
        for pattern in rubric.numeric_item_patterns():
            entry = RubricItem(pattern)
            numeric.update(name for name in names if entry.matches(name))
    return sorted(numeric)
