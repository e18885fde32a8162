"""
Numeric coercion checks for survey item values.

No I/O occurs here; all functions are pure transformations so the scoring
engine and the coercion audit share exactly one definition of "numeric".

A value is coercible when, after stripping whitespace, ``float()`` parses it
to a finite number.  Missing values (None, NaN, pd.NA) are never reported as
uncoercible — they are missing, which is a different failure.
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd


def is_missing(value) -> bool:
    """
    Return True for None, NaN, and pd.NA.

    Args:
        value: Any cell value from the long table.

    Returns:
        True if the value is an explicit missing marker.
    """
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def parse_number(value) -> float:
    """
    Parse a raw item value as a finite float.

    Args:
        value: Raw value (usually text from a CSV export).

    Returns:
        The parsed number, or ``nan`` if the value is missing, unparseable,
        or infinite.
    """
    if is_missing(value):
        return np.nan
    if isinstance(value, (bool, np.bool_)):
        # "True"/"False" checkbox exports are categorical, not 1/0
        return np.nan
    try:
        number = float(str(value).strip())
    except ValueError:
        return np.nan
    return number if math.isfinite(number) else np.nan


def is_uncoercible(value) -> bool:
    """
    Return True for a non-missing value that cannot be parsed as a number.

    Args:
        value: Raw item value.

    Returns:
        True if the value is present but not numeric.
    """
    if is_missing(value):
        return False
    return math.isnan(parse_number(value))


def coerce_numeric(values: pd.Series) -> pd.Series:
    """
    Coerce a Series of raw values to float, failures becoming NaN.

    Args:
        values: Series of raw item values.

    Returns:
        float64 Series aligned to the input index.
    """
    return values.map(parse_number).astype(float)


def flag_uncoercible(values: pd.Series) -> pd.Series:
    """
    Flag present-but-non-numeric values.

    Args:
        values: Series of raw item values.

    Returns:
        Boolean Series aligned to the input index.
    """
    return values.map(is_uncoercible).astype(bool)
