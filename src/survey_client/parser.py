"""
Response payload parsing for the survey platform API.

No I/O occurs here; all functions are pure transformations of decoded JSON
to support easy unit testing.

Expected page envelope::

    {"result": {"elements": [...], "nextPage": "https://..." | null},
     "meta": {"httpStatus": "200 - OK"}}

Each element::

    {"responseId": "R_abc", "values": {"SID": "FP001", "M1": 4, ...},
     "labels": {...}}
"""

from __future__ import annotations

import pandas as pd

from .config import RESPONSE_ID_FIELD


def extract_response_elements(payload: dict) -> tuple[list[dict], str | None]:
    """
    Pull the response elements and next-page URL out of one page.

    Args:
        payload: JSON-decoded page.

    Returns:
        Tuple of (elements, next_page_url or None).

    Raises:
        ValueError: The payload has no ``result.elements`` list.
    """
    result = payload.get("result")
    if not isinstance(result, dict) or not isinstance(result.get("elements"), list):
        raise ValueError(
            "Unrecognized survey API page format. "
            f"Top-level keys present: {list(payload.keys())}"
        )
    return result["elements"], result.get("nextPage") or None


def _cell_text(value) -> str:
    """Render one answer as export text (multi-select lists joined by ',')."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, list):
        return ",".join(_cell_text(v) for v in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def responses_to_wide_frame(elements: list[dict]) -> pd.DataFrame:
    """
    Convert response elements into a wide, all-text export table.

    One row per response, ``ResponseId`` first, then every answered field
    in first-seen order.  Display labels are ignored; unanswered fields
    become "" exactly as in a CSV export.

    Args:
        elements: Response elements from :func:`extract_response_elements`.

    Returns:
        Wide DataFrame of strings.
    """
    rows: list[dict] = []
    for element in elements:
        row = {RESPONSE_ID_FIELD: _cell_text(element.get("responseId"))}
        for field, value in (element.get("values") or {}).items():
            row[field] = _cell_text(value)
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=[RESPONSE_ID_FIELD])

    columns = list(dict.fromkeys(field for row in rows for field in row))
    return pd.DataFrame(rows, columns=columns).fillna("")
