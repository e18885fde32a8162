"""
Survey platform HTTP client: paginated response retrieval and CSV export.

Design notes:
- The API token is always passed in by the caller; nothing here reads
  environment variables or stores credentials.
- There is no retry layer.  A failed page raises requests.HTTPError and the
  caller re-runs the export; partial exports are never written.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import requests

from .config import (
    API_TOKEN_HEADER,
    PAGE_SIZE,
    RAW_EXPORTS_DIR,
    REQUEST_TIMEOUT_SECONDS,
    RESPONSES_PATH,
    SURVEY_API_BASE_URL,
    SURVEYS,
)
from .parser import extract_response_elements, responses_to_wide_frame


def build_request_headers(api_token: str) -> dict:
    """
    Construct HTTP authentication headers for an API call.

    Args:
        api_token: Platform API token supplied by the caller.

    Returns:
        Dict of HTTP header name → value pairs.

    Raises:
        ValueError: The token is empty.
    """
    if not api_token:
        raise ValueError("An API token is required to fetch survey responses.")
    return {
        API_TOKEN_HEADER: api_token,
        "Accept": "application/json",
    }


def fetch_survey_responses(
    survey_id: str,
    api_token: str,
    base_url: str = SURVEY_API_BASE_URL,
    page_size: int = PAGE_SIZE,
    timeout: int = REQUEST_TIMEOUT_SECONDS,
) -> list[dict]:
    """
    Retrieve every response element for a survey, following nextPage links.

    Args:
        survey_id: Platform survey ID.
        api_token: Platform API token.
        base_url: API base URL.
        page_size: Responses requested per page.
        timeout: Per-request timeout in seconds.

    Returns:
        List of response element dicts across all pages.

    Raises:
        requests.HTTPError: Any page returns a non-2xx status.
        ValueError: A page is not in the expected envelope.
    """
    headers = build_request_headers(api_token)
    url: str | None = base_url.rstrip("/") + RESPONSES_PATH.format(survey_id=survey_id)
    params: dict | None = {"limit": page_size}

    elements: list[dict] = []
    n_pages = 0
    while url:
        response = requests.get(url, headers=headers, params=params, timeout=timeout)
        response.raise_for_status()
        page_elements, url = extract_response_elements(response.json())
        elements.extend(page_elements)
        n_pages += 1
        params = None  # nextPage URLs carry their own query string

    print(f"  Fetched {len(elements)} responses for {survey_id} ({n_pages} pages)")
    return elements


def export_survey_responses(
    survey_id: str,
    survey_name: str,
    api_token: str,
    output_dir: Path = RAW_EXPORTS_DIR,
    base_url: str = SURVEY_API_BASE_URL,
) -> Path:
    """
    Fetch a survey's responses and write them as ``<survey_name>.csv``.

    The file lands in the raw export directory the cleaning stage reads, so
    the survey_name chosen here is the survey_name used downstream.

    Args:
        survey_id: Platform survey ID.
        survey_name: Pipeline name for the survey (wave marker included).
        api_token: Platform API token.
        output_dir: Raw export directory.
        base_url: API base URL.

    Returns:
        Path of the written CSV.
    """
    elements = fetch_survey_responses(survey_id, api_token, base_url=base_url)
    wide_df: pd.DataFrame = responses_to_wide_frame(elements)

    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{survey_name}.csv"
    wide_df.to_csv(output_path, index=False)
    print(f"  Export written: {output_path} ({len(wide_df)} rows)")
    return output_path


def export_configured_surveys(
    api_token: str,
    surveys: dict[str, str] | None = None,
    output_dir: Path = RAW_EXPORTS_DIR,
    base_url: str = SURVEY_API_BASE_URL,
) -> dict[str, Path]:
    """
    Export every survey in a survey_name → survey_id mapping.

    Args:
        api_token: Platform API token.
        surveys: survey_name → survey ID; defaults to config SURVEYS.
        output_dir: Raw export directory.
        base_url: API base URL.

    Returns:
        Dict of survey_name → written CSV path.
    """
    surveys = SURVEYS if surveys is None else surveys
    sep = "=" * 60
    print(f"\n{sep}")
    print(f"SURVEY EXPORT — {len(surveys)} surveys")
    print(f"{sep}")

    paths: dict[str, Path] = {}
    for survey_name, survey_id in surveys.items():
        print(f"\n{survey_name} ({survey_id})")
        paths[survey_name] = export_survey_responses(
            survey_id, survey_name, api_token, output_dir=output_dir, base_url=base_url
        )
    return paths
