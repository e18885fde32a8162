"""
Survey platform endpoint and request configuration.

The API token is NOT configured here.  Callers pass it explicitly to
src.survey_client.export_survey_responses; this package never reads or
stores credentials.

SURVEYS maps the survey_name used throughout the pipeline (and as the raw
export file stem) to the platform's survey ID.
"""

from __future__ import annotations

# Base URL of the platform's v3 REST API (datacenter-specific host).
SURVEY_API_BASE_URL: str = "https://yul1.qualtrics.com/API/v3"

# survey_name → platform survey ID
SURVEYS: dict[str, str] = {
    # "Mood Wave 1": "SV_0000000000000000",
}

PAGE_SIZE: int = 100
REQUEST_TIMEOUT_SECONDS: int = 60
