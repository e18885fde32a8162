"""
src/survey_client — Survey platform retrieval layer.

Module layout
-------------
config.py  — Endpoint, paging, path constants (from config/survey_config.py)
parser.py  — Page envelope parsing, response elements → wide export table
client.py  — Paginated GET, CSV export into the raw export directory

Public interface
----------------
Export every configured survey:
    export_configured_surveys(api_token)

Export one survey:
    export_survey_responses(survey_id, survey_name, api_token)
"""

from .client import (
    build_request_headers,
    export_configured_surveys,
    export_survey_responses,
    fetch_survey_responses,
)
from .parser import extract_response_elements, responses_to_wide_frame

__all__ = [
    "build_request_headers",
    "export_configured_surveys",
    "export_survey_responses",
    "fetch_survey_responses",
    "extract_response_elements",
    "responses_to_wide_frame",
]
