"""
Survey-client configuration: endpoint, paging, and path constants.

Endpoint values are imported from config/survey_config.py (the authoritative
source) so they are maintained in one place.
"""

from pathlib import Path

from config.survey_config import (  # noqa: F401  (re-exported)
    PAGE_SIZE,
    REQUEST_TIMEOUT_SECONDS,
    SURVEY_API_BASE_URL,
    SURVEYS,
)

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Resolve from this file: src/survey_client/config.py → src → root
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = PROJECT_ROOT / "data"
RAW_EXPORTS_DIR = DATA_DIR / "raw"

# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------

API_TOKEN_HEADER = "X-API-TOKEN"

# responses endpoint, relative to SURVEY_API_BASE_URL
RESPONSES_PATH = "/surveys/{survey_id}/responses"

# Column written for each response's platform ID; matches
# config.pipeline_params.RESPONSE_ID_COLUMN.
RESPONSE_ID_FIELD = "ResponseId"
