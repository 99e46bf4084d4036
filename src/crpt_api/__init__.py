"""
CRPT registry client.

Submits documents to the CRPT document registry while enforcing a local
request quota per rolling time window.
"""

from crpt_api.api import CREATE_DOCUMENT_PATH, CrptApi, SyncCrptApi
from crpt_api.errors import ClientError, CrptApiError, ServerError, TransportError
from crpt_api.models import (
    Description,
    DocumentCreated,
    DocumentPayload,
    ErrorResponse,
    Product,
)
from crpt_api.outcome import Outcome, SubmissionOutcome, classify_response
from crpt_api.quota import SlidingWindowLimiter, TimeUnit, WindowConfig

__version__ = "0.1.0"
__all__ = [
    "CREATE_DOCUMENT_PATH",
    "ClientError",
    "CrptApi",
    "CrptApiError",
    "Description",
    "DocumentCreated",
    "DocumentPayload",
    "ErrorResponse",
    "Outcome",
    "Product",
    "ServerError",
    "SlidingWindowLimiter",
    "SubmissionOutcome",
    "SyncCrptApi",
    "TimeUnit",
    "TransportError",
    "WindowConfig",
    "classify_response",
]
