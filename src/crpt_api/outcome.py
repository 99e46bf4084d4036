"""Submission outcomes and registry response classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import httpx
from pydantic import ValidationError

from crpt_api.errors import ClientError, ServerError, TransportError
from crpt_api.models import DocumentCreated, ErrorResponse

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """Non-failure result of a submission attempt."""

    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of one submission attempt."""

    outcome: Outcome
    """Whether the document was accepted or the local quota denied it."""

    response: DocumentCreated | None = None
    """Decoded registry response (only set on success)."""

    @classmethod
    def success(cls, response: DocumentCreated) -> SubmissionOutcome:
        return cls(outcome=Outcome.SUCCESS, response=response)

    @classmethod
    def rate_limited(cls) -> SubmissionOutcome:
        return cls(outcome=Outcome.RATE_LIMITED)

    @property
    def is_success(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def is_rate_limited(self) -> bool:
        return self.outcome is Outcome.RATE_LIMITED


def _client_error_message(response: httpx.Response) -> str:
    """Extract the registry's message from a 4xx body."""
    try:
        error = ErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.debug(f"Undecodable error body for status {response.status_code}: {e}")
        return response.reason_phrase
    return error.message or response.reason_phrase


def classify_response(response: httpx.Response) -> SubmissionOutcome:
    """
    Map a registry response to an outcome or a typed failure.

    Args:
        response: Response to a document creation request

    Returns:
        SubmissionOutcome with the decoded body for 2xx responses (an empty
        body decodes to an empty DocumentCreated)

    Raises:
        ClientError: 4xx, carrying the registry's message
        ServerError: 5xx
        TransportError: 2xx with an undecodable body, or an unexpected status
    """
    status = response.status_code

    if response.is_success:
        if not response.content:
            return SubmissionOutcome.success(DocumentCreated())
        try:
            body = DocumentCreated.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(f"Malformed success body: {e}") from e
        return SubmissionOutcome.success(body)

    if response.is_client_error:
        message = _client_error_message(response)
        logger.warning(f"Registry rejected document ({status}): {message}")
        raise ClientError(message, status_code=status)

    if response.is_server_error:
        logger.error(f"Registry server error ({status})")
        raise ServerError(status_code=status)

    raise TransportError(f"Unexpected status {status}")
