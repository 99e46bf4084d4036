"""Pytest configuration and fixtures."""

from collections.abc import Callable

import httpx
import pytest

from crpt_api.models import Description, DocumentPayload, Product


class FakeClock:
    """Manually advanced time source for deterministic limiter tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRegistry:
    """
    Stand-in for the registry behind an httpx.MockTransport.

    Records every request and answers with a configurable status and body.
    """

    def __init__(self, status_code: int = 200, body: object | None = None) -> None:
        self.status_code = status_code
        self.body = {"id": "doc-1"} if body is None else body
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        """Transport usable by both sync and async httpx clients."""
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock() -> FakeClock:
    """A frozen clock that tests advance explicitly."""
    return FakeClock()


@pytest.fixture
def registry() -> FakeRegistry:
    """A registry that accepts every document."""
    return FakeRegistry()


@pytest.fixture
def make_registry() -> Callable[..., FakeRegistry]:
    """Factory for registries with custom responses."""
    return FakeRegistry


@pytest.fixture
def sample_payload() -> DocumentPayload:
    """A filled-in document payload."""
    return DocumentPayload(
        description=Description(participantInn="7701234567"),
        doc_id="d-42",
        doc_status="DRAFT",
        doc_type="LP_INTRODUCE_GOODS",
        importRequest=True,
        owner_inn="7701234567",
        participant_inn="7701234567",
        producer_inn="7707654321",
        production_date="2024-01-15",
        production_type="OWN_PRODUCTION",
        products=[
            Product(
                certificate_document="CONFORMITY_CERTIFICATE",
                certificate_document_date="2023-12-01",
                certificate_document_number="RU-123",
                owner_inn="7701234567",
                producer_inn="7707654321",
                production_date="2024-01-15",
                tnved_code="6403",
                uit_code="010460043993125621JgXJ5.T",
                uitu_code=None,
            )
        ],
        reg_date="2024-01-16",
        reg_number="R-1",
    )
