"""Pydantic models for the document registry API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Description(BaseModel):
    """Document description block."""

    participantInn: str | None = None


class Product(BaseModel):
    """A single product line of a document."""

    certificate_document: str | None = None
    certificate_document_date: str | None = None
    certificate_document_number: str | None = None
    owner_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    tnved_code: str | None = None
    uit_code: str | None = None
    uitu_code: str | None = None


class DocumentPayload(BaseModel):
    """
    Body of a document creation request.

    Field names match the registry's wire format and are sent verbatim.
    Unset fields are serialized as null.
    """

    description: Description | None = None
    doc_id: str | None = None
    doc_status: str | None = None
    doc_type: str | None = None
    importRequest: bool = False
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    production_type: str | None = None
    products: list[Product] = Field(default_factory=list)
    reg_date: str | None = None
    reg_number: str | None = None

    def to_json(self) -> dict[str, Any]:
        """JSON-ready representation for the transport."""
        return self.model_dump(mode="json")


class DocumentCreated(BaseModel):
    """Successful response to a document creation request."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None


class ErrorResponse(BaseModel):
    """Error body returned by the registry (Spring default error attributes)."""

    model_config = ConfigDict(extra="ignore")

    message: str | None = None
    trace: str | None = None
    requestId: str | None = None
    status: int | None = None
    path: str | None = None
