"""Typed failures raised by the document submission pipeline."""


class CrptApiError(Exception):
    """Base class for every failure surfaced by the CRPT client."""


class ClientError(CrptApiError):
    """Raised when the registry rejects a request as the caller's fault (4xx)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ServerError(CrptApiError):
    """Raised when the registry fails to process a request (5xx)."""

    def __init__(self, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"Server error (status {status_code})")


class TransportError(CrptApiError):
    """Raised when no usable response was obtained from the registry."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Transport error: {reason}")
