"""Error taxonomy surfaced to API clients as the OpenAI-style error envelope."""
from __future__ import annotations
from typing import Any


class GatewayError(Exception):
    """Base error carrying the HTTP status and envelope fields."""

    status_code = 500
    error_type = "api_error"
    code: str | None = None

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_envelope(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message, "type": self.error_type}
        if self.code:
            body["code"] = self.code
        return {"error": body}


class InvalidRequestError(GatewayError):
    status_code = 400
    error_type = "invalid_request_error"


class AuthenticationError(GatewayError):
    status_code = 401
    error_type = "invalid_request_error"
    code = "invalid_api_key"


class NotFoundError(GatewayError):
    status_code = 404
    error_type = "invalid_request_error"
    code = "not_found"


class UpstreamError(GatewayError):
    """Upstream answered with a non-success status; the status is passed through."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"Upstream service error: {body}",
            status_code=status_code,
            code=f"upstream_{status_code}",
        )
        self.body = body


class BadGatewayError(GatewayError):
    status_code = 502


class UpstreamTransportError(BadGatewayError):
    """The upstream call failed at the network level."""


class UpstreamParseError(BadGatewayError):
    """The upstream body was not valid JSON."""


class UpstreamContractError(BadGatewayError):
    """The upstream body parsed but had no string ``summary``."""


class InternalServerError(GatewayError):
    code = "internal_server_error"
