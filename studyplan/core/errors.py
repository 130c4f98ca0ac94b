"""
Error Taxonomy

Typed errors shared by every layer. Services raise (or return inside a
result object) a `ServiceError` carrying an `ErrorKind`; user-facing
sentences are produced only at the API boundary by `user_message()`.
"""

from enum import Enum
from typing import Optional

from fastapi import status


class ErrorKind(str, Enum):
    """Category of a failure, independent of how it is presented."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    PROVIDER = "provider"
    PARSE = "parse"
    PERSISTENCE = "persistence"


class ProviderErrorCode(str, Enum):
    """Typed reason reported by the chat-completion provider."""
    INVALID_CREDENTIALS = "invalid_credentials"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    UNKNOWN = "unknown"


class ServiceError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class AuthenticationError(ServiceError):
    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(ServiceError):
    """Resource exists but is not owned by the caller (reported as not found)."""
    kind = ErrorKind.AUTHORIZATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class TransportError(ServiceError):
    kind = ErrorKind.TRANSPORT


class ParseError(ServiceError):
    kind = ErrorKind.PARSE


class PersistenceError(ServiceError):
    kind = ErrorKind.PERSISTENCE


class ProviderError(ServiceError):
    """Non-2xx response (or missing credentials) from the LLM provider."""
    kind = ErrorKind.PROVIDER

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: ProviderErrorCode = ProviderErrorCode.UNKNOWN,
        provider_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.provider_code = provider_code

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "code": self.code.value,
            "provider_code": self.provider_code,
        })
        return data


# ============================================================
# BOUNDARY MAPPING
# ============================================================

HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    # Foreign resources are indistinguishable from missing ones
    ErrorKind.AUTHORIZATION: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.TRANSPORT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.PROVIDER: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PARSE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

MSG_INVALID_CREDENTIALS = "OpenAI API key is invalid or missing. Please check your configuration."
MSG_QUOTA_EXCEEDED = "OpenAI API quota exceeded. Please check your billing settings."
MSG_RATE_LIMITED = "Too many requests. Please wait a moment and try again."
MSG_NETWORK = "Network error. Please check your internet connection and try again."
EXTRACTION_FAILED_PREFIX = "Topic extraction failed: "

_PROVIDER_MESSAGES = {
    ProviderErrorCode.INVALID_CREDENTIALS: MSG_INVALID_CREDENTIALS,
    ProviderErrorCode.QUOTA_EXCEEDED: MSG_QUOTA_EXCEEDED,
    ProviderErrorCode.RATE_LIMITED: MSG_RATE_LIMITED,
}


def http_status_for(error: ServiceError) -> int:
    """HTTP status code for a service error."""
    if isinstance(error, ProviderError) and error.code == ProviderErrorCode.RATE_LIMITED:
        return status.HTTP_429_TOO_MANY_REQUESTS
    return HTTP_STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def user_message(error: ServiceError) -> str:
    """
    Human-readable sentence for an error.

    Provider and transport failures get fixed sentences; everything
    else is shown with its own message.
    """
    if isinstance(error, ProviderError):
        fixed = _PROVIDER_MESSAGES.get(error.code)
        if fixed:
            return fixed
        return f"{EXTRACTION_FAILED_PREFIX}{error.message}"
    if error.kind == ErrorKind.TRANSPORT:
        return MSG_NETWORK
    return error.message


def classify_error_message(message: Optional[str]) -> str:
    """
    Map an untyped error message to a user sentence by substring match.

    Only used for exceptions that carry no typed code (anything that
    escaped the transport layer's classification).
    """
    text = message or "Unknown error"
    lowered = text.lower()

    if "api key" in lowered:
        return MSG_INVALID_CREDENTIALS
    if "quota" in lowered or "billing" in lowered:
        return MSG_QUOTA_EXCEEDED
    if "rate limit" in lowered:
        return MSG_RATE_LIMITED
    if "network" in lowered or "fetch" in lowered or "connect" in lowered:
        return MSG_NETWORK
    return f"{EXTRACTION_FAILED_PREFIX}{text}"
