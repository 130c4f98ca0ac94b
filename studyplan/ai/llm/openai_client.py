"""
OpenAI-compatible Chat Completion Client

Thin async client for the `/chat/completions` endpoint using httpx.

One request per call; no retries, no streaming. Failures are raised as
typed errors from `studyplan.core.errors`:
- missing key / non-2xx response -> ProviderError (with ProviderErrorCode)
- connection problems, timeouts   -> TransportError
- 2xx body that is not JSON        -> ParseError
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from studyplan.core.config import settings
from studyplan.core.errors import (
    ParseError,
    ProviderError,
    ProviderErrorCode,
    TransportError,
)

logger = logging.getLogger(__name__)


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

_CODE_BY_PROVIDER_CODE = {
    "invalid_api_key": ProviderErrorCode.INVALID_CREDENTIALS,
    "invalid_authentication": ProviderErrorCode.INVALID_CREDENTIALS,
    "insufficient_quota": ProviderErrorCode.QUOTA_EXCEEDED,
    "billing_hard_limit_reached": ProviderErrorCode.QUOTA_EXCEEDED,
    "rate_limit_exceeded": ProviderErrorCode.RATE_LIMITED,
}


def classify_provider_error(
    status_code: int,
    provider_code: Optional[str] = None,
    provider_type: Optional[str] = None,
) -> ProviderErrorCode:
    """
    Typed reason for a failed provider response.

    Status code decides first; the provider's own `code` / `type`
    fields are only consulted when the status is not conclusive.
    """
    hints = {h for h in (provider_code, provider_type) if h}

    if status_code in (401, 403):
        return ProviderErrorCode.INVALID_CREDENTIALS
    if status_code == 429:
        if "insufficient_quota" in hints:
            return ProviderErrorCode.QUOTA_EXCEEDED
        return ProviderErrorCode.RATE_LIMITED

    for hint in (provider_code, provider_type):
        if hint in _CODE_BY_PROVIDER_CODE:
            return _CODE_BY_PROVIDER_CODE[hint]
    return ProviderErrorCode.UNKNOWN


def _error_details(response: httpx.Response) -> Dict[str, Optional[str]]:
    """Best-effort read of `{"error": {"message", "code", "type"}}`."""
    try:
        body = response.json()
    except ValueError:
        return {"message": None, "code": None, "type": None}

    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return {"message": None, "code": None, "type": None}

    def _str(value: Any) -> Optional[str]:
        return value if isinstance(value, str) and value else None

    return {
        "message": _str(error.get("message")),
        "code": _str(error.get("code")),
        "type": _str(error.get("type")),
    }


# ============================================================
# CLIENT
# ============================================================

class ChatCompletionClient:
    """
    Async client for an OpenAI-compatible chat-completion API.

    Args:
        api_key: Bearer token; requests are refused locally when empty
        model: Model name sent with every request
        base_url: API root, e.g. https://api.openai.com/v1
        max_tokens: Completion token limit
        temperature: Sampling temperature
        timeout: httpx timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-3.5-turbo",
        base_url: str = "https://api.openai.com/v1",
        max_tokens: int = 2000,
        temperature: float = 0.3,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, **overrides) -> "ChatCompletionClient":
        options = {
            "api_key": settings.OPENAI_API_KEY,
            "model": settings.OPENAI_MODEL,
            "base_url": settings.OPENAI_BASE_URL,
            "max_tokens": settings.LLM_MAX_TOKENS,
            "temperature": settings.LLM_TEMPERATURE,
            "timeout": settings.LLM_REQUEST_TIMEOUT_SECONDS,
        }
        options.update(overrides)
        return cls(**options)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

    async def chat_completion(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """
        Send one chat-completion request and return the decoded body.

        Raises:
            ProviderError: Missing key or non-2xx response
            TransportError: Network failure or timeout
            ParseError: 2xx response that is not JSON
        """
        if not self.is_configured:
            raise ProviderError(
                "OpenAI API key not configured",
                code=ProviderErrorCode.INVALID_CREDENTIALS,
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.endpoint,
                    headers=headers,
                    json=self.build_payload(messages),
                )
        except httpx.TransportError as e:
            logger.error(f"Chat completion transport error: {e!r}")
            raise TransportError(f"Network error while contacting the model provider: {e}") from e

        if not response.is_success:
            details = _error_details(response)
            code = classify_provider_error(
                response.status_code, details["code"], details["type"]
            )
            logger.warning(
                f"Chat completion failed: status={response.status_code} "
                f"code={details['code']} type={details['type']}"
            )
            raise ProviderError(
                f"OpenAI API error: {response.status_code} - {details['message'] or 'Unknown error'}",
                status_code=response.status_code,
                code=code,
                provider_code=details["code"] or details["type"],
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"Failed to parse AI response: invalid JSON body ({e})") from e

        logger.debug(f"Chat completion succeeded (model: {self.model})")
        return data
