"""
Client for the upstream generative-AI completion endpoint.

Provides a single bounded POST; no retries, since the relay's caller
decides whether to try again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from volunteer_hub.chat.errors import UpstreamError, UpstreamTimeoutError

logger = structlog.get_logger()

MAX_DETAILS_CHARS = 500


class UpstreamClient(Protocol):
    """Protocol for the upstream client (allows mocking)."""

    async def generate(self, contents: list[dict[str, Any]]) -> Any:
        """Send the reshaped turns and return the decoded upstream payload."""
        ...


def check_payload(data: Any) -> None:
    """Reject payloads that carry no usable reply at all."""
    if not isinstance(data, (dict, str)) or not data:
        raise UpstreamError("Empty or malformed response from AI service", status_code=500)

    if not isinstance(data, dict):
        return

    error = data.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise UpstreamError(message or "Error in AI service response", status_code=500)

    if "candidates" in data:
        candidates = data["candidates"]
        first = candidates[0] if isinstance(candidates, list) and candidates else None
        if not isinstance(first, dict) or not first.get("content"):
            raise UpstreamError("No content in AI service response", status_code=500)


class GeminiClient:
    """Async client for the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        api_key: str,
        url: str,
        timeout_seconds: float = 10.0,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.timeout = timeout_seconds
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._transport = transport

    def _redact(self, text: str) -> str:
        if self.api_key:
            text = text.replace(self.api_key, "[redacted]")
        return text[:MAX_DETAILS_CHARS]

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(
                self.url,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json=payload,
            )

    async def generate(self, contents: list[dict[str, Any]]) -> Any:
        payload = {
            "contents": contents,
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

        try:
            # httpx bounds each phase; wait_for bounds the whole exchange.
            response = await asyncio.wait_for(self._post(payload), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("chat_upstream_timeout", timeout_seconds=self.timeout)
            raise UpstreamTimeoutError(
                "Request timeout", "The request to the AI service timed out"
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("chat_upstream_request_error", error=exc.__class__.__name__)
            raise UpstreamError(
                "Error communicating with AI service",
                details=exc.__class__.__name__,
                status_code=500,
            ) from exc

        if not response.is_success:
            logger.warning("chat_upstream_error", upstream_status=response.status_code)
            raise UpstreamError(
                f"AI service error: {response.status_code}",
                details=self._redact(response.text),
                status_code=502,
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Invalid JSON from AI service", status_code=500) from exc

        check_payload(data)
        return data
