from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from volunteer_hub.chat.errors import (
    ConfigurationError,
    InvalidInputError,
    MethodNotAllowedError,
    RateLimitedError,
    RelayError,
    UnsupportedMediaTypeError,
)
from volunteer_hub.chat.messages import sanitize, to_upstream_contents, validate_messages
from volunteer_hub.chat.normalize import normalize_response
from volunteer_hub.chat.rate_limit import RateLimiter
from volunteer_hub.chat.upstream import UpstreamClient

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Max-Age": "86400",
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


def client_key(request: Request) -> str:
    """Rate-limit bucket for the caller: first forwarded hop, else the peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class ChatRelay:
    """Validates, sanitizes and forwards chat turns to the upstream AI service."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        upstream: UpstreamClient,
        api_key: str | None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.upstream = upstream
        self.api_key = api_key

    def _error_response(self, exc: RelayError) -> JSONResponse:
        return JSONResponse(
            exc.to_body(),
            status_code=exc.status_code,
            headers={**CORS_HEADERS, **exc.headers},
        )

    async def _read_payload(self, request: Request) -> Any:
        try:
            return await request.json()
        except ValueError as exc:
            raise InvalidInputError("Invalid request body", "body is not valid JSON") from exc

    async def _relay(self, request: Request) -> dict[str, Any]:
        if request.method != "POST":
            raise MethodNotAllowedError("Method not allowed")

        content_type = request.headers.get("content-type") or ""
        if "application/json" not in content_type.lower():
            raise UnsupportedMediaTypeError("Content-Type must be application/json")

        key = client_key(request)
        if not self.rate_limiter.check(key):
            logger.warning("chat_rate_limited", client=key)
            raise RateLimitedError(retry_after=self.rate_limiter.window_seconds)

        if not self.api_key:
            logger.error("chat_api_key_missing")
            raise ConfigurationError("Server configuration error: API key not configured")

        messages = validate_messages(await self._read_payload(request))
        contents = to_upstream_contents(sanitize(messages))

        data = await self.upstream.generate(contents)
        return normalize_response(data)

    async def handle(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        try:
            body = await self._relay(request)
        except RelayError as exc:
            if exc.status_code >= 500:
                logger.error(
                    "chat_relay_failed",
                    status_code=exc.status_code,
                    error=exc.message,
                )
            return self._error_response(exc)
        except Exception:
            logger.exception("chat_relay_unexpected_error")
            return self._error_response(RelayError("Internal server error"))

        return JSONResponse(body, headers={**CORS_HEADERS, **NO_CACHE_HEADERS})
