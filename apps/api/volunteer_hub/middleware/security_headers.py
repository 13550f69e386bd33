from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from volunteer_hub.core.config import settings

BASELINE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline hardening headers for JSON APIs; HSTS outside local runs only."""

    def __init__(self, app, enabled: bool | None = None) -> None:
        super().__init__(app)
        self.enabled = settings.security_headers_enabled if enabled is None else enabled

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)

        if not self.enabled:
            return response

        for name, value in BASELINE_HEADERS.items():
            response.headers.setdefault(name, value)

        if settings.env != "local":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=63072000; includeSubDomains; preload",
            )

        return response
