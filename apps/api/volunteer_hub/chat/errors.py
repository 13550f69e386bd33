from __future__ import annotations


class RelayError(Exception):
    """Base error for the chat relay; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(
        self,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers or {}

    def to_body(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInputError(RelayError):
    status_code = 400


class UnsupportedMediaTypeError(RelayError):
    status_code = 415


class RateLimitedError(RelayError):
    status_code = 429

    def __init__(self, retry_after: int) -> None:
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class ConfigurationError(RelayError):
    status_code = 500


class UpstreamError(RelayError):
    """Non-2xx from the upstream (502) or an unusable upstream payload (500)."""

    status_code = 502

    def __init__(
        self,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message, details=details, status_code=status_code)
        self.upstream_status = upstream_status


class UpstreamTimeoutError(RelayError):
    status_code = 504


class MethodNotAllowedError(RelayError):
    status_code = 405
