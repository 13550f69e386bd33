"""Map the upstream's reply, whatever its shape, onto one chat-completion shape.

Each matcher takes the decoded payload and returns the reply text or None.
They are tried in a fixed order; the first hit wins, and the fallback text is
used when none matches.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

FALLBACK_MESSAGE = "Sorry, I could not process the response from the AI service."

# Properties scanned, in order, by the last-resort matcher.
TEXT_PROPERTIES = ("text", "content", "message", "answer", "response", "result")

Matcher = Callable[[Any], str | None]


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _get(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return None


def match_plain_text(payload: Any) -> str | None:
    return _text(payload)


def match_choices(payload: Any) -> str | None:
    message = _get(_first(_get(payload, "choices")), "message")
    return _text(_get(message, "content"))


def match_candidates(payload: Any) -> str | None:
    content = _get(_first(_get(payload, "candidates")), "content")
    return _text(_get(_first(_get(content, "parts")), "text"))


def match_generic_fields(payload: Any) -> str | None:
    for key in ("response", "text", "content"):
        found = _text(_get(payload, key))
        if found:
            return found
    return None


def match_property_scan(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    for prop in TEXT_PROPERTIES:
        value = payload.get(prop)
        if isinstance(value, str):
            if value:
                return value
            continue
        if not isinstance(value, dict):
            continue
        found = (
            _text(value.get("content"))
            or _text(value.get("text"))
            or _text(_get(value.get("message"), "content"))
            or _text(_get(_first(value.get("parts")), "text"))
        )
        if found:
            return found
    return None


MATCHERS: tuple[Matcher, ...] = (
    match_choices,
    match_candidates,
    match_generic_fields,
    match_plain_text,
    match_property_scan,
)


def extract_content(payload: Any, matchers: tuple[Matcher, ...] = MATCHERS) -> str | None:
    for matcher in matchers:
        found = matcher(payload)
        if found is not None:
            return found
    return None


def normalize_response(payload: Any) -> dict[str, list[dict[str, dict[str, str]]]]:
    content = extract_content(payload) or FALLBACK_MESSAGE
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}
