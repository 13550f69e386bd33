from __future__ import annotations

from typing import Any

from volunteer_hub.chat.errors import InvalidInputError

ALLOWED_ROLES = frozenset({"system", "user", "assistant"})

_ESCAPES = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
    }
)


def validate_messages(payload: Any) -> list[dict[str, str]]:
    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid request body")

    messages = payload.get("messages")
    if not isinstance(messages, list) or not messages:
        raise InvalidInputError("Invalid messages format", "messages must be a non-empty array")

    for index, message in enumerate(messages):
        if not isinstance(message, dict):
            raise InvalidInputError("Invalid messages format", f"messages[{index}] is not an object")
        if message.get("role") not in ALLOWED_ROLES:
            raise InvalidInputError(
                "Invalid messages format",
                f"messages[{index}].role must be one of system, user, assistant",
            )
        if not isinstance(message.get("content"), str):
            raise InvalidInputError(
                "Invalid messages format", f"messages[{index}].content must be a string"
            )
    return messages


def sanitize(value: Any) -> Any:
    """Escape markup-significant characters in every string, recursively."""
    if isinstance(value, str):
        return value.translate(_ESCAPES)
    if isinstance(value, list):
        return [sanitize(item) for item in value]
    if isinstance(value, dict):
        return {key: sanitize(item) for key, item in value.items()}
    return value


def to_upstream_contents(messages: list[dict[str, str]]) -> list[dict[str, Any]]:
    """Reshape chat turns into the upstream's ``contents`` list.

    System prompts are not turns upstream: the last one is prepended to the
    first user turn, or sent as a user turn when there is none.
    """
    system_prompt = ""
    turns: list[dict[str, Any]] = []
    for message in messages:
        if message["role"] == "system":
            system_prompt = message["content"]
            continue
        turns.append(
            {
                "role": "model" if message["role"] == "assistant" else "user",
                "parts": [{"text": message["content"]}],
            }
        )

    if system_prompt:
        first_user = next((turn for turn in turns if turn["role"] == "user"), None)
        if first_user is not None:
            text = first_user["parts"][0]["text"]
            first_user["parts"][0]["text"] = f"{system_prompt}\n\n{text}"
        else:
            turns.insert(0, {"role": "user", "parts": [{"text": system_prompt}]})
    return turns
