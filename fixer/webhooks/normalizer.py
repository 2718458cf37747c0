"""Collapse the historical Inngest failure webhook shapes into one record."""

from typing import Any

from pydantic import BaseModel

from fixer.webhooks.schemas import FailureNotification

# Producers have spelled the failure event differently across versions
FAILURE_EVENT_NAMES = frozenset({
    "function/failed",
    "function.failed",
    "inngest/function.failed",
})

REQUIRED_FIELDS = ("function_id", "run_id", "event", "error")


class InvalidNotification(ValueError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"missing fields: {', '.join(missing)}")


class NormalizedEvent(BaseModel):
    event_type: str
    function_id: Any = None
    run_id: Any = None
    event: dict[str, Any] | None = None
    error: dict[str, Any] | None = None


def _first_str(payload: dict, *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str):
            return value
    return None


def _first_dict(payload: dict, *keys: str) -> dict | None:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, dict):
            return value
    return None


def normalize(payload: Any) -> NormalizedEvent | None:
    """Extract the failure fields from one webhook item.

    Returns None for anything that is not a failure event (other event
    names, unrecognised shapes, non-object items).
    """
    if not isinstance(payload, dict):
        return None

    event_type = _first_str(payload, "name", "event")
    if event_type not in FAILURE_EVENT_NAMES:
        return None

    envelope = _first_dict(payload, "data", "event_data") or {}

    return NormalizedEvent(
        event_type=event_type,
        function_id=payload.get("function_id") or envelope.get("function_id"),
        run_id=payload.get("run_id") or envelope.get("run_id"),
        event=_first_dict(envelope, "event") or _first_dict(payload, "event"),
        error=_first_dict(envelope, "error") or _first_dict(payload, "error"),
    )


def validate(normalized: NormalizedEvent) -> FailureNotification:
    missing = [name for name in REQUIRED_FIELDS if not getattr(normalized, name)]
    if missing:
        raise InvalidNotification(missing)

    return FailureNotification(
        function_id=str(normalized.function_id),
        run_id=str(normalized.run_id),
        event=normalized.event,
        error=normalized.error,
    )
