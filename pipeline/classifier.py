"""Event classification — raw stream message to typed Event.

Accepts either a decoded JSON object or the raw text/bytes of a WebSocket
frame. Anything that does not validate as one of the known event variants is
dropped: ``classify`` returns None and the stream carries on. A malformed
message is never fatal and never becomes an error event.
"""
import json
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from models.events import Event

logger = logging.getLogger(__name__)

_EVENT_ADAPTER = TypeAdapter(Event)

# Truncate dropped payloads in log output
_PREVIEW_CHARS = 120


def classify(raw: Any) -> Event | None:
    """Return the typed event for ``raw``, or None if it must be dropped."""
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            logger.warning("Dropping non-JSON message %s: %s", _preview(raw), exc)
            return None

    if not isinstance(raw, dict):
        logger.warning("Dropping message that is not a JSON object: %s", _preview(raw))
        return None

    try:
        return _EVENT_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        logger.warning(
            "Dropping malformed %r event (%d validation errors)",
            raw.get("type"),
            exc.error_count(),
        )
        logger.debug("Rejected payload: %s", _preview(raw))
        return None


def _preview(raw: Any) -> str:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else repr(raw)
    return text if len(text) <= _PREVIEW_CHARS else text[:_PREVIEW_CHARS] + "…"
