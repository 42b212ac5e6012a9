"""Helpers shared by the wire (JSON) representation of remote entities.

The remote API speaks camelCase JSON with Mongo-style ``_id`` keys and
ISO-8601 timestamps (often with a trailing ``Z``).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def entity_id(data: Dict[str, Any]) -> str:
    """Return the server id of an entity payload (``_id`` or ``id``)."""
    raw = data.get("_id")
    if raw in (None, ""):
        raw = data.get("id")
    return str(raw or "").strip()


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp: {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


__all__ = ["entity_id", "parse_timestamp", "format_timestamp"]
