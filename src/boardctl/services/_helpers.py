"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (for audit trails and row stamps)."""
    return datetime.now(UTC).isoformat()


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for backup filenames)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S")


def clean_text(value: str | None) -> str | None:
    """Strip surrounding whitespace; empty results become None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def normalize_due_date(value: str | None) -> str | None:
    """Validate an ISO 8601 date or datetime; blank clears the due date.

    Raises ValueError for anything ``datetime.fromisoformat`` rejects.
    """
    cleaned = clean_text(value)
    if cleaned is None:
        return None
    datetime.fromisoformat(cleaned)
    return cleaned
