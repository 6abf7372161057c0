"""Timestamp parsing for provider payloads."""

from __future__ import annotations

from datetime import datetime, timezone

from dateutil import parser as date_parser


def parse_timestamp(value: object) -> datetime | None:
    """Parse a provider timestamp into an aware UTC datetime.

    Providers disagree on formats (``2024-05-01T10:00:00Z``,
    ``2024-05-01T10:00:00+0000``, RFC 2822 strings). Anything that cannot be
    parsed yields ``None``; naive values are taken to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = date_parser.parse(text)
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
