"""
ISO-8601 helpers for Clockify timestamps ("2024-01-01T10:00:00Z").
"""
from datetime import datetime, timezone
from typing import Optional


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant into an aware datetime (naive input is taken as UTC)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_instant(moment: Optional[datetime] = None) -> str:
    """UTC, millisecond precision, trailing Z."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.astimezone()
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_now() -> datetime:
    return datetime.now().astimezone()
