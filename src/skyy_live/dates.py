"""Timestamp parsing shared by the countdown, fixtures and replays."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from dateutil import parser

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_instant(value: object) -> Optional[datetime]:
    """Parse an ISO-8601-ish timestamp into an aware datetime.

    Naive values are taken as UTC. Empty, missing or unparsable input yields
    ``None`` instead of raising.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = parser.isoparse(text)
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def ensure_aware(moment: Optional[datetime], clock: Clock = utc_now) -> datetime:
    if moment is None:
        return clock()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


__all__ = ["Clock", "ensure_aware", "parse_instant", "utc_now"]
