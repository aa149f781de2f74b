"""Fixture records and selection of the next fixture to count down to."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from .dates import ensure_aware, parse_instant

DEFAULT_TIMEZONE_NAME = "Europe/London"
DEFAULT_TZ = ZoneInfo(DEFAULT_TIMEZONE_NAME)
FALLBACK_LABEL = "TBD"


@dataclass(frozen=True)
class Fixture:
    id: str
    home_team: str
    away_team: str
    start: Optional[str]
    venue: Optional[str] = None
    kick_off: Optional[str] = None
    home_short: Optional[str] = None
    away_short: Optional[str] = None
    matchday: Optional[int] = None

    @property
    def starts_at(self) -> Optional[datetime]:
        return parse_instant(self.start)

    @property
    def title(self) -> str:
        return f"{self.home_team} vs {self.away_team}"


def _team_fields(value: Any) -> tuple[str, Optional[str]]:
    if isinstance(value, Mapping):
        name = str(value.get("name") or "").strip()
        short = str(value.get("shortName") or "").strip() or None
        return name, short
    if isinstance(value, str):
        return value.strip(), None
    return "", None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def fixture_from_record(record: Mapping[str, Any]) -> Fixture:
    """Build a :class:`Fixture` from a content store record.

    Team references may be expanded objects (``{"name", "shortName"}``) or
    plain names; missing fields become empty values rather than errors.
    """

    home_team, home_short = _team_fields(record.get("homeTeam"))
    away_team, away_short = _team_fields(record.get("awayTeam"))
    matchday_raw = record.get("matchday")
    try:
        matchday = int(matchday_raw) if matchday_raw is not None else None
    except (TypeError, ValueError):
        matchday = None
    return Fixture(
        id=str(record.get("_id") or record.get("id") or ""),
        home_team=home_team,
        away_team=away_team,
        start=_optional_text(record.get("date")),
        venue=_optional_text(record.get("venue")),
        kick_off=_optional_text(record.get("kickOff")),
        home_short=home_short,
        away_short=away_short,
        matchday=matchday,
    )


def parse_fixtures(records: Iterable[Mapping[str, Any]]) -> List[Fixture]:
    return [fixture_from_record(record) for record in records if isinstance(record, Mapping)]


def select_next_fixture(
    fixtures: Sequence[Fixture], *, now: Optional[datetime] = None
) -> Optional[Fixture]:
    """Pick the fixture the countdown should point at.

    The earliest fixture starting strictly after ``now`` wins, ties keeping
    collection order. Without any such fixture the first entry of the
    collection is used, so a stale list still shows something.
    """

    reference = ensure_aware(now)
    upcoming = []
    for fixture in fixtures:
        starts_at = fixture.starts_at
        if starts_at is not None and starts_at > reference:
            upcoming.append((starts_at, fixture))
    if upcoming:
        # min() returns the first of equal keys, which keeps ties stable.
        return min(upcoming, key=lambda item: item[0])[1]
    return fixtures[0] if fixtures else None


def is_past(fixture: Fixture, *, now: Optional[datetime] = None) -> bool:
    starts_at = fixture.starts_at
    if starts_at is None:
        return False
    return starts_at <= ensure_aware(now)


def kickoff_label(fixture: Fixture, *, tz: tzinfo = DEFAULT_TZ) -> str:
    if fixture.kick_off:
        return fixture.kick_off
    starts_at = fixture.starts_at
    if starts_at is None:
        return FALLBACK_LABEL
    return starts_at.astimezone(tz).strftime("%H:%M")


def date_label(fixture: Fixture, *, tz: tzinfo = DEFAULT_TZ) -> str:
    starts_at = fixture.starts_at
    if starts_at is None:
        return FALLBACK_LABEL
    local = starts_at.astimezone(tz)
    return f"{local:%a} {local.day} {local:%b}"


def venue_label(fixture: Optional[Fixture]) -> str:
    if fixture is None or not fixture.venue:
        return FALLBACK_LABEL
    return fixture.venue


def team_initials(name: Optional[str], short: Optional[str] = None) -> str:
    source = short or name
    if not source:
        return "??"
    return source[:2]


__all__ = [
    "DEFAULT_TZ",
    "FALLBACK_LABEL",
    "Fixture",
    "date_label",
    "fixture_from_record",
    "is_past",
    "kickoff_label",
    "parse_fixtures",
    "select_next_fixture",
    "team_initials",
    "venue_label",
]
