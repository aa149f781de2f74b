from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

import pytest


NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def at(**offset: float) -> str:
    return iso(NOW + timedelta(**offset))


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **offset: float) -> None:
        self.now = self.now + timedelta(**offset)


class FakeStore:
    """In-memory stand-in for the content store, keyed by query text."""

    def __init__(self, results: Optional[Mapping[str, Any]] = None) -> None:
        self.results: Dict[str, Any] = dict(results or {})
        self.calls: List[str] = []

    def query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        self.calls.append(query)
        result = self.results.get(query)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
