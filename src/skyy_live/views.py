"""Page-level views wiring fetched collections into the live components.

Every view owns its state exclusively. A fetch only applies to the mount
that issued it and only while no later load has started: responses
arriving after :meth:`View.unmount`, after a remount or after a newer
refresh are discarded.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Callable, Dict, List, Optional, Tuple

from .broadcast import BroadcastSelector, BroadcastView, live_stream_from_record, parse_replays
from .content import (
    LIVE_STREAM_QUERY,
    REPLAYS_QUERY,
    UPCOMING_FIXTURES_QUERY,
    CollectionSource,
    fetch_collection,
)
from .countdown import TICK_SECONDS, Countdown, TimeLeft
from .dates import Clock, utc_now
from .fixtures import (
    DEFAULT_TZ,
    Fixture,
    date_label,
    is_past,
    kickoff_label,
    parse_fixtures,
    select_next_fixture,
    team_initials,
    venue_label,
)
from .paging import PagedCollection

LOGGER = logging.getLogger(__name__)

NO_FIXTURES_LABEL = "No upcoming fixtures"
NO_ITEMS_LABEL = "No data available"


class View:
    def __init__(
        self,
        source: CollectionSource,
        *,
        clock: Clock = utc_now,
        tz: tzinfo = DEFAULT_TZ,
    ) -> None:
        self.source = source
        self.clock = clock
        self.tz = tz
        self.mounted = False
        self.loading = False
        self._generation = 0

    async def mount(self) -> None:
        self._generation += 1
        self.mounted = True
        await self.load()

    def unmount(self) -> None:
        self._generation += 1
        self.mounted = False
        self.loading = False

    async def refresh(self) -> None:
        if not self.mounted:
            return
        await self.load()

    async def load(self) -> None:
        raise NotImplementedError

    def _issue(self) -> int:
        self._generation += 1
        self.loading = True
        return self._generation

    def _is_current(self, generation: int) -> bool:
        if self.mounted and generation == self._generation:
            return True
        LOGGER.debug("Discarding stale response for %s", type(self).__name__)
        return False


@dataclass(frozen=True)
class FixtureRow:
    id: str
    title: str
    date_label: str
    kickoff: str
    is_past: bool
    home_initials: str
    away_initials: str


@dataclass(frozen=True)
class MatchPanelSnapshot:
    loading: bool
    venue: str
    countdown: TimeLeft
    next_fixture: Optional[Fixture]
    rows: Tuple[FixtureRow, ...] = field(default_factory=tuple)
    empty_label: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "loading": self.loading,
            "venue": self.venue,
            "countdown": self.countdown.as_dict(),
            "next_fixture": (
                {
                    "id": self.next_fixture.id,
                    "title": self.next_fixture.title,
                    "date": self.next_fixture.start,
                }
                if self.next_fixture
                else None
            ),
            "fixtures": [
                {
                    "id": row.id,
                    "title": row.title,
                    "date": row.date_label,
                    "kick_off": row.kickoff,
                    "is_past": row.is_past,
                }
                for row in self.rows
            ],
            "empty_label": self.empty_label,
        }


class MatchPanelView(View):
    """Next fixture, its live countdown and the short fixture list."""

    def __init__(
        self,
        source: CollectionSource,
        *,
        clock: Clock = utc_now,
        tz: tzinfo = DEFAULT_TZ,
        interval: float = TICK_SECONDS,
    ) -> None:
        super().__init__(source, clock=clock, tz=tz)
        self.fixtures: List[Fixture] = []
        self.next_fixture: Optional[Fixture] = None
        self.countdown = Countdown(None, clock=clock, interval=interval)

    async def mount(self) -> None:
        self.countdown.start()
        await super().mount()

    def unmount(self) -> None:
        super().unmount()
        self.countdown.stop()

    async def load(self) -> None:
        generation = self._issue()
        records = await fetch_collection(self.source, UPCOMING_FIXTURES_QUERY)
        if not self._is_current(generation):
            return
        self.fixtures = parse_fixtures(records)
        self.next_fixture = select_next_fixture(self.fixtures, now=self.clock())
        self.countdown.set_target(self.next_fixture.start if self.next_fixture else None)
        self.loading = False

    def render(self) -> MatchPanelSnapshot:
        now = self.clock()
        rows = tuple(
            FixtureRow(
                id=fixture.id,
                title=fixture.title,
                date_label=date_label(fixture, tz=self.tz),
                kickoff=kickoff_label(fixture, tz=self.tz),
                is_past=is_past(fixture, now=now),
                home_initials=team_initials(fixture.home_team, fixture.home_short),
                away_initials=team_initials(fixture.away_team, fixture.away_short),
            )
            for fixture in self.fixtures
        )
        empty = NO_FIXTURES_LABEL if not self.loading and not rows else None
        return MatchPanelSnapshot(
            loading=self.loading,
            venue=venue_label(self.next_fixture),
            countdown=self.countdown.value,
            next_fixture=self.next_fixture,
            rows=rows,
            empty_label=empty,
        )


class WatchView(View):
    """Live stream or replays, fetched together with partial degradation."""

    def __init__(
        self,
        source: CollectionSource,
        *,
        clock: Clock = utc_now,
        tz: tzinfo = DEFAULT_TZ,
    ) -> None:
        super().__init__(source, clock=clock, tz=tz)
        self.selector = BroadcastSelector()

    async def load(self) -> None:
        generation = self._issue()
        live_records, replay_records = await asyncio.gather(
            fetch_collection(self.source, LIVE_STREAM_QUERY),
            fetch_collection(self.source, REPLAYS_QUERY),
        )
        if not self._is_current(generation):
            return
        live = live_stream_from_record(live_records[0] if live_records else None)
        self.selector.refresh(live, parse_replays(replay_records))
        self.loading = False

    def select(self, replay_id: str) -> bool:
        return self.selector.select(replay_id)

    def render(self) -> BroadcastView:
        return self.selector.render(tz=self.tz)


@dataclass(frozen=True)
class PageSnapshot:
    loading: bool
    page: int
    total_pages: int
    total: int
    label: str
    items: Tuple[Dict[str, Any], ...]
    empty_label: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "loading": self.loading,
            "page": self.page,
            "total_pages": self.total_pages,
            "total": self.total,
            "label": self.label,
            "items": list(self.items),
            "empty_label": self.empty_label,
        }


class PagedListView(View):
    """A fetched collection (standings, stories, squad, results) in pages."""

    def __init__(
        self,
        source: CollectionSource,
        query: str,
        page_size: int,
        *,
        on_navigate: Optional[Callable[[int], None]] = None,
        clock: Clock = utc_now,
        tz: tzinfo = DEFAULT_TZ,
    ) -> None:
        super().__init__(source, clock=clock, tz=tz)
        self.query = query
        self.collection: PagedCollection[Dict[str, Any]] = PagedCollection(
            (), page_size, on_navigate=on_navigate
        )

    async def load(self) -> None:
        generation = self._issue()
        records = await fetch_collection(self.source, self.query)
        if not self._is_current(generation):
            return
        self.collection.replace(records)
        self.loading = False

    def set_page(self, page: int) -> int:
        return self.collection.set_page(page)

    def render(self) -> PageSnapshot:
        collection = self.collection
        empty = NO_ITEMS_LABEL if not self.loading and collection.total == 0 else None
        return PageSnapshot(
            loading=self.loading,
            page=collection.current_page,
            total_pages=collection.total_pages,
            total=collection.total,
            label=collection.label,
            items=tuple(collection.items),
            empty_label=empty,
        )


__all__ = [
    "FixtureRow",
    "MatchPanelSnapshot",
    "MatchPanelView",
    "PageSnapshot",
    "PagedListView",
    "View",
    "WatchView",
]
