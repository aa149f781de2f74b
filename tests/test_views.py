from __future__ import annotations

import asyncio
import threading
from typing import Any, List, Mapping, Optional

from conftest import FakeClock, FakeStore, at

from skyy_live.broadcast import BroadcastMode
from skyy_live.content import (
    LIVE_STREAM_QUERY,
    REPLAYS_QUERY,
    STANDINGS_QUERY,
    UPCOMING_FIXTURES_QUERY,
    ContentStoreError,
)
from skyy_live.countdown import ZERO, TimeLeft
from skyy_live.views import MatchPanelView, PagedListView, WatchView

FIXTURE_RECORDS = [
    {"_id": "1", "date": at(days=-1), "venue": "Old Ground", "homeTeam": {"name": "SKYY FC"}, "awayTeam": {"name": "Star FC"}},
    {"_id": "2", "date": at(hours=1), "venue": "Skyy Park", "homeTeam": {"name": "SKYY FC"}, "awayTeam": {"name": "Gold City FC"}},
    {"_id": "3", "date": at(minutes=30), "venue": "Coastal Arena", "homeTeam": {"name": "Coastal United"}, "awayTeam": {"name": "SKYY FC"}},
]

REPLAY_RECORDS = [
    {"_id": "r-1", "title": "Matchday 20", "videoUrl": "https://youtu.be/aaaaaaaaaaa", "date": at(days=-7)},
    {"_id": "r-2", "title": "Matchday 19", "videoUrl": "https://youtu.be/bbbbbbbbbbb", "date": at(days=-14)},
]


def test_match_panel_reconciles_and_counts_down(clock: FakeClock) -> None:
    store = FakeStore({UPCOMING_FIXTURES_QUERY: FIXTURE_RECORDS})
    view = MatchPanelView(store, clock=clock, interval=0.01)

    async def scenario() -> None:
        await view.mount()
        assert view.countdown.running
        snapshot = view.render()
        assert snapshot.next_fixture is not None
        assert snapshot.next_fixture.id == "3"
        assert snapshot.venue == "Coastal Arena"
        assert snapshot.countdown == TimeLeft("00", "00", "30", "00")
        assert [row.is_past for row in snapshot.rows] == [True, False, False]
        assert snapshot.empty_label is None
        view.unmount()

    asyncio.run(scenario())

    assert not view.countdown.running
    assert not view.mounted


def test_past_flags_follow_clock_without_reselecting(clock: FakeClock) -> None:
    store = FakeStore({UPCOMING_FIXTURES_QUERY: FIXTURE_RECORDS})
    view = MatchPanelView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        clock.advance(minutes=45)
        snapshot = view.render()
        assert snapshot.next_fixture.id == "3"
        assert [row.is_past for row in snapshot.rows] == [True, False, True]
        view.unmount()

    asyncio.run(scenario())


def test_refetch_moves_countdown_to_new_target(clock: FakeClock) -> None:
    store = FakeStore({UPCOMING_FIXTURES_QUERY: FIXTURE_RECORDS})
    view = MatchPanelView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        clock.advance(minutes=45)
        await view.refresh()
        assert view.next_fixture.id == "2"
        assert view.countdown.value == TimeLeft("00", "00", "15", "00")
        view.unmount()

    asyncio.run(scenario())


def test_match_panel_fetch_failure_is_empty_state(clock: FakeClock) -> None:
    store = FakeStore({UPCOMING_FIXTURES_QUERY: ContentStoreError("offline")})
    view = MatchPanelView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        snapshot = view.render()
        assert snapshot.next_fixture is None
        assert snapshot.venue == "TBD"
        assert snapshot.countdown == ZERO
        assert snapshot.empty_label == "No upcoming fixtures"
        view.unmount()

    asyncio.run(scenario())


def test_late_response_after_unmount_is_discarded(clock: FakeClock) -> None:
    store = FakeStore({UPCOMING_FIXTURES_QUERY: FIXTURE_RECORDS})
    view = MatchPanelView(store, clock=clock)

    async def scenario() -> None:
        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        view.unmount()
        await task

    asyncio.run(scenario())

    assert store.calls == [UPCOMING_FIXTURES_QUERY]
    assert view.fixtures == []
    assert view.next_fixture is None
    assert view.countdown.value == ZERO
    assert not view.countdown.running


def test_refresh_on_unmounted_view_does_nothing(clock: FakeClock) -> None:
    store = FakeStore({UPCOMING_FIXTURES_QUERY: FIXTURE_RECORDS})
    view = MatchPanelView(store, clock=clock)

    asyncio.run(view.refresh())

    assert store.calls == []


def test_watch_view_live_then_replay_on_refresh(clock: FakeClock) -> None:
    store = FakeStore(
        {
            LIVE_STREAM_QUERY: {"isLive": True, "youtubeUrl": "https://youtu.be/abcDEF12345", "matchTitle": "Derby"},
            REPLAYS_QUERY: REPLAY_RECORDS,
        }
    )
    view = WatchView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        assert view.render().mode is BroadcastMode.LIVE
        assert not view.select("r-2")
        assert "abcDEF12345" in view.render().embed_url

        store.results[LIVE_STREAM_QUERY] = {"isLive": False}
        await view.refresh()
        rendered = view.render()
        assert rendered.mode is BroadcastMode.REPLAY
        assert "bbbbbbbbbbb" in rendered.embed_url
        view.unmount()

    asyncio.run(scenario())


def test_watch_view_degrades_when_live_fetch_fails(clock: FakeClock) -> None:
    store = FakeStore(
        {
            LIVE_STREAM_QUERY: ContentStoreError("offline"),
            REPLAYS_QUERY: REPLAY_RECORDS,
        }
    )
    view = WatchView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        rendered = view.render()
        assert rendered.mode is BroadcastMode.REPLAY
        assert rendered.title == "Matchday 20"
        view.unmount()

    asyncio.run(scenario())


def test_watch_view_degrades_when_replay_fetch_fails(clock: FakeClock) -> None:
    store = FakeStore(
        {
            LIVE_STREAM_QUERY: {"isLive": True, "youtubeUrl": "https://youtu.be/abcDEF12345"},
            REPLAYS_QUERY: RuntimeError("bad gateway"),
        }
    )
    view = WatchView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        rendered = view.render()
        assert rendered.mode is BroadcastMode.LIVE
        assert rendered.replays == ()
        view.unmount()

    asyncio.run(scenario())


def test_watch_view_everything_failing_is_empty(clock: FakeClock) -> None:
    store = FakeStore(
        {
            LIVE_STREAM_QUERY: ContentStoreError("offline"),
            REPLAYS_QUERY: ContentStoreError("offline"),
        }
    )
    view = WatchView(store, clock=clock)

    async def scenario() -> None:
        await view.mount()
        assert view.render().mode is BroadcastMode.EMPTY
        view.unmount()

    asyncio.run(scenario())


def test_paged_list_view_clamps_after_refetch(clock: FakeClock) -> None:
    rows = [{"_id": str(position), "position": position} for position in range(1, 18)]
    store = FakeStore({STANDINGS_QUERY: rows})
    navigations: list[int] = []
    view = PagedListView(store, STANDINGS_QUERY, 8, on_navigate=navigations.append, clock=clock)

    async def scenario() -> None:
        await view.mount()
        assert view.set_page(5) == 2
        snapshot = view.render()
        assert snapshot.total_pages == 3
        assert [item["position"] for item in snapshot.items] == [17]

        store.results[STANDINGS_QUERY] = rows[:4]
        await view.refresh()
        snapshot = view.render()
        assert snapshot.page == 0
        assert snapshot.total_pages == 1

        store.results[STANDINGS_QUERY] = ContentStoreError("offline")
        await view.refresh()
        snapshot = view.render()
        assert snapshot.total == 0
        assert snapshot.empty_label == "No data available"
        view.unmount()

    asyncio.run(scenario())

    assert navigations == [2]


class GatedStore(FakeStore):
    """Holds a query open until its gate is set."""

    def __init__(self, results: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(results)
        self.gates: List[threading.Event] = []

    def query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        gate = self.gates.pop(0) if self.gates else None
        result = super().query(query, params)
        if gate is not None:
            gate.wait(timeout=5)
        return result


def test_older_refresh_finishing_last_is_discarded(clock: FakeClock) -> None:
    rows = [{"_id": str(position), "position": position} for position in range(1, 18)]
    store = GatedStore({STANDINGS_QUERY: rows})
    view = PagedListView(store, STANDINGS_QUERY, 8, clock=clock)
    gate = threading.Event()

    async def scenario() -> None:
        await view.mount()
        assert view.render().total == 17

        store.results[STANDINGS_QUERY] = rows[:3]
        store.gates.append(gate)
        older = asyncio.create_task(view.refresh())
        while len(store.calls) < 2:
            await asyncio.sleep(0.01)

        store.results[STANDINGS_QUERY] = rows[:5]
        await view.refresh()
        assert view.render().total == 5

        gate.set()
        await older
        assert view.render().total == 5
        assert not view.render().loading
        view.unmount()

    asyncio.run(scenario())

    assert store.calls == [STANDINGS_QUERY] * 3
