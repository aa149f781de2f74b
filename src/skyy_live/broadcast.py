"""Live/replay selection for the watch page.

The selector is an explicit state machine with three states:

``LIVE``
    A stream is on air. Replay selection is locked: picks are remembered as
    the pending selection but nothing visible changes.
``REPLAY``
    No stream is on air and at least one replay exists. Exactly one replay
    (by default the most recent) is selected.
``EMPTY``
    Neither a stream nor replays are available.

Transitions only happen when :meth:`BroadcastSelector.refresh` is called
with freshly fetched data; there is no background polling.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, ClassVar, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .dates import parse_instant
from .fixtures import DEFAULT_TZ
from .youtube import embed_url

LOGGER = logging.getLogger(__name__)

LIVE_FALLBACK_TITLE = "LIVE"
WATCH_FALLBACK_TITLE = "WATCH"
LINK_MISSING_LABEL = "Live match link missing"
LINK_MISSING_HINT = "Set liveStream.youtubeUrl in the content store"
NO_SELECTION_LABEL = "Pick a match to watch"
NO_SELECTION_HINT = "No video selected"
EMPTY_LABEL = "No live match"
EMPTY_HINT = "No previous matches yet."


class BroadcastMode(str, Enum):
    LIVE = "live"
    REPLAY = "replay"
    EMPTY = "empty"


@dataclass(frozen=True)
class LiveStream:
    is_live: bool
    youtube_url: Optional[str] = None
    match_title: Optional[str] = None


@dataclass(frozen=True)
class ReplayItem:
    id: str
    title: str
    video_url: Optional[str]
    date: Optional[str] = None

    @property
    def published_at(self) -> Optional[datetime]:
        return parse_instant(self.date)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def live_stream_from_record(record: Optional[Mapping[str, Any]]) -> Optional[LiveStream]:
    if not isinstance(record, Mapping):
        return None
    return LiveStream(
        is_live=bool(record.get("isLive")),
        youtube_url=_text(record.get("youtubeUrl")),
        match_title=_text(record.get("matchTitle")),
    )


def replay_from_record(record: Mapping[str, Any]) -> Optional[ReplayItem]:
    replay_id = _text(record.get("_id") or record.get("id"))
    if not replay_id:
        return None
    return ReplayItem(
        id=replay_id,
        title=_text(record.get("title")) or "",
        video_url=_text(record.get("videoUrl")),
        date=_text(record.get("date")),
    )


def parse_replays(records: Iterable[Any]) -> Tuple[ReplayItem, ...]:
    items = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        item = replay_from_record(record)
        if item is not None:
            items.append(item)
    return tuple(items)


def order_replays(items: Iterable[ReplayItem]) -> Tuple[ReplayItem, ...]:
    """Newest first; undated replays keep their order at the end."""

    materialized = list(items)
    dated = [item for item in materialized if item.published_at is not None]
    undated = [item for item in materialized if item.published_at is None]
    dated.sort(key=lambda item: item.published_at, reverse=True)
    return tuple(dated + undated)


@dataclass(frozen=True)
class LiveState:
    mode: ClassVar[BroadcastMode] = BroadcastMode.LIVE
    title: str
    source_url: Optional[str]


@dataclass(frozen=True)
class ReplayState:
    mode: ClassVar[BroadcastMode] = BroadcastMode.REPLAY
    selected_id: Optional[str]
    items: Tuple[ReplayItem, ...] = ()


@dataclass(frozen=True)
class EmptyState:
    mode: ClassVar[BroadcastMode] = BroadcastMode.EMPTY


BroadcastState = Union[LiveState, ReplayState, EmptyState]


@dataclass(frozen=True)
class ReplayEntry:
    id: str
    title: str
    date_label: str
    active: bool
    disabled: bool


@dataclass(frozen=True)
class BroadcastView:
    mode: BroadcastMode
    title: str
    embed_url: Optional[str]
    placeholder: Optional[str] = None
    placeholder_hint: Optional[str] = None
    locked: bool = False
    replays: Tuple[ReplayEntry, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "title": self.title,
            "embed_url": self.embed_url,
            "placeholder": self.placeholder,
            "placeholder_hint": self.placeholder_hint,
            "locked": self.locked,
            "replays": [
                {
                    "id": entry.id,
                    "title": entry.title,
                    "date": entry.date_label,
                    "active": entry.active,
                    "disabled": entry.disabled,
                }
                for entry in self.replays
            ],
        }


def replay_date_label(item: ReplayItem, *, tz: tzinfo = DEFAULT_TZ) -> str:
    published = item.published_at
    if published is None:
        return ""
    local = published.astimezone(tz)
    return f"{local:%a} {local.day} {local:%b}".upper()


class BroadcastSelector:
    """Chooses what the watch page plays."""

    def __init__(self) -> None:
        self._state: BroadcastState = EmptyState()
        self._items: Tuple[ReplayItem, ...] = ()
        self._pending: Optional[str] = None

    @property
    def state(self) -> BroadcastState:
        return self._state

    @property
    def mode(self) -> BroadcastMode:
        return self._state.mode

    @property
    def items(self) -> Tuple[ReplayItem, ...]:
        return self._items

    @property
    def locked(self) -> bool:
        return isinstance(self._state, LiveState)

    @property
    def selected_id(self) -> Optional[str]:
        """Current replay selection, pending while locked."""

        if isinstance(self._state, ReplayState):
            return self._state.selected_id
        return self._pending

    def refresh(
        self,
        live: Optional[LiveStream],
        replays: Sequence[ReplayItem] = (),
    ) -> BroadcastState:
        previous = self._state
        carried = self.selected_id
        self._items = order_replays(replays)
        known = {item.id for item in self._items}

        if live is not None and live.is_live:
            self._pending = carried if carried in known else None
            self._state = LiveState(
                title=live.match_title or LIVE_FALLBACK_TITLE,
                source_url=live.youtube_url,
            )
        elif self._items:
            selected = carried if carried in known else self._items[0].id
            self._pending = None
            self._state = ReplayState(selected_id=selected, items=self._items)
        else:
            self._pending = None
            self._state = EmptyState()

        if previous.mode is not self._state.mode:
            LOGGER.debug(
                "Broadcast mode %s -> %s", previous.mode.value, self._state.mode.value
            )
        return self._state

    def select(self, replay_id: str) -> bool:
        """Apply a user pick; returns whether the rendered output changed."""

        if replay_id not in {item.id for item in self._items}:
            LOGGER.debug("Ignoring selection of unknown replay %r", replay_id)
            return False
        state = self._state
        if isinstance(state, LiveState):
            self._pending = replay_id
            return False
        if isinstance(state, ReplayState):
            if state.selected_id == replay_id:
                return False
            self._state = ReplayState(selected_id=replay_id, items=state.items)
            return True
        return False

    def selected_replay(self) -> Optional[ReplayItem]:
        selected = self.selected_id
        for item in self._items:
            if item.id == selected:
                return item
        return None

    def render(self, *, tz: tzinfo = DEFAULT_TZ) -> BroadcastView:
        state = self._state
        selected = self.selected_id
        entries = tuple(
            ReplayEntry(
                id=item.id,
                title=item.title,
                date_label=replay_date_label(item, tz=tz),
                active=item.id == selected,
                disabled=self.locked,
            )
            for item in self._items
        )

        if isinstance(state, LiveState):
            live_embed = embed_url(state.source_url, autoplay=True)
            if live_embed is None:
                return BroadcastView(
                    mode=state.mode,
                    title=state.title,
                    embed_url=None,
                    placeholder=LINK_MISSING_LABEL,
                    placeholder_hint=LINK_MISSING_HINT,
                    locked=True,
                    replays=entries,
                )
            return BroadcastView(
                mode=state.mode,
                title=state.title,
                embed_url=live_embed,
                locked=True,
                replays=entries,
            )

        if isinstance(state, ReplayState):
            replay = self.selected_replay()
            replay_embed = embed_url(replay.video_url, autoplay=True) if replay else None
            title = replay.title if replay and replay.title else WATCH_FALLBACK_TITLE
            if replay_embed is None:
                return BroadcastView(
                    mode=state.mode,
                    title=title,
                    embed_url=None,
                    placeholder=NO_SELECTION_LABEL,
                    placeholder_hint=NO_SELECTION_HINT,
                    replays=entries,
                )
            return BroadcastView(
                mode=state.mode,
                title=title,
                embed_url=replay_embed,
                replays=entries,
            )

        return BroadcastView(
            mode=BroadcastMode.EMPTY,
            title=WATCH_FALLBACK_TITLE,
            embed_url=None,
            placeholder=EMPTY_LABEL,
            placeholder_hint=EMPTY_HINT,
        )


__all__ = [
    "BroadcastMode",
    "BroadcastSelector",
    "BroadcastState",
    "BroadcastView",
    "EmptyState",
    "LiveState",
    "LiveStream",
    "ReplayEntry",
    "ReplayItem",
    "ReplayState",
    "live_stream_from_record",
    "order_replays",
    "parse_replays",
    "replay_from_record",
]
