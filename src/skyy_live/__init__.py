"""Live match day state for the SKYY FC website: countdown, next fixture, watch page."""

from .broadcast import (
    BroadcastMode,
    BroadcastSelector,
    BroadcastView,
    LiveStream,
    ReplayItem,
)
from .content import ContentStoreClient, ContentStoreError, fetch_collection
from .countdown import Countdown, TimeLeft, time_left
from .fixtures import Fixture, is_past, select_next_fixture
from .paging import PagedCollection
from .youtube import embed_url, youtube_id

__all__ = [
    "BroadcastMode",
    "BroadcastSelector",
    "BroadcastView",
    "ContentStoreClient",
    "ContentStoreError",
    "Countdown",
    "Fixture",
    "LiveStream",
    "PagedCollection",
    "ReplayItem",
    "TimeLeft",
    "embed_url",
    "fetch_collection",
    "is_past",
    "select_next_fixture",
    "time_left",
    "youtube_id",
]
