"""Read-only access to the club's content store (Sanity query API)."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

import requests

from .config import ContentStoreConfig

LOGGER = logging.getLogger(__name__)

UPCOMING_FIXTURES_QUERY = """*[_type == "fixture" && date > now()] | order(date asc)[0...3] {
  _id,
  date,
  venue,
  kickOff,
  matchday,
  homeTeam -> { name, shortName },
  awayTeam -> { name, shortName }
}"""

LIVE_STREAM_QUERY = """*[_type == "liveStream"][0]{
  isLive,
  youtubeUrl,
  matchTitle
}"""

REPLAYS_QUERY = """*[_type == "news" && defined(videoUrl)] | order(date desc){
  _id,
  title,
  "videoUrl": videoUrl,
  date
}"""

STORIES_QUERY = """*[_type == "stories"] | order(date desc){
  _id,
  title,
  date,
  excerpt,
  author
}"""

STANDINGS_QUERY = """*[_type == "leagueTable"] | order(position asc){
  _id,
  position,
  "team": team->name,
  played,
  won,
  drawn,
  lost,
  gf,
  ga,
  points,
  isSkyy
}"""

SQUAD_QUERY = """*[_type == "player"] | order(number asc) {
  _id,
  name,
  number,
  position,
  nationality,
  age,
  "photo": photo.asset->url
}"""

RESULTS_QUERY = """*[_type == "result"] | order(date desc){
  _id,
  date,
  homeScore,
  awayScore,
  outcome,
  "homeTeam": homeTeam->name,
  "awayTeam": awayTeam->name
}"""

COLLECTION_QUERIES: Mapping[str, str] = {
    "standings": STANDINGS_QUERY,
    "news": STORIES_QUERY,
    "squad": SQUAD_QUERY,
    "results": RESULTS_QUERY,
}


class ContentStoreError(RuntimeError):
    """Raised when the content store cannot answer a query."""


class CollectionSource(Protocol):
    def query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        ...


class ContentStoreClient:
    """Minimal client for the Sanity HTTP query endpoint."""

    def __init__(self, config: Optional[ContentStoreConfig] = None) -> None:
        self.config = config or ContentStoreConfig()
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "skyy_live/1.0",
                "Accept": "application/json",
            }
        )
        if self.config.token:
            self.session.headers["Authorization"] = f"Bearer {self.config.token}"

    @property
    def base_url(self) -> str:
        host = "apicdn.sanity.io" if self.config.use_cdn else "api.sanity.io"
        return (
            f"https://{self.config.project_id}.{host}"
            f"/v{self.config.api_version}/data/query/{self.config.dataset}"
        )

    def query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        request_params: Dict[str, str] = {"query": query}
        for name, value in (params or {}).items():
            request_params[f"${name}"] = json.dumps(value)
        try:
            response = self.session.get(
                self.base_url, params=request_params, timeout=self.config.timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ContentStoreError(f"Query failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise ContentStoreError("Content store returned invalid JSON.") from exc
        if not isinstance(payload, Mapping):
            raise ContentStoreError("Content store returned an unexpected payload.")
        return payload.get("result")


def as_records(result: Any) -> List[Dict[str, Any]]:
    """Normalize a query result into a list of record mappings."""

    if result is None:
        return []
    if isinstance(result, Mapping):
        return [dict(result)]
    if isinstance(result, (list, tuple)):
        return [dict(item) for item in result if isinstance(item, Mapping)]
    LOGGER.warning("Discarding query result of type %s", type(result).__name__)
    return []


async def fetch_collection(
    source: CollectionSource,
    query: str,
    params: Optional[Mapping[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Run ``query`` off the event loop; failures degrade to an empty list."""

    try:
        result = await asyncio.to_thread(source.query, query, params)
    except Exception as exc:
        LOGGER.warning("Content store query failed, treating as empty: %s", exc)
        return []
    return as_records(result)


__all__ = [
    "COLLECTION_QUERIES",
    "CollectionSource",
    "ContentStoreClient",
    "ContentStoreError",
    "LIVE_STREAM_QUERY",
    "REPLAYS_QUERY",
    "RESULTS_QUERY",
    "SQUAD_QUERY",
    "STANDINGS_QUERY",
    "STORIES_QUERY",
    "UPCOMING_FIXTURES_QUERY",
    "as_records",
    "fetch_collection",
]
