"""FastAPI application exposing the live match day state as JSON."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from .config import AppConfig, load_config
from .content import COLLECTION_QUERIES, CollectionSource, ContentStoreClient
from .views import MatchPanelView, PagedListView, WatchView

CONFIG_ENV_VAR = "SKYY_LIVE_CONFIG"

app = FastAPI(title="SKYY FC live API")


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    raw_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    return load_config(Path(raw_path) if raw_path else None)


@lru_cache(maxsize=1)
def _default_client() -> ContentStoreClient:
    return ContentStoreClient(get_config().content_store)


def get_source() -> CollectionSource:
    return _default_client()


@app.get("/fixtures/next")
async def get_next_fixture(
    source: CollectionSource = Depends(get_source),
    config: AppConfig = Depends(get_config),
) -> Dict[str, Any]:
    """Return the next fixture, its countdown and the fixture list."""

    view = MatchPanelView(source, tz=config.resolve_timezone())
    await view.mount()
    try:
        return view.render().as_dict()
    finally:
        view.unmount()


@app.get("/watch")
async def get_watch(
    select: Optional[str] = Query(None, description="Replay id picked by the viewer."),
    source: CollectionSource = Depends(get_source),
    config: AppConfig = Depends(get_config),
) -> Dict[str, Any]:
    """Return what the watch page plays right now."""

    view = WatchView(source, tz=config.resolve_timezone())
    await view.mount()
    try:
        if select:
            view.select(select)
        return view.render().as_dict()
    finally:
        view.unmount()


@app.get("/collections/{name}")
async def get_collection_page(
    name: str,
    page: int = Query(0, description="0-indexed page, clamped into range."),
    source: CollectionSource = Depends(get_source),
    config: AppConfig = Depends(get_config),
) -> Dict[str, Any]:
    """Return one page of a content collection."""

    query = COLLECTION_QUERIES.get(name)
    if query is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection '{name}'.")
    view = PagedListView(source, query, config.page_size(name))
    await view.mount()
    try:
        view.set_page(page)
        return view.render().as_dict()
    finally:
        view.unmount()


@app.get("/collections")
def get_collections() -> list[str]:
    """Return all pageable collection names."""

    return list(COLLECTION_QUERIES.keys())
