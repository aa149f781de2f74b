"""Configuration helpers for the skyy_live toolkit."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .fixtures import DEFAULT_TZ

LOGGER = logging.getLogger(__name__)

DEFAULT_PROJECT_ID = "qzvxb9vu"
DEFAULT_DATASET = "production"
DEFAULT_API_VERSION = "2026-02-23"
DEFAULT_TIMEZONE = "Europe/London"
DEFAULT_PAGE_SIZES: Mapping[str, int] = {
    "standings": 8,
    "news": 6,
    "squad": 6,
    "results": 8,
}


@dataclass(slots=True)
class ContentStoreConfig:
    """Settings required to query the content store."""

    project_id: str = DEFAULT_PROJECT_ID
    dataset: str = DEFAULT_DATASET
    api_version: str = DEFAULT_API_VERSION
    use_cdn: bool = True
    token: Optional[str] = None
    timeout: float = 30.0


@dataclass(slots=True)
class AppConfig:
    """Root configuration model."""

    content_store: ContentStoreConfig = field(default_factory=ContentStoreConfig)
    page_sizes: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_PAGE_SIZES))
    timezone: str = DEFAULT_TIMEZONE

    def page_size(self, name: str) -> int:
        return self.page_sizes.get(name, DEFAULT_PAGE_SIZES.get(name, 8))

    def resolve_timezone(self) -> tzinfo:
        """Return the configured zone, or the club default when it is unknown."""

        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            LOGGER.warning("Unknown timezone %r, using %s", self.timezone, DEFAULT_TZ.key)
            return DEFAULT_TZ

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "AppConfig":
        store_section = mapping.get("content_store")
        store = ContentStoreConfig()
        if isinstance(store_section, Mapping):
            timeout_value = store_section.get("timeout")
            try:
                timeout = float(timeout_value) if timeout_value is not None else 30.0
            except (TypeError, ValueError):
                timeout = 30.0
            store = ContentStoreConfig(
                project_id=str(store_section.get("project_id") or DEFAULT_PROJECT_ID).strip(),
                dataset=str(store_section.get("dataset") or DEFAULT_DATASET).strip(),
                api_version=str(store_section.get("api_version") or DEFAULT_API_VERSION).strip(),
                use_cdn=bool(store_section.get("use_cdn", True)),
                token=(str(store_section.get("token") or "").strip() or None),
                timeout=timeout,
            )

        page_sizes = dict(DEFAULT_PAGE_SIZES)
        raw_sizes = mapping.get("page_sizes")
        if isinstance(raw_sizes, Mapping):
            for name, value in raw_sizes.items():
                try:
                    size = int(value)
                except (TypeError, ValueError):
                    continue
                if size > 0:
                    page_sizes[str(name)] = size

        timezone = str(mapping.get("timezone") or DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
        return cls(content_store=store, page_sizes=page_sizes, timezone=timezone)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load a configuration file from YAML, or the defaults without a path."""

    if path is None:
        return AppConfig()
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Configuration file must contain a mapping at the root.")
    return AppConfig.from_mapping(data)
