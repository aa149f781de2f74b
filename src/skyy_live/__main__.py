from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import tzinfo
from pathlib import Path
from typing import Optional, Sequence

from .config import AppConfig, load_config
from .content import COLLECTION_QUERIES, CollectionSource, ContentStoreClient
from .countdown import TimeLeft
from .views import MatchPanelView, PagedListView, WatchView


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SKYY FC live match day tools")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: built-in content store settings).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("next-fixture", help="Show the next fixture and its countdown.")

    countdown = subparsers.add_parser("countdown", help="Print the live countdown every second.")
    countdown.add_argument(
        "--seconds",
        type=int,
        default=10,
        help="How long to keep the countdown running (default: 10).",
    )

    watch = subparsers.add_parser("watch", help="Show what the watch page plays.")
    watch.add_argument("--select", default=None, help="Replay id to pick.")

    page = subparsers.add_parser("page", help="Show one page of a collection.")
    page.add_argument("name", choices=sorted(COLLECTION_QUERIES))
    page.add_argument(
        "--page",
        type=int,
        default=0,
        help="0-indexed page number, clamped into range (default: 0).",
    )
    return parser


def _format_countdown(value: TimeLeft) -> str:
    return f"{value.days}d {value.hours}:{value.minutes}:{value.seconds}"


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


async def _run_next_fixture(source: CollectionSource, tz: tzinfo) -> None:
    view = MatchPanelView(source, tz=tz)
    await view.mount()
    try:
        _print_json(view.render().as_dict())
    finally:
        view.unmount()


async def _run_countdown(source: CollectionSource, tz: tzinfo, seconds: int) -> None:
    view = MatchPanelView(source, tz=tz)
    await view.mount()
    try:
        snapshot = view.render()
        title = snapshot.next_fixture.title if snapshot.next_fixture else "No fixture"
        print(f"{title} @ {snapshot.venue}")
        print(_format_countdown(view.countdown.value))
        view.countdown.subscribe(lambda value: print(_format_countdown(value)))
        await asyncio.sleep(max(seconds, 0))
    finally:
        view.unmount()


async def _run_watch(source: CollectionSource, tz: tzinfo, select: Optional[str]) -> None:
    view = WatchView(source, tz=tz)
    await view.mount()
    try:
        if select and not view.select(select) and view.selector.locked:
            print("Live match is on. Replays will unlock when live ends.", file=sys.stderr)
        _print_json(view.render().as_dict())
    finally:
        view.unmount()


async def _run_page(source: CollectionSource, config: AppConfig, name: str, page: int) -> None:
    view = PagedListView(source, COLLECTION_QUERIES[name], config.page_size(name))
    await view.mount()
    try:
        view.set_page(page)
        _print_json(view.render().as_dict())
    finally:
        view.unmount()


def main(argv: Optional[Sequence[str]] = None, *, source: Optional[CollectionSource] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    tz = config.resolve_timezone()
    if source is None:
        source = ContentStoreClient(config.content_store)

    if args.command == "next-fixture":
        asyncio.run(_run_next_fixture(source, tz))
    elif args.command == "countdown":
        asyncio.run(_run_countdown(source, tz, args.seconds))
    elif args.command == "watch":
        asyncio.run(_run_watch(source, tz, args.select))
    elif args.command == "page":
        asyncio.run(_run_page(source, config, args.name, args.page))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
