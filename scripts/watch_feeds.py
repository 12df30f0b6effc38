#!/usr/bin/env python3
"""Run the reconciliation loop headless and log what happens.

Usage:
    python scripts/watch_feeds.py
    python scripts/watch_feeds.py --window last_day --search climate
    python scripts/watch_feeds.py --source https://example.com/rss.xml Technology --cycles 3

Options:
    --window      Time window: all, last_hour, last_day, last_week
    --search      Only show titles containing this term
    --hide        Category to hide (repeatable)
    --source      Extra feed source: URL CATEGORY (repeatable)
    --cycles      Stop after this many polls (default: run until Ctrl-C)
    --interval    Poll interval in seconds
    --env         Settings preset: dev, prod, test (default: prod)
"""

import argparse
import asyncio
import logging
import sys

from feedscape.config import Environment, get_settings_for
from feedscape.context import ReconciliationContext
from feedscape.models import SourceDescriptor, TimeWindow

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def watch(args: argparse.Namespace) -> None:
    cfg = get_settings_for(args.env)
    if args.interval is not None:
        cfg.poll_interval_seconds = args.interval

    ctx = ReconciliationContext(cfg)
    for address, category in args.source or []:
        ctx.sources.append(SourceDescriptor(address=address, category=category))
        ctx.layout.register(category)

    visibility = {c: c not in (args.hide or []) for c in ctx.layout.categories}
    ctx.update_filters(
        time_window=args.window,
        category_visibility=visibility,
        search_term=args.search,
    )

    done = asyncio.Event()

    def report(batch) -> None:
        result = ctx.apply_batch(batch)
        print(
            f"poll {ctx.scheduler.polls}: {len(ctx.store)} entities, "
            f"{len(ctx.visible)} visible | +{len(result.created)} "
            f"-{len(result.destroyed)} ~{len(result.repositioned)} | {result.edges} edges"
        )
        if args.cycles and ctx.scheduler.polls >= args.cycles:
            done.set()

    ctx.scheduler.on_batch = report
    await ctx.start()
    try:
        await done.wait()
    finally:
        await ctx.teardown()


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch feeds reconcile into the scene")
    parser.add_argument("--window", choices=[w.value for w in TimeWindow], default="all")
    parser.add_argument("--search", default="")
    parser.add_argument("--hide", action="append")
    parser.add_argument("--source", nargs=2, action="append", metavar=("URL", "CATEGORY"))
    parser.add_argument("--cycles", type=int, default=0)
    parser.add_argument("--interval", type=float, default=None)
    parser.add_argument("--env", choices=[e.value for e in Environment], default="prod")
    args = parser.parse_args()

    try:
        asyncio.run(watch(args))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
