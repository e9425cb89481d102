"""Feed job entry point: login, search, then fall back or write the snapshot."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable

from bsky_feed import __version__
from bsky_feed.config import FeedConfig, get_settings, resolve_config
from bsky_feed.services.aggregation import collect_posts
from bsky_feed.services.feed_store import build_feed, load_fallback_feed, write_feed_file
from bsky_feed.services.xrpc import BskyClient

logger = logging.getLogger(__name__)


async def run(
    config: FeedConfig,
    client: BskyClient | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> dict:
    """Run one feed generation pass and return the document that was written.

    If every query fails and a valid previous feed exists, that feed is
    rewritten unchanged. If no previous feed is usable, a feed is written
    from whatever was collected, which may be empty.
    """
    owns_client = client is None
    if client is None:
        client = BskyClient(config.service, timeout=config.http_timeout_seconds)

    try:
        await client.login(config.identifier, config.password)

        queries = config.effective_queries
        result = await collect_posts(
            client,
            queries,
            language=config.language,
            limit=config.search_limit,
            retry_count=config.retry_count,
            base_delay_ms=config.retry_base_delay_ms,
            sleep=sleep,
        )
    finally:
        if owns_client:
            await client.aclose()

    if not result.had_success:
        fallback = load_fallback_feed(config.feed_path)
        if fallback is not None:
            logger.warning("All queries failed; using previous %s as fallback.", config.feed_path)
            write_feed_file(config.feed_path, fallback)
            return fallback
        logger.warning("All queries failed and no previous feed is available; writing an empty feed.")
    elif result.failed:
        logger.warning(
            "%d of %d queries failed: %s",
            len(result.failed),
            len(result.failed) + len(result.succeeded),
            ", ".join(result.failed),
        )

    feed = build_feed(list(result.posts.values()), queries, config.language)
    data = feed.to_json_dict()
    write_feed_file(config.feed_path, data)

    logger.info(
        "Wrote %d posts from queries [%s] to %s (languages: %s)",
        len(feed.items),
        ", ".join(queries),
        config.feed_path,
        config.language or "all",
    )
    return data


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bsky-feed",
        description="Search Bluesky for the configured terms and write a JSON feed",
    )
    parser.add_argument(
        "--feed-path",
        type=str,
        default=None,
        help="Output file (default: FEED_PATH or data/feed.json)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = _parse_args(argv)

    try:
        settings = get_settings()
        if args.feed_path:
            settings = settings.model_copy(update={"feed_path": args.feed_path})

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        config = resolve_config(settings)
        asyncio.run(run(config))
    except Exception as exc:
        logger.error("Feed generation failed: %s", exc, exc_info=args.verbose)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
