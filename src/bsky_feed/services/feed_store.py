"""Feed snapshot assembly and persistence.

The snapshot is a single JSON file that is fully replaced on every run.
Writes are not atomic; a crash mid-write can leave a truncated file,
which the next run treats as "no fallback available".
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from bsky_feed.schemas.feed import FEED_SOURCE, FeedFile, FeedItem
from bsky_feed.schemas.search import PostView

logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_feed(
    posts: list[PostView],
    queries: list[str],
    language: str | None,
    now: datetime | None = None,
) -> FeedFile:
    """Sort posts newest first and assemble the feed snapshot."""
    generated_at = format_timestamp(now or datetime.now(timezone.utc))

    # Missing timestamps take the snapshot time before sorting so the
    # order stays non-increasing. Plain string comparison.
    items = [FeedItem(uri=post.uri, indexed_at=post.indexed_at or generated_at) for post in posts]
    items.sort(key=lambda item: item.indexed_at, reverse=True)

    return FeedFile(
        generated_at=generated_at,
        source=FEED_SOURCE,
        query=list(queries),
        languages=[language] if language else [],
        items=items,
    )


def load_fallback_feed(path: str | Path) -> dict | None:
    """Return the previously written feed document, or None if it is unusable.

    The document is returned as parsed so that it can be written back
    unchanged.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.debug("No fallback feed at %s: %s", path, exc)
        return None

    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        logger.warning("Fallback feed at %s is not valid JSON: %s", path, exc)
        return None

    if not isinstance(parsed, dict) or not isinstance(parsed.get("items"), list):
        logger.warning("Fallback feed at %s has no items list", path)
        return None
    return parsed


def write_feed_file(path: str | Path, data: dict) -> Path:
    """Write the feed document as indented JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
