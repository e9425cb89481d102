"""Multi-query aggregation: one search per effective query, merged by post URI."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from bsky_feed.schemas.search import PostView, SearchParams
from bsky_feed.services.retry import RETRY_BASE_DELAY_MS, RETRY_COUNT, search_posts_with_retry
from bsky_feed.services.xrpc import BskyClient

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Posts merged across queries, keyed by URI in first-seen order."""

    posts: dict[str, PostView] = field(default_factory=dict)
    had_success: bool = False
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


async def collect_posts(
    client: BskyClient,
    queries: list[str],
    *,
    language: str | None = None,
    limit: int = 100,
    retry_count: int = RETRY_COUNT,
    base_delay_ms: int = RETRY_BASE_DELAY_MS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AggregationResult:
    """Search each query in turn; a failing query contributes nothing.

    A query that succeeds with zero posts still counts as a success.
    """
    result = AggregationResult()

    for query in queries:
        if not query:
            continue
        params = SearchParams(q=query, limit=limit, lang=language, sort="latest")
        try:
            response = await search_posts_with_retry(
                client,
                params,
                retry_count=retry_count,
                base_delay_ms=base_delay_ms,
                sleep=sleep,
            )
        except Exception as exc:
            logger.warning('searchPosts failed for query "%s": %s', query, exc)
            result.failed.append(query)
            continue

        result.had_success = True
        result.succeeded.append(query)
        for post in response.posts or []:
            if post.uri not in result.posts:
                result.posts[post.uri] = post

    return result
