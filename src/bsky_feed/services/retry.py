"""Retry with exponential backoff around a single searchPosts call."""

import asyncio
import errno
import logging
import socket
from collections.abc import Awaitable, Callable

import httpx

from bsky_feed.schemas.search import SearchParams, SearchPostsResponse
from bsky_feed.services.xrpc import BskyClient, XrpcError

logger = logging.getLogger(__name__)

RETRY_COUNT = 3
RETRY_BASE_DELAY_MS = 500

_RETRYABLE_ERRNOS = {errno.ETIMEDOUT, errno.ECONNRESET, socket.EAI_AGAIN}


def _has_retryable_errno(exc: BaseException) -> bool:
    """Walk the exception chain looking for a transient socket error."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, OSError) and current.errno in _RETRYABLE_ERRNOS:
            return True
        current = current.__cause__ or current.__context__
    return False


def is_retryable_error(exc: BaseException) -> bool:
    """Classify a failed remote call as transient (worth retrying) or not."""
    status = getattr(exc, "status", None) or 0
    if isinstance(status, int) and status >= 500:
        return True

    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if _has_retryable_errno(exc):
        return True

    if isinstance(exc, XrpcError):
        return exc.error == "InternalServerError" or status == 0
    return False


async def search_posts_with_retry(
    client: BskyClient,
    params: SearchParams,
    *,
    retry_count: int = RETRY_COUNT,
    base_delay_ms: int = RETRY_BASE_DELAY_MS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> SearchPostsResponse:
    """Run searchPosts, retrying transient failures up to ``retry_count`` times.

    The delay before retry ``n`` (0-based) is ``base_delay_ms * 2**n``.
    Non-retryable errors propagate immediately; the last error propagates
    once retries are exhausted.
    """
    attempt = 0
    while True:
        try:
            return await client.search_posts(params)
        except Exception as exc:
            if not is_retryable_error(exc) or attempt >= retry_count:
                raise
            delay_ms = base_delay_ms * 2**attempt
            logger.warning(
                "searchPosts failed (attempt %d/%d); retrying in %dms: %s",
                attempt + 1,
                retry_count + 1,
                delay_ms,
                exc,
            )
            await sleep(delay_ms / 1000)
            attempt += 1
