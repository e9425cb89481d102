"""Test fixtures and configuration."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
import respx
from httpx import Response

from bsky_feed.config import FeedConfig, get_settings
from bsky_feed.services.xrpc import BskyClient

SERVICE = "https://bsky.test"

ENV_VARS = (
    "BSKY_APP_HANDLE",
    "BSKY_APP_PASSWORD",
    "BSKY_SERVICE",
    "BSKY_SEARCH_QUERY",
    "BSKY_SEARCH_LANG",
    "BSKY_MUTE_WORDS",
    "FEED_PATH",
    "SEARCH_LIMIT",
    "RETRY_COUNT",
    "RETRY_BASE_DELAY_MS",
    "HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Run every test without inherited BSKY_* variables or a stray .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def feed_path(tmp_path):
    return tmp_path / "data" / "feed.json"


@pytest.fixture
def make_config(feed_path):
    """Return a factory for FeedConfig with test-friendly defaults."""

    def _make(**overrides) -> FeedConfig:
        values = {
            "identifier": "tester.bsky.social",
            "password": "app-password",
            "service": SERVICE,
            "queries": {"cats": "cats"},
            "feed_path": str(feed_path),
        }
        values.update(overrides)
        return FeedConfig(**values)

    return _make


@pytest.fixture
def session_body() -> dict:
    return {
        "did": "did:plc:tester",
        "handle": "tester.bsky.social",
        "accessJwt": "access-token",
        "refreshJwt": "refresh-token",
    }


@pytest.fixture
def bsky_mock(session_body):
    """respx router for the test service with createSession pre-mocked."""
    with respx.mock(base_url=SERVICE, assert_all_called=False) as router:
        router.post("/xrpc/com.atproto.server.createSession", name="login").mock(
            return_value=Response(200, json=session_body)
        )
        yield router


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[BskyClient, None]:
    bsky = BskyClient(SERVICE)
    yield bsky
    await bsky.aclose()


@pytest_asyncio.fixture
async def logged_in_client(client: BskyClient, bsky_mock) -> BskyClient:
    await client.login("tester.bsky.social", "app-password")
    return client


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_post():
    """Return a builder for post views shaped like searchPosts results."""

    def _post(uri: str, indexed_at: str | None = "2024-01-01T00:00:00.000Z", **extra) -> dict:
        body = {"uri": uri, "cid": "bafy" + uri[-6:], "author": {"handle": "someone.bsky.social"}}
        if indexed_at is not None:
            body["indexedAt"] = indexed_at
        body.update(extra)
        return body

    return _post
