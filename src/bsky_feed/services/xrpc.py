"""Minimal Bluesky XRPC client: session login and post search over httpx.

Only the two calls the feed job needs are implemented. Transport errors
raised by httpx are left to propagate unchanged so the retry policy can
classify them.
"""

import logging

import httpx

from bsky_feed.schemas.search import SearchParams, SearchPostsResponse, Session

logger = logging.getLogger(__name__)

CREATE_SESSION = "com.atproto.server.createSession"
SEARCH_POSTS = "app.bsky.feed.searchPosts"


class XrpcError(Exception):
    """An XRPC call returned an error response."""

    def __init__(self, status: int | None, error: str | None = None, message: str | None = None) -> None:
        self.status = status
        self.error = error
        self.message = message
        summary = f"XRPC {status} {error or 'UnknownError'}"
        super().__init__(f"{summary}: {message}" if message else summary)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "XrpcError":
        """Build an error from an XRPC JSON error body, tolerating non-JSON bodies."""
        error = None
        message = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            message = body.get("message")
        if message is None and body is None:
            message = response.text[:200] or None
        return cls(response.status_code, error, message)


class BskyClient:
    """Async client for a Bluesky PDS / AppView."""

    def __init__(
        self,
        service: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.service = service.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.service,
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "bsky-feed"},
        )
        self.session: Session | None = None

    async def __aenter__(self) -> "BskyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def login(self, identifier: str, password: str) -> Session:
        """Create a session and keep its access token for later calls."""
        response = await self._http.post(
            f"/xrpc/{CREATE_SESSION}",
            json={"identifier": identifier, "password": password},
        )
        if response.status_code >= 400:
            raise XrpcError.from_response(response)

        self.session = Session.model_validate(response.json())
        logger.debug("Logged in to %s as %s", self.service, self.session.handle)
        return self.session

    async def search_posts(self, params: SearchParams) -> SearchPostsResponse:
        """Run one searchPosts request (a single page)."""
        if self.session is None:
            raise XrpcError(401, "AuthenticationRequired", "login() must be called before searching")

        response = await self._http.get(
            f"/xrpc/{SEARCH_POSTS}",
            params=params.to_query(),
            headers={"Authorization": f"Bearer {self.session.access_jwt}"},
        )
        if response.status_code >= 400:
            raise XrpcError.from_response(response)

        return SearchPostsResponse.model_validate(response.json())
