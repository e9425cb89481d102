"""Schemas for the app.bsky.feed.searchPosts and createSession XRPC calls."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SearchParams(BaseModel):
    """Query parameters for a single searchPosts request."""

    q: str
    limit: int = Field(default=100, ge=1, le=100)
    lang: str | None = None
    sort: Literal["latest", "top"] = "latest"

    def to_query(self) -> dict[str, str | int]:
        """Return the parameters as a query dict, omitting unset values."""
        return self.model_dump(exclude_none=True)


class PostView(BaseModel):
    """The fields of a remote post the feed needs. Everything else is ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uri: str
    indexed_at: str | None = Field(default=None, alias="indexedAt")


class SearchPostsResponse(BaseModel):
    """Response body of searchPosts."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    posts: list[PostView] | None = None
    hits_total: int | None = Field(default=None, alias="hitsTotal")


class Session(BaseModel):
    """Subset of the createSession response used for authenticated calls."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    did: str
    handle: str
    access_jwt: str = Field(alias="accessJwt")
