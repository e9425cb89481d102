"""Schemas for the persisted feed file."""

from pydantic import BaseModel, ConfigDict, Field

FEED_SOURCE = "bsky.searchPosts"


class FeedItem(BaseModel):
    """Minimal reference to a post in the feed."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str
    indexed_at: str = Field(alias="indexedAt")


class FeedFile(BaseModel):
    """Snapshot written to data/feed.json."""

    model_config = ConfigDict(populate_by_name=True)

    generated_at: str = Field(alias="generatedAt")
    source: str = FEED_SOURCE
    query: list[str]
    languages: list[str] = Field(default_factory=list, max_length=1)
    items: list[FeedItem]

    def to_json_dict(self) -> dict:
        """Serialize using the camelCase keys of the on-disk format."""
        return self.model_dump(by_alias=True)
