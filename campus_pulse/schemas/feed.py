"""Read models for the ping feed and comment threads."""

from datetime import datetime

from pydantic import BaseModel, Field


class PingRead(BaseModel):
    """
    One feed entry.

    vote_count is derived from ping_votes; upvotes is the stored counter.
    image_base64 is only present when the ping has an image.
    """

    id: int
    user_id: int
    username: str
    content: str
    category: str
    location_name: str | None = None
    upvotes: int
    vote_count: int
    comment_count: int
    created_at: datetime
    image_base64: str | None = Field(default=None, description="Base64-encoded JPEG")


class CommentRead(BaseModel):
    """One comment in a thread; image_base64 only present when an image is stored."""

    id: int
    ping_id: int
    user_id: int
    username: str
    content: str
    created_at: datetime
    image_base64: str | None = Field(default=None, description="Base64-encoded JPEG")
