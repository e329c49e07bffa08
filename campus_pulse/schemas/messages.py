"""Plain acknowledgement bodies shared by the write endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    message: str


class PingCreatedResponse(MessageResponse):
    ping_id: int = Field(..., alias="pingId")

    model_config = ConfigDict(populate_by_name=True)


class CommentCreatedResponse(MessageResponse):
    comment_id: int = Field(..., alias="commentId")

    model_config = ConfigDict(populate_by_name=True)


class VoteResponse(MessageResponse):
    voted: bool
