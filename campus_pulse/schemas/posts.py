"""Text fields of ping and comment writes, sent as form fields or as a JSON object."""

from pydantic import BaseModel


class PingFields(BaseModel):
    content: str | None = None
    category: str | None = None
    location_name: str | None = None


class CommentFields(BaseModel):
    content: str | None = None
