"""Pydantic request/response schemas."""

from campus_pulse.schemas.auth import CurrentUser, LoginRequest, LoginResponse, RegisterRequest
from campus_pulse.schemas.feed import CommentRead, PingRead
from campus_pulse.schemas.health import HealthResponse
from campus_pulse.schemas.messages import (
    CommentCreatedResponse,
    MessageResponse,
    PingCreatedResponse,
    VoteResponse,
)
from campus_pulse.schemas.posts import CommentFields, PingFields

__all__ = [
    "CommentCreatedResponse",
    "CommentFields",
    "CommentRead",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "PingCreatedResponse",
    "PingFields",
    "PingRead",
    "RegisterRequest",
    "VoteResponse",
]
