"""SQLAlchemy ORM models."""

from campus_pulse.models.base import Base
from campus_pulse.models.comment import Comment
from campus_pulse.models.ping import Ping, PingVote
from campus_pulse.models.user import User

__all__ = ["Base", "Comment", "Ping", "PingVote", "User"]
