"""ORM models for pings and the per-user votes on them."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.orm import relationship

from campus_pulse.models.base import Base, utcnow

DEFAULT_CATEGORY = "Other"
UPVOTE = 1


class Ping(Base):
    """
    A short feed post, optionally with a compressed JPEG attached.

    upvotes is a stored counter adjusted alongside ping_votes inserts and
    deletes; the feed also reports vote_count derived from ping_votes.
    """

    __tablename__ = "pings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content = Column(Text, nullable=False)
    category = Column(String(64), nullable=False, default=DEFAULT_CATEGORY)
    location_name = Column(String(255), nullable=True)
    image_data = Column(LargeBinary, nullable=True)
    upvotes = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    author = relationship("User")
    comments = relationship(
        "Comment", back_populates="ping", cascade="all, delete-orphan"
    )
    votes = relationship(
        "PingVote", back_populates="ping", cascade="all, delete-orphan"
    )


class PingVote(Base):
    """One user's upvote on one ping; the row existing is the vote."""

    __tablename__ = "ping_votes"
    __table_args__ = (UniqueConstraint("user_id", "ping_id", name="uq_ping_votes_user_ping"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    ping_id = Column(
        Integer, ForeignKey("pings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vote_type = Column(SmallInteger, nullable=False, default=UPVOTE)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    ping = relationship("Ping", back_populates="votes")
