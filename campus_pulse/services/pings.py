"""Ping feed queries and ping writes."""

import base64
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_pulse.core.errors import NotFoundError
from campus_pulse.models import Comment, Ping, PingVote, User
from campus_pulse.models.ping import DEFAULT_CATEGORY, UPVOTE
from campus_pulse.schemas.feed import PingRead

logger = logging.getLogger(__name__)

MAX_FEED_SIZE = 50


def encode_image(data: bytes | None) -> str | None:
    if not data:
        return None
    return base64.b64encode(data).decode("ascii")


def list_feed(db: Session, limit: int = MAX_FEED_SIZE) -> list[PingRead]:
    """
    Active pings, newest first (id breaks ties), at most MAX_FEED_SIZE rows.

    Each row carries the author's username, vote_count derived from
    ping_votes, comment_count, and the image as base64 when one is stored.
    """
    limit = max(1, min(limit, MAX_FEED_SIZE))
    vote_count = (
        select(func.count(PingVote.id))
        .where(PingVote.ping_id == Ping.id, PingVote.vote_type == UPVOTE)
        .correlate(Ping)
        .scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.ping_id == Ping.id)
        .correlate(Ping)
        .scalar_subquery()
    )
    stmt = (
        select(
            Ping,
            User.username,
            vote_count.label("vote_count"),
            comment_count.label("comment_count"),
        )
        .join(User, Ping.user_id == User.id)
        .where(Ping.is_active.is_(True))
        .order_by(Ping.created_at.desc(), Ping.id.desc())
        .limit(limit)
    )
    feed: list[PingRead] = []
    for ping, username, votes, comments in db.execute(stmt).all():
        fields = {
            "id": ping.id,
            "user_id": ping.user_id,
            "username": username,
            "content": ping.content,
            "category": ping.category,
            "location_name": ping.location_name,
            "upvotes": ping.upvotes,
            "vote_count": votes,
            "comment_count": comments,
            "created_at": ping.created_at,
        }
        image = encode_image(ping.image_data)
        if image is not None:
            fields["image_base64"] = image
        feed.append(PingRead(**fields))
    return feed


def get_ping_or_404(db: Session, ping_id: int) -> Ping:
    ping = db.get(Ping, ping_id)
    if ping is None:
        raise NotFoundError("Ping not found")
    return ping


def create_ping(
    db: Session,
    user_id: int,
    content: str,
    category: str | None = None,
    location_name: str | None = None,
    image_data: bytes | None = None,
) -> Ping:
    ping = Ping(
        user_id=user_id,
        content=content,
        category=category or DEFAULT_CATEGORY,
        location_name=location_name,
        image_data=image_data,
    )
    db.add(ping)
    db.commit()
    logger.info("Ping %s created by user %s", ping.id, user_id)
    return ping


def update_ping(
    db: Session,
    ping: Ping,
    content: str,
    category: str | None = None,
    location_name: str | None = None,
    image_data: bytes | None = None,
) -> Ping:
    """Overwrite the editable fields; the stored image is kept unless a new one is given."""
    ping.content = content
    ping.category = category or DEFAULT_CATEGORY
    ping.location_name = location_name
    if image_data is not None:
        ping.image_data = image_data
    db.commit()
    return ping


def delete_ping(db: Session, ping: Ping) -> None:
    """Hard delete; comments and votes go with it."""
    ping_id = ping.id
    db.delete(ping)
    db.commit()
    logger.info("Ping %s deleted", ping_id)
