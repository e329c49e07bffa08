"""Upvote toggle: the vote row and the ping's upvotes counter change together."""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_pulse.core.errors import NotFoundError
from campus_pulse.models import Ping, PingVote
from campus_pulse.models.ping import UPVOTE

logger = logging.getLogger(__name__)


def has_voted(db: Session, user_id: int, ping_id: int) -> bool:
    stmt = select(PingVote.id).where(PingVote.user_id == user_id, PingVote.ping_id == ping_id)
    return db.execute(stmt).first() is not None


def toggle_vote(db: Session, user_id: int, ping_id: int) -> bool:
    """
    Flip the user's upvote on a ping and return the new state (True = voted).

    Runs as one transaction. The ping row is locked first (FOR UPDATE; a no-op
    on SQLite, which serializes writers anyway), so concurrent toggles on the
    same ping apply one after another and the counter tracks the vote rows.
    """
    try:
        locked = db.execute(
            select(Ping.id).where(Ping.id == ping_id).with_for_update()
        ).first()
        if locked is None:
            raise NotFoundError("Ping not found")

        removed = db.execute(
            delete(PingVote).where(PingVote.user_id == user_id, PingVote.ping_id == ping_id)
        ).rowcount
        if removed:
            db.execute(update(Ping).where(Ping.id == ping_id).values(upvotes=Ping.upvotes - 1))
            voted = False
        else:
            db.add(PingVote(user_id=user_id, ping_id=ping_id, vote_type=UPVOTE))
            db.flush()
            db.execute(update(Ping).where(Ping.id == ping_id).values(upvotes=Ping.upvotes + 1))
            voted = True
        db.commit()
    except IntegrityError:
        db.rollback()
        # A concurrent request inserted the same (user, ping) row first.
        if has_voted(db, user_id, ping_id):
            logger.info("Concurrent vote by user %s on ping %s already recorded", user_id, ping_id)
            return True
        raise
    except Exception:
        db.rollback()
        raise

    logger.debug("User %s vote on ping %s -> %s", user_id, ping_id, voted)
    return voted
