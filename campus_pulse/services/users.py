"""User lookups, registration and credential checks."""

from functools import lru_cache

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_pulse.core.errors import ConflictError
from campus_pulse.core.security import hash_password, verify_password
from campus_pulse.models import User

USERNAME_TAKEN = "Username taken"


@lru_cache
def _dummy_hash(rounds: int) -> str:
    # Checked against when the username is unknown so both login failures cost a bcrypt round.
    return hash_password("campus-pulse-unknown-user", rounds)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def username_taken(db: Session, username: str) -> bool:
    return db.execute(select(User.id).where(User.username == username)).first() is not None


def create_user(db: Session, username: str, password: str, role: str, rounds: int = 12) -> User:
    """Insert a user with a bcrypt hash; raises ConflictError if the username exists."""
    if username_taken(db, username):
        raise ConflictError(USERNAME_TAKEN)
    user = User(username=username, password_hash=hash_password(password, rounds), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same name.
        db.rollback()
        raise ConflictError(USERNAME_TAKEN) from e
    return user


def authenticate_user(
    db: Session, username: str, password: str, rounds: int = 12
) -> User | None:
    """Return the user if the password matches; None for unknown user or wrong password."""
    user = get_user_by_username(db, username)
    if user is None:
        verify_password(password, _dummy_hash(rounds))
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
