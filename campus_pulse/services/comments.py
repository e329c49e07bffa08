"""Comment thread queries and comment writes."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_pulse.core.errors import NotFoundError
from campus_pulse.models import Comment, User
from campus_pulse.schemas.feed import CommentRead
from campus_pulse.services.pings import encode_image, get_ping_or_404


def list_comments(db: Session, ping_id: int) -> list[CommentRead]:
    """Comments on a ping, oldest first, with author usernames. Unknown ping -> []."""
    stmt = (
        select(Comment, User.username)
        .join(User, Comment.user_id == User.id)
        .where(Comment.ping_id == ping_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    thread: list[CommentRead] = []
    for comment, username in db.execute(stmt).all():
        fields = {
            "id": comment.id,
            "ping_id": comment.ping_id,
            "user_id": comment.user_id,
            "username": username,
            "content": comment.content,
            "created_at": comment.created_at,
        }
        image = encode_image(comment.image_data)
        if image is not None:
            fields["image_base64"] = image
        thread.append(CommentRead(**fields))
    return thread


def get_comment_or_404(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def create_comment(
    db: Session,
    user_id: int,
    ping_id: int,
    content: str,
    image_data: bytes | None = None,
) -> Comment:
    get_ping_or_404(db, ping_id)
    comment = Comment(user_id=user_id, ping_id=ping_id, content=content, image_data=image_data)
    db.add(comment)
    db.commit()
    return comment


def update_comment(
    db: Session, comment: Comment, content: str, image_data: bytes | None = None
) -> Comment:
    comment.content = content
    if image_data is not None:
        comment.image_data = image_data
    db.commit()
    return comment


def delete_comment(db: Session, comment: Comment) -> None:
    db.delete(comment)
    db.commit()
