"""Comment threads under pings, with optional compressed images."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from campus_pulse.api.deps import comment_fields, get_image_processor
from campus_pulse.api.routes.auth import get_current_user
from campus_pulse.core.database import get_db
from campus_pulse.core.errors import ValidationFailedError
from campus_pulse.schemas.auth import CurrentUser
from campus_pulse.schemas.feed import CommentRead
from campus_pulse.schemas.messages import CommentCreatedResponse, MessageResponse
from campus_pulse.schemas.posts import CommentFields
from campus_pulse.services import comments as comment_service
from campus_pulse.services.authorization import ensure_can_modify
from campus_pulse.services.media import ImageProcessor

router = APIRouter()


def _require_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise ValidationFailedError("Comment content required")
    return content


@router.get(
    "/pings/{ping_id}/comments",
    response_model=list[CommentRead],
    response_model_exclude_unset=True,
)
def get_comments(
    ping_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> list[CommentRead]:
    return comment_service.list_comments(db, ping_id)


@router.post(
    "/pings/{ping_id}/comments",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    ping_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    images: Annotated[ImageProcessor, Depends(get_image_processor)],
    fields: Annotated[CommentFields, Depends(comment_fields)],
    image: Annotated[UploadFile | None, File()] = None,
) -> CommentCreatedResponse:
    content = _require_content(fields.content)
    raw = images.read(image)
    image_data = images.process(raw) if raw is not None else None
    comment = comment_service.create_comment(
        db, user_id=user.id, ping_id=ping_id, content=content, image_data=image_data
    )
    return CommentCreatedResponse(message="Comment added", comment_id=comment.id)


@router.put("/comments/{comment_id}", response_model=MessageResponse)
def update_comment(
    comment_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    images: Annotated[ImageProcessor, Depends(get_image_processor)],
    fields: Annotated[CommentFields, Depends(comment_fields)],
    image: Annotated[UploadFile | None, File()] = None,
) -> MessageResponse:
    content = _require_content(fields.content)
    comment = comment_service.get_comment_or_404(db, comment_id)
    ensure_can_modify(user, comment.user_id)

    raw = images.read(image)
    image_data = images.process(raw) if raw is not None else None
    comment_service.update_comment(db, comment, content=content, image_data=image_data)
    return MessageResponse(message="Comment updated")


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    comment = comment_service.get_comment_or_404(db, comment_id)
    ensure_can_modify(user, comment.user_id)
    comment_service.delete_comment(db, comment)
    return MessageResponse(message="Comment deleted")
