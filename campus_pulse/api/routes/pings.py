"""Feed, ping create/edit/delete and the upvote toggle."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from campus_pulse.api.deps import get_app_settings, get_image_processor, ping_fields
from campus_pulse.api.routes.auth import get_current_user
from campus_pulse.core.config import Settings
from campus_pulse.core.database import get_db
from campus_pulse.core.errors import ValidationFailedError
from campus_pulse.schemas.auth import CurrentUser
from campus_pulse.schemas.feed import PingRead
from campus_pulse.schemas.messages import MessageResponse, PingCreatedResponse, VoteResponse
from campus_pulse.schemas.posts import PingFields
from campus_pulse.services import pings as ping_service
from campus_pulse.services.authorization import ensure_can_modify
from campus_pulse.services.media import ImageProcessor
from campus_pulse.services.votes import toggle_vote

router = APIRouter()


def _require_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise ValidationFailedError("Content is required")
    return content


@router.get("/pings", response_model=list[PingRead], response_model_exclude_unset=True)
def get_feed(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> list[PingRead]:
    """Active pings, newest first, capped at 50."""
    return ping_service.list_feed(db, limit=settings.FEED_LIMIT)


@router.post("/pings", response_model=PingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_ping(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    images: Annotated[ImageProcessor, Depends(get_image_processor)],
    fields: Annotated[PingFields, Depends(ping_fields)],
    image: Annotated[UploadFile | None, File()] = None,
) -> PingCreatedResponse:
    """
    Post a ping as a multipart form, or as a JSON object when there is no image.
    An attached image is resized to at most 800px wide and stored as JPEG;
    uploads over 5 MB are rejected.
    """
    content = _require_content(fields.content)
    raw = images.read(image)
    image_data = images.process(raw) if raw is not None else None
    ping = ping_service.create_ping(
        db,
        user_id=user.id,
        content=content,
        category=fields.category,
        location_name=fields.location_name,
        image_data=image_data,
    )
    return PingCreatedResponse(message="Ping created!", ping_id=ping.id)


@router.put("/pings/{ping_id}", response_model=MessageResponse)
def update_ping(
    ping_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    images: Annotated[ImageProcessor, Depends(get_image_processor)],
    fields: Annotated[PingFields, Depends(ping_fields)],
    image: Annotated[UploadFile | None, File()] = None,
) -> MessageResponse:
    """Edit a ping (author or admin). The stored image is replaced only if a new one is sent."""
    content = _require_content(fields.content)
    ping = ping_service.get_ping_or_404(db, ping_id)
    ensure_can_modify(user, ping.user_id)

    raw = images.read(image)
    image_data = images.process(raw) if raw is not None else None
    ping_service.update_ping(
        db,
        ping,
        content=content,
        category=fields.category,
        location_name=fields.location_name,
        image_data=image_data,
    )
    return MessageResponse(message="Ping updated successfully")


@router.delete("/pings/{ping_id}", response_model=MessageResponse)
def delete_ping(
    ping_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a ping with its comments and votes (author or admin)."""
    ping = ping_service.get_ping_or_404(db, ping_id)
    ensure_can_modify(user, ping.user_id)
    ping_service.delete_ping(db, ping)
    return MessageResponse(message="Ping deleted")


@router.post("/pings/{ping_id}/vote", response_model=VoteResponse)
def vote_on_ping(
    ping_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> VoteResponse:
    """Toggle the caller's upvote: the first call votes, the next one removes it."""
    voted = toggle_vote(db, user_id=user.id, ping_id=ping_id)
    if voted:
        return VoteResponse(message="Upvoted!", voted=True)
    return VoteResponse(message="Vote removed", voted=False)
