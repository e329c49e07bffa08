"""Dependencies that hand route functions the per-application singletons and write payloads."""

from typing import Annotated, TypeVar

from fastapi import Form, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from campus_pulse.core.config import Settings
from campus_pulse.core.errors import ValidationFailedError
from campus_pulse.schemas.posts import CommentFields, PingFields
from campus_pulse.services.media import ImageProcessor

FieldsT = TypeVar("FieldsT", bound=BaseModel)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_processor(request: Request) -> ImageProcessor:
    return request.app.state.image_processor


def _is_json(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() == "application/json"


async def _json_fields(request: Request, model: type[FieldsT]) -> FieldsT:
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationFailedError("Malformed JSON body") from e
    if not isinstance(payload, dict):
        raise ValidationFailedError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


async def ping_fields(
    request: Request,
    content: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    location_name: Annotated[str | None, Form()] = None,
) -> PingFields:
    """
    Ping text from a multipart/urlencoded form, or from a JSON object when the
    request is application/json (text-only posts; images need multipart).
    """
    if _is_json(request):
        return await _json_fields(request, PingFields)
    return PingFields(content=content, category=category, location_name=location_name)


async def comment_fields(
    request: Request,
    content: Annotated[str | None, Form()] = None,
) -> CommentFields:
    if _is_json(request):
        return await _json_fields(request, CommentFields)
    return CommentFields(content=content)
