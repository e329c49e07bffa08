"""Registration, JWT login and the bearer-token dependency."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_pulse.api.deps import get_app_settings
from campus_pulse.core.config import Settings
from campus_pulse.core.database import get_db
from campus_pulse.core.errors import ValidationFailedError
from campus_pulse.core.rate_limit import auth_rate_limit
from campus_pulse.core.security import (
    TokenExpired,
    TokenValid,
    create_access_token,
    verify_access_token,
)
from campus_pulse.schemas.auth import CurrentUser, LoginRequest, LoginResponse, RegisterRequest
from campus_pulse.schemas.messages import MessageResponse
from campus_pulse.services.users import authenticate_user, create_user

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

INVALID_CREDENTIALS = "Invalid username or password"


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    """Create an account. The role defaults to the first configured role (student)."""
    username = (body.username or "").strip()
    if not username or not body.password:
        raise ValidationFailedError("Username and password required")

    role = body.role or settings.default_role
    if role not in settings.USER_ROLES:
        raise ValidationFailedError(
            f"Role must be one of: {', '.join(settings.USER_ROLES)}"
        )

    create_user(db, username, body.password, role, rounds=settings.BCRYPT_ROUNDS)
    logger.info("Registered user %r with role %s", username, role)
    return MessageResponse(message="User registered successfully")


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(auth_rate_limit)],
)
def login(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    body: LoginRequest | None = None,
) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT valid for 24 hours.
    Include the token in the Authorization header as: Bearer <token>

    Every failed attempt gets the same 401 body, even one with no credentials at all.
    """
    user = None
    if body is not None and body.username and body.password:
        user = authenticate_user(
            db, body.username.strip(), body.password, rounds=settings.BCRYPT_ROUNDS
        )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )
    token = create_access_token(user.id, user.username, user.role, settings)
    return LoginResponse(token=token, username=user.username, role=user.role)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer JWT and return the caller's identity.

    401 when no token is sent; 403 when the token is expired or fails verification.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    result = verify_access_token(credentials.credentials, settings)
    if isinstance(result, TokenValid):
        claims = result.claims
        return CurrentUser(id=claims.user_id, username=claims.username, role=claims.role)
    if isinstance(result, TokenExpired):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token expired")
    logger.info("Rejected bearer token: %s", result.reason)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")
