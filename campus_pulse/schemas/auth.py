"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from campus_pulse.core.security import ADMIN_ROLE, PASSWORD_MAX_LEN, USERNAME_MAX_LEN


class RegisterRequest(BaseModel):
    """Registration body; missing fields are reported by the route as a 400."""

    username: str | None = Field(default=None, max_length=USERNAME_MAX_LEN, description="Username")
    password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN, description="Password")
    role: str | None = Field(default=None, description="Role; defaults to the first configured role")


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str | None = Field(default=None, description="Username")
    password: str | None = Field(default=None, description="Password")


class LoginResponse(BaseModel):
    """JWT returned after successful login; send it as Authorization: Bearer <token>."""

    token: str = Field(..., description="JWT access token")
    username: str
    role: str


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role) taken from a verified token."""

    id: int
    username: str
    role: str

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE
