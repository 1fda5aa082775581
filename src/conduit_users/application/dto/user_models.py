"""Pydantic models for the user account HTTP contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from conduit_users.application.ports.user_repository_port import UserRecord


class LenientModel(BaseModel):
    """Base model that drops unknown fields instead of rejecting them."""

    model_config = ConfigDict(extra="ignore")


class RegisterUserInput(LenientModel):
    """Registration fields; presence is checked by domain validation."""

    username: str | None = None
    email: str | None = None
    password: str | None = None


class RegisterUserRequest(LenientModel):
    """HTTP request envelope for `POST /api/users`."""

    user: RegisterUserInput = Field(default_factory=RegisterUserInput)


class LoginUserInput(LenientModel):
    """Login credential fields."""

    email: str | None = None
    password: str | None = None


class LoginUserRequest(LenientModel):
    """HTTP request envelope for `POST /api/users/login`."""

    user: LoginUserInput = Field(default_factory=LoginUserInput)


class UpdateUserInput(LenientModel):
    """Partial profile fields; only keys the client sent are applied."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    bio: str | None = None
    image: str | None = None


class UpdateUserRequest(LenientModel):
    """HTTP request envelope for `PUT /api/user`."""

    user: UpdateUserInput = Field(default_factory=UpdateUserInput)


class UserPayload(BaseModel):
    """Public user representation; the password verifier is never part of it."""

    email: str
    username: str
    bio: str | None
    image: str | None
    token: str


class UserResponse(BaseModel):
    """HTTP response envelope shared by all user endpoints."""

    user: UserPayload

    @classmethod
    def from_record(cls, record: UserRecord, *, token: str) -> UserResponse:
        """Shape one persisted user plus session token for the wire."""

        return cls(
            user=UserPayload(
                email=record.email,
                username=record.username,
                bio=record.bio,
                image=record.image,
                token=token,
            )
        )
