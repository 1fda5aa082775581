"""Field validation rules for registration, login and profile update payloads."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pydantic import HttpUrl, TypeAdapter, ValidationError

BLANK_MESSAGE = "can't be blank"
INVALID_MESSAGE = "is invalid"
TAKEN_MESSAGE = "has already been taken"
MAX_PASSWORD_BYTES = 72
PASSWORD_TOO_LONG_MESSAGE = f"is too long (maximum is {MAX_PASSWORD_BYTES} bytes)"
CREDENTIALS_FIELD = "email or password"

PROFILE_FIELDS = ("username", "email", "password", "bio", "image")

_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
_USERNAME_PATTERN = re.compile(r"^[\w.\-]+$")
_IMAGE_URL_ADAPTER = TypeAdapter(HttpUrl)


class UserValidationError(ValueError):
    """Raised with a field-error map when a user payload breaks validation rules."""

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        self.errors: dict[str, list[str]] = {
            field: list(messages) for field, messages in sorted(errors.items())
        }
        super().__init__(f"invalid user fields: {', '.join(self.errors)}")


@dataclass(frozen=True)
class RegistrationData:
    """Normalized registration fields."""

    username: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginData:
    """Normalized login credentials."""

    email: str
    password: str


@dataclass(frozen=True)
class ProfileUpdate:
    """Validated partial profile change; only names in `provided` are applied."""

    provided: frozenset[str]
    username: str | None = None
    email: str | None = None
    password: str | None = None
    bio: str | None = None
    image: str | None = None


def validate_registration(
    *,
    username: str | None,
    email: str | None,
    password: str | None,
) -> RegistrationData:
    """Validate a registration payload or raise with every offending field."""

    errors: dict[str, list[str]] = {}
    normalized_username = _check_username(username, errors)
    normalized_email = _check_email(email, errors)
    checked_password = _check_password(password, errors)
    if errors:
        raise UserValidationError(errors)

    assert normalized_username is not None
    assert normalized_email is not None
    assert checked_password is not None
    return RegistrationData(
        username=normalized_username,
        email=normalized_email,
        password=checked_password,
    )


def validate_login(*, email: str | None, password: str | None) -> LoginData:
    """Require both credentials, reporting any gap under the combined credentials key."""

    if _is_blank(email) or _is_blank(password):
        raise invalid_credentials_error()

    assert email is not None
    assert password is not None
    return LoginData(email=email.strip(), password=password)


def invalid_credentials_error() -> UserValidationError:
    """Build the single error used for every login failure."""

    return UserValidationError({CREDENTIALS_FIELD: [INVALID_MESSAGE]})


def validate_profile_update(changes: Mapping[str, str | None]) -> ProfileUpdate:
    """Validate a partial profile payload; unknown keys are ignored."""

    provided = frozenset(field for field in PROFILE_FIELDS if field in changes)
    errors: dict[str, list[str]] = {}

    username = _check_username(changes["username"], errors) if "username" in provided else None
    email = _check_email(changes["email"], errors) if "email" in provided else None
    password = _check_password(changes["password"], errors) if "password" in provided else None
    bio = _blank_to_none(changes["bio"]) if "bio" in provided else None
    image = _check_image(changes["image"], errors) if "image" in provided else None

    if errors:
        raise UserValidationError(errors)

    return ProfileUpdate(
        provided=provided,
        username=username,
        email=email,
        password=password,
        bio=bio,
        image=image,
    )


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _blank_to_none(value: str | None) -> str | None:
    return None if _is_blank(value) else value


def _check_username(value: str | None, errors: dict[str, list[str]]) -> str | None:
    if value is None or _is_blank(value):
        errors.setdefault("username", []).append(BLANK_MESSAGE)
        return None
    normalized = value.strip()
    if not _USERNAME_PATTERN.match(normalized):
        errors.setdefault("username", []).append(INVALID_MESSAGE)
        return None
    return normalized


def _check_email(value: str | None, errors: dict[str, list[str]]) -> str | None:
    if value is None or _is_blank(value):
        errors.setdefault("email", []).append(BLANK_MESSAGE)
        return None
    normalized = value.strip()
    if not _EMAIL_PATTERN.match(normalized):
        errors.setdefault("email", []).append(INVALID_MESSAGE)
        return None
    return normalized


def _check_password(value: str | None, errors: dict[str, list[str]]) -> str | None:
    if value is None or _is_blank(value):
        errors.setdefault("password", []).append(BLANK_MESSAGE)
        return None
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors.setdefault("password", []).append(PASSWORD_TOO_LONG_MESSAGE)
        return None
    return value


def _check_image(value: str | None, errors: dict[str, list[str]]) -> str | None:
    if value is None or _is_blank(value):
        return None
    normalized = value.strip()
    try:
        _IMAGE_URL_ADAPTER.validate_python(normalized)
    except ValidationError:
        errors.setdefault("image", []).append(INVALID_MESSAGE)
        return None
    return normalized
