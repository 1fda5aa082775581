"""Application service for user registration and profile management."""

from __future__ import annotations

import logging
from uuid import UUID

from conduit_users.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
    AuthEventType,
)
from conduit_users.application.ports.password_hasher_port import PasswordHasherPort
from conduit_users.application.ports.user_repository_port import (
    DuplicateUserError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
)
from conduit_users.domain.users.validation import (
    TAKEN_MESSAGE,
    ProfileUpdate,
    RegistrationData,
    UserValidationError,
)

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when an authenticated user id no longer resolves to an account."""

    def __init__(self, *, user_id: UUID) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


def taken_error(fields: tuple[str, ...]) -> UserValidationError:
    """Translate duplicate unique fields into the 422 field-error shape."""

    return UserValidationError({field: [TAKEN_MESSAGE] for field in fields})


class UserAccountService:
    """Register accounts and read or change the caller's own profile."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        auth_events: AuthEventRepositoryPort,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._auth_events = auth_events

    async def register(
        self,
        *,
        data: RegistrationData,
        ip_address: str | None,
        user_agent: str | None,
    ) -> UserRecord:
        """Create one account, reporting taken username/email as field errors."""

        taken = await self._find_taken_fields(username=data.username, email=data.email)
        if taken:
            raise taken_error(taken)

        try:
            user = await self._users.create_user(
                UserCreateInput(
                    username=data.username,
                    email=data.email,
                    password_hash=self._password_hasher.hash_password(data.password),
                )
            )
        except DuplicateUserError as exc:
            raise taken_error(exc.fields) from exc

        await self._auth_events.append_event(
            AuthEventCreateInput(
                user_id=user.user_id,
                event_type=AuthEventType.USER_REGISTERED,
                ip_address=ip_address,
                user_agent=user_agent,
                payload={"email": user.email, "username": user.username},
            )
        )
        logger.info("user_registered user_id=%s username=%s", user.user_id, user.username)
        return user

    async def get_profile(self, *, user_id: UUID) -> UserRecord:
        """Return the current persisted profile for one user id."""

        user = await self._users.get_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user

    async def update_profile(
        self,
        *,
        user_id: UUID,
        update: ProfileUpdate,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> UserRecord:
        """Apply a validated partial update to the user's own profile."""

        changes: dict[str, str | None] = {}
        for field in ("username", "email", "bio", "image"):
            if field in update.provided:
                changes[field] = getattr(update, field)
        if "password" in update.provided and update.password is not None:
            changes["password_hash"] = self._password_hasher.hash_password(update.password)

        taken = await self._find_taken_fields(
            username=update.username if "username" in update.provided else None,
            email=update.email if "email" in update.provided else None,
            exclude_user_id=user_id,
        )
        if taken:
            raise taken_error(taken)

        try:
            user = await self._users.update_user(user_id=user_id, changes=changes)
        except DuplicateUserError as exc:
            raise taken_error(exc.fields) from exc
        if user is None:
            raise UserNotFoundError(user_id=user_id)

        if changes:
            await self._auth_events.append_event(
                AuthEventCreateInput(
                    user_id=user_id,
                    event_type=AuthEventType.PROFILE_UPDATED,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    payload={"fields": sorted(update.provided)},
                )
            )
            logger.info(
                "profile_updated user_id=%s fields=%s",
                user_id,
                ",".join(sorted(update.provided)),
            )
        return user

    async def _find_taken_fields(
        self,
        *,
        username: str | None,
        email: str | None,
        exclude_user_id: UUID | None = None,
    ) -> tuple[str, ...]:
        """Return unique fields already owned by another account, email first."""

        taken: list[str] = []
        if email is not None:
            owner = await self._users.get_by_email(email=email)
            if owner is not None and owner.user_id != exclude_user_id:
                taken.append("email")
        if username is not None:
            owner = await self._users.get_by_username(username=username)
            if owner is not None and owner.user_id != exclude_user_id:
                taken.append("username")
        return tuple(taken)
