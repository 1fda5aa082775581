"""Application authentication service for credential verification."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from enum import StrEnum

from conduit_users.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
    AuthEventType,
)
from conduit_users.application.ports.password_hasher_port import PasswordHasherPort
from conduit_users.application.ports.user_repository_port import UserRecord, UserRepositoryPort

logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Supported authentication outcomes."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"


@dataclass(frozen=True)
class AuthResult:
    """Authentication result model."""

    outcome: AuthOutcome
    user: UserRecord | None = None


class AuthService:
    """Authenticate credentials and append auth audit events."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        auth_events: AuthEventRepositoryPort,
        password_hasher: PasswordHasherPort,
    ) -> None:
        self._users = users
        self._auth_events = auth_events
        self._password_hasher = password_hasher
        self._decoy_hash: str | None = None

    async def authenticate(
        self,
        *,
        email: str,
        password: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> AuthResult:
        """Authenticate user credentials and always emit auth event.

        Unknown emails still pay for one hash comparison against a decoy
        verifier, so response timing does not reveal which accounts exist.
        """

        user = await self._users.get_by_email(email=email)
        if user is None:
            self._password_hasher.verify_password(
                password=password,
                password_hash=self._get_decoy_hash(),
            )
            await self._record_failure(
                user=None,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS, user=None)

        is_valid = self._password_hasher.verify_password(
            password=password,
            password_hash=user.password_hash,
        )
        if not is_valid:
            await self._record_failure(
                user=user,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS, user=None)

        await self._auth_events.append_event(
            AuthEventCreateInput(
                user_id=user.user_id,
                event_type=AuthEventType.LOGIN_SUCCESS,
                ip_address=ip_address,
                user_agent=user_agent,
                payload={"email": email},
            )
        )
        logger.info("login_success user_id=%s", user.user_id)
        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)

    async def _record_failure(
        self,
        *,
        user: UserRecord | None,
        email: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> None:
        resolved_user_id = user.user_id if user is not None else None
        await self._auth_events.append_event(
            AuthEventCreateInput(
                user_id=resolved_user_id,
                event_type=AuthEventType.LOGIN_FAILED,
                ip_address=ip_address,
                user_agent=user_agent,
                payload={"email": email, "reason": "invalid_credentials"},
            )
        )
        logger.info(
            "login_failed user_id=%s reason=invalid_credentials",
            resolved_user_id,
        )

    def _get_decoy_hash(self) -> str:
        if self._decoy_hash is None:
            self._decoy_hash = self._password_hasher.hash_password(secrets.token_urlsafe(16))
        return self._decoy_hash
