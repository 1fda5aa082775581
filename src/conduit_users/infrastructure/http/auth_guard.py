"""Auth header parsing and token guard for user endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from conduit_users.application.ports.token_service_port import InvalidTokenError, TokenServicePort
from conduit_users.application.ports.user_repository_port import UserRecord, UserRepositoryPort

_ACCEPTED_SCHEMES = frozenset({"token", "bearer"})


class AuthTokenError(PermissionError):
    """Base error for requests that fail token authentication."""

    code = "invalid_token"


class MissingAuthTokenError(AuthTokenError):
    """Raised when a token is required but not provided."""

    code = "credentials_required"


class InvalidAuthTokenError(AuthTokenError):
    """Raised when the header, token or token subject is invalid."""

    def __init__(self, message: str, *, code: str = "invalid_token") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class AuthenticatedRequest:
    """Verified caller identity plus the token it presented."""

    user_id: UUID
    token: str


def extract_auth_token(authorization_header: str | None) -> str:
    """Extract token from `Authorization: Token <value>` (or `Bearer <value>`)."""

    if authorization_header is None or not authorization_header.strip():
        raise MissingAuthTokenError("no authorization token was found")

    parts = authorization_header.strip().split()
    if len(parts) != 2 or parts[0].lower() not in _ACCEPTED_SCHEMES:
        raise InvalidAuthTokenError("format is Authorization: Token <token>")

    return parts[1]


class TokenAuthGuard:
    """Resolve the calling user from a signed session token."""

    def __init__(
        self,
        *,
        token_service: TokenServicePort,
        user_repository: UserRepositoryPort,
    ) -> None:
        self._token_service = token_service
        self._user_repository = user_repository

    def authenticate(self, *, authorization_header: str | None) -> AuthenticatedRequest:
        """Verify header token signature and expiry without touching the store."""

        token = extract_auth_token(authorization_header)
        try:
            user_id = self._token_service.verify_token(token)
        except InvalidTokenError as exc:
            raise InvalidAuthTokenError(str(exc), code=exc.code) from exc
        return AuthenticatedRequest(user_id=user_id, token=token)

    async def require_user(
        self,
        *,
        authorization_header: str | None,
    ) -> tuple[AuthenticatedRequest, UserRecord]:
        """Verify token and require its subject to still exist."""

        request = self.authenticate(authorization_header=authorization_header)
        user = await self._user_repository.get_by_id(user_id=request.user_id)
        if user is None:
            raise InvalidAuthTokenError("token subject no longer exists", code="unknown_subject")
        return request, user
