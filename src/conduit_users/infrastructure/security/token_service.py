"""Signed JWT session tokens for authenticated user requests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError

from conduit_users.application.ports.token_service_port import InvalidTokenError, TokenServicePort

DEFAULT_TOKEN_TTL = timedelta(days=60)
DEFAULT_ALGORITHM = "HS256"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class JwtTokenService(TokenServicePort):
    """Issue and verify stateless HMAC-signed tokens carrying the user id as subject.

    Expiry is checked against the injected clock rather than the library's own,
    so verification depends only on the token, the secret and `now`.
    """

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = DEFAULT_ALGORITHM,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not secret:
            raise ValueError("token secret cannot be blank")
        self._secret = secret
        self._algorithm = algorithm
        self._token_ttl = token_ttl
        self._now = now

    def issue_token(self, user_id: UUID) -> str:
        """Mint a token whose subject is the given user id."""

        issued_at = self._now()
        claims = {
            "sub": str(user_id),
            "jti": uuid4().hex,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._token_ttl).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> UUID:
        """Return the token subject or raise InvalidTokenError with a failure code."""

        try:
            jwt.get_unverified_header(token)
        except JWTError as exc:
            raise InvalidTokenError("malformed token", code="malformed_token") from exc

        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_sub": False},
            )
        except JWTClaimsError as exc:
            raise InvalidTokenError("invalid token claims", code="malformed_token") from exc
        except JWTError as exc:
            raise InvalidTokenError("invalid token signature", code="invalid_signature") from exc

        expires_at = claims.get("exp")
        if not isinstance(expires_at, int | float):
            raise InvalidTokenError("token has no expiry", code="malformed_token")
        if expires_at <= self._now().timestamp():
            raise InvalidTokenError("token has expired", code="token_expired")

        try:
            return UUID(str(claims["sub"]))
        except (KeyError, ValueError) as exc:
            raise InvalidTokenError("invalid token subject", code="invalid_subject") from exc
