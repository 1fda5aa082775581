"""Port for stateless session token issue and verification."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID


class InvalidTokenError(ValueError):
    """Raised when a presented token cannot be verified."""

    def __init__(self, message: str, *, code: str) -> None:
        super().__init__(message)
        self.code = code


class TokenServicePort(Protocol):
    """Session token contract."""

    def issue_token(self, user_id: UUID) -> str:
        """Mint a signed, time-bounded token for one user id."""

    def verify_token(self, token: str) -> UUID:
        """Return the subject user id or raise InvalidTokenError."""
