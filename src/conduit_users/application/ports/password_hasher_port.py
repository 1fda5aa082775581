"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Credential hasher contract: salted one-way hash plus verification."""

    def hash_password(self, password: str) -> str:
        """Hash plaintext password into a stored verifier."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Return whether plaintext matches the verifier; malformed verifiers yield False."""
