"""Password hashing for auth."""

from __future__ import annotations

import bcrypt


class BcryptCredentialChecker:
    """bcrypt-backed credential check; callers only ever see a boolean."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash_password(self, password: str) -> str:
        return hash_password(password, rounds=self._rounds)

    def verify_password(self, password: str, hashed_password: str) -> bool:
        return verify_password(password, hashed_password)


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    try:
        password_bytes = password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Malformed or non-bcrypt hash
        return False
