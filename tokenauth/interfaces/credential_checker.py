"""Credential check interface."""

from __future__ import annotations

from typing import Protocol


class CredentialChecker(Protocol):
    def hash_password(self, password: str) -> str:
        ...

    def verify_password(self, password: str, hashed_password: str) -> bool:
        ...
