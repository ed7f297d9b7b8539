"""Session store interface for refresh tokens.

A subject's SessionSet is the set of refresh tokens currently valid for it.
Absence from the set is revocation. Writes must be visible to the next read
on the same store instance.
"""

from __future__ import annotations

from typing import Protocol


class SessionStore(Protocol):
    async def add(self, subject_id: str, token: str) -> None:
        """Add a token to the subject's set; no-op if already present."""
        ...

    async def remove_one(self, subject_id: str, token: str) -> bool:
        """Atomically delete one token owned by the subject.

        Returns True only for the call that actually removed it, so two racing
        callers can never both believe they consumed the same token.
        """
        ...

    async def remove_all(self, subject_id: str) -> int:
        ...

    async def find_subject_by_token(self, token: str) -> str | None:
        ...

    async def list_tokens(self, subject_id: str) -> set[str]:
        ...
