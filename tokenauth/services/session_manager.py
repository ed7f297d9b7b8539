"""Refresh-token rotation and reuse detection.

A refresh token is Active while it sits in its subject's SessionSet and is
gone (rotated or revoked) once removed; there is no separate revoked state.
Every successful refresh consumes the presented token and issues a new one.
Presenting a token that is no longer in the store is treated as a replay of a
stolen token: if it still carries a valid signature, every session of its
subject is revoked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from tokenauth.exceptions import (
    AuthException,
    InvalidAccessToken,
    InvalidCredentials,
    InvalidRefreshToken,
    PasswordUnchanged,
    StoreUnavailable,
    SubjectNotFound,
)
from tokenauth.interfaces.credential_checker import CredentialChecker
from tokenauth.interfaces.session_store import SessionStore
from tokenauth.interfaces.user_store import UserStore
from tokenauth.tokens import TokenCodec, TokenPurpose

T = TypeVar("T")


async def guard_store(operation: Awaitable[T]) -> T:
    """Await a store call, reporting any non-auth failure as ``StoreUnavailable``."""
    try:
        return await operation
    except AuthException:
        raise
    except Exception as exc:
        raise StoreUnavailable() from exc


@dataclass(frozen=True)
class TokenPair:
    subject_id: str
    access_token: str
    refresh_token: str
    access_expires_at: int
    refresh_expires_at: int


class SessionManager:
    def __init__(
        self,
        codec: TokenCodec,
        session_store: SessionStore,
        user_store: UserStore,
        credential_checker: CredentialChecker,
        logger: logging.Logger | None = None,
    ) -> None:
        self._codec = codec
        self._sessions = session_store
        self._users = user_store
        self._credentials = credential_checker
        self._log = logger or logging.getLogger(__name__)

    async def issue_session(self, subject_id: str) -> TokenPair:
        access = self._codec.issue_access(subject_id)
        refresh = self._codec.issue_refresh(subject_id)
        await guard_store(self._sessions.add(subject_id, refresh.token))
        return TokenPair(
            subject_id=subject_id,
            access_token=access.token,
            refresh_token=refresh.token,
            access_expires_at=access.expires_at,
            refresh_expires_at=refresh.expires_at,
        )

    async def login(
        self, email: str, password: str, presented_refresh: str | None = None
    ) -> TokenPair:
        user = await guard_store(self._users.get_by_email(email))
        if not user or not self._credentials.verify_password(password, user["hashed_password"]):
            raise InvalidCredentials()
        subject_id = user["id"]

        if presented_refresh:
            # Logging in over an existing cookie ends that cookie's session first
            owner = await guard_store(self._sessions.find_subject_by_token(presented_refresh))
            if owner is not None:
                await guard_store(self._sessions.remove_one(owner, presented_refresh))
                verification = self._codec.verify(presented_refresh, TokenPurpose.REFRESH)
                resolvable = verification.ok and verification.subject_id == owner
            else:
                resolvable = False
            if not resolvable:
                removed = await guard_store(self._sessions.remove_all(subject_id))
                self._log.warning(
                    "Login for %s presented an unusable refresh token; revoked %d sessions",
                    subject_id,
                    removed,
                )

        tokens = await self.issue_session(subject_id)
        self._log.info("User logged in successfully: %s", subject_id)
        return tokens

    async def refresh(self, presented_refresh: str | None) -> TokenPair:
        if not presented_refresh:
            raise InvalidRefreshToken()

        owner = await guard_store(self._sessions.find_subject_by_token(presented_refresh))
        if owner is None:
            await self._revoke_on_reuse(presented_refresh)
            raise InvalidRefreshToken()

        consumed = await guard_store(self._sessions.remove_one(owner, presented_refresh))
        if not consumed:
            # A concurrent refresh consumed it between lookup and delete
            await self._revoke_on_reuse(presented_refresh)
            raise InvalidRefreshToken()

        verification = self._codec.verify(presented_refresh, TokenPurpose.REFRESH)
        if not verification.ok or verification.subject_id != owner:
            self._log.info(
                "Rejected stored refresh token for %s (%s)",
                owner,
                verification.error.value if verification.error else "subject mismatch",
            )
            raise InvalidRefreshToken()

        user = await guard_store(self._users.get_by_id(owner))
        if not user:
            self._log.error("Refresh token resolved to missing subject %s", owner)
            raise SubjectNotFound()

        tokens = await self.issue_session(owner)
        self._log.info("Refresh token rotated for %s", owner)
        return tokens

    async def logout(self, presented_refresh: str | None) -> bool:
        """End the session behind ``presented_refresh``.

        Always succeeds so that callers cannot learn whether the token was
        valid; returns True only when a stored session was removed.
        """
        if not presented_refresh:
            return False
        owner = await guard_store(self._sessions.find_subject_by_token(presented_refresh))
        if owner is None:
            return False
        removed = await guard_store(self._sessions.remove_one(owner, presented_refresh))
        if removed:
            self._log.info("User logged out successfully: %s", owner)
        return removed

    async def change_password(
        self, subject_id: str, current_password: str, new_password: str
    ) -> int:
        """Replace the password and revoke every session; returns the number revoked."""
        user = await guard_store(self._users.get_by_id(subject_id))
        if not user:
            raise SubjectNotFound()
        if not self._credentials.verify_password(current_password, user["hashed_password"]):
            raise InvalidCredentials("Current password is incorrect")
        if current_password == new_password:
            raise PasswordUnchanged()

        hashed = self._credentials.hash_password(new_password)
        await guard_store(self._users.update_user(subject_id, {"hashed_password": hashed}))
        removed = await guard_store(self._sessions.remove_all(subject_id))
        self._log.info("User password changed successfully: %s (%d sessions revoked)", subject_id, removed)
        return removed

    def authenticate_access(self, access_token: str | None) -> str:
        verification = self._codec.verify(access_token, TokenPurpose.ACCESS)
        if not verification.ok:
            raise InvalidAccessToken()
        return verification.subject_id

    async def _revoke_on_reuse(self, presented_refresh: str) -> None:
        verification = self._codec.verify(presented_refresh, TokenPurpose.REFRESH)
        if not verification.ok:
            return
        subject_id = verification.subject_id
        self._log.warning("Refresh token reuse detected for %s; revoking all sessions", subject_id)
        try:
            await self._sessions.remove_all(subject_id)
        except Exception:
            # The request fails either way; remediation happens out of band
            self._log.error(
                "Failed to revoke sessions for %s after refresh token reuse",
                subject_id,
                exc_info=True,
            )
