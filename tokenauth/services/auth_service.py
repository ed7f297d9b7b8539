"""Core auth service."""

from __future__ import annotations

import logging
from typing import Any

from tokenauth.exceptions import (
    EmailAlreadyVerified,
    EmailTaken,
    SubjectNotFound,
    UsernameTaken,
)
from tokenauth.interfaces.credential_checker import CredentialChecker
from tokenauth.interfaces.user_store import UserStore
from tokenauth.services.session_manager import SessionManager, TokenPair, guard_store
from tokenauth.services.verification_service import VerificationService

logger = logging.getLogger(__name__)


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": user["id"],
        "username": user.get("username"),
        "email": user.get("email"),
        "is_verified": bool(user.get("is_verified")),
        "created_at": user.get("created_at"),
        "updated_at": user.get("updated_at"),
    }


class AuthService:
    """Registration and account lookups on top of the session and verification flows."""

    def __init__(
        self,
        user_store: UserStore,
        session_manager: SessionManager,
        verification_service: VerificationService,
        credential_checker: CredentialChecker,
    ) -> None:
        self._users = user_store
        self._sessions = session_manager
        self._verification = verification_service
        self._credentials = credential_checker

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    @property
    def verification(self) -> VerificationService:
        return self._verification

    async def register(self, username: str, email: str, password: str) -> tuple[dict[str, Any], TokenPair]:
        if await guard_store(self._users.get_by_email(email)):
            raise EmailTaken()
        if await guard_store(self._users.get_by_username(username)):
            raise UsernameTaken()

        user = await guard_store(
            self._users.create_user(
                {
                    "username": username,
                    "email": email,
                    "hashed_password": self._credentials.hash_password(password),
                    "is_verified": False,
                }
            )
        )
        tokens = await self._sessions.issue_session(user["id"])
        logger.info("User registered successfully: %s", user["id"])

        # The account exists either way; a lost email can be resent
        await self._verification.send_verification(user)
        return public_user(user), tokens

    async def resend_verification(self, subject_id: str) -> None:
        user = await self._require_user(subject_id)
        if user.get("is_verified"):
            raise EmailAlreadyVerified()
        await self._verification.send_verification(user)

    async def get_user(self, subject_id: str) -> dict[str, Any]:
        return public_user(await self._require_user(subject_id))

    async def get_user_from_access(self, access_token: str | None) -> dict[str, Any]:
        subject_id = self._sessions.authenticate_access(access_token)
        return await self.get_user(subject_id)

    async def _require_user(self, subject_id: str) -> dict[str, Any]:
        user = await guard_store(self._users.get_by_id(subject_id))
        if not user:
            raise SubjectNotFound()
        return user
