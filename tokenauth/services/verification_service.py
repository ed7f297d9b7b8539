"""Email ownership verification."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from tokenauth.exceptions import (
    ExpiredVerificationToken,
    InvalidVerificationToken,
    SubjectNotFound,
)
from tokenauth.interfaces.user_store import UserStore
from tokenauth.services.session_manager import guard_store
from tokenauth.tokens import SignedToken, TokenCodec, TokenError, TokenPurpose


class VerificationMailer(Protocol):
    async def send_verification_email(
        self, email: str, verification_token: str, display_name: str
    ) -> bool:
        ...


class VerificationOutcome(str, Enum):
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already-verified"


class VerificationService:
    """Issues and consumes ``email-verification`` tokens.

    Nothing is stored for a verification token. Consuming one only flips the
    subject's ``is_verified`` flag, and flipping it twice is harmless, so the
    token stays usable until it expires.
    """

    def __init__(
        self,
        codec: TokenCodec,
        user_store: UserStore,
        mailer: VerificationMailer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._codec = codec
        self._users = user_store
        self._mailer = mailer
        self._log = logger or logging.getLogger(__name__)

    def issue_verification_token(self, subject_id: str) -> SignedToken:
        return self._codec.issue_verification(subject_id)

    async def consume(self, token: str | None) -> VerificationOutcome:
        verification = self._codec.verify(token, TokenPurpose.EMAIL_VERIFICATION)
        if verification.error is TokenError.EXPIRED:
            raise ExpiredVerificationToken()
        if not verification.ok:
            raise InvalidVerificationToken()

        subject_id = verification.subject_id
        user = await guard_store(self._users.get_by_id(subject_id))
        if not user:
            self._log.error("Verification token resolved to missing subject %s", subject_id)
            raise SubjectNotFound()
        if user.get("is_verified"):
            return VerificationOutcome.ALREADY_VERIFIED

        await guard_store(self._users.update_user(subject_id, {"is_verified": True}))
        self._log.info("User email verified successfully: %s", subject_id)
        return VerificationOutcome.VERIFIED

    async def send_verification(self, user: dict) -> bool:
        """Mint a fresh token for ``user`` and email the link; False if nothing was sent."""
        if self._mailer is None:
            return False
        token = self.issue_verification_token(user["id"])
        sent = await self._mailer.send_verification_email(
            user["email"], token.token, user.get("username") or user["email"]
        )
        if sent:
            self._log.info("Verification email sent: %s", user["id"])
        else:
            self._log.warning("Verification email not delivered: %s", user["id"])
        return sent
