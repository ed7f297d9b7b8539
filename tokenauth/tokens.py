"""Signed, purpose-scoped, time-bound tokens.

Every token is a JWT carrying ``sub``, ``purpose``, ``iat``, ``exp`` and a
random ``jti``. Each purpose is signed with its own secret, so leaking the
email-verification secret cannot forge refresh or access tokens.

``TokenCodec.verify`` never raises: it returns a ``TokenVerification`` that is
either ok (with the subject id) or carries a ``TokenError`` tag. Expiry is
checked against the injected clock rather than the wall clock, which keeps
expiry boundaries testable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable
from uuid import uuid4

from jose import JWTError, jwt

from tokenauth.config import AuthConfig

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenPurpose(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
    EMAIL_VERIFICATION = "email-verification"


class TokenError(str, Enum):
    EXPIRED = "expired"
    MALFORMED = "malformed"
    PURPOSE_MISMATCH = "purpose-mismatch"


@dataclass(frozen=True)
class SignedToken:
    token: str
    subject_id: str
    purpose: TokenPurpose
    issued_at: int
    expires_at: int
    token_id: str


@dataclass(frozen=True)
class TokenVerification:
    subject_id: str | None = None
    error: TokenError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.subject_id is not None

    @classmethod
    def success(cls, subject_id: str) -> "TokenVerification":
        return cls(subject_id=subject_id)

    @classmethod
    def failure(cls, error: TokenError) -> "TokenVerification":
        return cls(error=error)


class TokenCodec:
    def __init__(
        self,
        config: AuthConfig,
        clock: Clock = utc_now,
        token_id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock
        self._token_id_factory = token_id_factory or (lambda: uuid4().hex)

    def now(self) -> int:
        """Current clock time in whole epoch seconds."""
        return int(self._clock().timestamp())

    def issue(self, subject_id: str, purpose: TokenPurpose, ttl: timedelta) -> SignedToken:
        issued_at = self.now()
        expires_at = issued_at + int(ttl.total_seconds())
        token_id = self._token_id_factory()
        payload: dict[str, Any] = {
            "sub": subject_id,
            "purpose": purpose.value,
            "iat": issued_at,
            "exp": expires_at,
            "jti": token_id,
        }
        token = jwt.encode(
            payload,
            self._config.secret_for(purpose.value),
            algorithm=self._config.JWT_ALGORITHM,
        )
        return SignedToken(
            token=token,
            subject_id=subject_id,
            purpose=purpose,
            issued_at=issued_at,
            expires_at=expires_at,
            token_id=token_id,
        )

    def issue_access(self, subject_id: str) -> SignedToken:
        ttl = timedelta(minutes=self._config.ACCESS_TOKEN_EXPIRE_MINUTES)
        return self.issue(subject_id, TokenPurpose.ACCESS, ttl)

    def issue_refresh(self, subject_id: str) -> SignedToken:
        ttl = timedelta(days=self._config.REFRESH_TOKEN_EXPIRE_DAYS)
        return self.issue(subject_id, TokenPurpose.REFRESH, ttl)

    def issue_verification(self, subject_id: str) -> SignedToken:
        ttl = timedelta(minutes=self._config.VERIFICATION_TOKEN_EXPIRE_MINUTES)
        return self.issue(subject_id, TokenPurpose.EMAIL_VERIFICATION, ttl)

    def verify(self, token: str | None, purpose: TokenPurpose) -> TokenVerification:
        if not token or not isinstance(token, str):
            return TokenVerification.failure(TokenError.MALFORMED)
        try:
            # Expiry is judged below against the injected clock
            payload = jwt.decode(
                token,
                self._config.secret_for(purpose.value),
                algorithms=[self._config.JWT_ALGORITHM],
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except JWTError:
            return TokenVerification.failure(TokenError.MALFORMED)

        subject_id = payload.get("sub")
        expires_at = payload.get("exp")
        if not isinstance(subject_id, str) or not subject_id or not isinstance(expires_at, int):
            return TokenVerification.failure(TokenError.MALFORMED)
        if payload.get("purpose") != purpose.value:
            return TokenVerification.failure(TokenError.PURPOSE_MISMATCH)
        if self.now() >= expires_at:
            return TokenVerification.failure(TokenError.EXPIRED)
        return TokenVerification.success(subject_id)
