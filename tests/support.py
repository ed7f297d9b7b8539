"""Shared builders for the auth tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from tokenauth.config import AuthConfig
from tokenauth.security import BcryptCredentialChecker
from tokenauth.services.auth_service import AuthService
from tokenauth.services.session_manager import SessionManager
from tokenauth.services.verification_service import VerificationService
from tokenauth.stores.memory_store import MemorySessionStore, MemoryUserStore
from tokenauth.tokens import TokenCodec

PASSWORD = "correct-horse-1"


def make_config(**overrides) -> AuthConfig:
    values = {
        "ENVIRONMENT": "test",
        "ACCESS_TOKEN_SECRET": "test-access-secret",
        "REFRESH_TOKEN_SECRET": "test-refresh-secret",
        "EMAIL_VERIFICATION_TOKEN_SECRET": "test-verification-secret",
        "ACCESS_TOKEN_EXPIRE_MINUTES": 15,
        "REFRESH_TOKEN_EXPIRE_DAYS": 30,
        "VERIFICATION_TOKEN_EXPIRE_MINUTES": 15,
        "BCRYPT_ROUNDS": 4,
        "REFRESH_COOKIE_NAME": "jwt",
        "COOKIE_DOMAIN": None,
        "AUTH_RATE_LIMIT": 5,
        "AUTH_RATE_WINDOW_SECONDS": 900,
        "VERIFY_RATE_LIMIT": 3,
        "RESEND_RATE_LIMIT": 3,
        "VERIFICATION_LINK": "http://testserver/api/v1/auth/verify-email",
        "COOKIE_SECURE": False,
        "COOKIE_HTTP_ONLY": True,
        "EMAIL_PROVIDER": "resend",
        "AUTH_STORE": "memory",
        "RESEND_API_KEY": None,
    }
    values.update(overrides)
    return AuthConfig(**values)


class FixedClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class RecordingMailer:
    def __init__(self, deliver: bool = True) -> None:
        self.deliver = deliver
        self.sent: list[tuple[str, str, str]] = []

    async def send_verification_email(self, email: str, verification_token: str, display_name: str) -> bool:
        self.sent.append((email, verification_token, display_name))
        return self.deliver

    @property
    def last_token(self) -> str:
        return self.sent[-1][1]


class AuthHarness:
    """Wires the core services over in-memory stores with a controllable clock."""

    def __init__(self, config: AuthConfig | None = None, session_store=None, user_store=None) -> None:
        self.config = config or make_config()
        self.clock = FixedClock()
        self.codec = TokenCodec(self.config, clock=self.clock)
        self.users = user_store or MemoryUserStore()
        self.sessions = session_store or MemorySessionStore()
        self.checker = BcryptCredentialChecker(rounds=self.config.BCRYPT_ROUNDS)
        self.mailer = RecordingMailer()
        self.manager = SessionManager(self.codec, self.sessions, self.users, self.checker)
        self.verification = VerificationService(self.codec, self.users, mailer=self.mailer)
        self.auth = AuthService(self.users, self.manager, self.verification, self.checker)

    async def create_user(self, username: str = "alice", email: str = "alice@example.com") -> dict:
        return await self.users.create_user(
            {
                "username": username,
                "email": email,
                "hashed_password": self.checker.hash_password(PASSWORD),
            }
        )
