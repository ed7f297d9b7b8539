"""Auth dependency helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Header, Request, Response

from tokenauth.config import AuthConfig
from tokenauth.exceptions import InvalidAccessToken, RateLimitExceeded
from tokenauth.interfaces.rate_limiter import RateLimiter
from tokenauth.interfaces.session_store import SessionStore
from tokenauth.interfaces.user_store import UserStore
from tokenauth.security import BcryptCredentialChecker
from tokenauth.services.auth_service import AuthService
from tokenauth.services.email_service import EmailService
from tokenauth.services.session_manager import SessionManager
from tokenauth.services.verification_service import VerificationMailer, VerificationService
from tokenauth.stores.memory_store import MemoryRateLimiter, MemorySessionStore, MemoryUserStore
from tokenauth.tokens import Clock, TokenCodec, utc_now


@dataclass
class AuthComponents:
    config: AuthConfig
    auth_service: AuthService
    rate_limiter: RateLimiter

    @property
    def session_manager(self) -> SessionManager:
        return self.auth_service.sessions


def _get_stores(config: AuthConfig) -> tuple[UserStore, SessionStore]:
    """Get auth stores based on AUTH_STORE config."""
    if config.AUTH_STORE == "sql":
        from tokenauth.db.engine import create_session_factory
        from tokenauth.stores.sql_store import SQLSessionStore, SQLUserStore

        session_factory = create_session_factory(config.DATABASE_URL)
        return SQLUserStore(session_factory), SQLSessionStore(session_factory)
    return MemoryUserStore(), MemorySessionStore()


def build_components(
    config: AuthConfig,
    user_store: UserStore | None = None,
    session_store: SessionStore | None = None,
    rate_limiter: RateLimiter | None = None,
    mailer: VerificationMailer | None = None,
    clock: Clock = utc_now,
) -> AuthComponents:
    if user_store is None or session_store is None:
        default_users, default_sessions = _get_stores(config)
        user_store = user_store or default_users
        session_store = session_store or default_sessions

    codec = TokenCodec(config, clock=clock)
    checker = BcryptCredentialChecker(rounds=config.BCRYPT_ROUNDS)
    session_manager = SessionManager(codec, session_store, user_store, checker)
    verification_service = VerificationService(
        codec, user_store, mailer=mailer if mailer is not None else EmailService(config)
    )
    return AuthComponents(
        config=config,
        auth_service=AuthService(user_store, session_manager, verification_service, checker),
        rate_limiter=rate_limiter or MemoryRateLimiter(),
    )


def get_components(request: Request) -> AuthComponents:
    return request.app.state.auth


def get_config(components: AuthComponents = Depends(get_components)) -> AuthConfig:
    return components.config


def get_auth_service(components: AuthComponents = Depends(get_components)) -> AuthService:
    return components.auth_service


def get_session_manager(components: AuthComponents = Depends(get_components)) -> SessionManager:
    return components.session_manager


def get_refresh_cookie(request: Request, config: AuthConfig = Depends(get_config)) -> str | None:
    return request.cookies.get(config.REFRESH_COOKIE_NAME)


def rate_limit(scope: str, limit_field: str, window_field: str) -> Callable:
    """Build a per-client-IP rate limiting dependency reading its limits from config."""

    async def enforce(
        request: Request,
        components: AuthComponents = Depends(get_components),
    ) -> None:
        client_ip = request.client.host if request.client else "unknown"
        limit = getattr(components.config, limit_field)
        window = getattr(components.config, window_field)
        allowed = await components.rate_limiter.allow(f"{scope}:{client_ip}", limit, window)
        if not allowed:
            raise RateLimitExceeded()

    return enforce


enforce_auth_rate_limit = rate_limit("auth", "AUTH_RATE_LIMIT", "AUTH_RATE_WINDOW_SECONDS")
enforce_verify_rate_limit = rate_limit("verify", "VERIFY_RATE_LIMIT", "VERIFY_RATE_WINDOW_SECONDS")
enforce_resend_rate_limit = rate_limit("resend", "RESEND_RATE_LIMIT", "RESEND_RATE_WINDOW_SECONDS")


def get_current_subject(
    authorization: str | None = Header(default=None),
    session_manager: SessionManager = Depends(get_session_manager),
) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidAccessToken("No token provided, authorization denied")
    return session_manager.authenticate_access(authorization.split(" ", 1)[1].strip())


def set_refresh_cookie(response: Response, config: AuthConfig, value: str) -> None:
    response.set_cookie(
        key=config.REFRESH_COOKIE_NAME,
        value=value,
        max_age=config.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=config.COOKIE_HTTP_ONLY,
        secure=config.COOKIE_SECURE,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )


def clear_refresh_cookie(response: Response, config: AuthConfig) -> None:
    response.delete_cookie(
        config.REFRESH_COOKIE_NAME,
        httponly=config.COOKIE_HTTP_ONLY,
        secure=config.COOKIE_SECURE,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )
