"""Ports the auth core talks through."""

from tokenauth.interfaces.credential_checker import CredentialChecker
from tokenauth.interfaces.rate_limiter import RateLimiter
from tokenauth.interfaces.session_store import SessionStore
from tokenauth.interfaces.user_store import UserStore

__all__ = ["CredentialChecker", "RateLimiter", "SessionStore", "UserStore"]
