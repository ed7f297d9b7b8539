"""Access, refresh and email-verification token lifecycle."""

from tokenauth.config import AuthConfig
from tokenauth.tokens import SignedToken, TokenCodec, TokenError, TokenPurpose, TokenVerification

__all__ = [
    "AuthConfig",
    "SignedToken",
    "TokenCodec",
    "TokenError",
    "TokenPurpose",
    "TokenVerification",
]

__version__ = "0.1.0"
