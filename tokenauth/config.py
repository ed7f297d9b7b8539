"""Auth configuration management."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env before the dataclass defaults below are evaluated
_ENV_PATH = Path(__file__).parent.parent / ".env"
if _ENV_PATH.exists():
    load_dotenv(_ENV_PATH)
else:
    load_dotenv()


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# One generated secret per purpose, so a process started without secrets
# still never shares a key between token kinds.
_GENERATED_SECRETS = {
    "access": secrets.token_urlsafe(32),
    "refresh": secrets.token_urlsafe(32),
    "email-verification": secrets.token_urlsafe(32),
}


@dataclass(frozen=True)
class AuthConfig:
    """Configuration values for auth flows."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    ACCESS_TOKEN_SECRET: str = os.getenv("ACCESS_TOKEN_SECRET", _GENERATED_SECRETS["access"])
    REFRESH_TOKEN_SECRET: str = os.getenv("REFRESH_TOKEN_SECRET", _GENERATED_SECRETS["refresh"])
    EMAIL_VERIFICATION_TOKEN_SECRET: str = os.getenv(
        "EMAIL_VERIFICATION_TOKEN_SECRET", _GENERATED_SECRETS["email-verification"]
    )
    JWT_ALGORITHM: str = os.getenv("AUTH_JWT_ALGORITHM", "HS256")

    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "30"))
    VERIFICATION_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("VERIFICATION_TOKEN_EXPIRE_MINUTES", "15")
    )
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    REFRESH_COOKIE_NAME: str = os.getenv("REFRESH_COOKIE_NAME", "jwt")
    COOKIE_SECURE: bool = _parse_bool(os.getenv("COOKIE_SECURE"), True)
    COOKIE_HTTP_ONLY: bool = _parse_bool(os.getenv("COOKIE_HTTP_ONLY"), True)
    COOKIE_SAMESITE: str = os.getenv("COOKIE_SAME_SITE", "lax")
    COOKIE_DOMAIN: str | None = os.getenv("COOKIE_DOMAIN")

    AUTH_RATE_LIMIT: int = int(os.getenv("AUTH_RATE_LIMIT", "5"))
    AUTH_RATE_WINDOW_SECONDS: int = int(os.getenv("AUTH_RATE_WINDOW_SECONDS", "900"))
    VERIFY_RATE_LIMIT: int = int(os.getenv("VERIFY_RATE_LIMIT", "3"))
    VERIFY_RATE_WINDOW_SECONDS: int = int(os.getenv("VERIFY_RATE_WINDOW_SECONDS", "900"))
    RESEND_RATE_LIMIT: int = int(os.getenv("RESEND_RATE_LIMIT", "3"))
    RESEND_RATE_WINDOW_SECONDS: int = int(os.getenv("RESEND_RATE_WINDOW_SECONDS", "3600"))

    EMAIL_PROVIDER: str = os.getenv("EMAIL_PROVIDER", "resend")
    EMAIL_FROM_NAME: str = os.getenv("EMAIL_FROM_NAME", "Refri")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "no-reply@refri.app")
    RESEND_API_KEY: str | None = os.getenv("RESEND_API_KEY")
    VERIFICATION_LINK: str = os.getenv(
        "VERIFICATION_LINK", "http://localhost:3000/api/v1/auth/verify-email"
    )

    # Auth store: "sql" (production) or "memory" (testing)
    AUTH_STORE: str = os.getenv("AUTH_STORE", "memory")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///tokenauth.db")

    CORS_ORIGINS: tuple[str, ...] = field(
        default_factory=lambda: tuple(
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        )
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    def secret_for(self, purpose: str) -> str:
        """Return the signing secret for a token purpose value."""
        secrets_by_purpose = {
            "access": self.ACCESS_TOKEN_SECRET,
            "refresh": self.REFRESH_TOKEN_SECRET,
            "email-verification": self.EMAIL_VERIFICATION_TOKEN_SECRET,
        }
        try:
            return secrets_by_purpose[purpose]
        except KeyError as exc:
            raise ValueError(f"Unknown token purpose: {purpose}") from exc

    def validate(self) -> None:
        """Validate signing configuration."""
        signing_secrets = [
            self.ACCESS_TOKEN_SECRET,
            self.REFRESH_TOKEN_SECRET,
            self.EMAIL_VERIFICATION_TOKEN_SECRET,
        ]
        if any(not secret for secret in signing_secrets):
            raise ValueError("Token secrets must not be empty")
        if len(set(signing_secrets)) != len(signing_secrets):
            raise ValueError(
                "ACCESS_TOKEN_SECRET, REFRESH_TOKEN_SECRET and "
                "EMAIL_VERIFICATION_TOKEN_SECRET must all be different"
            )
        if self.ACCESS_TOKEN_EXPIRE_MINUTES < 1 or self.VERIFICATION_TOKEN_EXPIRE_MINUTES < 1:
            raise ValueError("Access and verification token expiration must be at least 1 minute")
        if self.REFRESH_TOKEN_EXPIRE_DAYS < 1:
            raise ValueError("Refresh token expiration must be at least 1 day")
        if self.is_production:
            generated = set(_GENERATED_SECRETS.values())
            if generated.intersection(signing_secrets):
                raise ValueError(
                    "Token secrets must be set explicitly in production. "
                    "Add them to your .env file or environment."
                )
            if self.AUTH_STORE == "memory":
                raise ValueError("AUTH_STORE=memory is not allowed in production")
        if self.AUTH_STORE not in {"memory", "sql"}:
            raise ValueError(f"Unsupported AUTH_STORE: {self.AUTH_STORE}")
