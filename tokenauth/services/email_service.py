"""Verification mail delivery through the Resend HTTP API."""

from __future__ import annotations

import html
import logging
from urllib.parse import urlencode

import httpx

from tokenauth.config import AuthConfig

logger = logging.getLogger(__name__)

RESEND_ENDPOINT = "https://api.resend.com/emails"


class EmailService:
    def __init__(self, config: AuthConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._transport = transport

    def verification_link(self, verification_token: str) -> str:
        return f"{self._config.VERIFICATION_LINK}?{urlencode({'token': verification_token})}"

    def _verification_message(self, email: str, verification_token: str, display_name: str) -> dict:
        link = html.escape(self.verification_link(verification_token))
        sender = self._config.EMAIL_FROM_NAME
        return {
            "from": f"{sender} <{self._config.EMAIL_FROM_ADDRESS}>",
            "to": [email],
            "subject": f"Verify your {sender} email address",
            "html": (
                f"<p>Hi {html.escape(display_name)},</p>"
                f'<p>Confirm your email address by opening <a href="{link}">this link</a>. '
                f"It expires in {self._config.VERIFICATION_TOKEN_EXPIRE_MINUTES} minutes.</p>"
            ),
        }

    async def send_verification_email(
        self, email: str, verification_token: str, display_name: str
    ) -> bool:
        """POST the verification mail; False when it was not accepted."""
        if self._config.EMAIL_PROVIDER != "resend":
            logger.warning("Unsupported EMAIL_PROVIDER %r", self._config.EMAIL_PROVIDER)
            return False
        if not self._config.RESEND_API_KEY:
            logger.warning("RESEND_API_KEY not set; verification email not sent")
            return False

        message = self._verification_message(email, verification_token, display_name)
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                reply = await client.post(
                    RESEND_ENDPOINT,
                    headers={"Authorization": f"Bearer {self._config.RESEND_API_KEY}"},
                    json=message,
                )
        except httpx.HTTPError:
            logger.error("Verification email request failed", exc_info=True)
            return False
        if reply.status_code != 200:
            logger.warning("Resend rejected verification email (%s)", reply.status_code)
            return False
        return True
