from tokenauth.services.auth_service import AuthService, public_user
from tokenauth.services.email_service import EmailService
from tokenauth.services.session_manager import SessionManager, TokenPair
from tokenauth.services.verification_service import VerificationOutcome, VerificationService

__all__ = [
    "AuthService",
    "EmailService",
    "SessionManager",
    "TokenPair",
    "VerificationOutcome",
    "VerificationService",
    "public_user",
]
