"""Auth exceptions."""


class AuthException(Exception):
    """Base auth exception with HTTP status."""

    status_code = 400
    code = "auth-error"
    default_message = "Authentication error"

    def __init__(self, message: str | None = None, status_code: int | None = None, code: str | None = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class InvalidCredentials(AuthException):
    status_code = 401
    code = "invalid-credentials"
    default_message = "Invalid email or password"


class InvalidRefreshToken(AuthException):
    """Refresh/logout failure; never says whether the token expired, was reused or never existed."""

    status_code = 403
    code = "invalid-refresh-token"
    default_message = "Forbidden"


class InvalidAccessToken(AuthException):
    status_code = 401
    code = "invalid-token"
    default_message = "Invalid token"


class ExpiredVerificationToken(AuthException):
    status_code = 400
    code = "expired-verification-token"
    default_message = "Verification link has expired"


class InvalidVerificationToken(AuthException):
    status_code = 400
    code = "invalid-verification-token"
    default_message = "Verification link is invalid"


class SubjectNotFound(AuthException):
    status_code = 404
    code = "no-user"
    default_message = "User not found"


class StoreUnavailable(AuthException):
    """The session or user store could not be reached; the token itself was not judged."""

    status_code = 503
    code = "store-unavailable"
    default_message = "Session store unavailable"


class EmailTaken(AuthException):
    status_code = 409
    code = "email-taken"
    default_message = "Email is already in use"


class UsernameTaken(AuthException):
    status_code = 409
    code = "username-taken"
    default_message = "Username is already in use"


class EmailAlreadyVerified(AuthException):
    status_code = 400
    code = "email-already-verified"
    default_message = "Email already verified"


class PasswordUnchanged(AuthException):
    status_code = 400
    code = "new-password-same"
    default_message = "New password must differ from the current password"


class RateLimitExceeded(AuthException):
    status_code = 429
    code = "rate-limit-exceeded"
    default_message = "Too many requests, please try again later"
