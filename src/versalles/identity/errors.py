"""Identity provider errors and their user-facing classification."""

from enum import Enum


class IdentityProviderError(Exception):
    """The provider answered and rejected the request."""

    def __init__(self, code: str, detail: str = ""):
        self.code = code
        self.detail = detail
        super().__init__(f"{code}: {detail}" if detail else code)


class IdentityProviderUnavailable(Exception):
    """The provider could not be reached or answered garbage."""


class AuthErrorCategory(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_EMAIL = "invalid_email"
    WEAK_PASSWORD = "weak_password"
    EMAIL_IN_USE = "email_in_use"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


_CODE_CATEGORIES: dict[str, AuthErrorCategory] = {
    "INVALID_LOGIN_CREDENTIALS": AuthErrorCategory.INVALID_CREDENTIALS,
    "INVALID_PASSWORD": AuthErrorCategory.INVALID_CREDENTIALS,
    "EMAIL_NOT_FOUND": AuthErrorCategory.INVALID_CREDENTIALS,
    "USER_DISABLED": AuthErrorCategory.INVALID_CREDENTIALS,
    "INVALID_EMAIL": AuthErrorCategory.INVALID_EMAIL,
    "MISSING_EMAIL": AuthErrorCategory.INVALID_EMAIL,
    "WEAK_PASSWORD": AuthErrorCategory.WEAK_PASSWORD,
    "MISSING_PASSWORD": AuthErrorCategory.WEAK_PASSWORD,
    "EMAIL_EXISTS": AuthErrorCategory.EMAIL_IN_USE,
}

LOGIN_MESSAGES: dict[AuthErrorCategory, str] = {
    AuthErrorCategory.INVALID_CREDENTIALS: "Invalid email or password.",
    AuthErrorCategory.INVALID_EMAIL: "Invalid email format.",
    AuthErrorCategory.UNAVAILABLE: "Could not reach the sign-in service. Try again.",
    AuthErrorCategory.UNKNOWN: "An error occurred during sign-in. Try again.",
}

REGISTER_MESSAGES: dict[AuthErrorCategory, str] = {
    AuthErrorCategory.EMAIL_IN_USE: "This email is already in use.",
    AuthErrorCategory.INVALID_EMAIL: "The email format is invalid.",
    AuthErrorCategory.WEAK_PASSWORD: "The password is too weak. Use at least 6 characters.",
    AuthErrorCategory.UNAVAILABLE: "Could not reach the sign-up service. Try again.",
    AuthErrorCategory.UNKNOWN: "An error occurred during registration. Try again.",
}


def classify(exc: Exception) -> AuthErrorCategory:
    if isinstance(exc, IdentityProviderUnavailable):
        return AuthErrorCategory.UNAVAILABLE
    if isinstance(exc, IdentityProviderError):
        return _CODE_CATEGORIES.get(exc.code, AuthErrorCategory.UNKNOWN)
    return AuthErrorCategory.UNKNOWN


def login_message(exc: Exception) -> str:
    category = classify(exc)
    return LOGIN_MESSAGES.get(category, LOGIN_MESSAGES[AuthErrorCategory.UNKNOWN])


def register_message(exc: Exception) -> str:
    category = classify(exc)
    return REGISTER_MESSAGES.get(category, REGISTER_MESSAGES[AuthErrorCategory.UNKNOWN])
