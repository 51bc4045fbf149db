"""Versalles exception hierarchy."""


class VersallesError(Exception):
    """Base exception for all Versalles errors."""

    status_code = 400

    def __init__(self, message: str = "", code: str = "VERSALLES_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(VersallesError):
    """Raised at startup when the process is misconfigured."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message, code="CONFIGURATION")


class AuthenticationError(VersallesError):
    """Raised when a request needs a logged-in user and has none."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class NotFoundError(VersallesError):
    """Raised when a record cannot be found in the store."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictError(VersallesError):
    """Raised when a write collides with an existing record."""

    status_code = 409

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, code="CONFLICT")


class FormValidationError(VersallesError):
    """Raised when a form payload has one or more field violations."""

    status_code = 422

    def __init__(self, violations: list):
        self.violations = list(violations)
        message = self.violations[0].message if self.violations else "Invalid input"
        super().__init__(message, code="VALIDATION")


class ServiceUnavailableError(VersallesError):
    """Raised when an external dependency cannot be reached."""

    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable, try again"):
        super().__init__(message, code="UNAVAILABLE")
