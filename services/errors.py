from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"
    USERNAME_TAKEN = "username_taken"
    NOT_FOUND = "not_found"
    NOT_AUTHENTICATED = "not_authenticated"
    UNKNOWN = "unknown"


class PortalError(Exception):
    """Base class for every error surfaced to a view"""

    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: int = 502
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class FormValidationError(PortalError):
    kind = ErrorKind.VALIDATION
    status_code = 422
    default_message = "Please correct the highlighted fields."

    def __init__(self, fields: Dict[str, str], message: Optional[str] = None):
        self.fields = fields
        super().__init__(message)


class InvalidCredentials(PortalError):
    kind = ErrorKind.INVALID_CREDENTIALS
    status_code = 401
    default_message = "Invalid email or password"


class EmailAlreadyRegistered(PortalError):
    kind = ErrorKind.EMAIL_ALREADY_REGISTERED
    status_code = 409
    default_message = "This email is already registered. Please try signing in instead."


class UsernameTaken(PortalError):
    kind = ErrorKind.USERNAME_TAKEN
    status_code = 409
    default_message = "This username is already taken. Please choose another one."


class NotAuthenticated(PortalError):
    kind = ErrorKind.NOT_AUTHENTICATED
    status_code = 401
    default_message = "Invalid or expired token"


class ProfileNotFound(PortalError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Profile not found"


class UnknownError(PortalError):
    kind = ErrorKind.UNKNOWN
    status_code = 502
