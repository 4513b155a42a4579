"""Application errors and their HTTP rendering.

Every error carries the status code it maps to and a short human-readable
message. Some carry machine-readable flags (``extra``) so the client can
react without parsing the message, e.g. redirecting to account setup.
"""

from typing import Any, Dict, Optional


class LeaveTrackerError(Exception):
    """Base class for errors that resolve to an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(LeaveTrackerError):
    """Missing or malformed input."""

    status_code = 400


class NotFoundError(LeaveTrackerError):
    """No entity matched the request."""

    status_code = 404


class AuthError(LeaveTrackerError):
    """Base class for authentication failures."""

    status_code = 401


class UnauthorizedError(AuthError):
    """No session token was presented."""

    status_code = 401


class ForbiddenError(AuthError):
    """The session token is invalid or expired."""

    status_code = 403


class InvalidCredentialsError(AuthError):
    """The password does not match."""

    status_code = 401


class SetupRequiredError(AuthError):
    """The account has not completed first login yet."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, extra={"first_login": True})


class ConflictError(LeaveTrackerError):
    """The request conflicts with the current state of the entity."""

    status_code = 400


class AlreadySetupError(ConflictError):
    """First login was already completed for the account."""

    def __init__(self, message: str):
        super().__init__(message, extra={"already_setup": True})


class InternalError(LeaveTrackerError):
    """Unexpected backend failure."""

    status_code = 500
