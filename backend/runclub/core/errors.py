"""
Domain exceptions.

Every error carries the HTTP status and a machine readable code so the API
layer can render a consistent `{"detail", "error_code"}` body.
"""
from typing import Optional


class RunClubError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400
    error_code = "ERROR"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


# --------- Validation (422) --------- #

class RunValidationError(RunClubError):
    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field


class InvalidDistance(RunValidationError):
    error_code = "INVALID_DISTANCE"


class InvalidDuration(RunValidationError):
    error_code = "INVALID_DURATION"


class InvalidPace(RunValidationError):
    error_code = "INVALID_PACE"


class LocationTooLong(RunValidationError):
    error_code = "LOCATION_TOO_LONG"


class DurationTooShort(RunValidationError):
    error_code = "DURATION_TOO_SHORT"


class DurationTooLong(RunValidationError):
    error_code = "DURATION_TOO_LONG"


class InvalidGpx(RunValidationError):
    error_code = "INVALID_GPX"


# --------- Access --------- #

class AuthenticationError(RunClubError):
    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(detail)


class AuthorizationError(RunClubError):
    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, detail: str = "Access denied"):
        super().__init__(detail)


# --------- Missing resources (404) --------- #

class NotFoundError(RunClubError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class UserNotFound(NotFoundError):
    error_code = "USER_NOT_FOUND"

    def __init__(self, user_id):
        super().__init__("User", user_id)
        self.user_id = user_id
