"""Custom exceptions for the event site application."""


class EventsiteException(Exception):
    """Base class for application exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code and error code for consistent HTTP
    response handling.
    """
    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict:
        return {"error": self.error, "message": self.message}


class InvalidInputError(EventsiteException):
    """Raised when a request payload or query parameter is malformed.

    Maps to HTTP 400 Bad Request.
    """
    status_code = 400
    error = "invalid_input"

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class RedemptionRejectedError(EventsiteException):
    """Raised when a redemption matched no attendee with remaining quota.

    Unknown attendees and exhausted quotas share this error and its
    message so callers cannot probe which employee IDs exist.
    Maps to HTTP 400 Bad Request.
    """
    status_code = 400
    error = "redemption_rejected"

    def __init__(self):
        super().__init__("Attendee not found or quota exhausted")


class AuthenticationError(EventsiteException):
    """Raised when the session credential is missing, invalid or expired,
    or when login credentials do not match an attendee.

    Maps to HTTP 401 Unauthorized.
    """
    status_code = 401
    error = "unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class PermissionDeniedError(EventsiteException):
    """Raised when the session role may not access the endpoint.

    Maps to HTTP 403 Forbidden.
    """
    status_code = 403
    error = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class AttendeeNotFoundError(EventsiteException):
    """Maps to HTTP 404 Not Found."""
    status_code = 404
    error = "not_found"

    def __init__(self, message: str = "Attendee not found"):
        super().__init__(message)


class ConflictError(EventsiteException):
    """Raised on unique constraint violations and blocked deletes.

    Maps to HTTP 409 Conflict.
    """
    status_code = 409
    error = "conflict"

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)
