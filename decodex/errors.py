"""
Error taxonomy shared by the engine, the HTTP routes and the socket handlers.

Every error carries a machine readable ``code``, the HTTP status the routes
answer with, and whether the caller may retry the same request later.
"""


class DecodexError(Exception):
    code = "error"
    status_code = 400
    retryable = False

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or self.__class__.__doc__ or self.code

    def to_dict(self):
        return {
            "status": "error",
            "error": self.code,
            "msg": self.message,
            "retryable": self.retryable,
        }


class NotReady(DecodexError):
    """The quiz is not running for this team right now."""
    code = "not_ready"
    status_code = 409
    retryable = True


class InvalidState(DecodexError):
    """The operation does not match the team's current state."""
    code = "invalid_state"
    status_code = 409


class Exhausted(DecodexError):
    """No power-ups of this kind left."""
    code = "exhausted"
    status_code = 409


class ValidationError(DecodexError):
    """The request is malformed."""
    code = "validation_error"
    status_code = 400


class NotFound(DecodexError):
    """The requested entity does not exist."""
    code = "not_found"
    status_code = 404


class AuthenticationError(DecodexError):
    """Invalid credentials."""
    code = "authentication_error"
    status_code = 401


class Conflict(DecodexError):
    """The team record is busy, try again."""
    code = "conflict"
    status_code = 409
    retryable = True


class StorageUnavailable(DecodexError):
    """The database did not answer in time."""
    code = "storage_unavailable"
    status_code = 503
    retryable = True
