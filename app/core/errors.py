"""Error taxonomy shared by the stores, the access gate and the HTTP layer."""


class ServiceError(Exception):
    """Base class for typed service errors; carries the HTTP mapping."""

    status_code = 500
    status = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidArgument(ServiceError):
    """Malformed input or a violated record invariant."""

    status_code = 400
    status = "fail"


class Unauthenticated(ServiceError):
    """Missing, invalid or expired credential."""

    status_code = 401
    status = "fail"


class PermissionDenied(ServiceError):
    """Valid credential without a sufficient role."""

    status_code = 403
    status = "fail"


class NotFound(ServiceError):
    """Book id or account email not present."""

    status_code = 404
    status = "fail"


class Conflict(ServiceError):
    """Uniqueness violation (email taken, identifier retries exhausted)."""

    status_code = 409
    status = "fail"


class Internal(ServiceError):
    """Unexpected persistence or encoding fault. Message is safe to return."""

    status_code = 500
    status = "error"
