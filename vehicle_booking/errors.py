# vehicle_booking/errors.py
"""
Error taxonomy shared by services and routers.
Every error carries a stable machine-readable kind, an HTTP status code and
a human message; main.py renders them as {"error": kind, "message": message}.
"""


class BookingAPIError(Exception):
    kind = "internal_error"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(BookingAPIError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class AuthError(BookingAPIError):
    kind = "auth_error"
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(BookingAPIError):
    kind = "forbidden"
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(BookingAPIError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class ConflictError(BookingAPIError):
    kind = "conflict"
    status_code = 409
    default_message = "Request conflicts with existing data"


class InvalidStateError(ConflictError):
    kind = "invalid_state"
    default_message = "Operation not allowed in the current state"


class InternalError(BookingAPIError):
    pass
