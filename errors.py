"""Error classes raised by the services and mapped to HTTP responses in main.py."""


class AppError(Exception):
    """Base class; carries the HTTP status the error maps to."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str = ""):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = 400
    default_detail = "Missing or invalid fields"


class Unauthorized(AppError):
    status_code = 401
    default_detail = "Invalid credentials"


class Forbidden(AppError):
    status_code = 403
    default_detail = "Not allowed for this role"


class NotFound(AppError):
    status_code = 404
    default_detail = "Not found"


class AlreadyAccepted(NotFound):
    """Accept matched no open request: unknown id or already accepted."""

    default_detail = "Help request not found or already accepted."


class NotFoundOrNotOwned(NotFound):
    default_detail = "Help request not found or not accepted by this caller."


class Conflict(AppError):
    status_code = 409
    default_detail = "Already exists"


class InternalError(AppError):
    pass
