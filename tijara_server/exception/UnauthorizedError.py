from tijara_server.exception.AppError import AppError


class UnauthorizedError(AppError):
    """Raised when authentication fails due to invalid, expired, or malformed token."""
    status = 401

    def __init__(self, message):
        super().__init__(message)
