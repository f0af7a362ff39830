from tijara_server.exception.AppError import AppError


class ValidationError(AppError):
    """Raised for malformed or missing input; nothing has been written."""
    status = 400
