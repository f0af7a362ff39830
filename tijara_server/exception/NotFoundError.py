from tijara_server.exception.AppError import AppError


class NotFoundError(AppError):
    """Raised when an entity does not exist or is outside the caller's scope."""
    status = 404
