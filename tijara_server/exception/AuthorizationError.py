from tijara_server.exception.AppError import AppError


class AuthorizationError(AppError):
    """Raised when the caller may see an entity but not act on it (not sender/owner)."""
    status = 403
