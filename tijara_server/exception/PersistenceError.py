from tijara_server.exception.AppError import AppError


class PersistenceError(AppError):
    """Raised when a database operation fails.

    The original driver error is kept as ``__cause__`` for logging; the
    client only ever sees the generic message.
    """
    status = 500

    def __init__(self, message='Database operation failed'):
        super().__init__(message)
