class AppError(Exception):
    """Base class for errors that map onto an HTTP status.

    `message` is safe to return to the client; anything sensitive belongs in
    the chained cause, which is only logged.
    """
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
