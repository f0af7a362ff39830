from tijara_server.exception.AppError import AppError
from tijara_server.exception.AuthorizationError import AuthorizationError
from tijara_server.exception.NotFoundError import NotFoundError
from tijara_server.exception.PersistenceError import PersistenceError
from tijara_server.exception.UnauthorizedError import UnauthorizedError
from tijara_server.exception.ValidationError import ValidationError

__all__ = [
    'AppError', 'AuthorizationError', 'NotFoundError',
    'PersistenceError', 'UnauthorizedError', 'ValidationError',
]
