"""Route decorators for common patterns like error handling and authentication.

This module provides reusable decorators to reduce boilerplate in route handlers.
"""
import functools
import logging
from typing import Callable

from flask import request

from tijara_server.exception import AppError, PersistenceError, UnauthorizedError
from tijara_server.utils.helpers import respond_error, get_services
from tijara_server.security.authentication import get_auth_payload

logger = logging.getLogger(__name__)


def handle_errors(func: Callable) -> Callable:
    """Decorator to translate service exceptions into JSON error responses.

    Catches:
    - UnauthorizedError -> 401
    - ValidationError -> 400, AuthorizationError -> 403, NotFoundError -> 404
    - PersistenceError -> 500 with a generic message (cause is logged)
    - Other exceptions -> 500

    Usage:
        @bp.route('/example')
        @handle_errors
        def example_route():
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UnauthorizedError as e:
            logger.warning("Unauthorized: %s", e)
            return respond_error(e.message, status=401)
        except PersistenceError as e:
            logger.error("Persistence error in %s: %s (cause: %r)", func.__name__, e, e.__cause__)
            return respond_error(e.message, status=500)
        except AppError as e:
            logger.warning("%s in %s: %s", type(e).__name__, func.__name__, e)
            return respond_error(e.message, status=e.status)
        except Exception:
            logger.exception("Unexpected error in %s", func.__name__)
            return respond_error('Server error', status=500)
    return wrapper


def require_auth(func: Callable) -> Callable:
    """Decorator to require authentication and inject payload into handler.

    The token must decode and its `user_id` must belong to an existing user.
    The decorated function receives `auth_payload` as a keyword argument,
    with the caller's UserDTO under `auth_payload['user']`.

    Usage:
        @bp.route('/protected')
        @handle_errors
        @require_auth
        def protected_route(auth_payload):
            user_id = auth_payload['user_id']
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        payload = get_auth_payload(request)
        user = get_services().users.find_by_id(payload['user_id'])
        if user is None:
            raise UnauthorizedError('User not found')
        payload['user'] = user
        kwargs['auth_payload'] = payload
        return func(*args, **kwargs)
    return wrapper
