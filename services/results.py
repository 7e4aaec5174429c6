"""
Action Results

Every action returns a plain dict: ``{'success': True, ...}`` on success or
``{'error': message}`` on failure. Failures also carry the HTTP status the
route should answer with; the route strips it before responding.
"""

import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

from models import db

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = 'Not authenticated'


def ok(**data):
    return {'success': True, **data}


def fail(message, status=400):
    return {'error': message, 'status': status}


def unauthenticated():
    return fail(NOT_AUTHENTICATED, 401)


def storage_action(message):
    """
    Turn storage failures inside an action into a generic error result.

    The session is rolled back so nothing from a half-finished action is
    committed later by an unrelated request.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(user_id, *args, **kwargs):
            if not user_id:
                return unauthenticated()
            try:
                return func(user_id, *args, **kwargs)
            except SQLAlchemyError:
                db.session.rollback()
                logger.exception("%s (user=%s)", message, user_id)
                return fail(message, 500)
        return wrapper
    return decorator
