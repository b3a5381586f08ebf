from functools import wraps
import logging

from fastapi import HTTPException, status


logger = logging.getLogger(__name__)


def handle_firestore_exceptions(func):
    """
    Decorator to turn unexpected storage failures into an opaque 500.

    HTTPExceptions (including the business errors in app.utils.exceptions)
    pass through unchanged. Anything else is logged with its traceback and
    surfaced to the caller without internal detail.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unhandled exception in {func.__name__}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error",
            ) from e

    return wrapper
