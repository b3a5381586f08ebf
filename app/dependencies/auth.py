"""Authentication dependencies for route handlers"""

from fastapi import Depends, HTTPException, Request, status

from app.models.user import User
from app.utils.exceptions import ForbiddenError


def get_current_user(request: Request) -> User:
    """
    Get the user the session middleware attached to the request.

    Returns:
        User: The authenticated user object

    Raises:
        HTTPException: 401 if user is not authenticated (e.g. on a public route)
    """
    user = getattr(request.state, "current_user", None)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_current_instructor(current_user: User = Depends(get_current_user)) -> User:
    """Like get_current_user, but 403 unless the user has the instructor role."""
    if current_user.role != "instructor":
        raise ForbiddenError("Instructor access required")
    return current_user
