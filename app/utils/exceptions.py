"""Business-rule errors surfaced as structured 4xx responses.

Each error is an HTTPException so services can raise it directly and
``handle_firestore_exceptions`` lets it through untouched. The ``detail``
is always a dict with at least an ``error`` message.
"""

from typing import Any

from fastapi import HTTPException, status


class InvalidInputError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": message})


class NotEnrolledError(HTTPException):
    def __init__(self, message: str = "Not enrolled in this course"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail={"error": message})


class ForbiddenError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail={"error": message})


class NotFoundError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail={"error": message})


class AlreadyIssuedError(HTTPException):
    """A certificate already exists for the (student, course) pair."""

    def __init__(self, certificate: Any):
        self.certificate = certificate
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Certificate already issued",
                "certificate": certificate.model_dump(mode="json"),
            },
        )


class NotEligibleError(HTTPException):
    """Completion evaluation found the course unfinished."""

    def __init__(self, message: str, progress: Any = None):
        self.progress = progress
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": message,
                "progress": progress.model_dump(mode="json") if progress is not None else None,
            },
        )
