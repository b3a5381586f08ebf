"""Lesson completion, course progress and dashboard endpoints."""

from fastapi import APIRouter, Depends

from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.progress import CourseProgress, LessonCompleteRequest, StudentDashboard
from app.models.user import User
from app.services.progress_service import ProgressService
from app.utils.exceptions import InvalidInputError

router = APIRouter()


@router.post("/complete")
async def mark_lesson_complete(
    request: LessonCompleteRequest | None = None,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Mark a lesson as complete for the current user.

    Raises:
        400: Missing IDs, or the lesson belongs to a different course
        403: Not enrolled in the course
        404: Lesson not found
    """
    if request is None or not request.lesson_id or not request.course_id:
        raise InvalidInputError("Lesson ID and Course ID are required")

    progress_service = ProgressService(db)
    progress = progress_service.mark_lesson_complete(
        current_user.id, request.course_id, request.lesson_id
    )
    return {"message": "Lesson marked as complete", "progress": progress}


@router.get("/course/{course_id}", response_model=CourseProgress)
async def get_course_progress(
    course_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    progress_service = ProgressService(db)
    return progress_service.get_course_progress(current_user.id, course_id)


@router.get("/dashboard", response_model=StudentDashboard)
async def get_dashboard(
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every enrolled course with progress, latest quiz and next lesson."""
    progress_service = ProgressService(db)
    return progress_service.get_dashboard(current_user.id)
