"""Enrollment endpoints for the current user."""

from fastapi import APIRouter, Depends, status

from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.enrollment import Enrollment, EnrollmentCheck, EnrollmentCreate
from app.models.user import User
from app.services.enrollment_service import EnrollmentService
from app.utils.exceptions import InvalidInputError

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def enroll(
    request: EnrollmentCreate | None = None,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Enroll the current user in a published course.

    Raises:
        400: Missing course ID, unpublished course or already enrolled
        404: Course not found
    """
    if request is None or not request.course_id:
        raise InvalidInputError("Course ID is required")

    enrollment_service = EnrollmentService(db)
    enrollment = enrollment_service.enroll(current_user.id, request.course_id)
    return {"message": "Enrolled successfully", "enrollment": enrollment}


@router.get("/my-enrollments", response_model=list[Enrollment])
async def get_my_enrollments(
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = 100,
):
    enrollment_service = EnrollmentService(db)
    return enrollment_service.get_enrollments_by_student(current_user.id, limit=limit)


@router.get("/check/{course_id}", response_model=EnrollmentCheck)
async def check_enrollment(
    course_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enrollment_service = EnrollmentService(db)
    enrollment = enrollment_service.find_enrollment(current_user.id, course_id)
    return EnrollmentCheck(enrolled=enrollment is not None, enrollment=enrollment)


@router.delete("/{course_id}")
async def unenroll(
    course_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enrollment_service = EnrollmentService(db)
    return enrollment_service.unenroll(current_user.id, course_id)
