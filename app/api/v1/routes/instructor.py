"""Instructor reporting endpoints. All of them require the instructor role."""

from fastapi import APIRouter, Depends

from app.dependencies.auth import get_current_instructor
from app.initializers.firestore import get_db
from app.models.instructor import (
    CourseStudents,
    InstructorCourse,
    InstructorStats,
    StudentCourseReport,
)
from app.models.user import User
from app.services.instructor_service import InstructorService

router = APIRouter()


@router.get("/my-courses", response_model=list[InstructorCourse])
async def get_my_courses(
    db=Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    instructor_service = InstructorService(db)
    return instructor_service.list_courses(current_user.id)


@router.get("/courses/{course_id}/students", response_model=CourseStudents)
async def get_course_students(
    course_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Enrolled students of a course with their progress and quiz averages.

    Raises:
        403: Not an instructor, or not the instructor of this course
        404: Course not found
    """
    instructor_service = InstructorService(db)
    return instructor_service.get_course_students(course_id, current_user)


@router.get(
    "/courses/{course_id}/students/{student_id}/progress", response_model=StudentCourseReport
)
async def get_student_progress(
    course_id: str,
    student_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Lesson-by-lesson progress of one student in a course.

    Raises:
        403: Not an instructor, or not the instructor of this course
        404: Course or student not found, or the student is not enrolled
    """
    instructor_service = InstructorService(db)
    return instructor_service.get_student_progress(course_id, student_id, current_user)


@router.get("/dashboard/stats", response_model=InstructorStats)
async def get_dashboard_stats(
    db=Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    instructor_service = InstructorService(db)
    return instructor_service.get_stats(current_user.id)
