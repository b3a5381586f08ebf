"""Read-only reporting views for course instructors."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.course import Course, CourseSummary
from app.models.enrollment import EnrollmentStatus
from app.models.quiz import QuizAttempt
from app.models.user import UserSummary


class CourseStats(BaseModel):
    total_enrollments: int = 0
    active_enrollments: int = 0
    completed_enrollments: int = 0
    total_lessons: int = 0


class InstructorCourse(BaseModel):
    course: Course
    stats: CourseStats


class StudentProgressSummary(BaseModel):
    total_lessons: int
    completed_lessons: int
    progress_percentage: int = Field(..., ge=0, le=100)
    total_quiz_attempts: int
    avg_quiz_score: int = Field(..., ge=0, le=100)
    last_accessed: datetime | None = Field(
        None, description="Latest lesson completion, else the enrollment date"
    )


class EnrolledStudent(BaseModel):
    enrollment_id: str
    student: UserSummary
    enrolled_at: datetime
    status: EnrollmentStatus
    progress: StudentProgressSummary


class CourseStudents(BaseModel):
    course: CourseSummary
    students: list[EnrolledStudent] = Field(default_factory=list)


class LessonReport(BaseModel):
    lesson_id: str
    title: str
    order: int
    completed: bool = False
    completed_at: datetime | None = None
    has_quiz: bool = False
    quiz_attempts: list[QuizAttempt] = Field(
        default_factory=list, description="Attempts on the lesson's quiz, newest first"
    )


class ModuleReport(BaseModel):
    module_id: str
    title: str
    order: int
    total_lessons: int
    completed_lessons: int
    progress_percentage: int = Field(..., ge=0, le=100)
    lessons: list[LessonReport] = Field(default_factory=list)


class EnrollmentInfo(BaseModel):
    enrolled_at: datetime
    status: EnrollmentStatus


class StudentCourseReport(BaseModel):
    """One student's lesson-by-lesson progress in one course."""

    student: UserSummary
    course: CourseSummary
    enrollment: EnrollmentInfo
    summary: StudentProgressSummary
    modules: list[ModuleReport] = Field(default_factory=list)


class InstructorStats(BaseModel):
    total_courses: int = 0
    published_courses: int = 0
    total_enrollments: int = 0
    active_enrollments: int = 0
    completed_enrollments: int = 0
    total_lessons: int = 0
    total_quizzes: int = 0
    recent_enrollments: int = Field(0, description="Enrollments in the last seven days")
