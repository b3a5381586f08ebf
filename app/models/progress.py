from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.course import Lesson
from app.models.quiz import QuizAttempt


class LessonProgress(BaseModel):
    id: str = Field(..., description="Composite key: {studentId}_{lessonId}")
    student_id: str
    course_id: str = Field(..., description="Parent course of the lesson")
    lesson_id: str
    completed: bool = False
    completed_at: datetime | None = None


class LessonCompleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lesson_id: str | None = Field(None, alias="lessonId")
    course_id: str | None = Field(None, alias="courseId")


class ProgressSummary(BaseModel):
    completed_lessons: int
    total_lessons: int


class CourseProgress(BaseModel):
    course_id: str
    total_lessons: int
    completed_lessons: int
    progress_percentage: int = Field(..., ge=0, le=100)
    suggested_lesson: Lesson | None = Field(
        None, description="First incomplete lesson in course order"
    )
    progress_records: list[LessonProgress] = Field(default_factory=list)
    recent_quizzes: list[QuizAttempt] = Field(
        default_factory=list, description="Newest attempts on this course's lessons"
    )


class DashboardEntry(BaseModel):
    """One enrolled course as shown on the student dashboard."""

    course_id: str
    course_title: str
    total_lessons: int
    completed_lessons: int
    progress_percentage: int = Field(..., ge=0, le=100)
    recent_quiz: QuizAttempt | None = None
    suggested_lesson: Lesson | None = None
    enrolled_at: datetime


class StudentDashboard(BaseModel):
    courses: list[DashboardEntry] = Field(default_factory=list)
    recent_quizzes: list[QuizAttempt] = Field(
        default_factory=list, description="Newest attempts across every course"
    )
