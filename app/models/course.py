from datetime import datetime

from pydantic import BaseModel, Field


class Course(BaseModel):
    id: str
    title: str
    description: str = ""
    instructor_id: str | None = Field(None, description="User ID of the course instructor")
    is_published: bool = Field(default=False, description="Only published courses accept enrollments")
    created_at: datetime = Field(default_factory=datetime.today)
    updated_at: datetime = Field(default_factory=datetime.today)


class Lesson(BaseModel):
    id: str
    course_id: str = Field(..., description="ID of the course the lesson belongs to")
    module_id: str = Field(..., description="ID of the parent module")
    title: str
    order: int = 0
    quiz_id: str | None = Field(None, description="Quiz attached to the lesson, if any")


class Module(BaseModel):
    id: str
    course_id: str
    title: str
    order: int = 0
    lessons: list[Lesson] = Field(default_factory=list, description="Lessons in display order")


class CourseOutline(BaseModel):
    """A course with its ordered module -> lesson tree."""

    course: Course
    modules: list[Module] = Field(default_factory=list)

    @property
    def lessons(self) -> list[Lesson]:
        return [lesson for module in self.modules for lesson in module.lessons]

    @property
    def lesson_ids(self) -> set[str]:
        return {lesson.id for lesson in self.lessons}


class CourseSummary(BaseModel):
    """Display fields embedded in certificate lookups."""

    id: str
    title: str | None = None
    description: str | None = None
