from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


EnrollmentStatus = Literal["active", "completed", "dropped", "paused"]


class Enrollment(BaseModel):
    id: str = Field(..., description="Composite key: {studentId}_{courseId}")
    student_id: str = Field(..., description="ID of the enrolled student")
    course_id: str = Field(..., description="ID of the course")
    enrolled_at: datetime = Field(default_factory=datetime.today)
    status: EnrollmentStatus = Field(
        default="active", description="Flipped to 'completed' when a certificate is issued"
    )
    updated_at: datetime = Field(default_factory=datetime.today)


class EnrollmentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str | None = Field(None, alias="courseId")


class EnrollmentCheck(BaseModel):
    enrolled: bool
    enrollment: Enrollment | None = None
