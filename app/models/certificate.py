from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.course import CourseSummary
from app.models.progress import ProgressSummary
from app.models.user import UserSummary


class Certificate(BaseModel):
    """Issued, permanent proof of course completion. One per (student, course)."""

    student_id: str
    course_id: str
    certificate_id: str = Field(..., description="CERT-<base36 ms>-<8 hex>, upper-cased")
    issued_at: datetime
    completion_date: datetime = Field(
        ..., description="Latest completed_at among the course's lesson progress records"
    )
    grade: int = Field(..., ge=0, le=100)
    verification_code: str = Field(..., description="32 upper-case hex characters")


class CertificateDetail(Certificate):
    """Certificate plus the display fields a renderer or verifier needs."""

    student: UserSummary | None = None
    course: CourseSummary | None = None


class CertificateIssueRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str | None = Field(None, alias="courseId")


class CertificateIssued(BaseModel):
    message: str = "Certificate issued successfully"
    certificate: CertificateDetail


class VerificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    verification_code: str | None = Field(None, alias="verificationCode")


class VerificationResult(BaseModel):
    verified: bool
    certificate: CertificateDetail | None = None
    error: str | None = None


class CompletionResult(BaseModel):
    """Outcome of evaluating a student's completion of a course."""

    completed: bool
    grade: int | None = Field(None, ge=0, le=100)
    completion_date: datetime | None = None
    progress: ProgressSummary | None = None
    error: str | None = None


class EligibilityResult(BaseModel):
    eligible: bool
    completed: bool = False
    grade: int | None = None
    progress: ProgressSummary | None = None
    error: str | None = None
    already_issued: bool = False
    certificate: Certificate | None = None
