"""Certificate endpoints: issuance, eligibility check and public verification."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.certificate import (
    CertificateDetail,
    CertificateIssued,
    CertificateIssueRequest,
    EligibilityResult,
    VerificationRequest,
    VerificationResult,
)
from app.models.user import User
from app.services.certificate_service import CertificateService
from app.utils.exceptions import InvalidInputError

router = APIRouter()


@router.post("/issue", response_model=CertificateIssued, status_code=status.HTTP_201_CREATED)
async def issue_certificate(
    request: CertificateIssueRequest | None = None,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Issue a certificate for a course the current user has fully completed.

    Raises:
        400: Missing course ID, certificate already issued, or course not completed
        403: Not enrolled in the course
    """
    if request is None or not request.course_id:
        raise InvalidInputError("Course ID is required")

    certificate_service = CertificateService(db)
    certificate = certificate_service.issue_certificate(current_user.id, request.course_id)
    return CertificateIssued(certificate=certificate_service.with_details(certificate))


@router.get("/my-certificates", response_model=list[CertificateDetail])
async def get_my_certificates(
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    certificate_service = CertificateService(db)
    return certificate_service.list_for_student(current_user.id)


@router.post("/verify", response_model=VerificationResult)
async def verify_certificate(
    request: VerificationRequest | None = None, db=Depends(get_db)
):
    """Public: check a verification code. Unknown codes answer 404 with verified=false."""
    if request is None or not request.verification_code:
        raise InvalidInputError("Verification code is required")

    certificate_service = CertificateService(db)
    result = certificate_service.verify_by_code(request.verification_code)

    if not result.verified:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=result.model_dump(mode="json", exclude={"certificate"}),
        )
    return result


@router.get("/check/{course_id}", response_model=EligibilityResult)
async def check_eligibility(
    course_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Report whether the current user could be issued a certificate right now."""
    certificate_service = CertificateService(db)
    return certificate_service.check_eligibility(current_user.id, course_id)


@router.get("/{certificate_id}", response_model=CertificateDetail)
async def get_certificate(certificate_id: str, db=Depends(get_db)):
    """Public: look up a certificate by its certificate ID."""
    certificate_service = CertificateService(db)
    return certificate_service.get_by_certificate_id(certificate_id)
