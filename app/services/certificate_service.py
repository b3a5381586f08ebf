"""Certificate issuance and public verification.

Issuance is a two-phase write:

1. One atomic batch of create-only writes: the certificate document keyed by
   ``{student_id}_{course_id}`` plus reservation documents keyed by the
   certificate id and by the verification code. Any existing document makes
   the whole batch fail with ``AlreadyExists``, so Firestore itself
   guarantees one certificate per (student, course) and globally unique
   identifiers.
2. The enrollment status update. It runs only after phase 1 succeeded and
   its failure is logged, not raised: enrollment status is a convenience
   projection, duplicate issuance is prevented by the certificate document.
"""

import logging

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.config import settings
from app.models.certificate import (
    Certificate,
    CertificateDetail,
    CompletionResult,
    EligibilityResult,
    VerificationResult,
)
from app.services.identifier_generator import IdentifierGenerator
from app.utils.exceptions import (
    AlreadyIssuedError,
    InvalidInputError,
    NotEligibleError,
    NotEnrolledError,
    NotFoundError,
)
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class CertificateService:
    def __init__(
        self,
        db,
        enrollment_service=None,
        completion_evaluator=None,
        course_service=None,
        user_service=None,
        identifier_generator: IdentifierGenerator | None = None,
        max_attempts: int | None = None,
    ):
        self.db = db
        self.collection = db.collection("certificates")
        self.certificate_ids_collection = db.collection("certificate_ids")
        self.verification_codes_collection = db.collection("verification_codes")

        if course_service is None:
            from app.services.course_service import CourseService

            course_service = CourseService(db)
        self.course_service = course_service

        if enrollment_service is None:
            from app.services.enrollment_service import EnrollmentService

            enrollment_service = EnrollmentService(db, course_service=course_service)
        self.enrollment_service = enrollment_service

        if completion_evaluator is None:
            from app.services.completion_evaluator import CompletionEvaluator

            completion_evaluator = CompletionEvaluator(db, course_service=course_service)
        self.completion_evaluator = completion_evaluator

        if user_service is None:
            from app.services.user_service import UserService

            user_service = UserService(db)
        self.user_service = user_service

        self.identifier_generator = identifier_generator or IdentifierGenerator()
        self.max_attempts = max_attempts or settings.CERTIFICATE_ISSUE_MAX_ATTEMPTS

    def _generate_certificate_key(self, student_id: str, course_id: str) -> str:
        """Generate composite key for the (student, course) certificate document."""
        return f"{student_id}_{course_id}"

    @handle_firestore_exceptions
    def find_certificate(self, student_id: str, course_id: str) -> Certificate | None:
        doc = self.collection.document(self._generate_certificate_key(student_id, course_id)).get()
        if not doc.exists:
            return None
        return Certificate(**doc.to_dict())

    @handle_firestore_exceptions
    def issue_certificate(self, student_id: str, course_id: str) -> Certificate:
        if self.enrollment_service.find_enrollment(student_id, course_id) is None:
            raise NotEnrolledError()

        existing = self.find_certificate(student_id, course_id)
        if existing is not None:
            raise AlreadyIssuedError(existing)

        completion = self.completion_evaluator.evaluate(student_id, course_id)
        if not completion.completed:
            raise NotEligibleError(completion.error or "Course not completed", completion.progress)

        certificate = self._store_certificate(student_id, course_id, completion)

        try:
            self.enrollment_service.mark_completed(student_id, course_id)
        except Exception as e:
            logger.error(
                f"Certificate '{certificate.certificate_id}' issued but enrollment of student "
                f"'{student_id}' in course '{course_id}' could not be marked completed: {e}",
                exc_info=True,
            )

        return certificate

    def _store_certificate(
        self, student_id: str, course_id: str, completion: CompletionResult
    ) -> Certificate:
        key = self._generate_certificate_key(student_id, course_id)

        for attempt in range(1, self.max_attempts + 1):
            issued_at = self.identifier_generator.now()
            # Completed records written without a timestamp leave no completion date; the
            # issue time stands in for it
            certificate = Certificate(
                student_id=student_id,
                course_id=course_id,
                certificate_id=self.identifier_generator.new_certificate_id(),
                issued_at=issued_at,
                completion_date=completion.completion_date or issued_at,
                grade=completion.grade,
                verification_code=self.identifier_generator.new_verification_code(),
            )

            batch = self.db.batch()
            batch.create(self.collection.document(key), certificate.model_dump())
            batch.create(
                self.certificate_ids_collection.document(certificate.certificate_id),
                {"certificate_key": key},
            )
            batch.create(
                self.verification_codes_collection.document(certificate.verification_code),
                {"certificate_key": key},
            )

            try:
                batch.commit()
            except AlreadyExists:
                winner = self.find_certificate(student_id, course_id)
                if winner is not None:
                    logger.info(
                        f"Concurrent issuance for student '{student_id}' in course "
                        f"'{course_id}' lost to certificate '{winner.certificate_id}'"
                    )
                    raise AlreadyIssuedError(winner)

                logger.warning(
                    f"Identifier collision issuing certificate for '{key}' "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            logger.info(
                f"Issued certificate '{certificate.certificate_id}' to student '{student_id}' "
                f"for course '{course_id}' with grade {certificate.grade}"
            )
            return certificate

        raise RuntimeError(
            f"Could not reserve unique certificate identifiers for '{key}' "
            f"after {self.max_attempts} attempts"
        )

    def _get_by_reservation(self, reservation_ref) -> Certificate | None:
        reservation = reservation_ref.get()
        if not reservation.exists:
            return None

        doc = self.collection.document(reservation.to_dict()["certificate_key"]).get()
        if not doc.exists:
            return None
        return Certificate(**doc.to_dict())

    @handle_firestore_exceptions
    def with_details(self, certificate: Certificate) -> CertificateDetail:
        return CertificateDetail(
            **certificate.model_dump(),
            student=self.user_service.get_user_summary(certificate.student_id),
            course=self.course_service.get_course_summary(certificate.course_id),
        )

    @handle_firestore_exceptions
    def get_by_certificate_id(self, certificate_id: str) -> CertificateDetail:
        certificate = self._get_by_reservation(
            self.certificate_ids_collection.document(certificate_id)
        )
        if certificate is None:
            raise NotFoundError("Certificate not found")
        return self.with_details(certificate)

    @handle_firestore_exceptions
    def verify_by_code(self, code: str | None) -> VerificationResult:
        normalized = (code or "").strip().upper()
        if not normalized:
            raise InvalidInputError("Verification code is required")

        certificate = self._get_by_reservation(
            self.verification_codes_collection.document(normalized)
        )
        if certificate is None:
            return VerificationResult(verified=False, error="Invalid verification code")

        return VerificationResult(verified=True, certificate=self.with_details(certificate))

    @handle_firestore_exceptions
    def list_for_student(self, student_id: str) -> list[CertificateDetail]:
        """All certificates of a student, most recently issued first."""
        docs = self.collection.where(filter=FieldFilter("student_id", "==", student_id)).get()
        certificates = sorted(
            (Certificate(**doc.to_dict()) for doc in docs),
            key=lambda certificate: certificate.issued_at,
            reverse=True,
        )
        return [self.with_details(certificate) for certificate in certificates]

    @handle_firestore_exceptions
    def check_eligibility(self, student_id: str, course_id: str) -> EligibilityResult:
        """Run the issuance preconditions without writing anything."""
        if self.enrollment_service.find_enrollment(student_id, course_id) is None:
            raise NotEnrolledError()

        existing = self.find_certificate(student_id, course_id)
        if existing is not None:
            return EligibilityResult(
                eligible=False,
                completed=True,
                grade=existing.grade,
                already_issued=True,
                certificate=existing,
            )

        completion = self.completion_evaluator.evaluate(student_id, course_id)
        return EligibilityResult(
            eligible=completion.completed,
            completed=completion.completed,
            grade=completion.grade,
            progress=completion.progress,
            error=completion.error,
        )
