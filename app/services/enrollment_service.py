from datetime import datetime
import logging

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.enrollment import Enrollment
from app.utils.exceptions import InvalidInputError, NotFoundError
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(self, db, course_service=None):
        self.db = db
        self.collection = db.collection("enrollments")

        if course_service is None:
            from app.services.course_service import CourseService

            self.course_service = CourseService(db)
        else:
            self.course_service = course_service

    def _generate_enrollment_id(self, student_id: str, course_id: str) -> str:
        """Generate composite key for enrollment."""
        return f"{student_id}_{course_id}"

    @handle_firestore_exceptions
    def enroll(self, student_id: str, course_id: str) -> Enrollment:
        course = self.course_service.get_course(course_id)
        if not course.is_published:
            raise InvalidInputError("Course is not published")

        enrollment_id = self._generate_enrollment_id(student_id, course_id)
        doc_ref = self.collection.document(enrollment_id)

        now = datetime.today()
        enrollment_data = {
            "id": enrollment_id,
            "student_id": student_id,
            "course_id": course_id,
            "enrolled_at": now,
            "status": "active",
            "updated_at": now,
        }
        # create() fails when the enrollment document already exists
        try:
            doc_ref.create(enrollment_data)
        except AlreadyExists:
            raise InvalidInputError("Already enrolled in this course")

        logger.info(f"Student '{student_id}' enrolled in course '{course_id}'")
        return Enrollment(**enrollment_data)

    @handle_firestore_exceptions
    def find_enrollment(self, student_id: str, course_id: str) -> Enrollment | None:
        doc = self.collection.document(self._generate_enrollment_id(student_id, course_id)).get()
        if not doc.exists:
            return None

        return Enrollment(**doc.to_dict())

    @handle_firestore_exceptions
    def get_enrollment(self, student_id: str, course_id: str) -> Enrollment:
        enrollment = self.find_enrollment(student_id, course_id)
        if enrollment is None:
            raise NotFoundError(
                f"Enrollment not found for student '{student_id}' in course '{course_id}'."
            )
        return enrollment

    @handle_firestore_exceptions
    def get_enrollments_by_student(self, student_id: str, limit: int = 100) -> list[Enrollment]:
        """Get all enrollments for a student, newest first."""
        docs = (
            self.collection.where(filter=FieldFilter("student_id", "==", student_id))
            .limit(limit)
            .get()
        )
        enrollments = [Enrollment(**doc.to_dict()) for doc in docs]
        return sorted(enrollments, key=lambda e: e.enrolled_at, reverse=True)

    @handle_firestore_exceptions
    def get_enrollments_by_course(self, course_id: str) -> list[Enrollment]:
        """Get all enrollments in a course, newest first."""
        docs = self.collection.where(filter=FieldFilter("course_id", "==", course_id)).get()
        enrollments = [Enrollment(**doc.to_dict()) for doc in docs]
        return sorted(enrollments, key=lambda e: e.enrolled_at, reverse=True)

    @handle_firestore_exceptions
    def unenroll(self, student_id: str, course_id: str) -> dict:
        enrollment_id = self._generate_enrollment_id(student_id, course_id)
        doc_ref = self.collection.document(enrollment_id)
        if not doc_ref.get().exists:
            raise NotFoundError("Enrollment not found")

        doc_ref.delete()
        logger.info(f"Student '{student_id}' unenrolled from course '{course_id}'")
        return {"message": "Unenrolled successfully"}

    @handle_firestore_exceptions
    def mark_completed(self, student_id: str, course_id: str) -> None:
        """Flip the enrollment status to 'completed' after certificate issuance."""
        enrollment_id = self._generate_enrollment_id(student_id, course_id)
        self.collection.document(enrollment_id).update(
            {"status": "completed", "updated_at": datetime.today()}
        )
