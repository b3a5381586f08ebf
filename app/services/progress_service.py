from datetime import datetime
import logging

from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.progress import CourseProgress, DashboardEntry, LessonProgress, StudentDashboard
from app.utils.exceptions import InvalidInputError, NotEnrolledError, NotFoundError
from app.utils.firestore_exception import handle_firestore_exceptions
from app.utils.grading import round_half_up


logger = logging.getLogger(__name__)

RECENT_COURSE_QUIZZES = 5
RECENT_DASHBOARD_QUIZZES = 10


class ProgressService:
    def __init__(self, db, course_service=None, enrollment_service=None, quiz_service=None):
        self.db = db
        self.collection = db.collection("progress")

        if course_service is None:
            from app.services.course_service import CourseService

            course_service = CourseService(db)
        self.course_service = course_service

        if enrollment_service is None:
            from app.services.enrollment_service import EnrollmentService

            enrollment_service = EnrollmentService(db, course_service=course_service)
        self.enrollment_service = enrollment_service

        if quiz_service is None:
            from app.services.quiz_service import QuizService

            quiz_service = QuizService(
                db, course_service=course_service, enrollment_service=enrollment_service
            )
        self.quiz_service = quiz_service

    def _generate_progress_id(self, student_id: str, lesson_id: str) -> str:
        """Generate composite key for a (student, lesson) progress record."""
        return f"{student_id}_{lesson_id}"

    @handle_firestore_exceptions
    def mark_lesson_complete(self, student_id: str, course_id: str, lesson_id: str) -> LessonProgress:
        """Mark a lesson complete. Re-completing keeps the original completed_at."""
        if self.enrollment_service.find_enrollment(student_id, course_id) is None:
            raise NotEnrolledError()

        lesson = self.course_service.get_lesson(lesson_id)
        if lesson.course_id != course_id:
            raise InvalidInputError(
                f"Lesson '{lesson_id}' does not belong to course '{course_id}'"
            )

        progress_id = self._generate_progress_id(student_id, lesson_id)
        doc_ref = self.collection.document(progress_id)
        doc = doc_ref.get()

        if doc.exists:
            progress = LessonProgress(**doc.to_dict())
            if progress.completed:
                return progress

            completed_at = datetime.today()
            doc_ref.update({"completed": True, "completed_at": completed_at})
            logger.info(f"Student '{student_id}' completed lesson '{lesson_id}'")
            return progress.model_copy(update={"completed": True, "completed_at": completed_at})

        progress_data = {
            "id": progress_id,
            "student_id": student_id,
            "course_id": course_id,
            "lesson_id": lesson_id,
            "completed": True,
            "completed_at": datetime.today(),
        }
        doc_ref.set(progress_data)
        logger.info(f"Student '{student_id}' completed lesson '{lesson_id}'")
        return LessonProgress(**progress_data)

    @handle_firestore_exceptions
    def get_progress_records(self, student_id: str, completed_only: bool = False) -> list[LessonProgress]:
        """All progress records of a student; callers filter by lesson set."""
        query = self.collection.where(filter=FieldFilter("student_id", "==", student_id))
        if completed_only:
            query = query.where(filter=FieldFilter("completed", "==", True))
        return [LessonProgress(**doc.to_dict()) for doc in query.get()]

    def _summarize(self, outline, records, attempts):
        """Counts, suggestion and newest-first attempts restricted to the outline's lessons."""
        lesson_ids = outline.lesson_ids
        completed_ids = {
            record.lesson_id for record in records if record.completed and record.lesson_id in lesson_ids
        }

        total = len(lesson_ids)
        percentage = round_half_up(len(completed_ids) / total * 100) if total else 0

        suggested = next(
            (lesson for lesson in outline.lessons if lesson.id not in completed_ids), None
        )
        course_attempts = sorted(
            (attempt for attempt in attempts if attempt.lesson_id in lesson_ids),
            key=lambda a: a.attempted_at,
            reverse=True,
        )
        return total, len(completed_ids), percentage, suggested, course_attempts

    @handle_firestore_exceptions
    def get_course_progress(self, student_id: str, course_id: str) -> CourseProgress:
        if self.enrollment_service.find_enrollment(student_id, course_id) is None:
            raise NotEnrolledError()

        outline = self.course_service.get_course_outline(course_id)
        records = [
            record
            for record in self.get_progress_records(student_id)
            if record.lesson_id in outline.lesson_ids
        ]
        attempts = self.quiz_service.get_attempts_by_student(student_id)

        total, completed, percentage, suggested, course_attempts = self._summarize(
            outline, records, attempts
        )
        return CourseProgress(
            course_id=course_id,
            total_lessons=total,
            completed_lessons=completed,
            progress_percentage=percentage,
            suggested_lesson=suggested,
            progress_records=records,
            recent_quizzes=course_attempts[:RECENT_COURSE_QUIZZES],
        )

    @handle_firestore_exceptions
    def get_dashboard(self, student_id: str) -> StudentDashboard:
        """Progress across every enrolled course, newest enrollment first."""
        records = self.get_progress_records(student_id)
        attempts = self.quiz_service.get_attempts_by_student(student_id)

        entries = []
        for enrollment in self.enrollment_service.get_enrollments_by_student(student_id):
            try:
                outline = self.course_service.get_course_outline(enrollment.course_id)
            except NotFoundError:
                logger.warning(
                    f"Skipping enrollment '{enrollment.id}' on dashboard: course no longer exists"
                )
                continue

            total, completed, percentage, suggested, course_attempts = self._summarize(
                outline, records, attempts
            )
            entries.append(
                DashboardEntry(
                    course_id=outline.course.id,
                    course_title=outline.course.title,
                    total_lessons=total,
                    completed_lessons=completed,
                    progress_percentage=percentage,
                    recent_quiz=course_attempts[0] if course_attempts else None,
                    suggested_lesson=suggested,
                    enrolled_at=enrollment.enrolled_at,
                )
            )

        recent = sorted(attempts, key=lambda a: a.attempted_at, reverse=True)
        return StudentDashboard(courses=entries, recent_quizzes=recent[:RECENT_DASHBOARD_QUIZZES])
