"""Reporting on the courses an instructor owns.

Every view is read-only. Course-scoped views check that the course's
``instructor_id`` is the requesting user before reading any student data.
"""

from datetime import datetime, timedelta
import logging

from app.models.course import Course, CourseOutline, CourseSummary
from app.models.instructor import (
    CourseStats,
    CourseStudents,
    EnrolledStudent,
    EnrollmentInfo,
    InstructorCourse,
    InstructorStats,
    LessonReport,
    ModuleReport,
    StudentCourseReport,
    StudentProgressSummary,
)
from app.models.progress import LessonProgress
from app.models.quiz import QuizAttempt
from app.models.user import User, UserSummary
from app.utils.exceptions import ForbiddenError, NotFoundError
from app.utils.firestore_exception import handle_firestore_exceptions
from app.utils.grading import round_half_up


logger = logging.getLogger(__name__)

RECENT_ENROLLMENT_WINDOW = timedelta(days=7)


def _percentage(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def _local_naive(value: datetime) -> datetime:
    # Firestore returns UTC-aware timestamps; datetime.today() is naive local time
    return value.astimezone().replace(tzinfo=None) if value.tzinfo else value


def summarize_student(
    outline: CourseOutline,
    records: list[LessonProgress],
    attempts: list[QuizAttempt],
    enrolled_at: datetime,
) -> StudentProgressSummary:
    """Progress and quiz averages of one student, restricted to the outline's lessons."""
    lesson_ids = outline.lesson_ids
    completed = [r for r in records if r.completed and r.lesson_id in lesson_ids]
    completed_count = len({r.lesson_id for r in completed})
    course_attempts = [a for a in attempts if a.lesson_id in lesson_ids]

    avg_score = (
        round_half_up(sum(a.score for a in course_attempts) / len(course_attempts))
        if course_attempts
        else 0
    )
    completion_dates = [r.completed_at for r in completed if r.completed_at is not None]

    return StudentProgressSummary(
        total_lessons=len(lesson_ids),
        completed_lessons=completed_count,
        progress_percentage=_percentage(completed_count, len(lesson_ids)),
        total_quiz_attempts=len(course_attempts),
        avg_quiz_score=avg_score,
        last_accessed=max(completion_dates) if completion_dates else enrolled_at,
    )


class InstructorService:
    def __init__(
        self,
        db,
        course_service=None,
        enrollment_service=None,
        progress_service=None,
        quiz_service=None,
        user_service=None,
    ):
        self.db = db

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

        if progress_service is None:
            from app.services.progress_service import ProgressService

            progress_service = ProgressService(
                db,
                course_service=course_service,
                enrollment_service=enrollment_service,
                quiz_service=quiz_service,
            )
        self.progress_service = progress_service

        if user_service is None:
            from app.services.user_service import UserService

            user_service = UserService(db)
        self.user_service = user_service

    def _get_owned_course(self, course_id: str, instructor: User, message: str) -> Course:
        course = self.course_service.get_course(course_id)
        if course.instructor_id != instructor.id:
            logger.warning(
                f"User '{instructor.id}' denied access to course '{course_id}' "
                f"owned by '{course.instructor_id}'"
            )
            raise ForbiddenError(message)
        return course

    @staticmethod
    def _course_summary(course: Course) -> CourseSummary:
        return CourseSummary(id=course.id, title=course.title, description=course.description)

    @handle_firestore_exceptions
    def list_courses(self, instructor_id: str) -> list[InstructorCourse]:
        """Courses owned by the instructor with enrollment and lesson counts."""
        result = []
        for course in self.course_service.get_courses_by_instructor(instructor_id):
            enrollments = self.enrollment_service.get_enrollments_by_course(course.id)
            outline = self.course_service.get_course_outline(course.id)
            stats = CourseStats(
                total_enrollments=len(enrollments),
                active_enrollments=sum(1 for e in enrollments if e.status == "active"),
                completed_enrollments=sum(1 for e in enrollments if e.status == "completed"),
                total_lessons=len(outline.lessons),
            )
            result.append(InstructorCourse(course=course, stats=stats))
        return result

    @handle_firestore_exceptions
    def get_course_students(self, course_id: str, instructor: User) -> CourseStudents:
        course = self._get_owned_course(
            course_id, instructor, "Not authorized to view students for this course"
        )
        outline = self.course_service.get_course_outline(course_id)

        students = []
        for enrollment in self.enrollment_service.get_enrollments_by_course(course_id):
            records = self.progress_service.get_progress_records(enrollment.student_id)
            attempts = self.quiz_service.get_attempts_by_student(enrollment.student_id)
            students.append(
                EnrolledStudent(
                    enrollment_id=enrollment.id,
                    student=self.user_service.get_user_summary(enrollment.student_id),
                    enrolled_at=enrollment.enrolled_at,
                    status=enrollment.status,
                    progress=summarize_student(outline, records, attempts, enrollment.enrolled_at),
                )
            )

        return CourseStudents(course=self._course_summary(course), students=students)

    @handle_firestore_exceptions
    def get_student_progress(
        self, course_id: str, student_id: str, instructor: User
    ) -> StudentCourseReport:
        course = self._get_owned_course(
            course_id, instructor, "Not authorized to view this information"
        )

        student = self.user_service.find_user(student_id)
        if student is None:
            raise NotFoundError("Student not found")

        enrollment = self.enrollment_service.find_enrollment(student_id, course_id)
        if enrollment is None:
            raise NotFoundError("Student not enrolled in this course")

        outline = self.course_service.get_course_outline(course_id)
        records = {
            record.lesson_id: record
            for record in self.progress_service.get_progress_records(student_id)
        }
        attempts = self.quiz_service.get_attempts_by_student(student_id)

        modules = []
        for module in outline.modules:
            lessons = []
            for lesson in module.lessons:
                record = records.get(lesson.id)
                completed = record is not None and record.completed
                lesson_attempts = sorted(
                    (a for a in attempts if lesson.quiz_id and a.quiz_id == lesson.quiz_id),
                    key=lambda a: a.attempted_at,
                    reverse=True,
                )
                lessons.append(
                    LessonReport(
                        lesson_id=lesson.id,
                        title=lesson.title,
                        order=lesson.order,
                        completed=completed,
                        completed_at=record.completed_at if completed else None,
                        has_quiz=lesson.quiz_id is not None,
                        quiz_attempts=lesson_attempts,
                    )
                )

            done = sum(1 for lesson in lessons if lesson.completed)
            modules.append(
                ModuleReport(
                    module_id=module.id,
                    title=module.title,
                    order=module.order,
                    total_lessons=len(lessons),
                    completed_lessons=done,
                    progress_percentage=_percentage(done, len(lessons)),
                    lessons=lessons,
                )
            )

        return StudentCourseReport(
            student=UserSummary(id=student.id, name=student.name, email=student.email),
            course=self._course_summary(course),
            enrollment=EnrollmentInfo(enrolled_at=enrollment.enrolled_at, status=enrollment.status),
            summary=summarize_student(
                outline, list(records.values()), attempts, enrollment.enrolled_at
            ),
            modules=modules,
        )

    @handle_firestore_exceptions
    def get_stats(self, instructor_id: str) -> InstructorStats:
        courses = self.course_service.get_courses_by_instructor(instructor_id)
        since = datetime.today() - RECENT_ENROLLMENT_WINDOW

        stats = InstructorStats(
            total_courses=len(courses),
            published_courses=sum(1 for c in courses if c.is_published),
        )
        for course in courses:
            outline = self.course_service.get_course_outline(course.id)
            stats.total_lessons += len(outline.lessons)
            stats.total_quizzes += sum(1 for lesson in outline.lessons if lesson.quiz_id)

            for enrollment in self.enrollment_service.get_enrollments_by_course(course.id):
                stats.total_enrollments += 1
                if enrollment.status == "active":
                    stats.active_enrollments += 1
                elif enrollment.status == "completed":
                    stats.completed_enrollments += 1
                if _local_naive(enrollment.enrolled_at) >= since:
                    stats.recent_enrollments += 1

        return stats
