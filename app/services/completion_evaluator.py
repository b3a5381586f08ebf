"""Decides whether a student has finished a course, and with what grade.

A course is complete only when every lesson in its module tree has a
completed progress record. The grade is the rounded mean of the student's
best score on each quiz attempted within those lessons; a course whose
lessons carry no quiz attempts grades at 100.
"""

import logging

from app.models.certificate import CompletionResult
from app.models.progress import LessonProgress, ProgressSummary
from app.models.quiz import QuizAttempt
from app.utils.firestore_exception import handle_firestore_exceptions
from app.utils.grading import round_half_up


logger = logging.getLogger(__name__)

PERFECT_GRADE = 100


def best_scores_by_quiz(attempts: list[QuizAttempt]) -> dict[str, int]:
    """Highest score per quiz; quizzes never attempted have no entry."""
    best: dict[str, int] = {}
    for attempt in attempts:
        if attempt.quiz_id not in best or attempt.score > best[attempt.quiz_id]:
            best[attempt.quiz_id] = attempt.score
    return best


def aggregate_grade(scores: list[int]) -> int:
    if not scores:
        return PERFECT_GRADE
    return round_half_up(sum(scores) / len(scores))


def latest_completion(records: list[LessonProgress]) -> LessonProgress | None:
    """Record with the greatest completed_at; equal timestamps go to the lowest lesson id."""
    dated = [record for record in records if record.completed_at is not None]
    if not dated:
        return None

    latest = max(record.completed_at for record in dated)
    return min(
        (record for record in dated if record.completed_at == latest),
        key=lambda record: record.lesson_id,
    )


class CompletionEvaluator:
    def __init__(self, db, course_service=None, progress_service=None, quiz_service=None):
        self.db = db

        if course_service is None:
            from app.services.course_service import CourseService

            course_service = CourseService(db)
        self.course_service = course_service

        if quiz_service is None:
            from app.services.quiz_service import QuizService

            quiz_service = QuizService(db, course_service=course_service)
        self.quiz_service = quiz_service

        if progress_service is None:
            from app.services.progress_service import ProgressService

            progress_service = ProgressService(
                db, course_service=course_service, quiz_service=quiz_service
            )
        self.progress_service = progress_service

    @handle_firestore_exceptions
    def evaluate(self, student_id: str, course_id: str) -> CompletionResult:
        """Read-only: repeated calls without intervening writes give equal results."""
        outline = self.course_service.get_course_outline(course_id)
        lesson_ids = outline.lesson_ids

        if not lesson_ids:
            return CompletionResult(completed=False, error="Course has no lessons")

        completed_records = [
            record
            for record in self.progress_service.get_progress_records(student_id, completed_only=True)
            if record.lesson_id in lesson_ids and record.completed
        ]
        progress = ProgressSummary(
            completed_lessons=len({record.lesson_id for record in completed_records}),
            total_lessons=len(lesson_ids),
        )

        if progress.completed_lessons < progress.total_lessons:
            return CompletionResult(
                completed=False, error="Course not fully completed", progress=progress
            )

        attempts = [
            attempt
            for attempt in self.quiz_service.get_attempts_by_student(student_id)
            if attempt.lesson_id in lesson_ids
        ]
        grade = aggregate_grade(list(best_scores_by_quiz(attempts).values()))
        latest = latest_completion(completed_records)

        logger.debug(
            f"Student '{student_id}' completed course '{course_id}': "
            f"{len(attempts)} quiz attempts, grade {grade}"
        )
        return CompletionResult(
            completed=True,
            grade=grade,
            completion_date=latest.completed_at if latest else None,
            progress=progress,
        )
