from datetime import datetime
import logging

from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.quiz import (
    PublicQuiz,
    PublicQuizQuestion,
    Quiz,
    QuizAnswer,
    QuizAttempt,
    QuizSubmissionResult,
)
from app.models.user import User
from app.utils.exceptions import NotEnrolledError, NotFoundError
from app.utils.firestore_exception import handle_firestore_exceptions
from app.utils.grading import round_half_up


logger = logging.getLogger(__name__)


def score_answers(quiz: Quiz, answers: list[QuizAnswer]) -> tuple[int, int]:
    """Return (correct_answers, score). Unknown question indexes count as wrong."""
    total = len(quiz.questions)
    correct = 0
    for answer in answers:
        if 0 <= answer.question_index < total:
            question = quiz.questions[answer.question_index]
            if question.correct_answer == answer.selected_answer:
                correct += 1

    score = round_half_up(correct / total * 100) if total else 0
    return correct, score


class QuizService:
    def __init__(self, db, course_service=None, enrollment_service=None):
        self.db = db
        self.collection = db.collection("quizzes")
        self.attempts_collection = db.collection("quiz_attempts")

        if course_service is None:
            from app.services.course_service import CourseService

            course_service = CourseService(db)
        self.course_service = course_service

        if enrollment_service is None:
            from app.services.enrollment_service import EnrollmentService

            enrollment_service = EnrollmentService(db, course_service=course_service)
        self.enrollment_service = enrollment_service

    @handle_firestore_exceptions
    def get_quiz(self, quiz_id: str) -> Quiz:
        doc = self.collection.document(quiz_id).get()
        if not doc.exists:
            raise NotFoundError(f"Quiz with ID '{quiz_id}' not found.")

        return Quiz(**{**doc.to_dict(), "id": doc.id})

    def _require_enrollment(self, student_id: str, quiz: Quiz) -> str:
        lesson = self.course_service.get_lesson(quiz.lesson_id)
        if self.enrollment_service.find_enrollment(student_id, lesson.course_id) is None:
            raise NotEnrolledError()
        return lesson.course_id

    @handle_firestore_exceptions
    def get_quiz_for_user(self, quiz_id: str, user: User) -> Quiz | PublicQuiz:
        """Instructors get the full quiz; students must be enrolled and never see answers."""
        quiz = self.get_quiz(quiz_id)
        if user.role == "instructor":
            return quiz

        self._require_enrollment(user.id, quiz)
        return PublicQuiz(
            id=quiz.id,
            lesson_id=quiz.lesson_id,
            title=quiz.title,
            questions=[
                PublicQuizQuestion(question=q.question, options=q.options) for q in quiz.questions
            ],
            passing_score=quiz.passing_score,
        )

    @handle_firestore_exceptions
    def submit_attempt(
        self, student_id: str, quiz_id: str, answers: list[QuizAnswer]
    ) -> QuizSubmissionResult:
        quiz = self.get_quiz(quiz_id)
        self._require_enrollment(student_id, quiz)

        correct, score = score_answers(quiz, answers)
        passed = score >= quiz.passing_score

        # Attempts are append-only: create() fails rather than overwrite
        doc_ref = self.attempts_collection.document()
        attempt = QuizAttempt(
            id=doc_ref.id,
            student_id=student_id,
            quiz_id=quiz.id,
            lesson_id=quiz.lesson_id,
            answers=answers,
            score=score,
            passed=passed,
            attempted_at=datetime.today(),
        )
        doc_ref.create(attempt.model_dump())

        logger.info(
            f"Student '{student_id}' scored {score} on quiz '{quiz_id}' (passed={passed})"
        )
        return QuizSubmissionResult(
            score=score,
            passed=passed,
            correct_answers=correct,
            total_questions=len(quiz.questions),
            passing_score=quiz.passing_score,
            attempt=attempt,
        )

    @handle_firestore_exceptions
    def get_attempts_by_student(self, student_id: str) -> list[QuizAttempt]:
        docs = self.attempts_collection.where(
            filter=FieldFilter("student_id", "==", student_id)
        ).get()
        return [QuizAttempt(**doc.to_dict()) for doc in docs]

    @handle_firestore_exceptions
    def list_attempts(self, student_id: str, quiz_id: str) -> list[QuizAttempt]:
        """A student's attempts on one quiz, newest first."""
        docs = (
            self.attempts_collection.where(filter=FieldFilter("student_id", "==", student_id))
            .where(filter=FieldFilter("quiz_id", "==", quiz_id))
            .get()
        )
        attempts = [QuizAttempt(**doc.to_dict()) for doc in docs]
        return sorted(attempts, key=lambda a: a.attempted_at, reverse=True)
