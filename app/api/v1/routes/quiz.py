"""Quiz endpoints: fetch, submit an attempt, list own attempts."""

from fastapi import APIRouter, Depends

from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.quiz import PublicQuiz, Quiz, QuizAttempt, QuizSubmission, QuizSubmissionResult
from app.models.user import User
from app.services.quiz_service import QuizService

router = APIRouter()


@router.get("/{quiz_id}", response_model=Quiz | PublicQuiz)
async def get_quiz(
    quiz_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Students must be enrolled and get the quiz without correct answers."""
    quiz_service = QuizService(db)
    return quiz_service.get_quiz_for_user(quiz_id, current_user)


@router.post("/{quiz_id}/submit", response_model=QuizSubmissionResult)
async def submit_quiz(
    quiz_id: str,
    submission: QuizSubmission,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    quiz_service = QuizService(db)
    return quiz_service.submit_attempt(current_user.id, quiz_id, submission.answers)


@router.get("/{quiz_id}/attempts", response_model=list[QuizAttempt])
async def get_quiz_attempts(
    quiz_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    quiz_service = QuizService(db)
    return quiz_service.list_attempts(current_user.id, quiz_id)
