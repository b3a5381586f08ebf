"""Tests for CompletionEvaluator and its grade/date reductions."""

from datetime import datetime

import pytest
from fastapi import HTTPException, status

from app.models.progress import LessonProgress
from app.models.quiz import QuizAttempt
from app.services.completion_evaluator import (
    CompletionEvaluator,
    aggregate_grade,
    best_scores_by_quiz,
    latest_completion,
)
from tests.mocks.seed import seed_attempt, seed_completed_lesson, seed_course


def make_attempt(quiz_id, score, lesson_id="lesson1"):
    return QuizAttempt(
        id=f"attempt_{quiz_id}_{score}",
        student_id="student1",
        quiz_id=quiz_id,
        lesson_id=lesson_id,
        score=score,
        passed=score >= 70,
    )


def make_progress(lesson_id, completed_at):
    return LessonProgress(
        id=f"student1_{lesson_id}",
        student_id="student1",
        course_id="course1",
        lesson_id=lesson_id,
        completed=True,
        completed_at=completed_at,
    )


# ============================================================================
# PURE REDUCTIONS
# ============================================================================


def test_best_scores_takes_maximum_not_latest_or_mean():
    attempts = [make_attempt("quiz1", 40), make_attempt("quiz1", 90), make_attempt("quiz1", 60)]

    assert best_scores_by_quiz(attempts) == {"quiz1": 90}


def test_best_scores_keeps_one_entry_per_quiz():
    attempts = [make_attempt("quiz1", 50), make_attempt("quiz2", 70), make_attempt("quiz1", 80)]

    assert best_scores_by_quiz(attempts) == {"quiz1": 80, "quiz2": 70}


def test_aggregate_grade_without_scores_is_perfect():
    assert aggregate_grade([]) == 100


@pytest.mark.parametrize(
    "scores, expected",
    [([80], 80), ([85, 90], 88), ([70, 71], 71), ([33, 33, 34], 33)],
)
def test_aggregate_grade_rounds_mean_half_up(scores, expected):
    assert aggregate_grade(scores) == expected


def test_latest_completion_picks_greatest_timestamp():
    records = [
        make_progress("lesson1", datetime(2025, 1, 3)),
        make_progress("lesson2", datetime(2025, 1, 9)),
        make_progress("lesson3", datetime(2025, 1, 5)),
    ]

    assert latest_completion(records).lesson_id == "lesson2"


def test_latest_completion_tie_goes_to_lowest_lesson_id():
    same_time = datetime(2025, 1, 9)
    records = [
        make_progress("lesson_b", same_time),
        make_progress("lesson_a", same_time),
        make_progress("lesson_c", datetime(2025, 1, 1)),
    ]

    assert latest_completion(records).lesson_id == "lesson_a"


def test_latest_completion_without_dates_is_none():
    assert latest_completion([make_progress("lesson1", None)]) is None


# ============================================================================
# EVALUATE
# ============================================================================


def test_evaluate_course_without_lessons_is_not_completed(memory_db):
    seed_course(memory_db, "course1", lessons=[])

    result = CompletionEvaluator(memory_db).evaluate("student1", "course1")

    assert result.completed is False
    assert result.error == "Course has no lessons"


def test_evaluate_unknown_course_raises_404(memory_db):
    with pytest.raises(HTTPException) as exc:
        CompletionEvaluator(memory_db).evaluate("student1", "missing")

    assert exc.value.status_code == status.HTTP_404_NOT_FOUND


def test_evaluate_one_lesson_short_never_completes(memory_db):
    seed_course(memory_db, "course1", lessons=[("lesson1", None), ("lesson2", "quiz2")])
    seed_completed_lesson(memory_db, "student1", "course1", "lesson1", datetime(2025, 1, 2))
    seed_attempt(memory_db, "student1", "quiz2", "lesson2", 100)

    result = CompletionEvaluator(memory_db).evaluate("student1", "course1")

    assert result.completed is False
    assert result.error == "Course not fully completed"
    assert result.progress.completed_lessons == 1
    assert result.progress.total_lessons == 2
    assert result.grade is None


def test_evaluate_ignores_other_students_progress(memory_db):
    seed_course(memory_db, "course1", lessons=[("lesson1", None)])
    seed_completed_lesson(memory_db, "student2", "course1", "lesson1", datetime(2025, 1, 2))

    result = CompletionEvaluator(memory_db).evaluate("student1", "course1")

    assert result.completed is False
    assert result.progress.completed_lessons == 0


def test_evaluate_lesson_only_course_grades_100(memory_db):
    seed_course(memory_db, "course1", lessons=[("lesson1", None), ("lesson2", None)])
    seed_completed_lesson(memory_db, "student1", "course1", "lesson1", datetime(2025, 1, 2))
    seed_completed_lesson(memory_db, "student1", "course1", "lesson2", datetime(2025, 1, 4))

    result = CompletionEvaluator(memory_db).evaluate("student1", "course1")

    assert result.completed is True
    assert result.grade == 100
    assert result.completion_date == datetime(2025, 1, 4)


def test_evaluate_scenario_best_attempt_and_latest_completion(memory_db):
    """L1 has no quiz, L2 has one quiz attempted twice (50 then 80)."""
    seed_course(memory_db, "course1", lessons=[("lesson1", None), ("lesson2", "quiz2")])
    seed_completed_lesson(memory_db, "student1", "course1", "lesson1", datetime(2025, 1, 2))
    seed_completed_lesson(memory_db, "student1", "course1", "lesson2", datetime(2025, 1, 7))
    seed_attempt(memory_db, "student1", "quiz2", "lesson2", 50, datetime(2025, 1, 5))
    seed_attempt(memory_db, "student1", "quiz2", "lesson2", 80, datetime(2025, 1, 6))

    result = CompletionEvaluator(memory_db).evaluate("student1", "course1")

    assert result.completed is True
    assert result.grade == 80
    assert result.completion_date == datetime(2025, 1, 7)
    assert result.progress.completed_lessons == 2


def test_evaluate_ignores_attempts_outside_course(memory_db):
    seed_course(memory_db, "course1", lessons=[("lesson1", "quiz1")])
    seed_course(memory_db, "course2", lessons=[("lesson9", "quiz9")])
    seed_completed_lesson(memory_db, "student1", "course1", "lesson1", datetime(2025, 1, 2))
    seed_attempt(memory_db, "student1", "quiz1", "lesson1", 60)
    seed_attempt(memory_db, "student1", "quiz9", "lesson9", 100)

    result = CompletionEvaluator(memory_db).evaluate("student1", "course1")

    assert result.grade == 60


def test_evaluate_is_idempotent(memory_db):
    seed_course(memory_db, "course1", lessons=[("lesson1", "quiz1"), ("lesson2", "quiz2")])
    seed_completed_lesson(memory_db, "student1", "course1", "lesson1", datetime(2025, 1, 2))
    seed_completed_lesson(memory_db, "student1", "course1", "lesson2", datetime(2025, 1, 3))
    seed_attempt(memory_db, "student1", "quiz1", "lesson1", 75)
    seed_attempt(memory_db, "student1", "quiz2", "lesson2", 90)

    evaluator = CompletionEvaluator(memory_db)

    first = evaluator.evaluate("student1", "course1")
    second = evaluator.evaluate("student1", "course1")

    assert first == second
    assert first.grade == 83
