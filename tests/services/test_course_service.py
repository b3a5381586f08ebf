import pytest
from fastapi import HTTPException, status

from app.services.course_service import CourseService
from tests.mocks.seed import seed_course


@pytest.fixture
def two_module_course(memory_db):
    """course1: module m2 (order 2) seeded before m1 (order 1), lessons out of order."""
    memory_db.collection("courses").document("course1").set(
        {"title": "Python", "description": "Basics", "is_published": True}
    )
    memory_db.collection("modules").document("m2").set(
        {"course_id": "course1", "title": "Advanced", "order": 2}
    )
    memory_db.collection("modules").document("m1").set(
        {"course_id": "course1", "title": "Intro", "order": 1}
    )
    for lesson_id, module_id, order in [("l4", "m2", 2), ("l3", "m2", 1), ("l2", "m1", 2), ("l1", "m1", 1)]:
        memory_db.collection("lessons").document(lesson_id).set(
            {"course_id": "course1", "module_id": module_id, "title": lesson_id, "order": order}
        )
    seed_course(memory_db, "course2", lessons=[("other", None)])
    return memory_db


def test_get_course(two_module_course):
    course = CourseService(two_module_course).get_course("course1")

    assert course.id == "course1"
    assert course.title == "Python"
    assert course.is_published is True


def test_get_course_missing_raises_404(memory_db):
    with pytest.raises(HTTPException) as exc:
        CourseService(memory_db).get_course("missing")

    assert exc.value.status_code == status.HTTP_404_NOT_FOUND


def test_outline_orders_modules_and_lessons(two_module_course):
    outline = CourseService(two_module_course).get_course_outline("course1")

    assert [module.id for module in outline.modules] == ["m1", "m2"]
    assert [lesson.id for lesson in outline.lessons] == ["l1", "l2", "l3", "l4"]
    assert outline.lesson_ids == {"l1", "l2", "l3", "l4"}


def test_outline_of_course_without_modules_has_no_lessons(memory_db):
    memory_db.collection("courses").document("empty").set({"title": "Empty"})

    outline = CourseService(memory_db).get_course_outline("empty")

    assert outline.modules == []
    assert outline.lesson_ids == set()


def test_get_lesson(two_module_course):
    lesson = CourseService(two_module_course).get_lesson("l3")

    assert lesson.module_id == "m2"
    assert lesson.quiz_id is None


def test_get_lesson_missing_raises_404(memory_db):
    with pytest.raises(HTTPException) as exc:
        CourseService(memory_db).get_lesson("nope")

    assert exc.value.status_code == status.HTTP_404_NOT_FOUND


def test_course_summary(two_module_course):
    summary = CourseService(two_module_course).get_course_summary("course1")

    assert summary.title == "Python"
    assert summary.description == "Basics"


def test_course_summary_of_missing_course(memory_db):
    summary = CourseService(memory_db).get_course_summary("gone")

    assert summary.id == "gone"
    assert summary.title is None


def test_courses_by_instructor(memory_db):
    seed_course(memory_db, "course1", lessons=[])
    seed_course(memory_db, "course2", lessons=[])
    seed_course(memory_db, "course3", lessons=[])
    memory_db.collection("courses").document("course3").update({"instructor_id": "instructor2"})

    courses = CourseService(memory_db).get_courses_by_instructor("instructor1")

    assert sorted(course.id for course in courses) == ["course1", "course2"]
    assert all(course.instructor_id == "instructor1" for course in courses)
