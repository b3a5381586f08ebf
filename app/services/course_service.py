"""Read-only access to the course -> module -> lesson tree.

Authoring lives elsewhere; this service only reads the documents the
authoring tools write into the ``courses``, ``modules`` and ``lessons``
collections.
"""

from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.course import Course, CourseOutline, CourseSummary, Lesson, Module
from app.utils.exceptions import NotFoundError
from app.utils.firestore_exception import handle_firestore_exceptions


class CourseService:
    def __init__(self, db):
        self.db = db
        self.collection = db.collection("courses")
        self.modules_collection = db.collection("modules")
        self.lessons_collection = db.collection("lessons")

    @handle_firestore_exceptions
    def get_course(self, course_id: str) -> Course:
        doc = self.collection.document(course_id).get()
        if not doc.exists:
            raise NotFoundError(f"Course with ID '{course_id}' not found.")

        course_data = doc.to_dict()
        course_data["id"] = doc.id
        return Course(**course_data)

    @handle_firestore_exceptions
    def get_course_outline(self, course_id: str) -> CourseOutline:
        """Get the course with modules and lessons, both ordered by their 'order' field."""
        course = self.get_course(course_id)

        module_docs = (
            self.modules_collection.where(filter=FieldFilter("course_id", "==", course_id))
            .order_by("order")
            .get()
        )
        lesson_docs = self.lessons_collection.where(
            filter=FieldFilter("course_id", "==", course_id)
        ).get()

        lessons_by_module: dict[str, list[Lesson]] = {}
        for doc in lesson_docs:
            lesson = Lesson(**{**doc.to_dict(), "id": doc.id})
            lessons_by_module.setdefault(lesson.module_id, []).append(lesson)

        modules = []
        for doc in module_docs:
            module = Module(**{**doc.to_dict(), "id": doc.id})
            module.lessons = sorted(
                lessons_by_module.get(module.id, []), key=lambda lesson: lesson.order
            )
            modules.append(module)

        return CourseOutline(course=course, modules=modules)

    @handle_firestore_exceptions
    def get_courses_by_instructor(self, instructor_id: str) -> list[Course]:
        """Courses owned by an instructor, newest first."""
        docs = self.collection.where(filter=FieldFilter("instructor_id", "==", instructor_id)).get()
        courses = [Course(**{**doc.to_dict(), "id": doc.id}) for doc in docs]
        return sorted(courses, key=lambda c: c.created_at, reverse=True)

    @handle_firestore_exceptions
    def get_lesson(self, lesson_id: str) -> Lesson:
        doc = self.lessons_collection.document(lesson_id).get()
        if not doc.exists:
            raise NotFoundError(f"Lesson with ID '{lesson_id}' not found.")

        return Lesson(**{**doc.to_dict(), "id": doc.id})

    @handle_firestore_exceptions
    def get_course_summary(self, course_id: str) -> CourseSummary:
        doc = self.collection.document(course_id).get()
        if not doc.exists:
            return CourseSummary(id=course_id)

        course_data = doc.to_dict()
        return CourseSummary(
            id=course_id,
            title=course_data.get("title"),
            description=course_data.get("description"),
        )
