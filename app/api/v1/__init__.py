from fastapi import APIRouter

from .routes.certificate import router as certificate_router
from .routes.enrollment import router as enrollment_router
from .routes.health import router as health_router
from .routes.instructor import router as instructor_router
from .routes.progress import router as progress_router
from .routes.quiz import router as quiz_router
from .routes.user import router as user_router

router = APIRouter()

router.include_router(health_router, prefix="/health", tags=["health"])
router.include_router(user_router, prefix="/user", tags=["user"])
router.include_router(enrollment_router, prefix="/enrollments", tags=["enrollments"])
router.include_router(progress_router, prefix="/progress", tags=["progress"])
router.include_router(quiz_router, prefix="/quizzes", tags=["quizzes"])
router.include_router(certificate_router, prefix="/certificates", tags=["certificates"])
router.include_router(instructor_router, prefix="/instructor", tags=["instructor"])
