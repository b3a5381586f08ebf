"""Application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.initializer import startup_handler
from app.core.set_middleware import setup_middleware
from app.core.set_routes import setup_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan"""
    await startup_handler(app)
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        lifespan=lifespan,
    )

    setup_middleware(app)
    setup_routes(app)

    return app
