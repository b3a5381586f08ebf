from fastapi import FastAPI

from app.api.v1 import router as api_v1_router


def setup_routes(app: FastAPI) -> None:
    """Register all application routes"""
    app.include_router(api_v1_router, prefix="/api/v1")
