import logging
import sys

from google.cloud import logging as gcp_logging

from app.core.config import settings


def setup_logging():
    """Setup logging with Cloud Logging fallback to console"""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    try:
        client = gcp_logging.Client()
        client.setup_logging(log_level=level)
        logging.debug(f"Cloud Logging enabled, CORS origins: {settings.cors_origins}")
    except Exception:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )
        logging.getLogger().setLevel(level)
        logging.getLogger(__name__).info("Cloud Logging unavailable, logging to console")
