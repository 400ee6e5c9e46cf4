"""Storefront FastAPI application.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8080 --reload
"""

from storefront.config import Settings
from storefront.domain import storefront
from storefront.utils.logging import get_logger

storefront.init()

from storefront.api import create_app  # noqa: E402

logger = get_logger(__name__)
settings = Settings.from_env()

app = create_app(settings)

logger.info("storefront_app_ready", environment=settings.environment, port=settings.port)
