import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.exceptions import register_exception_handlers
from .api.routes import account_router, router as loyalty_points_router
from .core.config import Settings, get_settings
from .core.db import init_db


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=settings.log_format)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    application = FastAPI(title=settings.app_name, lifespan=lifespan)
    application.include_router(loyalty_points_router)
    application.include_router(account_router)
    register_exception_handlers(application)

    @application.get("/health")
    def read_health() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
