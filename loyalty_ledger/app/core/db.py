from __future__ import annotations

from collections.abc import Generator
from typing import Any, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..models import db as _db_models  # noqa: F401 - ensure models register with metadata
from .config import Settings, get_settings


def create_engine_for_url(database_url: str, settings: Optional[Settings] = None) -> Engine:
    settings = settings or get_settings()
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout,
        }
    return create_engine(database_url, echo=settings.database_echo, connect_args=connect_args)


_engine: Engine = create_engine_for_url(get_settings().database_url)


def get_engine() -> Engine:
    return _engine


def set_engine(new_engine: Engine) -> None:
    global _engine
    _engine = new_engine


def init_db(bind: Optional[Engine] = None) -> None:
    SQLModel.metadata.create_all(bind or _engine)


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session; one per HTTP request."""
    with Session(_engine) as session:
        yield session
