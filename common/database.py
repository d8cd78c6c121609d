"""SQLAlchemy engine, session factory and the request-scoped session dependency."""
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_settings

settings = get_settings()


def _engine_options(database_url: str, timeout: float) -> Dict[str, Any]:
    if database_url.startswith("sqlite"):
        # busy timeout; the connection is shared with FastAPI's worker threads
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}
    options: Dict[str, Any] = {"pool_pre_ping": True, "pool_timeout": timeout}
    if database_url.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url, settings.storage_timeout_seconds))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
