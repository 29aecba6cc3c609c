"""
Database setup for the FastAPI backend.
Provides SQLAlchemy engine/session utilities for SQLite.
"""
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from settings import settings


Base = declarative_base()


def make_session_factory(db_path: str, echo: bool = False) -> sessionmaker:
    """Create an engine for a SQLite file and return a bound session factory."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    # check_same_thread=False allows usage across FastAPI threads
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        echo=echo,
    )
    init_db(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(engine) -> None:
    """Create tables if they don't exist."""
    from repositories import models  # noqa: F401  Ensures models are registered

    Base.metadata.create_all(bind=engine)


_session_factory: sessionmaker | None = None


def get_session_factory() -> sessionmaker:
    """Lazily build the default session factory from settings."""
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(settings.PINDIARY_DB_PATH, echo=settings.SQL_ECHO)
    return _session_factory
