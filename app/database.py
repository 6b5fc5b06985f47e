"""Database engine and per-request sessions."""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import get_settings

settings = get_settings()
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    # SQLite serializes writers; wait for the lock instead of failing a concurrent reset.
    connect_args={"check_same_thread": False, "timeout": 15} if settings.DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def create_tables() -> None:
    """Create missing tables. Development shortcut for running without Alembic."""
    from app.models.reset_token import ResetToken  # noqa: F401
    from app.models.user import User  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session, closed when the request finishes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
