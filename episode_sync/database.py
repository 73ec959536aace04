"""SQLite database setup and session management."""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.engine import Engine

from .config import get_database_url


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


# Singleton engine and session maker to ensure consistent database access
_engine = None
_session_maker = None


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine():
    """Get or create the singleton database engine."""
    global _engine
    if _engine is None:
        url = get_database_url()
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _engine = create_engine(url, connect_args=connect_args, echo=False)
    return _engine


def get_session_maker():
    """Get or create the singleton session maker."""
    global _session_maker
    if _session_maker is None:
        engine = get_engine()
        _session_maker = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _session_maker


def init_database():
    """Initialize the database, creating all tables."""
    # Register models on Base.metadata before creating tables
    from . import models  # noqa: F401

    engine = get_engine()
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency to get a database session."""
    SessionLocal = get_session_maker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
