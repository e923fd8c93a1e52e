"""Database configuration and connection setup"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(database_url: str, app_settings: Settings = settings) -> Engine:
    """
    Create a SQLAlchemy engine with per-transaction lock bounds.

    PostgreSQL transactions get ``SET LOCAL lock_timeout`` and
    ``statement_timeout`` so a blocked booking fails instead of hanging.
    SQLite gets the equivalent busy timeout and foreign key enforcement.
    """
    if database_url.startswith("sqlite"):
        # check_same_thread=False is required for the FastAPI threadpool
        engine = create_engine(
            database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": app_settings.DB_LOCK_TIMEOUT_MS / 1000,
            },
        )

        @event.listens_for(engine, "connect")
        def enable_sqlite_fk(dbapi_connection, _):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    engine = create_engine(
        database_url,
        pool_size=app_settings.DB_POOL_SIZE,
        max_overflow=app_settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=False,
    )

    if engine.dialect.name == "postgresql":
        lock_timeout = int(app_settings.DB_LOCK_TIMEOUT_MS)
        statement_timeout = int(app_settings.DB_STATEMENT_TIMEOUT_MS)

        @event.listens_for(engine, "begin")
        def bound_transaction(conn):
            conn.exec_driver_sql(f"SET LOCAL lock_timeout = {lock_timeout}")
            conn.exec_driver_sql(f"SET LOCAL statement_timeout = {statement_timeout}")

    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = engine):
    """Create all booking tables that do not exist yet"""
    from app.models import Base

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured")


if __name__ == "__main__":
    create_tables()
