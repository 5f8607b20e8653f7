#update_operator/infrastructure/sql/database.py

"""SQLAlchemy database setup and session management."""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from update_operator.config import OperatorSettings


# ============================================
# Base for ORM models
# ============================================
Base = declarative_base()


# ============================================
# Engine configuration
# ============================================
def create_db_engine(
    database_url: str,
    settings: Optional[OperatorSettings] = None,
) -> Engine:
    """Create SQLAlchemy engine; pooled for PostgreSQL, plain for SQLite."""
    settings = settings or OperatorSettings()
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        return create_engine(
            url,
            echo=settings.echo_sql,
            connect_args={"check_same_thread": False},
        )

    engine = create_engine(
        url,
        echo=settings.echo_sql,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )

    if url.get_backend_name() == "postgresql":
        @event.listens_for(engine, "connect")
        def set_search_path(dbapi_conn, connection_record):
            """Set default schema on connect."""
            cursor = dbapi_conn.cursor()
            cursor.execute("SET search_path TO public")
            cursor.close()

    return engine


# ============================================
# Session factory function
# ============================================
def get_session_factory(engine_instance: Engine):
    """Get a session factory bound to the given engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine_instance,
        expire_on_commit=False
    )


# ============================================
# Database initialization
# ============================================
def init_db(engine_instance: Engine) -> None:
    """Create all tables."""
    # Register models on Base.metadata
    from update_operator.infrastructure.sql import models  # noqa: F401

    Base.metadata.create_all(bind=engine_instance)


def drop_db(engine_instance: Engine) -> None:
    """Drop all tables (for testing only)."""
    Base.metadata.drop_all(bind=engine_instance)
