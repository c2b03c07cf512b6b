"""
Database configuration and session management
"""
import time
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from addressbook.core.config import get_settings
from addressbook.core.logging_config import LoggingConfig
from addressbook.core.metrics import db_queries_total, db_query_duration_seconds

logger = LoggingConfig.get_logger(__name__)

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

# Base class for models (can be created immediately)
Base = declarative_base()

_TABLE_KEYWORDS = {"select": "FROM", "insert": "INTO", "delete": "FROM"}


def _statement_target(statement: str):
    """Return (operation, table) for a SQL statement, best effort"""
    words = statement.strip().split()
    if not words:
        return "unknown", "unknown"
    operation = words[0].lower()
    table = "unknown"
    if operation == "update" and len(words) > 1:
        table = words[1]
    elif operation in _TABLE_KEYWORDS:
        keyword = _TABLE_KEYWORDS[operation]
        for i, word in enumerate(words[:-1]):
            if word.upper() == keyword:
                table = words[i + 1]
                break
    return operation, table.lower().strip(';"')


def setup_db_metrics(engine: Engine):
    """Setup SQLAlchemy event listeners for database metrics"""

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault('query_start_time', []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not conn.info.get('query_start_time'):
            return
        duration = time.perf_counter() - conn.info['query_start_time'].pop()
        operation, table = _statement_target(statement)
        db_queries_total.labels(operation=operation, table=table).inc()
        db_query_duration_seconds.labels(operation=operation, table=table).observe(duration)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with pool and timeout options suited to the backend"""
    settings = get_settings()
    kwargs = {"echo": echo}

    if database_url.startswith("sqlite"):
        # Handlers run in a threadpool, so connections cross threads
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 5}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )
        if database_url.startswith("postgresql"):
            kwargs["connect_args"] = {
                "connect_timeout": 5,
                "options": "-c statement_timeout=5000",
            }

    engine = create_engine(database_url, **kwargs)
    setup_db_metrics(engine)
    return engine


def get_engine() -> Engine:
    """Get or create database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.log_sqlalchemy)
    return _engine


def get_session_local() -> sessionmaker:
    """Get or create session factory (lazy initialization)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet"""
    # Import models so they are registered with Base.metadata
    import addressbook.models  # noqa: F401

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured", extra={"tables": sorted(Base.metadata.tables)})


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
