# gate_register/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy; SQLite by default, PostgreSQL via DATABASE_URL.
All models are auto-imported in create_tables() so one call creates every table.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from gate_register.config import settings

Base = declarative_base()


def make_engine(url: str = None, echo: bool = None) -> Engine:
    """Build an engine for url. In-memory SQLite shares one connection across sessions."""
    url = url or settings.DATABASE_URL
    echo = settings.DB_ECHO if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit=False: rows stay readable after commit for snapshotting
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine()
SessionLocal = make_session_factory(engine)


@contextmanager
def session_scope(factory: sessionmaker = None):
    """Yield a session; roll back if the block raises, always close."""
    db = (factory or SessionLocal)()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(bind: Engine = None) -> bool:
    """
    Creates all tables. Safe to call multiple times.
    Returns True when the schema did not exist before this call (first start).
    """
    from gate_register.models.profile import Profile                  # noqa
    from gate_register.models.access_log import AccessLog             # noqa
    from gate_register.models.blacklist_event import BlacklistEvent   # noqa

    bind = bind or engine
    is_new = not inspect(bind).has_table(Profile.__tablename__)
    Base.metadata.create_all(bind=bind)
    return is_new
