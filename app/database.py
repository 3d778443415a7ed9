import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> Engine:
    """Create the pooled engine shared by every request."""
    url = make_url(settings.sqlalchemy_url)
    logger.info("Using database connection: %s", url.get_backend_name())

    kwargs = {"echo": settings.db_echo}
    if url.get_backend_name() == "sqlite":
        # Needed for SQLite in multi-threaded FastAPI
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    # Register the mapped classes on Base.metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema is ready")


def get_db(request: Request) -> Iterator[Session]:
    """Yield a database session and make sure it is always closed.

    The repository is responsible for commit / rollback.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
