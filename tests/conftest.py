import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Base
from app.main import create_app
from app.models import User


@pytest.fixture()
def settings():
    """Settings for an in-memory SQLite database and the cheapest bcrypt cost."""
    return Settings(
        _env_file=None,
        db_connection="sqlite",
        db_database=":memory:",
        database_url=None,
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture()
def app(settings):
    """Application wired to a fresh in-memory database.

    The schema is dropped and recreated for every test function,
    ensuring complete isolation between tests.
    """
    application = create_app(settings)
    engine = application.state.engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield application
    engine.dispose()


@pytest.fixture()
def client(app):
    """FastAPI TestClient that also triggers startup/shutdown hooks."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db_session(app):
    db = app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def user_factory(db_session, app):
    """Factory fixture that creates users directly in the test database.

    This is useful when a test needs pre-existing data without going
    through the HTTP API.
    """

    def _create_user(name: str, email: str, password: str = "secret123") -> User:
        user = User(
            name=name,
            email=email,
            password_hash=app.state.password_hasher.hash(password),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user
