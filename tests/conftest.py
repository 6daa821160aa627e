"""Shared test fixtures."""
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import app.models.feedback
    import app.models.analytics_snapshot
    import app.models.live_poll
    import app.models.networking_profile
    import app.models.raffle
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine, expire_on_commit=False)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    get_session() looks SessionLocal up at call time, so patching the factory
    also covers modules that did `from app.database import get_session`.
    We disable close() so that route handlers calling session.close()
    in their finally blocks don't invalidate the shared test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with patch('app.database.SessionLocal', MagicMock(return_value=db_session)):
        yield db_session
    db_session.close = _real_close


@pytest.fixture
def secrets_config():
    """Known moderator credentials and feature secrets for auth tests."""
    values = {
        'APP_ENV': 'development',
        'DASHBOARD_USERNAME': 'moderator',
        'DASHBOARD_PASSWORD': 'test-password',
        'DASHBOARD_AUTH_SECRET': 'test-auth-secret',
        'ANALYZE_SECRET': 'analyze-secret',
        'RESET_SECRET': 'reset-secret',
        'POLL_ADMIN_SECRET': 'poll-secret',
        'RAFFLE_ADMIN_SECRET': 'raffle-secret',
    }
    patchers = [patch(f'app.config.{name}', value) for name, value in values.items()]
    for p in patchers:
        p.start()
    yield values
    for p in patchers:
        p.stop()


@pytest.fixture
def app(secrets_config):
    """Flask test app."""
    from app import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def moderator_client(client):
    """Test client carrying a valid dashboard session cookie."""
    from app import config
    from app.auth import session_token
    client.set_cookie(config.DASHBOARD_AUTH_COOKIE_NAME, session_token())
    return client


@pytest.fixture
def mock_openai():
    """Patch the shared OpenAI client; returns the mock for configuring replies."""
    mock = MagicMock()
    with patch('app.services.openai_client.get_openai_client', return_value=mock):
        yield mock
