import os

# Engine and CORS settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from reset_api.core.config import Settings, get_settings  # noqa: E402
from reset_api.core.password import Sha256PasswordHasher, get_password_hasher  # noqa: E402
from reset_api.database.database import get_session  # noqa: E402
from reset_api.main import app  # noqa: E402
from reset_api.models.account import Account  # noqa: E402
from reset_api.services.account_store import SqlAccountStore  # noqa: E402
from reset_api.services.email import get_mailer  # noqa: E402

TEST_EMAIL = "user@example.com"
TEST_PASSWORD = "OldPassword123"


class RecordingMailer:
    """Mailer double that keeps sent messages in memory."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str, str]] = []

    async def send(self, to_address: str, subject: str, body: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        self.sent.append((to_address, subject, body))


@pytest.fixture(name="test_settings")
def test_settings_fixture() -> Settings:
    """Provide settings isolated from the environment's SMTP configuration."""
    return Settings(
        DATABASE_URL="sqlite://",
        FRONTEND_URL="https://app.example.com",
        PASSWORD_RESET_TOKEN_EXPIRE_MINUTES=120,
        SMTP_HOST="smtp.example.com",
        SMTP_USER="no-reply@example.com",
        SMTP_PASSWORD="smtp-secret",
    )


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite engine shared by every connection of the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> SqlAccountStore:
    return SqlAccountStore(session)


@pytest.fixture(name="hasher")
def hasher_fixture() -> Sha256PasswordHasher:
    return Sha256PasswordHasher()


@pytest.fixture(name="account_factory")
def account_factory_fixture(session: Session, hasher: Sha256PasswordHasher):
    """Return a callable that persists an account with optional reset fields."""

    def _create(
        email: str = TEST_EMAIL,
        password: str = TEST_PASSWORD,
        reset_token: str | None = None,
        token_expiry: datetime | None = None,
    ) -> Account:
        account = Account(
            email=email,
            password_hash=hasher.hash(password),
            reset_token=reset_token,
            token_expiry=token_expiry,
        )
        session.add(account)
        session.commit()
        session.refresh(account)
        return account

    return _create


@pytest.fixture(name="account")
def account_fixture(account_factory) -> Account:
    return account_factory()


@pytest.fixture(name="mailer")
def mailer_fixture() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(name="client")
def client_fixture(session: Session, mailer: RecordingMailer, test_settings: Settings):
    """TestClient with the database session, mailer and settings overridden."""

    def _get_session_override():
        yield session

    app.dependency_overrides[get_session] = _get_session_override
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_password_hasher] = lambda: Sha256PasswordHasher()

    yield TestClient(app)

    app.dependency_overrides.clear()
