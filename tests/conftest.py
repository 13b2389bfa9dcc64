"""pytest fixtures shared across all tests."""

from __future__ import annotations

import os

# Settings are cached on first use, so the test environment goes in first
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-0123456789abcdef0123")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret-0123456789abcdef")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test/dashboard")
os.environ.setdefault("APP_DEBUG", "true")

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from studentms.core.errors import AuthenticationFailure  # noqa: E402
from studentms.core.federation import ProviderProfile  # noqa: E402
from studentms.models.base import Base  # noqa: E402
from studentms.models.user import User  # noqa: E402

# SQLite in-memory per test function; no PostgreSQL required
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Shared fake admin used to bypass auth in resource tests
_FAKE_ADMIN = User(
    id=uuid.uuid4(),
    email="admin@example.com",
    username="testadmin",
    hashed_password=None,
    role="admin",
    is_active=True,
    is_verified=True,
    auth_provider="local",
)


class FakeGoogleOAuth:
    """Stands in for GoogleOAuthClient: codes map to canned profiles."""

    configured = True

    def __init__(self) -> None:
        self.profiles: dict[str, ProviderProfile] = {}

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?client_id=test&state={state}"

    async def fetch_profile(self, code: str) -> ProviderProfile:
        try:
            return self.profiles[code]
        except KeyError:
            raise AuthenticationFailure(f"unknown code {code!r}")

    async def aclose(self) -> None:
        pass


def _session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory SQLite engine per test function."""
    eng = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """File-backed SQLite engine: separate connections, real write locking."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'studentms.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Yield an async session bound to the test engine."""
    async with _session_factory(engine)() as session:
        yield session


@pytest.fixture
def google() -> FakeGoogleOAuth:
    return FakeGoogleOAuth()


@pytest.fixture
def app(engine, google):
    """The FastAPI app wired to the test DB and the fake Google client."""
    from studentms.api.app import create_app
    from studentms.api.dependencies import get_db
    from studentms.core.limiter import limiter

    application = create_app(google_oauth=google)
    factory = _session_factory(engine)

    async def override_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_db
    limiter.reset()
    return application


@pytest_asyncio.fixture
async def anon_client(app):
    """Client going through real authentication."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def client(app):
    """Client authenticated as the fake admin."""
    from studentms.api.dependencies import get_current_active_user

    async def override_auth():
        return _FAKE_ADMIN

    app.dependency_overrides[get_current_active_user] = override_auth
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def read_cookies():
    """Parse the Set-Cookie headers of a response into {name: value}."""

    def _read(response) -> dict[str, str]:
        cookies = {}
        for header in response.headers.get_list("set-cookie"):
            name, _, rest = header.partition("=")
            cookies[name.strip()] = rest.split(";", 1)[0].strip('"')
        return cookies

    return _read


@pytest.fixture
def make_user(engine):
    """Insert a committed user with a real bcrypt hash and return it."""
    from studentms.core.auth import hash_password

    factory = _session_factory(engine)

    async def _make(
        username: str = "alice",
        password: str = "correct-horse",
        role: str = "student",
        email: str | None = None,
        is_active: bool = True,
    ) -> User:
        async with factory() as session:
            user = User(
                email=email or f"{username}@example.com",
                username=username,
                hashed_password=hash_password(password),
                role=role,
                is_active=is_active,
                is_verified=True,
                auth_provider="local",
            )
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest.fixture
def login(anon_client):
    """Log in through the password form and return the token response body."""

    async def _login(identifier: str, password: str = "correct-horse") -> dict:
        r = await anon_client.post(
            "/api/v1/users/login", data={"username": identifier, "password": password}
        )
        assert r.status_code == 200, r.text
        anon_client.cookies.clear()
        return r.json()

    return _login
