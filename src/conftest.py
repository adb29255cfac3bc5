import os

# Must run before src.config.settings is imported
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite:///./party_inviter.db")

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.auth.access import AccessControl, get_access_control  # noqa: E402
from src.auth.passwords import PasswordHasher  # noqa: E402
from src.auth.tokens import TokenService  # noqa: E402
from src.main import app  # noqa: E402


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(
        admin_secret="test-admin-secret-with-enough-bytes",
        guest_secret="test-guest-secret-with-enough-bytes",
    )


@pytest.fixture
def password_hasher() -> PasswordHasher:
    # Lowest cost bcrypt accepts, keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def access_control(token_service, password_hasher) -> AccessControl:
    return AccessControl(token_service, password_hasher)


@pytest.fixture
def admin_headers(token_service) -> dict:
    return {"Authorization": f"Bearer {token_service.issue_admin_token()}"}


@pytest.fixture
def client_factory(access_control):
    """Build a test client with the given dependency overrides applied."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides[get_access_control] = lambda: access_control
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture
async def client(client_factory):
    async with client_factory() as ac:
        yield ac
