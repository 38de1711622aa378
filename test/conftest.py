"""
Pytest configuration and fixtures for DocFlow tests

Every test gets its own in-memory SQLite database. Route tests talk to the
real application through httpx's ASGI transport with ``get_db`` pointed at
that database.
"""

import os
import sys

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JSON_LOGS"] = "false"
os.environ["DEBUG"] = "false"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from docflow.auth import create_access_token, hash_password  # noqa: E402
from docflow.constants.roles import MemberRole, UserRole  # noqa: E402
from docflow.database import Base, get_db  # noqa: E402
from docflow.models import Document, DocumentStatus, Organization, OrganizationMember, User  # noqa: E402
from main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpassword"

# Hashing is slow; every fixture user shares one hash
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on it."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the application, backed by the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


# ── Factories ──────────────────────────────────────────────────────────────────


@pytest.fixture
def make_user(test_db: AsyncSession):
    """Create and commit users with explicit field values."""
    counter = {"n": 0}

    async def _make_user(
        email: str | None = None,
        role: UserRole = UserRole.VIEWER,
        organization_id: int | None = None,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        counter["n"] += 1
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email or f"user{counter['n']}@example.com",
            hashed_password=_PASSWORD_HASH,
            role=role,
            is_active=True,
            organization_id=organization_id,
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_organization(test_db: AsyncSession):
    """Create an organization with an owner membership for ``owner``."""

    async def _make_organization(
        owner: User,
        subdomain: str = "acme",
        name: str = "Acme Corp",
        is_public: bool = True,
    ) -> Organization:
        organization = Organization(name=name, subdomain=subdomain, is_public=is_public, is_active=True)
        test_db.add(organization)
        await test_db.flush()
        test_db.add(
            OrganizationMember(
                organization_id=organization.id,
                user_id=owner.id,
                role=MemberRole.OWNER,
                is_active=True,
            )
        )
        await test_db.commit()
        await test_db.refresh(organization)
        return organization

    return _make_organization


@pytest.fixture
def make_membership(test_db: AsyncSession):
    async def _make_membership(organization: Organization, user: User, role: MemberRole) -> OrganizationMember:
        member = OrganizationMember(organization_id=organization.id, user_id=user.id, role=role, is_active=True)
        test_db.add(member)
        await test_db.commit()
        await test_db.refresh(member)
        return member

    return _make_membership


@pytest.fixture
def make_document(test_db: AsyncSession):
    async def _make_document(
        author: User,
        title: str = "Getting Started",
        status: DocumentStatus = DocumentStatus.DRAFT,
        is_public: bool = False,
        organization_id: int | None = None,
        slug: str | None = None,
        views: int = 0,
    ) -> Document:
        document = Document(
            title=title,
            content=f"# {title}",
            status=status,
            is_public=is_public,
            slug=slug or title.lower().replace(" ", "-"),
            views=views,
            author_id=author.id,
            organization_id=organization_id,
        )
        test_db.add(document)
        await test_db.commit()
        await test_db.refresh(document)
        return document

    return _make_document


# ── Common principals ──────────────────────────────────────────────────────────


@pytest.fixture
async def test_user(make_user) -> User:
    return await make_user(email="viewer@example.com", first_name="Vera", last_name="Viewer")


@pytest.fixture
async def test_editor(make_user) -> User:
    return await make_user(email="editor@example.com", role=UserRole.EDITOR, first_name="Eddie", last_name="Editor")


@pytest.fixture
async def test_admin(make_user) -> User:
    return await make_user(email="admin@example.com", role=UserRole.ADMIN, first_name="Ada", last_name="Admin")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def headers_for():
    return auth_headers
