"""
Test configuration and fixtures for the Realty Portal API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read at import time; point them at SQLite before the app loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from httpx import AsyncClient, ASGITransport

from realty_portal.main import app
from realty_portal.database import Base, get_db, enable_sqlite_foreign_keys
from realty_portal.models.user import User, UserRole
from realty_portal.models.property import Property, PropertyType, PropertyStatus
from realty_portal.models.access_request import AccessRequest, AccessAction, RequestStatus
from realty_portal.repositories.user import UserRepository
from realty_portal.repositories.property import PropertyRepository
from realty_portal.repositories.image import ImageRepository, build_images
from realty_portal.repositories.access_request import AccessRequestRepository
from realty_portal.repositories.audit_log import AuditLogRepository
from realty_portal.services.auth import AuthService
from realty_portal.services.permission import PermissionService
from realty_portal.services.access_request import AccessRequestService
from realty_portal.services.property import PropertyService
from realty_portal.services.audit import AuditService
from realty_portal.utils.auth import create_access_token

TEST_PASSWORD = "testpassword123"


@pytest.fixture
async def test_engine(tmp_path):
    """One SQLite file per test, foreign keys enforced."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'realty_portal_test.db'}",
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async test client; every request gets its own session on the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    return ImageRepository(db_session)


@pytest.fixture
def request_repository(db_session: AsyncSession) -> AccessRequestRepository:
    return AccessRequestRepository(db_session)


@pytest.fixture
def audit_repository(db_session: AsyncSession) -> AuditLogRepository:
    return AuditLogRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def permission_service(db_session: AsyncSession) -> PermissionService:
    return PermissionService(db_session)


@pytest.fixture
def request_service(db_session: AsyncSession) -> AccessRequestService:
    return AccessRequestService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    return PropertyService(db_session)


@pytest.fixture
def audit_service(db_session: AsyncSession) -> AuditService:
    return AuditService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        full_name: str = "Test User",
        role: UserRole = UserRole.AGENT,
        is_active: bool = True
    ) -> User:
        return await user_repo.create_user({
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "role": role,
            "is_active": is_active
        })


class PropertyFactory:
    """Factory for creating test properties, bypassing the permission layer."""

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        title: str = "Test Property",
        property_type: PropertyType = PropertyType.RENTAL,
        price: Decimal = Decimal("1000.00"),
        surface_area: Optional[Decimal] = Decimal("75.00"),
        address: Optional[str] = "1 Test Street",
        city: Optional[str] = "Test City",
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        agent_id: Optional[int] = None,
        image_urls: Optional[List[str]] = None
    ) -> Property:
        property_obj = await property_repo.create({
            "title": title,
            "description": "A test listing",
            "property_type": property_type,
            "price": price,
            "surface_area": surface_area,
            "address": address,
            "city": city,
            "status": status,
            "agent_id": agent_id,
            "images": build_images(image_urls or [])
        })
        return await property_repo.get_property_with_details(property_obj.id)


class AccessRequestFactory:
    """Factory for access requests in any status."""

    @staticmethod
    async def create_request(
        request_repo: AccessRequestRepository,
        user_id: int,
        action: AccessAction = AccessAction.EDIT,
        property_id: Optional[int] = None,
        status: RequestStatus = RequestStatus.PENDING,
        justification: str = "Needed for a client"
    ) -> AccessRequest:
        return await request_repo.create({
            "user_id": user_id,
            "action": action,
            "property_id": property_id,
            "justification": justification,
            "status": status
        })


# Common test fixtures
@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        full_name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="agent@example.com",
        full_name="Test Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def other_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="other.agent@example.com",
        full_name="Other Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        full_name="Inactive Agent",
        role=UserRole.AGENT,
        is_active=False
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agent: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        title="Harbour View Flat",
        price=Decimal("1500.00"),
        city="Casablanca",
        agent_id=test_agent.id,
        image_urls=["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
    )


@pytest.fixture
async def second_property(property_repository: PropertyRepository) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        title="Garden Villa",
        property_type=PropertyType.SALE,
        price=Decimal("450000.00"),
        city="Rabat"
    )


def token_for(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role
    )


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers(test_admin)


@pytest.fixture
def agent_headers(test_agent: User) -> Dict[str, str]:
    return auth_headers(test_agent)
