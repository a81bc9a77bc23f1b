"""Shared fixtures and utilities for tests."""

import itertools
import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment is prepared before
# any application module is imported.
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("APP_ENV", "development")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import database.models  # noqa: F401
from core.privacy.policy import ViewerContext
from core.security import create_access_token
from database.engine import Base, get_db
from database.models.applications import Application, ApplicationStatus
from database.models.candidates import Candidate
from database.models.industries import Industry
from database.models.opportunities import Opportunity, OpportunityType
from database.models.users import User, UserType


# ==================== Database ==================== #

@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with a fresh schema per test."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ==================== Factories ==================== #

class ModelFactory:
    """Creates committed rows with sensible defaults."""

    _sequence = itertools.count(1)

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def user(
        self,
        user_type: UserType = UserType.CANDIDATE,
        premium: bool = False,
        premium_expired: bool = False,
        is_active: bool = True,
        email: str | None = None,
    ) -> User:
        number = next(self._sequence)
        user = User(
            email=email or f"user{number}@example.com",
            user_type=user_type,
            is_active=is_active,
        )
        if premium or premium_expired:
            user.is_premium = True
            offset = timedelta(days=-1) if premium_expired else timedelta(days=30)
            user.premium_expires_at = datetime.now(timezone.utc) + offset
        return await self._save(user)

    async def candidate(self, user: User | None = None, **fields) -> Candidate:
        user = user or await self.user(UserType.CANDIDATE)
        values = {
            "first_name": "Asha",
            "last_name": "Verma",
            "phone": "+91-9876543210",
            "linkedin_url": "https://linkedin.com/in/asha-verma",
            "city": "Pune",
            "state": "Maharashtra",
            "country": "India",
            "bio": "Final-year student who likes backend systems",
            "college": "College of Engineering Pune",
            "degree": "B.Tech",
            "field_of_study": "Computer Science",
            "graduation_year": 2025,
            "cgpa": 8.4,
        }
        values.update(fields)
        return await self._save(Candidate(user=user, **values))

    async def industry(
        self, user: User | None = None, premium: bool = False, **fields
    ) -> Industry:
        user = user or await self.user(UserType.INDUSTRY, premium=premium)
        values = {
            "company_name": "Acme Robotics",
            "website": "https://acme.example.com",
            "contact_person": "R. Mehta",
            "phone": "+91-2012345678",
            "city": "Bengaluru",
            "state": "Karnataka",
            "country": "India",
            "industry": "Robotics",
            "company_size": "51-200",
        }
        values.update(fields)
        return await self._save(Industry(user=user, **values))

    async def admin(self) -> User:
        return await self.user(UserType.ADMIN)

    async def opportunity(
        self,
        industry: Industry,
        type: OpportunityType = OpportunityType.INTERNSHIP,
        **fields,
    ) -> Opportunity:
        values = {
            "title": "Backend Intern",
            "description": "Work on the order pipeline",
            "is_approved": True,
        }
        values.update(fields)
        return await self._save(
            Opportunity(industry_id=industry.id, type=type, **values)
        )

    async def application(
        self,
        candidate: Candidate,
        opportunity: Opportunity,
        status: ApplicationStatus = ApplicationStatus.PENDING,
        **fields,
    ) -> Application:
        return await self._save(
            Application(
                candidate_id=candidate.id,
                opportunity_id=opportunity.id,
                industry_id=opportunity.industry_id,
                status=status,
                **fields,
            )
        )


@pytest.fixture
def factory(db):
    return ModelFactory(db)


def viewer_for(user: User, ip_address: str = "203.0.113.0") -> ViewerContext:
    return ViewerContext.from_user(user, ip_address, "pytest")


# ==================== API ==================== #

@pytest.fixture
async def client(session_factory):
    """HTTP client against the app with its sessions bound to the test database."""
    from api.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.user_type.value)
    return {"Authorization": f"Bearer {token}"}
