"""
Shared fixtures: in-memory database, pinned clock, seeded accounts and an HTTP client
"""
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from overseas_tracker.config.settings import (
    DatabaseSettings,
    MailSettings,
    SchedulerSettings,
    SecuritySettings,
    Settings,
)
from overseas_tracker.core.clock import FixedClock
from overseas_tracker.core.db import Database
from overseas_tracker.models.account import AccountRole
from overseas_tracker.schemas.account import AccountCreate
from overseas_tracker.schemas.trip import TripCreate
from overseas_tracker.services.account_service import AccountService
from overseas_tracker.services.company_service import CompanyService
from overseas_tracker.services.trip_service import TripService

TODAY = date(2024, 3, 10)
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "Admin@123"


@pytest.fixture
def test_settings():
    return Settings(
        timezone="UTC",
        log_format="text",
        database=DatabaseSettings(url="sqlite+aiosqlite://"),
        security=SecuritySettings(
            jwt_secret="test-secret",
            default_admin_username=ADMIN_USERNAME,
            default_admin_password=ADMIN_PASSWORD,
        ),
        scheduler=SchedulerSettings(enabled=False),
        mail=MailSettings(enabled=False),
    )


@pytest.fixture
async def database():
    # One shared in-memory connection so every session sees the same data
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def trip_service(db_session, clock):
    return TripService(db_session, clock)


@pytest.fixture
async def staff_user(db_session):
    return await AccountService(db_session).create_account(
        AccountCreate(username="staff", password="staffpass", role=AccountRole.STAFF)
    )


@pytest.fixture
async def test_user(db_session):
    """Traveller account"""
    return await AccountService(db_session).create_account(
        AccountCreate(username="traveller", password="travelpass")
    )


@pytest.fixture
async def test_company(db_session):
    return await CompanyService(db_session).create_company("Acme Pty Ltd")


@pytest.fixture
def make_trip(trip_service, test_user, staff_user):
    """Factory creating a trip for the traveller with the given dates."""

    async def _make(departure, return_date, name="Jane Doe", company_id=None):
        data = TripCreate(
            traveller_id=test_user.id,
            company_id=company_id,
            name=name,
            email="jane@example.com",
            departure_date=departure,
            return_date=return_date,
        )
        return await trip_service.create_trip(data, actor_id=staff_user.id)

    return _make


@pytest.fixture
async def app(test_settings, database, clock):
    from overseas_tracker.main import create_app

    application = create_app(test_settings, database=database, clock=clock)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def async_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _login(client: AsyncClient, username: str, password: str) -> dict:
    r = await client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['data']['access_token']}"}


@pytest.fixture
async def admin_headers(async_client):
    return await _login(async_client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
async def staff_headers(async_client, staff_user):
    return await _login(async_client, "staff", "staffpass")
