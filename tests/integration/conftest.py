"""Pytest configuration and fixtures for integration tests (real SQLite file)."""

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from helixintel.core.config import Settings
from helixintel.core.sqlite_store import SQLiteMaintenanceStore
from helixintel.domain.create_models import AssetCreate, HomeCreate, TemplateCreate
from helixintel.domain.frequency import Frequency
from helixintel.domain.template import AssetCategory
from helixintel.main import create_app
from tests.unit.mocks import FakeClock


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "helixintel-test.db")


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, tzinfo=UTC))


@pytest.fixture
async def sqlite_store(db_path, clock):
    """Opened SQLite store on a fresh database file."""
    store = SQLiteMaintenanceStore(db_path=db_path, clock=clock)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
async def seeded(sqlite_store):
    """A home with one HVAC asset and two templates."""
    home = await sqlite_store.create_home(HomeCreate(name="Maple Street"))
    furnace = await sqlite_store.create_asset(
        AssetCreate(home_id=home.id, name="Furnace", category=AssetCategory.HVAC)
    )
    filter_template = await sqlite_store.create_template(
        TemplateCreate(
            name="Change HVAC Filter",
            description="Replace the air filter",
            category=AssetCategory.HVAC,
            default_frequency=Frequency.MONTHLY,
            instructions=["Turn off the system", "Swap the filter", "Turn the system on"],
        )
    )
    gutter_template = await sqlite_store.create_template(
        TemplateCreate(name="Clean Gutters", category=AssetCategory.OUTDOOR, default_frequency=Frequency.SEMIANNUAL)
    )
    return {"home": home, "furnace": furnace, "filter": filter_template, "gutters": gutter_template}


@pytest.fixture
def test_settings(db_path):
    return Settings(_env_file=None, sqlite_db_path=db_path, logfire_token=None, environment="test")


@pytest.fixture
def client(test_settings, clock, seeded):
    """TestClient over an app sharing the seeded database file.

    The seeding store is already open; both connections use WAL so they see
    each other's commits.
    """
    app = create_app(test_settings, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
