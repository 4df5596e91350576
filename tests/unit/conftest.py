"""Pytest configuration and fixtures for unit tests."""

from datetime import UTC, datetime

import pytest

from helixintel.domain.create_models import AssetCreate, HomeCreate, TemplateCreate
from helixintel.domain.frequency import Frequency
from helixintel.domain.template import AssetCategory, Difficulty
from helixintel.modules.schedules.engine import ScheduleEngine
from tests.unit.mocks import FakeClock, InMemoryMaintenanceStore


START = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def clock():
    """Provides a clock frozen at 2024-01-01 00:00 UTC."""
    return FakeClock(START)


@pytest.fixture
def in_memory_store():
    """Provides a fresh InMemoryMaintenanceStore for each test."""
    return InMemoryMaintenanceStore()


@pytest.fixture
def engine(in_memory_store, clock):
    """Schedule engine wired to the in-memory store and the fake clock."""
    return ScheduleEngine(in_memory_store, clock)


@pytest.fixture
async def home(in_memory_store):
    return await in_memory_store.create_home(HomeCreate(name="Maple Street"))


@pytest.fixture
async def other_home(in_memory_store):
    return await in_memory_store.create_home(HomeCreate(name="Lake Cabin"))


@pytest.fixture
async def furnace(in_memory_store, home):
    return await in_memory_store.create_asset(
        AssetCreate(home_id=home.id, name="Furnace", category=AssetCategory.HVAC)
    )


@pytest.fixture
async def filter_template(in_memory_store):
    """Monthly HVAC filter change template."""
    return await in_memory_store.create_template(
        TemplateCreate(
            name="Change HVAC Filter",
            description="Replace the air filter",
            category=AssetCategory.HVAC,
            default_frequency=Frequency.MONTHLY,
            estimated_duration_minutes=10,
            difficulty=Difficulty.EASY,
            instructions=["Turn off the system", "Swap the filter"],
        )
    )


@pytest.fixture
async def gutter_template(in_memory_store):
    """Semiannual whole-home template."""
    return await in_memory_store.create_template(
        TemplateCreate(
            name="Clean Gutters",
            category=AssetCategory.OUTDOOR,
            default_frequency=Frequency.SEMIANNUAL,
        )
    )
