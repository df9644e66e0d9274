from datetime import date, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
import pytz

from campwatch.common.config import Config, MonitorConfig, DatabaseConfig, NotificationsConfig
from campwatch.common.models import WatchCreate
from campwatch.store import WatchStore


TZ = pytz.timezone("America/Los_Angeles")
NOW = TZ.localize(datetime(2025, 5, 20, 9, 0, 0))


@pytest.fixture()
def config(tmp_path):
    return Config(
        monitor=MonitorConfig(
            interval_seconds=0.05,
            batch_size=10,
            batch_delay_ms=0,
            rate_limit_pause_seconds=0,
            group_backoff_seconds=0,
            max_rate_limit_retries=2,
        ),
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        notifications=NotificationsConfig(base_url="https://alerts.example.com"),
    )


@pytest_asyncio.fixture()
async def store(config):
    store = WatchStore(config.database.url)
    await store.init()
    yield store
    await store.close()


def make_watch(**overrides) -> WatchCreate:
    fields = dict(
        name="Pat",
        email_address="pat@example.com",
        campsite_id="5",
        campsite_name="North Pines",
        campsite_number="A005",
        facility_id="100",
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 3),
    )
    fields.update(overrides)
    return WatchCreate(**fields)


@pytest.fixture()
def clock():
    return lambda: NOW


@pytest.fixture()
def fake_client():
    return SimpleNamespace(
        get_campsite_availability=AsyncMock(return_value={}),
        get_facility_month=AsyncMock(return_value={}),
        upstream_calls=0,
    )


@pytest.fixture()
def fake_notifier():
    return SimpleNamespace(notify_available=AsyncMock(return_value=True))
