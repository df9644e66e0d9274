"""
Tests for the SQLite watch store (campwatch/store/database.py)
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from tests.conftest import NOW, make_watch


class TestRecordManagement:
    @pytest.mark.asyncio
    async def test_add_and_get(self, store):
        record = await store.add(make_watch())

        assert record.id is not None
        assert record.attempts_made == 0
        assert record.success_sent == 0
        assert record.monitoring_active is True
        assert record.created_at is not None

        fetched = await store.get(record.id)
        assert fetched == record

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get(999) is None

    @pytest.mark.asyncio
    async def test_list_all_excludes_deleted(self, store):
        kept = await store.add(make_watch())
        gone = await store.add(make_watch(campsite_id="6"))
        assert await store.soft_delete(gone.id) is True

        assert [r.id for r in await store.list_all()] == [kept.id]
        assert [r.id for r in await store.list_all(include_deleted=True)] == [kept.id, gone.id]

    @pytest.mark.asyncio
    async def test_soft_delete_stops_monitoring(self, store):
        record = await store.add(make_watch())
        await store.soft_delete(record.id)

        deleted = await store.get(record.id)
        assert deleted.user_deleted is True
        assert deleted.monitoring_active is False

    @pytest.mark.asyncio
    async def test_set_monitoring(self, store):
        record = await store.add(make_watch(monitoring_active=False))
        assert await store.set_monitoring(record.id, True) is True
        assert (await store.get(record.id)).monitoring_active is True
        assert await store.set_monitoring(999, True) is False

    @pytest.mark.asyncio
    async def test_deleted_record_cannot_be_reenabled(self, store):
        record = await store.add(make_watch())
        await store.soft_delete(record.id)
        assert await store.set_monitoring(record.id, True) is False

    @pytest.mark.asyncio
    async def test_disable_for_owner_checks_email(self, store):
        record = await store.add(make_watch(email_address="Pat@Example.com"))

        assert await store.disable_for_owner(record.id, "someone@else.com") is False
        assert (await store.get(record.id)).monitoring_active is True

        assert await store.disable_for_owner(record.id, "pat@example.com") is True
        assert (await store.get(record.id)).monitoring_active is False


class TestMonitorInterface:
    @pytest.mark.asyncio
    async def test_list_active(self, store):
        active = await store.add(make_watch())
        await store.add(make_watch(monitoring_active=False))
        deleted = await store.add(make_watch())
        await store.soft_delete(deleted.id)

        assert [r.id for r in await store.list_active()] == [active.id]

    @pytest.mark.asyncio
    async def test_increment_attempts(self, store):
        record = await store.add(make_watch())
        await store.increment_attempts(record.id)
        await store.increment_attempts(record.id)
        assert (await store.get(record.id)).attempts_made == 2

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_not_lost(self, store):
        record = await store.add(make_watch())
        await asyncio.gather(*[store.increment_attempts(record.id) for _ in range(10)])
        assert (await store.get(record.id)).attempts_made == 10

    @pytest.mark.asyncio
    async def test_record_success(self, store):
        record = await store.add(make_watch())
        assert await store.record_success(record.id, NOW) is True

        updated = await store.get(record.id)
        assert updated.success_sent == 1
        assert updated.last_success_sent_at == NOW
        assert updated.last_success_sent_at.tzinfo == timezone.utc
        assert updated.updated_at == NOW

    @pytest.mark.asyncio
    async def test_record_success_naive_timestamp_is_utc(self, store):
        record = await store.add(make_watch())
        await store.record_success(record.id, datetime(2025, 5, 20, 16, 0))

        updated = await store.get(record.id)
        assert updated.last_success_sent_at == datetime(2025, 5, 20, 16, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_deactivate_resets_success(self, store):
        record = await store.add(make_watch())
        await store.record_success(record.id, NOW - timedelta(days=1))
        await store.record_success(record.id, NOW)

        assert await store.deactivate(record.id) is True

        updated = await store.get(record.id)
        assert updated.monitoring_active is False
        assert updated.success_sent == 0
        assert updated.last_success_sent_at == NOW

    @pytest.mark.asyncio
    async def test_missing_record(self, store):
        assert await store.increment_attempts(999) is False
        assert await store.deactivate(999) is False
