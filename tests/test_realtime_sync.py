"""Tests for the realtime synchronization path."""
import os

import pytest

from domain.enums import ChangeEventType, ReservationStatus, ServiceType
from services.mirror_cache import ALL_RESERVATIONS_KEY
from services.realtime_sync import (
    ReservationRealtimeSync,
    StorageChangeWatcher,
    load_all_reservations,
)
from services.reservation_store import ReservationStoreError


@pytest.fixture
def realtime(store, cache, bus):
    return ReservationRealtimeSync(store, cache, bus)


@pytest.mark.integration
class TestRealtimeSync:
    """Store events from any client reach the cache and the bus."""

    @pytest.mark.asyncio
    async def test_insert_is_mirrored_and_reported(self, realtime, cache, bus, create_reservation):
        updates, signals = [], []
        bus.subscribe(lambda: signals.append(1))
        realtime.subscribe(updates.append)

        record = await create_reservation()

        assert [r.id for r in cache.read_all()] == [record.id]
        assert updates[0].type == ChangeEventType.INSERT
        assert updates[0].data.pet_name == "초코"
        assert len(signals) == 1

    @pytest.mark.asyncio
    async def test_update_to_cancelled_hides_record(self, realtime, store, cache, create_reservation):
        updates = []
        realtime.subscribe(updates.append)
        record = await create_reservation()

        await store.update(record.id, {"status": "cancelled"})

        assert cache.read_all() == []
        assert updates[-1].type == ChangeEventType.UPDATE
        assert updates[-1].data.status == ReservationStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_delete_removes_id(self, realtime, store, cache, create_reservation):
        updates = []
        realtime.subscribe(updates.append)
        record = await create_reservation()

        await store.remove(record.id)

        assert cache.read_all() == []
        assert updates[-1].type == ChangeEventType.DELETE
        assert updates[-1].id == record.id
        assert updates[-1].data is None

    @pytest.mark.asyncio
    async def test_events_applied_in_delivery_order(self, realtime, store, cache, create_reservation):
        realtime.subscribe()
        record = await create_reservation()

        await store.update(record.id, {"status": "confirmed"})
        await store.update(record.id, {"service": "daycare"})

        records = cache.read_all()
        assert [(r.status, r.service) for r in records] == [
            (ReservationStatus.CONFIRMED, ServiceType.DAYCARE)
        ]
        assert cache.read_by_service(ServiceType.GROOMING) == []

    @pytest.mark.asyncio
    async def test_async_callback(self, realtime, create_reservation):
        seen = []

        async def on_update(update):
            seen.append(update.reservation_id)

        realtime.subscribe(on_update)
        record = await create_reservation()

        assert seen == [record.id]

    @pytest.mark.asyncio
    async def test_start_and_stop(self, realtime, store, cache, create_reservation):
        realtime.start()
        record = await create_reservation()
        assert [r.id for r in cache.read_all()] == [record.id]

        await realtime.stop()
        await create_reservation()

        assert store.channel.subscriber_count == 0
        assert len(cache.read_all()) == 1


@pytest.mark.integration
class TestLoadAllReservations:

    @pytest.mark.asyncio
    async def test_normalizes_records(self, store, create_reservation):
        await create_reservation(reservation_time=None)

        reservations = await load_all_reservations(store)

        assert [r.time for r in reservations] == ["미정"]

    @pytest.mark.asyncio
    async def test_failure_returns_empty_list(self):
        class BrokenStore:
            async def get_all(self):
                raise ReservationStoreError("offline")

        assert await load_all_reservations(BrokenStore()) == []


@pytest.mark.unit
class TestStorageChangeWatcher:
    """Detects cache writes from other processes."""

    def test_own_writes_are_ignored(self, file_store, cache, bus):
        signals = []
        bus.subscribe(lambda: signals.append(1))
        watcher = StorageChangeWatcher(file_store, bus)
        watcher.snapshot()

        cache.clear()

        assert watcher.poll() is False
        assert signals == []

    def test_foreign_write_is_broadcast(self, file_store, cache, bus):
        signals = []
        bus.subscribe(lambda: signals.append(1))
        watcher = StorageChangeWatcher(file_store, bus)
        watcher.snapshot()

        path = file_store.data_dir / f"{ALL_RESERVATIONS_KEY}.json"
        path.write_text('[{"id": "x", "service": "hotel"}]', encoding="utf-8")
        stat = path.stat()
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))

        assert watcher.poll() is True
        assert signals == [1]
        assert watcher.poll() is False
