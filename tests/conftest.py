"""Pytest configuration and fixtures for the pet hotel reservation tests."""
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio

from core.utils_datetime import get_today_key
from db.session import close_db, create_engine, create_session_factory, init_db
from domain.enums import ReservationStatus, ServiceType
from domain.models import ReservationCreate
from integrations.sms import SmsDispatcher, SmsResult
from services.change_bus import ChangeBus
from services.mirror_cache import JsonFileStore, MirrorCache
from services.reservation_lifecycle import ReservationLifecycleController
from services.reservation_store import SqlAlchemyReservationStore


class FakeSmsProvider:
    """Records messages instead of sending them."""

    def __init__(self, result: Optional[SmsResult] = None, raises: Optional[Exception] = None):
        self.sent: List[Tuple[str, str]] = []
        self.result = result or SmsResult(success=True, data={"sid": "SM-test"})
        self.raises = raises

    async def send(self, phone: str, text: str) -> SmsResult:
        self.sent.append((phone, text))
        if self.raises is not None:
            raise self.raises
        return self.result


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def store(session_factory):
    return SqlAlchemyReservationStore(session_factory)


@pytest.fixture
def file_store(tmp_path):
    return JsonFileStore(tmp_path / "cache")


@pytest.fixture
def cache(file_store):
    mirror = MirrorCache(file_store)
    mirror.initialize()
    return mirror


@pytest.fixture
def bus():
    return ChangeBus()


@pytest.fixture
def sms_provider_factory():
    return FakeSmsProvider


@pytest.fixture
def sms_provider():
    return FakeSmsProvider()


@pytest.fixture
def sms_dispatcher(sms_provider):
    return SmsDispatcher(sms_provider, shop_name="PuppyHotel")


@pytest.fixture
def lifecycle(store, cache, bus, sms_dispatcher):
    return ReservationLifecycleController(store, cache, bus, sms_dispatcher)


@pytest.fixture
def today_key():
    return get_today_key(540)


@pytest.fixture
def reservation_data(today_key):
    """Factory for create payloads; keyword arguments override the defaults."""
    def _build(**overrides) -> ReservationCreate:
        data = {
            "pet_name": "초코",
            "owner_name": "김민수",
            "service": ServiceType.GROOMING,
            "phone": "010-1234-5678",
            "reservation_date": today_key,
            "reservation_time": "14:00",
            "grooming_style": "가위컷",
            "status": ReservationStatus.PENDING,
        }
        data.update(overrides)
        return ReservationCreate(**data)
    return _build


@pytest.fixture
def create_reservation(store, reservation_data):
    """Factory fixture that persists a reservation through the store."""
    async def _create(**overrides):
        return await store.create(reservation_data(**overrides))
    return _create
