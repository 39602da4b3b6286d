"""Tests for the chatbot availability service."""
import pytest

from core.config import Settings
from domain.enums import ReservationStatus, ServiceType
from services.chatbot_service import (
    CHATBOT_REFUSAL_MESSAGE,
    ChatbotReservationService,
    SLOTS_ERROR_MESSAGE,
)

# 2025-03-04 is a Tuesday, 2025-03-03 a Monday
OPEN_DAY = "2025-03-04"
CLOSED_DAY = "2025-03-03"


@pytest.fixture
def config():
    return Settings(
        grooming_time_slots=["10:00", "11:00", "14:00"],
        grooming_closed_weekdays=["monday"],
        chatbot_accepts_reservations=False,
    )


@pytest.fixture
def chatbot(store, config):
    return ChatbotReservationService(store, config)


@pytest.mark.integration
class TestAvailableSlots:

    @pytest.mark.asyncio
    async def test_booked_times_are_excluded(self, chatbot, create_reservation):
        await create_reservation(reservation_date=OPEN_DAY, reservation_time="10:00")
        await create_reservation(reservation_date=OPEN_DAY, reservation_time="11:00",
                                 status=ReservationStatus.CANCELLED)
        await create_reservation(reservation_date=OPEN_DAY, reservation_time="14:00",
                                 service=ServiceType.DAYCARE)

        result = await chatbot.get_available_slots(OPEN_DAY, "grooming")

        assert result["success"]
        assert result["availableSlots"] == ["11:00", "14:00"]
        assert result["message"] == f"{OPEN_DAY}에 2개의 예약 가능 시간이 있습니다."

    @pytest.mark.asyncio
    async def test_closed_day_has_no_slots(self, chatbot):
        result = await chatbot.get_available_slots(CLOSED_DAY, "grooming")

        assert result["availableSlots"] == []
        assert result["message"] == f"{CLOSED_DAY}는 예약이 마감되었습니다."

    @pytest.mark.asyncio
    async def test_invalid_input_returns_failure(self, chatbot):
        result = await chatbot.get_available_slots("someday", "grooming")

        assert result == {"success": False, "error": SLOTS_ERROR_MESSAGE}


@pytest.mark.integration
class TestReservationStatus:

    @pytest.mark.asyncio
    async def test_counts_only_active_reservations(self, chatbot, create_reservation):
        await create_reservation(reservation_date=OPEN_DAY)
        await create_reservation(reservation_date=OPEN_DAY, service=ServiceType.HOTEL,
                                 status=ReservationStatus.CONFIRMED)
        await create_reservation(reservation_date=OPEN_DAY, service=ServiceType.HOTEL,
                                 status=ReservationStatus.COMPLETED)

        result = await chatbot.get_reservation_status(OPEN_DAY)

        assert result["summary"] == {
            "hotel": {"available": 9, "booked": 1},
            "grooming": {"available": 7, "booked": 1},
            "daycare": {"available": 15, "booked": 0},
        }
        assert result["message"] == "호텔 9개, 미용 7개, 데이케어 15개 예약 가능합니다."


@pytest.mark.integration
class TestCreateReservation:

    @pytest.mark.asyncio
    async def test_refused_by_default(self, chatbot, store):
        result = await chatbot.create_reservation("grooming", {"petName": "초코"})

        assert result == {"success": False, "error": CHATBOT_REFUSAL_MESSAGE}
        assert await store.get_all() == []

    @pytest.mark.asyncio
    async def test_creates_pending_when_enabled(self, store):
        chatbot = ChatbotReservationService(store, Settings(chatbot_accepts_reservations=True))

        result = await chatbot.create_reservation("daycare", {
            "petName": "콩이",
            "ownerName": "박서준",
            "phone": "010-5555-6666",
            "date": OPEN_DAY,
            "time": "09:00",
            "status": "confirmed",
        })

        assert result["success"]
        assert result["reservation"]["status"] == "pending"
        records = await store.get_all()
        assert [r.status for r in records] == [ReservationStatus.PENDING]
