"""Unit tests for the storage/display format adapter."""
from datetime import date

import pytest

from domain.enums import ReservationStatus, ServiceType
from domain.models import DisplayReservation, ReservationRecord
from services.reservation_format import to_display, to_storage


@pytest.fixture
def hotel_record():
    return ReservationRecord(
        id="r-1",
        pet_name="보리",
        owner_name="이지은",
        service=ServiceType.HOTEL,
        phone="010-2222-3333",
        reservation_date=None,
        check_in=date(2025, 3, 1),
        check_out=date(2025, 3, 3),
        room_type="deluxe",
        status=ReservationStatus.CONFIRMED,
    )


@pytest.mark.unit
class TestToDisplay:
    """Server record to display schema."""

    def test_hotel_date_falls_back_to_check_in(self, hotel_record):
        display = to_display(hotel_record)

        assert display.date == "2025-03-01"
        assert display.check_in == "2025-03-01"
        assert display.check_out == "2025-03-03"
        assert display.room_type == "deluxe"

    def test_missing_time_becomes_placeholder(self, hotel_record):
        display = to_display(hotel_record)

        assert display.time == "미정"
        assert display.has_time is False

    def test_field_renames(self):
        display = to_display({
            "id": "r-2",
            "pet_name": "콩이",
            "owner_name": "박서준",
            "service": "grooming",
            "phone": "01055556666",
            "reservation_date": "2025-03-02",
            "reservation_time": "11:00",
            "grooming_style": "전체미용",
            "special_notes": "겁이 많아요",
            "status": "pending",
        })

        assert display.pet_name == "콩이"
        assert display.style == "전체미용"
        assert display.special_notes == "겁이 많아요"
        assert display.time == "11:00"

    def test_missing_status_defaults_to_pending(self):
        display = to_display({
            "id": "r-3", "service": "daycare", "reservation_date": "2025-03-02",
        })

        assert display.status == ReservationStatus.PENDING

    def test_cache_dict_uses_legacy_names(self, hotel_record):
        entry = to_display(hotel_record).to_cache_dict()

        assert entry["petName"] == "보리"
        assert entry["checkIn"] == "2025-03-01"
        assert entry["roomType"] == "deluxe"
        assert "pet_name" not in entry


@pytest.mark.unit
class TestToStorage:
    """Display record (possibly partial) to storage patch."""

    def test_partial_patch_only_contains_supplied_fields(self):
        patch = to_storage({"status": "confirmed"})

        assert patch == {"status": "confirmed"}

    def test_camel_case_keys_are_mapped(self):
        patch = to_storage({"petName": "보리", "style": "스포팅", "specialNotes": "x"})

        assert patch == {"pet_name": "보리", "grooming_style": "스포팅", "special_notes": "x"}

    def test_date_falls_back_to_check_in(self):
        patch = to_storage({"checkIn": "2025-03-01"})

        assert patch["reservation_date"] == "2025-03-01"
        assert patch["check_in"] == "2025-03-01"

    def test_placeholder_time_is_cleared(self):
        patch = to_storage({"time": "미정"})

        assert patch["reservation_time"] is None

    def test_deleted_status_is_never_written(self):
        patch = to_storage({"status": "deleted", "petName": "보리"})

        assert "status" not in patch
        assert patch["pet_name"] == "보리"

    def test_round_trip_of_model_keeps_values(self, hotel_record):
        display = to_display(hotel_record)
        patch = to_storage(display)

        assert patch["service"] == "hotel"
        assert patch["status"] == "confirmed"
        assert patch["reservation_date"] == "2025-03-01"
        assert patch["reservation_time"] is None

    def test_unknown_fields_are_dropped(self):
        patch = to_storage(DisplayReservation(id="r-9", service=ServiceType.DAYCARE, phone="1"))

        assert "id" not in patch
        assert patch["service"] == "daycare"


@pytest.mark.unit
@pytest.mark.parametrize("record", [
    ReservationRecord(
        id="h-1", pet_name="보리", owner_name="이지은", service=ServiceType.HOTEL,
        phone="010-2222-3333", check_in=date(2025, 3, 1), check_out=date(2025, 3, 3),
        room_type="deluxe", special_notes="약 복용", status=ReservationStatus.CONFIRMED,
    ),
    ReservationRecord(
        id="g-1", pet_name="초코", owner_name="김민수", service=ServiceType.GROOMING,
        phone="01012345678", reservation_date=date(2024, 12, 25), reservation_time="14:00",
        grooming_style="가위컷", status=ReservationStatus.PENDING,
    ),
    ReservationRecord(
        id="d-1", pet_name="콩이", owner_name="박서준", service=ServiceType.DAYCARE,
        phone="010-5555-6666", reservation_date=date(2025, 1, 2),
        status=ReservationStatus.COMPLETED,
    ),
])
def test_display_storage_display_is_stable(record):
    display = to_display(record)

    again = to_display(to_storage(display))

    assert again.model_dump(exclude={"id"}) == display.model_dump(exclude={"id"})
