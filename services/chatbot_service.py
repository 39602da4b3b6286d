"""
Availability queries for the site chatbot.

Counts here are advisory: capacities are never enforced when reservations
are written. Every method returns a ``{"success": ...}`` dict and never
raises.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from core.config import Settings, settings as default_settings
from core.utils_datetime import to_date_key, weekday_name
from domain.enums import ACTIVE_STATUSES, ReservationStatus, ServiceType
from domain.models import ReservationCreate
from services.reservation_format import to_display, to_storage
from services.reservation_store import ReservationStore, ReservationStoreError


logger = logging.getLogger(__name__)

CHATBOT_REFUSAL_MESSAGE = (
    "챗봇으로 예약접수는 받지 않고 있습니다. 예약신청은 예약폼에 작성해 주시기 바랍니다."
)
SLOTS_ERROR_MESSAGE = "예약 조회에 실패했습니다."
STATUS_ERROR_MESSAGE = "예약 현황 조회에 실패했습니다."
CREATE_ERROR_MESSAGE = "예약 접수에 실패했습니다."


class ChatbotReservationService:
    """Read-mostly reservation service exposed to the chatbot."""

    def __init__(self, store: ReservationStore, config: Optional[Settings] = None):
        self.store = store
        self.config = config or default_settings

    def _time_slots(self, date_key: str):
        if weekday_name(date_key) in self.config.grooming_closed_weekdays:
            return []
        return list(self.config.grooming_time_slots)

    async def get_available_slots(self, date: str, service: str) -> Dict[str, Any]:
        """
        Free time slots of a service on a date.

        Args:
            date: YYYY-MM-DD
            service: hotel, grooming or daycare

        Returns:
            Dict with ``availableSlots`` and a Korean summary message
        """
        try:
            date_key = to_date_key(date) or ""
            service_type = ServiceType(service)
            slots = self._time_slots(date_key)
            records = await self.store.get_by_date(date_key)
        except (ValueError, ReservationStoreError) as e:
            logger.warning(f"Slot lookup failed for {date} {service}: {e}")
            return {"success": False, "error": SLOTS_ERROR_MESSAGE}

        booked = {
            r.reservation_time
            for r in records
            if r.service == service_type and r.status in ACTIVE_STATUSES
        }
        available = [slot for slot in slots if slot not in booked]
        if available:
            message = f"{date_key}에 {len(available)}개의 예약 가능 시간이 있습니다."
        else:
            message = f"{date_key}는 예약이 마감되었습니다."
        return {
            "success": True,
            "date": date_key,
            "service": service_type.value,
            "availableSlots": available,
            "message": message,
        }

    async def get_reservation_status(self, date: str) -> Dict[str, Any]:
        """Advisory booked/available counts per service on a date."""
        try:
            date_key = to_date_key(date) or ""
            records = await self.store.get_by_date(date_key)
        except (ValueError, ReservationStoreError) as e:
            logger.warning(f"Status lookup failed for {date}: {e}")
            return {"success": False, "error": STATUS_ERROR_MESSAGE}

        capacities = self.config.service_capacities
        summary = {
            service.value: {"available": capacities[service.value], "booked": 0}
            for service in ServiceType
        }
        for record in records:
            if record.status in ACTIVE_STATUSES:
                summary[record.service.value]["booked"] += 1
                summary[record.service.value]["available"] -= 1

        return {
            "success": True,
            "date": date_key,
            "summary": summary,
            "message": (
                f"호텔 {summary['hotel']['available']}개, "
                f"미용 {summary['grooming']['available']}개, "
                f"데이케어 {summary['daycare']['available']}개 예약 가능합니다."
            ),
        }

    async def create_reservation(self, service: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a pending reservation, or refuse when chatbot intake is off."""
        if not self.config.chatbot_accepts_reservations:
            return {"success": False, "error": CHATBOT_REFUSAL_MESSAGE}

        try:
            fields = to_storage({**data, "service": service})
            fields["status"] = ReservationStatus.PENDING
            record = await self.store.create(ReservationCreate.model_validate(fields))
        except (ValueError, ValidationError, ReservationStoreError) as e:
            logger.warning(f"Chatbot reservation failed for {service}: {e}")
            return {"success": False, "error": CREATE_ERROR_MESSAGE}

        reservation = to_display(record)
        logger.info(f"Chatbot created reservation {reservation.id} ({service})")
        return {
            "success": True,
            "reservation": reservation.to_cache_dict(),
            "message": f"{reservation.pet_name} {reservation.service.label} 예약이 접수되었습니다.",
        }
