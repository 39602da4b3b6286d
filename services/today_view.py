"""
Today's reservations for the admin mobile view.

Holds the reservations of the current shop day (fixed UTC offset, never the
host timezone), sorted by service then time, and keeps them current from
realtime updates without refetching.
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from core.config import settings
from core.subscriptions import Subscription
from core.utils_datetime import get_today_key
from domain.enums import ChangeEventType, HIDDEN_STATUSES, ServiceType
from domain.models import DisplayReservation, RealtimeUpdate
from services.reservation_format import to_display_list
from services.reservation_store import ReservationStore, ReservationStoreError
from services.realtime_sync import ReservationRealtimeSync


logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "오늘 예약을 불러오지 못했습니다. 잠시 후 다시 시도해주세요."

DEFAULT_SERVICE_ORDER = (ServiceType.HOTEL, ServiceType.GROOMING, ServiceType.DAYCARE)


def sort_reservations(
    reservations: Iterable[DisplayReservation],
    service_order: Sequence[ServiceType] = DEFAULT_SERVICE_ORDER,
) -> List[DisplayReservation]:
    """Sort by service rank, then time, reservations without a time last."""
    ranks = {ServiceType(service): index for index, service in enumerate(service_order)}

    def key(reservation: DisplayReservation):
        rank = ranks.get(reservation.service, len(ranks))
        return (rank, not reservation.has_time, reservation.time if reservation.has_time else "")

    return sorted(reservations, key=key)


class TodayReservationsView:
    """Reservation list for the current shop day."""

    def __init__(
        self,
        store: ReservationStore,
        realtime: ReservationRealtimeSync,
        enabled: bool = True,
        tz_offset_minutes: Optional[int] = None,
        service_order: Sequence[ServiceType] = DEFAULT_SERVICE_ORDER,
    ):
        self.store = store
        self.realtime = realtime
        self.enabled = enabled
        self.service_order = tuple(ServiceType(s) for s in service_order)
        self.tz_offset_minutes = (
            settings.shop_utc_offset_minutes if tz_offset_minutes is None else tz_offset_minutes
        )
        self.today_key = get_today_key(self.tz_offset_minutes)

        self.reservations: List[DisplayReservation] = []
        self.is_loading = False
        self.is_refreshing = False
        self.error: Optional[str] = None
        self._subscription: Optional[Subscription] = None

    def _belongs_today(self, reservation: DisplayReservation) -> bool:
        return (
            reservation.effective_date == self.today_key
            and reservation.status not in HIDDEN_STATUSES
        )

    def _sort(self, reservations: Iterable[DisplayReservation]) -> List[DisplayReservation]:
        return sort_reservations(reservations, self.service_order)

    async def _load(self) -> None:
        # A long-lived view rolls over to the new shop day on its next load
        today_key = get_today_key(self.tz_offset_minutes)
        if today_key != self.today_key:
            logger.info(f"Today view rolled over from {self.today_key} to {today_key}")
            self.today_key = today_key
            self.reservations = [r for r in self.reservations if self._belongs_today(r)]

        try:
            records = await self.store.get_by_date(self.today_key)
        except ReservationStoreError as e:
            logger.error(f"Failed to load reservations for {self.today_key}: {e.message}")
            self.error = LOAD_ERROR_MESSAGE
            return

        unique: Dict[str, DisplayReservation] = {}
        for reservation in to_display_list(records):
            if self._belongs_today(reservation):
                unique[reservation.id] = reservation
        self.reservations = self._sort(unique.values())
        self.error = None

    async def start(self) -> None:
        """Load today's reservations and follow realtime updates. No-op when disabled."""
        if not self.enabled:
            return
        self.is_loading = True
        try:
            await self._load()
        finally:
            self.is_loading = False
        if self._subscription is None:
            self._subscription = self.realtime.subscribe(self.handle_realtime_update)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def refresh(self) -> None:
        if not self.enabled:
            return
        self.is_refreshing = True
        try:
            await self._load()
        finally:
            self.is_refreshing = False

    def handle_realtime_update(self, update: RealtimeUpdate) -> None:
        """Apply one realtime update to the held list."""
        reservation_id = update.reservation_id
        remaining = [r for r in self.reservations if r.id != reservation_id]

        if update.type == ChangeEventType.DELETE or update.data is None:
            self.reservations = remaining
            return

        if self._belongs_today(update.data):
            remaining.append(update.data)
        self.reservations = self._sort(remaining)

    def by_service(self, service: ServiceType) -> List[DisplayReservation]:
        return [r for r in self.reservations if r.service == service]

    @property
    def today_hotel(self) -> List[DisplayReservation]:
        return self.by_service(ServiceType.HOTEL)

    @property
    def today_grooming(self) -> List[DisplayReservation]:
        return self.by_service(ServiceType.GROOMING)

    @property
    def today_daycare(self) -> List[DisplayReservation]:
        return self.by_service(ServiceType.DAYCARE)

    def grouped(self) -> Dict[str, List[DisplayReservation]]:
        return {service.value: self.by_service(service) for service in self.service_order}
