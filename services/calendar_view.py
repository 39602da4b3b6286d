"""Per-service calendar views backed by the mirror cache."""
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from core.subscriptions import Subscription
from domain.enums import HIDDEN_STATUSES, ServiceType
from domain.models import DisplayReservation
from services.change_bus import ChangeBus
from services.mirror_cache import MirrorCache
from services.today_view import sort_reservations


logger = logging.getLogger(__name__)


class ServiceCalendar:
    """Calendar of one service, reloaded on every change signal.

    Acquire with ``mount()`` and release with ``unmount()``; a calendar must
    not stay subscribed after it is unmounted.
    """

    def __init__(self, cache: MirrorCache, bus: ChangeBus, service: ServiceType):
        self.cache = cache
        self.bus = bus
        self.service = ServiceType(service)
        self.days: Dict[str, List[DisplayReservation]] = {}
        self.reload_count = 0
        self._subscription: Optional[Subscription] = None

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def mount(self) -> None:
        if self._subscription is None:
            self._subscription = self.bus.subscribe(self.reload)
        self.reload()

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _day_of(self, reservation: DisplayReservation) -> Optional[str]:
        if self.service == ServiceType.HOTEL:
            return reservation.check_in or reservation.date
        return reservation.effective_date

    def reload(self) -> None:
        """Rebuild the day map from the mirror cache."""
        unique: Dict[str, DisplayReservation] = {}
        for reservation in self.cache.read_all() + self.cache.read_by_service(self.service):
            if reservation.service == self.service:
                unique[reservation.id] = reservation

        days: Dict[str, List[DisplayReservation]] = defaultdict(list)
        for reservation in unique.values():
            if reservation.status in HIDDEN_STATUSES:
                continue
            day = self._day_of(reservation)
            if day:
                days[day].append(reservation)

        self.days = {day: sort_reservations(items) for day, items in sorted(days.items())}
        self.reload_count += 1
        logger.debug(f"{self.service.value} calendar reloaded with {len(unique)} reservation(s)")

    def reservations_on(self, date_key: str) -> List[DisplayReservation]:
        return list(self.days.get(date_key, []))
