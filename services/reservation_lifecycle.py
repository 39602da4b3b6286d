"""
Reservation lifecycle controller.

Admin actions on a reservation: status changes (with a confirmation SMS on
confirm), hard delete and bulk delete. Each successful action reconciles the
mirror cache and broadcasts the change signal. Only store failures reach the
caller; SMS and cache problems are logged.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Set, Union
from uuid import uuid4

from core.logging import LogContext
from domain.enums import ReservationStatus
from domain.models import DisplayReservation
from integrations.sms import SmsDispatcher
from services.change_bus import ChangeBus
from services.mirror_cache import MirrorCache
from services.reservation_format import to_display
from services.reservation_store import ReservationStore, ReservationStoreError


logger = logging.getLogger(__name__)

ALREADY_PROCESSING = "Reservation is already being processed"


@dataclass
class ActionResult:
    """Outcome of a lifecycle action."""

    success: bool
    reservation: Optional[DisplayReservation] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "reservation": self.reservation.to_cache_dict() if self.reservation else None,
            "error": self.error,
        }


class ReservationLifecycleController:
    """Runs admin status changes and deletions against the store."""

    def __init__(
        self,
        store: ReservationStore,
        cache: MirrorCache,
        bus: ChangeBus,
        sms_dispatcher: SmsDispatcher,
        origin: Optional[str] = None,
    ):
        self.store = store
        self.cache = cache
        self.bus = bus
        self.sms_dispatcher = sms_dispatcher
        # Tag on store events caused by this controller
        self.origin = origin or f"lifecycle-{uuid4().hex[:12]}"
        self._processing: Set[str] = set()

    def is_processing(self, reservation_id: str) -> bool:
        return reservation_id in self._processing

    async def change_status(
        self,
        reservation_id: str,
        new_status: Union[ReservationStatus, str],
    ) -> ActionResult:
        """
        Move a reservation to ``new_status``.

        Steps run in order: store update, normalization, SMS (confirm only),
        cache reconciliation, broadcast. A failed store update returns a
        failure and skips every later step.

        Args:
            reservation_id: Reservation to update
            new_status: Target status; any persisted status is accepted

        Returns:
            ActionResult with the normalized record on success
        """
        try:
            new_status = ReservationStatus(new_status)
        except ValueError:
            return ActionResult(success=False, error=f"Unknown status: {new_status}")

        if reservation_id in self._processing:
            logger.info(f"Status change for {reservation_id} ignored, already in flight")
            return ActionResult(success=False, error=ALREADY_PROCESSING)

        self._processing.add(reservation_id)
        try:
            with LogContext(logger, reservation_id=reservation_id, new_status=new_status.value) as ctx:
                return await self._apply_status(reservation_id, new_status, ctx)
        finally:
            self._processing.discard(reservation_id)

    async def _apply_status(
        self,
        reservation_id: str,
        new_status: ReservationStatus,
        ctx: LogContext,
    ) -> ActionResult:
        try:
            record = await self.store.update(
                reservation_id, {"status": new_status}, origin=self.origin
            )
        except ReservationStoreError as e:
            ctx.log("error", f"Status change failed for {reservation_id}: {e.message}")
            return ActionResult(success=False, error=e.message)

        reservation = to_display(record)

        if new_status == ReservationStatus.CONFIRMED:
            sms = await self.sms_dispatcher.send_confirmation(reservation)
            if not sms.success:
                ctx.log("warning", f"Confirmation SMS not sent for {reservation_id}: {sms.error}")

        self.cache.reconcile(reservation_id, reservation)
        self.bus.publish()

        ctx.log("info", f"Reservation {reservation_id} is now {reservation.status.value}")
        return ActionResult(success=True, reservation=reservation)

    async def confirm(self, reservation_id: str) -> ActionResult:
        return await self.change_status(reservation_id, ReservationStatus.CONFIRMED)

    async def complete(self, reservation_id: str) -> ActionResult:
        return await self.change_status(reservation_id, ReservationStatus.COMPLETED)

    async def cancel(self, reservation_id: str) -> ActionResult:
        return await self.change_status(reservation_id, ReservationStatus.CANCELLED)

    async def delete(self, reservation_id: str) -> ActionResult:
        """Hard delete one reservation."""
        try:
            await self.store.remove(reservation_id, origin=self.origin)
        except ReservationStoreError as e:
            logger.error(f"Delete failed for {reservation_id}: {e.message}")
            return ActionResult(success=False, error=e.message)

        self.cache.remove([reservation_id])
        self.bus.publish()
        logger.info(f"Reservation {reservation_id} deleted")
        return ActionResult(success=True)

    async def delete_many(self, reservation_ids: Iterable[str]) -> ActionResult:
        """Hard delete a selection with one store call and one broadcast."""
        ids = list(dict.fromkeys(reservation_ids))
        if not ids:
            return ActionResult(success=True)

        try:
            await self.store.remove_many(ids, origin=self.origin)
        except ReservationStoreError as e:
            logger.error(f"Bulk delete of {len(ids)} reservation(s) failed: {e.message}")
            return ActionResult(success=False, error=e.message)

        self.cache.remove(ids)
        self.bus.publish()
        logger.info(f"Deleted {len(ids)} reservation(s)")
        return ActionResult(success=True)
