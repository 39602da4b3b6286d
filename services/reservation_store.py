"""
Reservation store gateway.

CRUD over the reservations table plus a realtime subscription that delivers
INSERT/UPDATE/DELETE change events for every committed mutation, whichever
client made it. Writers may pass an ``origin`` tag that is copied onto the
events, so a client can recognise the echo of its own changes.
"""
import inspect
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import (
    Any,
    AsyncGenerator,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Union,
)

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.subscriptions import Subscription
from core.utils_datetime import to_date_key
from db.models_sqlalchemy import Reservation
from domain.enums import ChangeEventType, PERSISTED_STATUSES
from domain.models import (
    ChangeEvent,
    ReservationCreate,
    ReservationPatch,
    ReservationRecord,
)


logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class ReservationStoreError(Exception):
    """Store operation failed. ``message`` is human-readable."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ReservationNotFoundError(ReservationStoreError):
    """Raised when a reservation is not found."""


class ReservationStore(Protocol):
    """Contract the rest of the service relies on."""

    async def get_all(self) -> List[ReservationRecord]: ...

    async def get_by_date(self, date_key: str) -> List[ReservationRecord]: ...

    async def get(self, reservation_id: str) -> ReservationRecord: ...

    async def create(
        self, data: ReservationCreate, origin: Optional[str] = None
    ) -> ReservationRecord: ...

    async def update(
        self,
        reservation_id: str,
        patch: Union[ReservationPatch, Mapping[str, Any]],
        origin: Optional[str] = None,
    ) -> ReservationRecord: ...

    async def remove(self, reservation_id: str, origin: Optional[str] = None) -> None: ...

    async def remove_many(
        self, reservation_ids: Iterable[str], origin: Optional[str] = None
    ) -> None: ...

    def subscribe(self, callback: ChangeCallback) -> Subscription: ...


class RealtimeChannel:
    """Fans change events out to subscribers in delivery order.

    A failing subscriber is logged and does not block the others.
    """

    def __init__(self):
        self._callbacks: List[ChangeCallback] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        self._callbacks.append(callback)

        def release() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return Subscription(release)

    async def deliver(self, event: ChangeEvent) -> None:
        for callback in list(self._callbacks):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Realtime subscriber failed for {event.event_type.value} "
                    f"{event.reservation_id}: {e}",
                    exc_info=True,
                )


class SqlAlchemyReservationStore:
    """Reservation store backed by SQLAlchemy async sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        channel: Optional[RealtimeChannel] = None,
    ):
        self._session_factory = session_factory
        self.channel = channel or RealtimeChannel()

    @asynccontextmanager
    async def _transaction(self, action: str) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except ReservationStoreError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to {action}: {e}")
                raise ReservationStoreError(f"Failed to {action}: {e}") from e

    @staticmethod
    def _to_record(row: Reservation) -> ReservationRecord:
        return ReservationRecord.model_validate(row)

    @staticmethod
    def _column_values(values: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: getattr(value, "value", value)
            for key, value in values.items()
        }

    async def get_all(self) -> List[ReservationRecord]:
        async with self._transaction("load reservations") as session:
            result = await session.execute(
                select(Reservation).order_by(
                    Reservation.reservation_date, Reservation.reservation_time
                )
            )
            return [self._to_record(row) for row in result.scalars().all()]

    async def get_by_date(self, date_key: str) -> List[ReservationRecord]:
        try:
            day = date.fromisoformat(to_date_key(date_key) or "")
        except ValueError as e:
            raise ReservationStoreError(f"Invalid date: {date_key}") from e

        async with self._transaction(f"load reservations for {date_key}") as session:
            result = await session.execute(
                select(Reservation)
                .where(Reservation.reservation_date == day)
                .order_by(Reservation.reservation_time)
            )
            return [self._to_record(row) for row in result.scalars().all()]

    async def get(self, reservation_id: str) -> ReservationRecord:
        async with self._transaction(f"load reservation {reservation_id}") as session:
            row = await session.get(Reservation, reservation_id)
            if row is None:
                raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
            return self._to_record(row)

    async def create(
        self, data: ReservationCreate, origin: Optional[str] = None
    ) -> ReservationRecord:
        if data.status not in PERSISTED_STATUSES:
            raise ReservationStoreError(f"Status '{data.status.value}' cannot be stored")

        async with self._transaction("create reservation") as session:
            row = Reservation(**self._column_values(data.model_dump()))
            session.add(row)
            await session.flush()
            await session.refresh(row)
            record = self._to_record(row)

        logger.info(f"Created reservation {record.id} ({record.service.value})")
        await self.channel.deliver(
            ChangeEvent(event_type=ChangeEventType.INSERT, new=record, origin=origin)
        )
        return record

    async def update(
        self,
        reservation_id: str,
        patch: Union[ReservationPatch, Mapping[str, Any]],
        origin: Optional[str] = None,
    ) -> ReservationRecord:
        if not isinstance(patch, ReservationPatch):
            try:
                patch = ReservationPatch.model_validate(dict(patch))
            except ValidationError as e:
                raise ReservationStoreError(f"Invalid update for {reservation_id}: {e}") from e

        changes = patch.changes()
        status = changes.get("status")
        if status is not None and status not in PERSISTED_STATUSES:
            raise ReservationStoreError(f"Status '{status.value}' cannot be stored")

        async with self._transaction(f"update reservation {reservation_id}") as session:
            row = await session.get(Reservation, reservation_id)
            if row is None:
                raise ReservationNotFoundError(f"Reservation {reservation_id} not found")

            old = {"id": row.id, "status": row.status}
            for key, value in self._column_values(changes).items():
                setattr(row, key, value)
            await session.flush()
            await session.refresh(row)
            record = self._to_record(row)

        await self.channel.deliver(
            ChangeEvent(
                event_type=ChangeEventType.UPDATE, new=record, old=old, origin=origin
            )
        )
        return record

    async def remove(self, reservation_id: str, origin: Optional[str] = None) -> None:
        await self.remove_many([reservation_id], origin=origin)

    async def remove_many(
        self, reservation_ids: Iterable[str], origin: Optional[str] = None
    ) -> None:
        ids = list(dict.fromkeys(reservation_ids))
        if not ids:
            return

        async with self._transaction(f"delete {len(ids)} reservation(s)") as session:
            result = await session.execute(
                select(Reservation.id).where(Reservation.id.in_(ids))
            )
            existing = list(result.scalars().all())
            await session.execute(delete(Reservation).where(Reservation.id.in_(ids)))

        logger.info(f"Deleted {len(existing)} reservation(s)")
        for reservation_id in existing:
            await self.channel.deliver(
                ChangeEvent(
                    event_type=ChangeEventType.DELETE,
                    old={"id": reservation_id},
                    origin=origin,
                )
            )

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        return self.channel.subscribe(callback)
