"""Domain enums for the pet hotel reservation service."""

from enum import Enum


class ServiceType(str, Enum):
    """Bookable services, declared in display rank order."""

    HOTEL = "hotel"
    GROOMING = "grooming"
    DAYCARE = "daycare"

    @property
    def rank(self) -> int:
        return list(ServiceType).index(self)

    @property
    def label(self) -> str:
        return SERVICE_LABELS[self]


class ReservationStatus(str, Enum):
    """Reservation status enumeration.

    DELETED is a client-side value meaning "no longer present" after a hard
    delete. It is never written to the store.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DELETED = "deleted"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


class ChangeEventType(str, Enum):
    """Realtime change event types delivered by the store."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


SERVICE_LABELS = {
    ServiceType.HOTEL: "호텔",
    ServiceType.GROOMING: "미용",
    ServiceType.DAYCARE: "데이케어",
}

STATUS_LABELS = {
    ReservationStatus.PENDING: "대기",
    ReservationStatus.CONFIRMED: "확정",
    ReservationStatus.COMPLETED: "완료",
    ReservationStatus.CANCELLED: "취소",
    ReservationStatus.DELETED: "삭제됨",
}

PERSISTED_STATUSES = frozenset({
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.COMPLETED,
    ReservationStatus.CANCELLED,
})

# Statuses that take a reservation off calendars and the today view
HIDDEN_STATUSES = frozenset({
    ReservationStatus.CANCELLED,
    ReservationStatus.DELETED,
})

# Statuses that hold a slot for advisory availability counts
ACTIVE_STATUSES = frozenset({
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
})

# Display placeholder for a reservation without a time
UNDETERMINED_TIME = "미정"
