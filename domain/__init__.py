"""Domain layer for the pet hotel reservation service."""

from .enums import (
    ServiceType,
    ReservationStatus,
    ChangeEventType,
    SERVICE_LABELS,
    STATUS_LABELS,
    PERSISTED_STATUSES,
    HIDDEN_STATUSES,
    ACTIVE_STATUSES,
    UNDETERMINED_TIME,
)
from .models import (
    ReservationBase,
    ReservationCreate,
    ReservationPatch,
    ReservationRecord,
    DisplayReservation,
    ChangeEvent,
    RealtimeUpdate,
    StatusChangeRequest,
    BulkDeleteRequest,
)

__all__ = [
    # Enums
    "ServiceType",
    "ReservationStatus",
    "ChangeEventType",
    "SERVICE_LABELS",
    "STATUS_LABELS",
    "PERSISTED_STATUSES",
    "HIDDEN_STATUSES",
    "ACTIVE_STATUSES",
    "UNDETERMINED_TIME",
    # Models
    "ReservationBase",
    "ReservationCreate",
    "ReservationPatch",
    "ReservationRecord",
    "DisplayReservation",
    "ChangeEvent",
    "RealtimeUpdate",
    "StatusChangeRequest",
    "BulkDeleteRequest",
]
