"""Domain models using Pydantic v2 for the pet hotel reservation service."""

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import ChangeEventType, ReservationStatus, ServiceType, UNDETERMINED_TIME


class ReservationBase(BaseModel):
    """Storage-schema fields shared by create payloads and records."""

    pet_name: str = Field(..., min_length=1, max_length=100, description="Pet name")
    owner_name: str = Field(..., min_length=1, max_length=100, description="Owner name")
    service: ServiceType
    phone: str = Field(..., min_length=1, max_length=30, description="Contact phone, used for SMS")
    email: Optional[str] = Field(None, max_length=255)
    reservation_date: Optional[dt.date] = Field(None, description="Visit date (hotel: check-in)")
    reservation_time: Optional[str] = Field(None, max_length=8, description="HH:MM")
    room_type: Optional[str] = Field(None, max_length=50)
    check_in: Optional[dt.date] = None
    check_out: Optional[dt.date] = None
    grooming_style: Optional[str] = Field(None, max_length=100)
    special_notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        from_attributes=True,
    )


class ReservationCreate(ReservationBase):
    """Model for creating a new reservation."""

    status: ReservationStatus = ReservationStatus.PENDING

    @model_validator(mode="after")
    def require_schedule(self) -> "ReservationCreate":
        """Hotel stays fall back to check-in as the reservation date."""
        if self.reservation_date is None:
            self.reservation_date = self.check_in
        if self.reservation_date is None:
            raise ValueError("reservation_date or check_in is required")
        return self


class ReservationPatch(BaseModel):
    """Partial update in storage naming. Only set fields are written."""

    pet_name: Optional[str] = Field(None, min_length=1, max_length=100)
    owner_name: Optional[str] = Field(None, min_length=1, max_length=100)
    service: Optional[ServiceType] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    reservation_date: Optional[dt.date] = None
    reservation_time: Optional[str] = Field(None, max_length=8)
    status: Optional[ReservationStatus] = None
    room_type: Optional[str] = Field(None, max_length=50)
    check_in: Optional[dt.date] = None
    check_out: Optional[dt.date] = None
    grooming_style: Optional[str] = Field(None, max_length=100)
    special_notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ReservationRecord(ReservationBase):
    """Server-authoritative reservation record."""

    id: str
    status: ReservationStatus
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class DisplayReservation(BaseModel):
    """Reservation in the legacy display schema used by calendars and the mirror cache.

    Serialized with camelCase names (``petName``, ``checkIn``...) so the
    cached JSON keeps the legacy shape.
    """

    id: str
    pet_name: str = ""
    owner_name: str = ""
    service: ServiceType
    date: Optional[str] = None
    time: str = UNDETERMINED_TIME
    status: ReservationStatus = ReservationStatus.PENDING
    phone: str = ""
    room_type: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    style: Optional[str] = None
    special_notes: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @property
    def has_time(self) -> bool:
        return bool(self.time) and self.time != UNDETERMINED_TIME

    @property
    def effective_date(self) -> Optional[str]:
        return self.date or self.check_in

    def to_cache_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChangeEvent(BaseModel):
    """Realtime change delivered by the reservation store."""

    event_type: ChangeEventType
    new: Optional[ReservationRecord] = None
    old: Optional[Dict[str, Any]] = None
    origin: Optional[str] = Field(None, description="Client that made the change, if it said so")

    @property
    def reservation_id(self) -> Optional[str]:
        if self.new is not None:
            return self.new.id
        if self.old:
            return self.old.get("id")
        return None


class RealtimeUpdate(BaseModel):
    """Normalized realtime update handed to view callbacks."""

    type: ChangeEventType
    data: Optional[DisplayReservation] = None
    id: Optional[str] = None

    @property
    def reservation_id(self) -> Optional[str]:
        return self.data.id if self.data is not None else self.id


class StatusChangeRequest(BaseModel):
    """Admin request to move a reservation to a new status."""

    status: ReservationStatus


class BulkDeleteRequest(BaseModel):
    """Admin multi-select delete."""

    ids: List[str] = Field(..., min_length=1)
