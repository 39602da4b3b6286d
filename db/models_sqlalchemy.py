"""SQLAlchemy models for the pet hotel reservation tables."""

from datetime import date
from typing import Optional
from uuid import uuid4

from sqlalchemy import Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from domain.enums import ReservationStatus


def _new_id() -> str:
    return str(uuid4())


class Reservation(Base, TimestampMixin):
    """Reservation table model (storage schema)."""

    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_new_id,
    )

    pet_name: Mapped[str] = mapped_column(String(100), nullable=False)

    owner_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    service: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    reservation_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    reservation_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReservationStatus.PENDING.value,
        index=True,
    )

    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    room_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    check_in: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    check_out: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    grooming_style: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    special_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_reservations_date_service", "reservation_date", "service"),
        Index("ix_reservations_status_date", "status", "reservation_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, pet_name='{self.pet_name}', "
            f"service='{self.service}', date={self.reservation_date}, "
            f"status='{self.status}')>"
        )
