"""
Mapping between the storage schema and the legacy display schema.

Storage records use column names (``pet_name``, ``reservation_date``,
``grooming_style``...). Calendars, the today view and the mirror cache use the
display schema (``petName``, ``date``, ``style``...). Both directions are pure
and never raise on well-formed records; fields the target schema does not
know are dropped.
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic.alias_generators import to_camel

from domain.enums import ReservationStatus, UNDETERMINED_TIME
from domain.models import DisplayReservation, ReservationRecord


# display field -> storage column; ``date`` is handled separately
DISPLAY_TO_STORAGE = {
    "pet_name": "pet_name",
    "owner_name": "owner_name",
    "service": "service",
    "time": "reservation_time",
    "status": "status",
    "phone": "phone",
    "room_type": "room_type",
    "check_in": "check_in",
    "check_out": "check_out",
    "style": "grooming_style",
    "special_notes": "special_notes",
}

# camelCase alias -> display field name
_ALIASES = {to_camel(name): name for name in DisplayReservation.model_fields}

ServerRecord = Union[ReservationRecord, Mapping[str, Any]]
DisplayInput = Union[DisplayReservation, Mapping[str, Any]]


def _read(source: ServerRecord, key: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def _date_key(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


def to_display(record: ServerRecord) -> DisplayReservation:
    """
    Convert a server record to the display schema.

    Args:
        record: ReservationRecord or raw row mapping

    Returns:
        DisplayReservation with a missing time replaced by the "미정" placeholder
    """
    reservation_date = _date_key(_read(record, "reservation_date"))
    check_in = _date_key(_read(record, "check_in"))

    return DisplayReservation(
        id=str(_read(record, "id") or ""),
        pet_name=_read(record, "pet_name") or "",
        owner_name=_read(record, "owner_name") or "",
        service=_read(record, "service"),
        date=reservation_date or check_in,
        time=_read(record, "reservation_time") or UNDETERMINED_TIME,
        status=_read(record, "status") or ReservationStatus.PENDING,
        phone=_read(record, "phone") or "",
        room_type=_read(record, "room_type"),
        check_in=check_in,
        check_out=_date_key(_read(record, "check_out")),
        style=_read(record, "grooming_style"),
        special_notes=_read(record, "special_notes"),
    )


def to_display_list(records: Iterable[ServerRecord]) -> List[DisplayReservation]:
    return [to_display(record) for record in records]


def _display_fields(display: DisplayInput) -> Dict[str, Any]:
    if isinstance(display, DisplayReservation):
        return display.model_dump(exclude_unset=True)

    fields: Dict[str, Any] = {}
    for key, value in display.items():
        name = _ALIASES.get(key, key)
        if name in DisplayReservation.model_fields:
            fields[name] = value
    return fields


def to_storage(display: DisplayInput) -> Dict[str, Any]:
    """
    Convert a (possibly partial) display record to a storage patch.

    Only supplied fields are emitted. ``id`` is not part of the patch, the
    "미정" placeholder becomes ``None`` and the client-only ``deleted``
    status is dropped.

    Args:
        display: DisplayReservation or mapping in camelCase or snake_case

    Returns:
        Dict keyed by storage column names
    """
    fields = _display_fields(display)
    patch: Dict[str, Any] = {}

    for name, column in DISPLAY_TO_STORAGE.items():
        if name in fields:
            patch[column] = _plain(fields[name])

    if "date" in fields or "check_in" in fields:
        patch["reservation_date"] = fields.get("date") or fields.get("check_in")

    if patch.get("reservation_time") == UNDETERMINED_TIME:
        patch["reservation_time"] = None

    if patch.get("status") == ReservationStatus.DELETED.value:
        del patch["status"]

    return patch
