"""
Local mirror cache of reservations for calendar views.

Reservations are kept twice in the legacy display format: once in the global
``allReservations`` collection and once in the collection of their service.
Both copies are keyed by ``id``. The mirror is disposable: the store stays
authoritative, so every durable-store failure is logged and swallowed and
callers never see an exception from here.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from domain.enums import HIDDEN_STATUSES, ReservationStatus, ServiceType
from domain.models import DisplayReservation


logger = logging.getLogger(__name__)

ALL_RESERVATIONS_KEY = "allReservations"

SERVICE_KEYS = {
    ServiceType.HOTEL: "hotelReservations",
    ServiceType.GROOMING: "groomingReservations",
    ServiceType.DAYCARE: "daycareReservations",
}

CACHE_KEYS = (ALL_RESERVATIONS_KEY, *SERVICE_KEYS.values())


class JsonFileStore:
    """Durable key-value store keeping one JSON document per key.

    Writes go through a temp file and ``os.replace`` so readers never see a
    half-written document. The store remembers the file versions it wrote
    itself so a watcher can tell them apart from writes by other processes.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self._own_versions: Dict[str, int] = {}

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def has(self, key: str) -> bool:
        return self._path(key).exists()

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        version = self.version(key)
        if version is not None:
            self._own_versions[key] = version

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        self._own_versions.pop(key, None)

    def version(self, key: str) -> Optional[int]:
        try:
            return self._path(key).stat().st_mtime_ns
        except FileNotFoundError:
            return None

    def is_own_version(self, key: str, version: Optional[int]) -> bool:
        return version is not None and self._own_versions.get(key) == version


class MirrorCache:
    """Write-through mirror of reservation display records."""

    def __init__(self, store: JsonFileStore):
        self.store = store

    # ------------------------------------------------------------------
    # Durable store access
    # ------------------------------------------------------------------
    def _load(self, key: str) -> List[Dict[str, Any]]:
        raw = self.store.get(key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed cache content under '{key}', treating as empty: {e}")
            return []
        if not isinstance(entries, list):
            logger.warning(f"Cache content under '{key}' is not a list, treating as empty")
            return []
        return [entry for entry in entries if isinstance(entry, dict)]

    def _save(self, key: str, entries: List[Dict[str, Any]]) -> None:
        self.store.set(key, json.dumps(entries, ensure_ascii=False))

    @staticmethod
    def _parse(entries: List[Dict[str, Any]], key: str) -> List[DisplayReservation]:
        records = []
        for entry in entries:
            try:
                records.append(DisplayReservation.model_validate(entry))
            except ValueError as e:
                logger.warning(f"Skipping unreadable cache entry under '{key}': {e}")
        return records

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    def initialize(self) -> None:
        """Create every missing key as an empty collection."""
        try:
            for key in CACHE_KEYS:
                if not self.store.has(key):
                    self._save(key, [])
        except Exception as e:
            logger.warning(f"Mirror cache unavailable, initialization skipped: {e}")

    def upsert(
        self,
        record: DisplayReservation,
        service_key: Optional[ServiceType] = None,
    ) -> None:
        """Write a record into the global and per-service collections.

        An entry with the same id is replaced in place, otherwise the record
        is appended. The record's own service decides the per-service
        collection, so a record never sits in two service collections.
        """
        if service_key is not None and ServiceType(service_key) != record.service:
            logger.warning(
                f"Upsert of {record.id} requested for '{ServiceType(service_key).value}' "
                f"but record belongs to '{record.service.value}'"
            )
        entry = record.to_cache_dict()

        try:
            for key in (ALL_RESERVATIONS_KEY, SERVICE_KEYS[record.service]):
                entries = self._load(key)
                updated = _replace_or_append(entries, entry)
                if updated != entries:
                    self._save(key, updated)

            for service, key in SERVICE_KEYS.items():
                if service == record.service:
                    continue
                entries = self._load(key)
                kept = [e for e in entries if e.get("id") != record.id]
                if len(kept) != len(entries):
                    self._save(key, kept)
        except Exception as e:
            logger.warning(f"Mirror cache update failed for {record.id}: {e}")

    def remove(self, ids: Iterable[str]) -> None:
        """Drop every entry whose id is in ``ids`` from all collections."""
        targets = set(ids)
        if not targets:
            return
        try:
            for key in CACHE_KEYS:
                entries = self._load(key)
                kept = [e for e in entries if e.get("id") not in targets]
                if len(kept) != len(entries):
                    self._save(key, kept)
        except Exception as e:
            logger.warning(f"Mirror cache removal failed for {sorted(targets)}: {e}")

    def reconcile(self, reservation_id: str, record: Optional[DisplayReservation]) -> None:
        """Remove the id everywhere, then re-insert only if the record stays visible."""
        self.remove([reservation_id])
        if record is not None and record.status not in HIDDEN_STATUSES:
            self.upsert(record)

    def read_all(self) -> List[DisplayReservation]:
        try:
            return self._parse(self._load(ALL_RESERVATIONS_KEY), ALL_RESERVATIONS_KEY)
        except Exception as e:
            logger.warning(f"Mirror cache read failed: {e}")
            return []

    def read_by_service(self, service: ServiceType) -> List[DisplayReservation]:
        key = SERVICE_KEYS[ServiceType(service)]
        try:
            return self._parse(self._load(key), key)
        except Exception as e:
            logger.warning(f"Mirror cache read failed for '{key}': {e}")
            return []

    def clear(self) -> None:
        """Reset every collection to empty. Realtime and reloads repopulate it."""
        try:
            for key in CACHE_KEYS:
                self._save(key, [])
        except Exception as e:
            logger.warning(f"Mirror cache clear failed: {e}")

    def stats(self, today_key: str) -> Dict[str, int]:
        """Counts over the global collection."""
        records = self.read_all()
        counts = {
            "total": len(records),
            "today": sum(1 for r in records if r.effective_date == today_key),
        }
        for service in ServiceType:
            counts[service.value] = sum(1 for r in records if r.service == service)
        for status in (
            ReservationStatus.PENDING,
            ReservationStatus.CONFIRMED,
            ReservationStatus.COMPLETED,
        ):
            counts[status.value] = sum(1 for r in records if r.status == status)
        return counts


def _replace_or_append(
    entries: List[Dict[str, Any]], entry: Dict[str, Any]
) -> List[Dict[str, Any]]:
    updated: List[Dict[str, Any]] = []
    placed = False
    for existing in entries:
        if existing.get("id") == entry["id"]:
            if not placed:
                updated.append(entry)
                placed = True
            continue
        updated.append(existing)
    if not placed:
        updated.append(entry)
    return updated
