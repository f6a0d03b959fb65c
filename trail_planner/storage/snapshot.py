"""Versioned snapshot persistence for the trip collection."""
from __future__ import annotations

import json
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from trail_planner.config import DEFAULT_STORAGE_KEY
from trail_planner.engine.normalizer import normalize_trips
from trail_planner.log import get_logger
from trail_planner.schemas import SCHEMA_VERSION, LoadResult, Trip
from trail_planner.storage.backends import KeyValueBackend

logger = get_logger(__name__)

LEGACY_KEYS: Sequence[str] = ("trail_planner_trips_v2", "trail_planner_trips_v1")
CORRUPT_NOTE = "Saved data looked corrupted. Starting with a clean state."


class TripStore(Protocol):
    def load(self) -> LoadResult: ...

    def save(self, trips: Iterable[Trip]) -> None: ...


def _is_schema_version(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return float(value).is_integer()


def _is_snapshot(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("trips"), list)
        and _is_schema_version(value.get("schemaVersion"))
    )


def _legacy_records(value: Any) -> Optional[list]:
    """Trip records from a pre-versioning shape, or ``None`` if unrecognised."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and isinstance(value.get("trips"), list) and "schemaVersion" not in value:
        return value["trips"]
    return None


class SnapshotStore:
    """Load/save ``{schemaVersion, trips}`` through a key-value backend.

    Every load runs the records through the normalizer. Legacy shapes (a bare
    list of trips, or a ``{trips}`` wrapper with no schemaVersion) found under
    the primary key or one of the legacy keys are migrated and immediately
    re-saved under the primary key.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        legacy_keys: Sequence[str] = LEGACY_KEYS,
    ):
        self.backend = backend
        self.key = key
        self.legacy_keys = tuple(legacy_keys)

    def save(self, trips: Iterable[Trip]) -> None:
        payload = {
            "schemaVersion": SCHEMA_VERSION,
            "trips": [trip.model_dump(mode="json", by_alias=True) for trip in trips],
        }
        self.backend.set_item(self.key, json.dumps(payload))
        logger.debug("Saved snapshot with %d trip(s) under %s", len(payload["trips"]), self.key)

    def load(self) -> LoadResult:
        try:
            return self._load()
        except (ValueError, OSError, RecursionError):
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors;
            # deeply nested JSON raises RecursionError.
            logger.warning("Stored trip data under %s could not be read", self.key, exc_info=True)
            return LoadResult(trips=[], migration_note=CORRUPT_NOTE)

    def _read(self, key: str) -> Any:
        raw = self.backend.get_item(key)
        if not raw:
            return None
        return json.loads(raw)

    def _load(self) -> LoadResult:
        current = self._read(self.key)
        if _is_snapshot(current):
            version = int(current["schemaVersion"])
            if version > SCHEMA_VERSION:
                logger.warning(
                    "Snapshot schemaVersion %d is newer than supported %d; loading what we can",
                    version,
                    SCHEMA_VERSION,
                )
            trips = normalize_trips(current["trips"])
            logger.info("Loaded %d trip(s) from %s", len(trips), self.key)
            return LoadResult(trips=trips)

        for key in (self.key, *self.legacy_keys):
            parsed = current if key == self.key else self._read(key)
            records = _legacy_records(parsed)
            if records is None:
                continue
            trips = self._migrate(key, records)
            return LoadResult(
                trips=trips,
                migration_note=f"Migrated {len(trips)} trip(s) from a legacy snapshot.",
            )

        if current is not None:
            logger.warning("Stored trip data under %s has an unrecognised shape", self.key)
            return LoadResult(trips=[], migration_note=CORRUPT_NOTE)
        logger.info("No stored trips found under %s", self.key)
        return LoadResult(trips=[])

    def _migrate(self, key: str, records: list) -> List[Trip]:
        trips = normalize_trips(records)
        logger.info("Migrating %d trip(s) from legacy snapshot under %s", len(trips), key)
        try:
            self.save(trips)
        except OSError:
            # Migrated trips are returned even when the re-save fails.
            logger.warning("Could not re-save migrated snapshot under %s", self.key, exc_info=True)
        return trips
