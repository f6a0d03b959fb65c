"""Coerce raw or legacy-shaped records into well-formed trip entities."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List

from pydantic import BaseModel

from trail_planner.engine.coerce import (
    clamp_count,
    clamp_int,
    coerce_bool,
    coerce_choice,
    coerce_text,
    format_status,
    new_id,
    utc_now_iso,
)
from trail_planner.log import get_logger
from trail_planner.schemas import (
    CAMPSITE_STATUSES,
    INVITEE_STATUSES,
    TRIP_STATUSES,
    Campsite,
    Invitee,
    ItineraryItem,
    Trip,
)

logger = get_logger(__name__)

# Legacy aggregate invitee shape: count key -> status, in migration order.
_LEGACY_INVITEE_COUNTS = (
    ("acceptedCount", "accepted"),
    ("pendingCount", "pending"),
    ("declinedCount", "declined"),
)


def normalize_trip_status(status: Any) -> str:
    return coerce_choice(status, TRIP_STATUSES, "planning")


def normalize_campsite_status(status: Any) -> str:
    return coerce_choice(status, CAMPSITE_STATUSES, "unsearched")


def normalize_invitee_status(status: Any) -> str:
    return coerce_choice(status, INVITEE_STATUSES, "pending")


def _as_raw(payload: Any) -> Dict[str, Any]:
    """Accept a model, a mapping or ``None``; anything else is treated as empty."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(by_alias=True)
    if isinstance(payload, Mapping):
        return dict(payload)
    return {}


def _pick(raw: Dict[str, Any], camel: str, snake: str) -> Any:
    value = raw.get(camel)
    return raw.get(snake) if value is None else value


def normalize_invitee(payload: Any = None) -> Invitee:
    raw = _as_raw(payload)
    return Invitee(
        id=coerce_text(raw.get("id")) or new_id(),
        name=coerce_text(raw.get("name"), "Unnamed invitee"),
        status=normalize_invitee_status(raw.get("status")),
        notes=coerce_text(raw.get("notes")),
        created_at=coerce_text(_pick(raw, "createdAt", "created_at")) or utc_now_iso(),
    )


def normalize_campsite(payload: Any = None) -> Campsite:
    raw = _as_raw(payload)
    return Campsite(
        id=coerce_text(raw.get("id")) or new_id(),
        name=coerce_text(raw.get("name"), "Untitled campsite"),
        source=coerce_text(raw.get("source")),
        status=normalize_campsite_status(raw.get("status")),
        upvotes=clamp_count(raw.get("upvotes")),
        downvotes=clamp_count(raw.get("downvotes")),
        notes=coerce_text(raw.get("notes")),
        created_at=coerce_text(_pick(raw, "createdAt", "created_at")) or utc_now_iso(),
    )


def normalize_itinerary_item(payload: Any = None) -> ItineraryItem:
    raw = _as_raw(payload)
    return ItineraryItem(
        id=coerce_text(raw.get("id")) or new_id(),
        day_number=clamp_int(_pick(raw, "dayNumber", "day_number"), 1),
        title=coerce_text(raw.get("title"), "Untitled item"),
        details=coerce_text(raw.get("details")),
        is_complete=coerce_bool(_pick(raw, "isComplete", "is_complete")),
        sort_order=clamp_int(_pick(raw, "sortOrder", "sort_order"), 1),
        created_at=coerce_text(_pick(raw, "createdAt", "created_at")) or utc_now_iso(),
    )


def migrate_invitee_summary(summary: Mapping[str, Any]) -> List[Invitee]:
    """Expand ``{acceptedCount, pendingCount, declinedCount}`` into placeholder invitees.

    The original names are not recoverable, so each placeholder is named after
    its status and ordinal (``"Accepted invitee 1"``).
    """
    migrated: List[Invitee] = []
    for key, status in _LEGACY_INVITEE_COUNTS:
        count = clamp_count(summary.get(key))
        for index in range(count):
            migrated.append(
                normalize_invitee({"name": f"{format_status(status)} invitee {index + 1}", "status": status})
            )
    if migrated:
        logger.info("Migrated legacy invitee counts into %d placeholder invitees", len(migrated))
    return migrated


def _normalize_invitees(value: Any) -> List[Invitee]:
    if isinstance(value, (list, tuple)):
        return [normalize_invitee(item) for item in value]
    if isinstance(value, Mapping):
        return migrate_invitee_summary(value)
    return []


def _normalize_list(value: Any, normalize) -> list:
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    return []


def normalize_trip(payload: Any = None) -> Trip:
    raw = _as_raw(payload)
    return Trip(
        id=coerce_text(raw.get("id")) or new_id(),
        name=coerce_text(raw.get("name"), "Untitled Trip"),
        location=coerce_text(raw.get("location")),
        start_date=coerce_text(_pick(raw, "startDate", "start_date")),
        end_date=coerce_text(_pick(raw, "endDate", "end_date")),
        status=normalize_trip_status(raw.get("status")),
        type=coerce_text(raw.get("type"), "Camping"),
        notes=coerce_text(raw.get("notes")),
        invitees=_normalize_invitees(raw.get("invitees")),
        campsites=_normalize_list(raw.get("campsites"), normalize_campsite),
        itinerary=_normalize_list(raw.get("itinerary"), normalize_itinerary_item),
        created_at=coerce_text(_pick(raw, "createdAt", "created_at")) or utc_now_iso(),
        updated_at=coerce_text(_pick(raw, "updatedAt", "updated_at")) or utc_now_iso(),
    )


def normalize_trips(records: Any) -> List[Trip]:
    """Normalize a list of trip-like records, skipping entries that are not objects."""
    if not isinstance(records, (list, tuple)):
        return []
    trips: List[Trip] = []
    for index, record in enumerate(records):
        if not isinstance(record, (Mapping, BaseModel)):
            logger.warning("Skipping trip record %d: expected an object, got %s", index, type(record).__name__)
            continue
        trips.append(normalize_trip(record))
    return trips
