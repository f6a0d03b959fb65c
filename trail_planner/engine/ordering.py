"""Deterministic ordering for trip lists and itineraries."""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Tuple

from trail_planner.engine.coerce import parse_iso_date
from trail_planner.schemas import ItineraryItem, Trip

# Trip list views and the trip statuses each one shows.
TRIP_VIEWS: Dict[str, Tuple[str, ...]] = {
    "planning": ("idea", "planning", "in_progress"),
    "booked": ("booked",),
    "completed": ("completed",),
}


def _start_key(trip: Trip) -> Tuple[int, date]:
    parsed = parse_iso_date(trip.start_date)
    if parsed is None:
        return (1, date.max)
    return (0, parsed.date())


def sort_trips_by_date(trips: Iterable[Trip]) -> List[Trip]:
    """Ascending by start date; undated trips keep their relative order at the end."""
    return sorted(trips, key=_start_key)


def sort_itinerary(items: Iterable[ItineraryItem]) -> List[ItineraryItem]:
    return sorted(items, key=lambda item: (item.day_number, item.sort_order))


def filter_trips(trips: Iterable[Trip], view: str = "all") -> List[Trip]:
    statuses = TRIP_VIEWS.get(view)
    if statuses is None:
        return list(trips)
    return [trip for trip in trips if trip.status in statuses]


def move_itinerary_item(items: Iterable[ItineraryItem], item_id: str, direction: str) -> List[ItineraryItem]:
    """Swap ``item_id``'s sortOrder with its neighbour on the same day.

    Positions in the returned list match the input; only the two sortOrder
    values change. Unknown items and moves past the first/last slot are no-ops.
    """
    items = list(items)
    if direction not in ("up", "down"):
        return items
    item = next((entry for entry in items if entry.id == item_id), None)
    if item is None:
        return items

    same_day = sorted(
        (entry for entry in items if entry.day_number == item.day_number),
        key=lambda entry: entry.sort_order,
    )
    index = next(i for i, entry in enumerate(same_day) if entry.id == item_id)
    swap_index = index - 1 if direction == "up" else index + 1
    if swap_index < 0 or swap_index >= len(same_day):
        return items

    other = same_day[swap_index]
    swapped = {
        item.id: item.model_copy(update={"sort_order": other.sort_order}),
        other.id: other.model_copy(update={"sort_order": item.sort_order}),
    }
    return [swapped.get(entry.id, entry) for entry in items]
