"""Collection-level edits: every change returns a new list of trips.

Each operation takes the caller's current trips, applies one edit and hands
back a new list, leaving the input untouched. Edits addressed to an id that is
no longer present are silent no-ops. Drafts may be passed as models or plain
mappings; invalid drafts raise ``pydantic.ValidationError`` before anything
changes.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from trail_planner.engine import ordering
from trail_planner.engine.coerce import new_id, utc_now_iso
from trail_planner.engine.invariants import enforce_single_booked
from trail_planner.engine.normalizer import (
    normalize_campsite_status,
    normalize_invitee_status,
    normalize_trips,
)
from trail_planner.log import get_logger
from trail_planner.schemas import (
    Campsite,
    CampsiteDraft,
    Invitee,
    InviteeDraft,
    ItineraryDraft,
    ItineraryItem,
    Trip,
    TripDraft,
)

logger = get_logger(__name__)

D = TypeVar("D", bound=BaseModel)
TripEdit = Callable[[Trip], Optional[Trip]]


def _draft(draft: Any, model: Type[D]) -> D:
    if isinstance(draft, model):
        return draft
    if isinstance(draft, BaseModel):
        draft = draft.model_dump()
    return model.model_validate(draft)


def find_trip(trips: List[Trip], trip_id: str) -> Trip | None:
    return next((trip for trip in trips if trip.id == trip_id), None)


def _edit_trip(trips: List[Trip], trip_id: str, edit: TripEdit) -> List[Trip]:
    """Apply ``edit`` to one trip and stamp ``updated_at``.

    ``edit`` returns ``None`` to signal a lookup miss inside the trip, in which
    case the original list comes back unchanged.
    """
    trips = list(trips)
    for index, trip in enumerate(trips):
        if trip.id != trip_id:
            continue
        edited = edit(trip)
        if edited is None:
            return trips
        trips[index] = edited.model_copy(update={"updated_at": utc_now_iso()})
        return trips
    logger.debug("Trip %s not found; edit skipped", trip_id)
    return trips


def _replace_child(children: List[Any], child_id: str, update: Callable[[Any], Any]) -> List[Any] | None:
    for index, child in enumerate(children):
        if child.id == child_id:
            updated = list(children)
            updated[index] = update(child)
            return updated
    logger.debug("Entity %s not found; edit skipped", child_id)
    return None


def _remove_child(children: List[Any], child_id: str) -> List[Any] | None:
    remaining = [child for child in children if child.id != child_id]
    if len(remaining) == len(children):
        logger.debug("Entity %s not found; delete skipped", child_id)
        return None
    return remaining


# ------- Trips -------
def create_trip(trips: List[Trip], draft: TripDraft | Any) -> Tuple[List[Trip], Trip]:
    """Validate ``draft`` and put the new trip at the front of the collection."""
    fields = _draft(draft, TripDraft)
    now = utc_now_iso()
    trip = Trip(id=new_id(), created_at=now, updated_at=now, **fields.model_dump())
    logger.info("Created trip %s (%s)", trip.id, trip.name)
    return [trip, *trips], trip


def update_trip(trips: List[Trip], trip_id: str, draft: TripDraft | Any) -> List[Trip]:
    fields = _draft(draft, TripDraft)
    return _edit_trip(trips, trip_id, lambda trip: trip.model_copy(update=fields.model_dump()))


def delete_trip(trips: List[Trip], trip_id: str) -> List[Trip]:
    return [trip for trip in trips if trip.id != trip_id]


def replace_trips(records: Any) -> List[Trip]:
    """Swap in a whole new collection of trip-like records, normalized."""
    return normalize_trips(records)


# ------- Invitees -------
def add_invitee(trips: List[Trip], trip_id: str, draft: InviteeDraft | Any) -> List[Trip]:
    fields = _draft(draft, InviteeDraft)
    invitee = Invitee(id=new_id(), created_at=utc_now_iso(), **fields.model_dump())
    return _edit_trip(trips, trip_id, lambda trip: trip.model_copy(update={"invitees": [*trip.invitees, invitee]}))


def update_invitee(trips: List[Trip], trip_id: str, invitee_id: str, draft: InviteeDraft | Any) -> List[Trip]:
    fields = _draft(draft, InviteeDraft).model_dump()

    def edit(trip: Trip) -> Trip | None:
        invitees = _replace_child(trip.invitees, invitee_id, lambda invitee: invitee.model_copy(update=fields))
        return None if invitees is None else trip.model_copy(update={"invitees": invitees})

    return _edit_trip(trips, trip_id, edit)


def set_invitee_status(trips: List[Trip], trip_id: str, invitee_id: str, status: Any) -> List[Trip]:
    status = normalize_invitee_status(status)

    def edit(trip: Trip) -> Trip | None:
        invitees = _replace_child(
            trip.invitees, invitee_id, lambda invitee: invitee.model_copy(update={"status": status})
        )
        return None if invitees is None else trip.model_copy(update={"invitees": invitees})

    return _edit_trip(trips, trip_id, edit)


def delete_invitee(trips: List[Trip], trip_id: str, invitee_id: str) -> List[Trip]:
    def edit(trip: Trip) -> Trip | None:
        invitees = _remove_child(trip.invitees, invitee_id)
        return None if invitees is None else trip.model_copy(update={"invitees": invitees})

    return _edit_trip(trips, trip_id, edit)


# ------- Campsites -------
def _with_campsites(trip: Trip, campsites: List[Campsite], touched: Campsite) -> Trip:
    if touched.status == "booked":
        campsites = enforce_single_booked(campsites, touched.id)
    return trip.model_copy(update={"campsites": campsites})


def add_campsite(trips: List[Trip], trip_id: str, draft: CampsiteDraft | Any) -> List[Trip]:
    fields = _draft(draft, CampsiteDraft)
    site = Campsite(id=new_id(), upvotes=0, downvotes=0, created_at=utc_now_iso(), **fields.model_dump())
    return _edit_trip(trips, trip_id, lambda trip: _with_campsites(trip, [*trip.campsites, site], site))


def _change_campsite(trips: List[Trip], trip_id: str, campsite_id: str, update: dict) -> List[Trip]:
    def edit(trip: Trip) -> Trip | None:
        campsites = _replace_child(trip.campsites, campsite_id, lambda site: site.model_copy(update=update))
        if campsites is None:
            return None
        touched = next(site for site in campsites if site.id == campsite_id)
        return _with_campsites(trip, campsites, touched)

    return _edit_trip(trips, trip_id, edit)


def update_campsite(trips: List[Trip], trip_id: str, campsite_id: str, draft: CampsiteDraft | Any) -> List[Trip]:
    fields = _draft(draft, CampsiteDraft)
    return _change_campsite(trips, trip_id, campsite_id, fields.model_dump())


def set_campsite_status(trips: List[Trip], trip_id: str, campsite_id: str, status: Any) -> List[Trip]:
    return _change_campsite(trips, trip_id, campsite_id, {"status": normalize_campsite_status(status)})


def vote_campsite(trips: List[Trip], trip_id: str, campsite_id: str, direction: str) -> List[Trip]:
    field = {"up": "upvotes", "down": "downvotes"}.get(direction)
    if field is None:
        return list(trips)

    def edit(trip: Trip) -> Trip | None:
        campsites = _replace_child(
            trip.campsites, campsite_id, lambda site: site.model_copy(update={field: getattr(site, field) + 1})
        )
        return None if campsites is None else trip.model_copy(update={"campsites": campsites})

    return _edit_trip(trips, trip_id, edit)


def delete_campsite(trips: List[Trip], trip_id: str, campsite_id: str) -> List[Trip]:
    def edit(trip: Trip) -> Trip | None:
        campsites = _remove_child(trip.campsites, campsite_id)
        return None if campsites is None else trip.model_copy(update={"campsites": campsites})

    return _edit_trip(trips, trip_id, edit)


# ------- Itinerary -------
def next_sort_order(items: List[ItineraryItem], day_number: int) -> int:
    return max((item.sort_order for item in items if item.day_number == day_number), default=0) + 1


def add_itinerary_item(trips: List[Trip], trip_id: str, draft: ItineraryDraft | Any) -> List[Trip]:
    fields = _draft(draft, ItineraryDraft)
    created_at = utc_now_iso()
    item_id = new_id()

    def edit(trip: Trip) -> Trip:
        item = ItineraryItem(
            id=item_id,
            is_complete=False,
            sort_order=next_sort_order(trip.itinerary, fields.day_number),
            created_at=created_at,
            **fields.model_dump(),
        )
        return trip.model_copy(update={"itinerary": [*trip.itinerary, item]})

    return _edit_trip(trips, trip_id, edit)


def _change_item(trips: List[Trip], trip_id: str, item_id: str, update: dict) -> List[Trip]:
    def edit(trip: Trip) -> Trip | None:
        itinerary = _replace_child(trip.itinerary, item_id, lambda item: item.model_copy(update=update))
        return None if itinerary is None else trip.model_copy(update={"itinerary": itinerary})

    return _edit_trip(trips, trip_id, edit)


def update_itinerary_item(trips: List[Trip], trip_id: str, item_id: str, draft: ItineraryDraft | Any) -> List[Trip]:
    fields = _draft(draft, ItineraryDraft)
    return _change_item(trips, trip_id, item_id, fields.model_dump())


def set_itinerary_complete(trips: List[Trip], trip_id: str, item_id: str, is_complete: bool) -> List[Trip]:
    return _change_item(trips, trip_id, item_id, {"is_complete": bool(is_complete)})


def delete_itinerary_item(trips: List[Trip], trip_id: str, item_id: str) -> List[Trip]:
    def edit(trip: Trip) -> Trip | None:
        itinerary = _remove_child(trip.itinerary, item_id)
        return None if itinerary is None else trip.model_copy(update={"itinerary": itinerary})

    return _edit_trip(trips, trip_id, edit)


def move_itinerary_item(trips: List[Trip], trip_id: str, item_id: str, direction: str) -> List[Trip]:
    def edit(trip: Trip) -> Trip | None:
        itinerary = ordering.move_itinerary_item(trip.itinerary, item_id, direction)
        if itinerary == trip.itinerary:
            return None
        return trip.model_copy(update={"itinerary": itinerary})

    return _edit_trip(trips, trip_id, edit)
