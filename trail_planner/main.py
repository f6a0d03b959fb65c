from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from trail_planner.config import get_settings
from trail_planner.engine import editor
from trail_planner.engine.metrics import collection_stats, trip_overview
from trail_planner.engine.ordering import filter_trips, sort_trips_by_date
from trail_planner.log import get_logger
from trail_planner.schemas import (
    CampsiteDraft,
    CampsiteStatusChange,
    CollectionStats,
    CompletionChange,
    InviteeDraft,
    InviteeStatusChange,
    ItineraryDraft,
    MoveRequest,
    Trip,
    TripDraft,
    TripListResponse,
    TripOverview,
    TripView,
    VoteRequest,
)
from trail_planner.storage.backends import FileBackend
from trail_planner.storage.snapshot import SnapshotStore, TripStore

logger = get_logger(__name__)

app = FastAPI(title="Trail Planner API")

# Allow local development UIs to reach the API. Operators can scope this via
# TRAIL_PLANNER_ALLOWED_ORIGINS if they prefer something narrower.
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One edit at a time: load -> mutate -> save must not interleave.
_edit_lock = threading.Lock()

TripsEdit = Callable[[List[Trip]], List[Trip]]


def get_store() -> TripStore:
    settings = get_settings()
    return SnapshotStore(FileBackend(settings.data_dir), key=settings.storage_key)


def _commit(store: TripStore, edit: TripsEdit, trip_id: str | None = None) -> List[Trip]:
    """Load the collection, apply ``edit`` and persist the result."""
    with _edit_lock:
        trips = store.load().trips
        if trip_id is not None and editor.find_trip(trips, trip_id) is None:
            raise HTTPException(status_code=404, detail=f"Trip {trip_id} not found")
        try:
            updated = edit(trips)
        except ValidationError as exc:
            raise HTTPException(
                status_code=422, detail=exc.errors(include_url=False, include_context=False)
            ) from exc
        store.save(updated)
    return updated


def _commit_trip(store: TripStore, trip_id: str, edit: TripsEdit) -> TripOverview:
    updated = _commit(store, edit, trip_id)
    return trip_overview(editor.find_trip(updated, trip_id))


def _list_response(trips: List[Trip], view: str, note: str | None = None) -> TripListResponse:
    visible = filter_trips(sort_trips_by_date(trips), view)
    return TripListResponse(trips=[trip_overview(trip) for trip in visible], migration_note=note)


# ------- Trips -------
@app.get("/api/trips")
def list_trips(view: TripView = Query("all"), store: TripStore = Depends(get_store)) -> TripListResponse:
    loaded = store.load()
    if loaded.migration_note:
        logger.info("Load advisory: %s", loaded.migration_note)
    return _list_response(loaded.trips, view, loaded.migration_note)


@app.put("/api/trips")
def replace_trips(
    records: List[Dict[str, Any]] = Body(...), store: TripStore = Depends(get_store)
) -> TripListResponse:
    """Replace the whole collection with normalized copies of ``records``."""
    updated = _commit(store, lambda _trips: editor.replace_trips(records))
    return _list_response(updated, "all")


@app.get("/api/stats")
def stats(store: TripStore = Depends(get_store)) -> CollectionStats:
    return collection_stats(store.load().trips)


@app.post("/api/trips", status_code=201)
def create_trip(draft: TripDraft, store: TripStore = Depends(get_store)) -> TripOverview:
    created: Dict[str, Trip] = {}

    def edit(trips: List[Trip]) -> List[Trip]:
        updated, created["trip"] = editor.create_trip(trips, draft)
        return updated

    _commit(store, edit)
    return trip_overview(created["trip"])


@app.get("/api/trips/{trip_id}")
def get_trip(trip_id: str, store: TripStore = Depends(get_store)) -> TripOverview:
    trip = editor.find_trip(store.load().trips, trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail=f"Trip {trip_id} not found")
    return trip_overview(trip)


@app.put("/api/trips/{trip_id}")
def update_trip(trip_id: str, draft: TripDraft, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.update_trip(trips, trip_id, draft))


@app.delete("/api/trips/{trip_id}")
def delete_trip(trip_id: str, store: TripStore = Depends(get_store)) -> Dict[str, Any]:
    updated = _commit(store, lambda trips: editor.delete_trip(trips, trip_id), trip_id)
    return {"deleted": trip_id, "remaining": len(updated)}


# ------- Invitees -------
@app.post("/api/trips/{trip_id}/invitees", status_code=201)
def add_invitee(trip_id: str, draft: InviteeDraft, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.add_invitee(trips, trip_id, draft))


@app.put("/api/trips/{trip_id}/invitees/{invitee_id}")
def update_invitee(
    trip_id: str, invitee_id: str, draft: InviteeDraft, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.update_invitee(trips, trip_id, invitee_id, draft))


@app.patch("/api/trips/{trip_id}/invitees/{invitee_id}/status")
def set_invitee_status(
    trip_id: str, invitee_id: str, change: InviteeStatusChange, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(
        store, trip_id, lambda trips: editor.set_invitee_status(trips, trip_id, invitee_id, change.status)
    )


@app.delete("/api/trips/{trip_id}/invitees/{invitee_id}")
def delete_invitee(trip_id: str, invitee_id: str, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.delete_invitee(trips, trip_id, invitee_id))


# ------- Campsites -------
@app.post("/api/trips/{trip_id}/campsites", status_code=201)
def add_campsite(trip_id: str, draft: CampsiteDraft, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.add_campsite(trips, trip_id, draft))


@app.put("/api/trips/{trip_id}/campsites/{campsite_id}")
def update_campsite(
    trip_id: str, campsite_id: str, draft: CampsiteDraft, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.update_campsite(trips, trip_id, campsite_id, draft))


@app.patch("/api/trips/{trip_id}/campsites/{campsite_id}/status")
def set_campsite_status(
    trip_id: str, campsite_id: str, change: CampsiteStatusChange, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(
        store, trip_id, lambda trips: editor.set_campsite_status(trips, trip_id, campsite_id, change.status)
    )


@app.post("/api/trips/{trip_id}/campsites/{campsite_id}/vote")
def vote_campsite(
    trip_id: str, campsite_id: str, vote: VoteRequest, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(
        store, trip_id, lambda trips: editor.vote_campsite(trips, trip_id, campsite_id, vote.direction)
    )


@app.delete("/api/trips/{trip_id}/campsites/{campsite_id}")
def delete_campsite(trip_id: str, campsite_id: str, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.delete_campsite(trips, trip_id, campsite_id))


# ------- Itinerary -------
@app.post("/api/trips/{trip_id}/itinerary", status_code=201)
def add_itinerary_item(trip_id: str, draft: ItineraryDraft, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.add_itinerary_item(trips, trip_id, draft))


@app.put("/api/trips/{trip_id}/itinerary/{item_id}")
def update_itinerary_item(
    trip_id: str, item_id: str, draft: ItineraryDraft, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.update_itinerary_item(trips, trip_id, item_id, draft))


@app.patch("/api/trips/{trip_id}/itinerary/{item_id}/complete")
def set_itinerary_complete(
    trip_id: str, item_id: str, change: CompletionChange, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(
        store, trip_id, lambda trips: editor.set_itinerary_complete(trips, trip_id, item_id, change.is_complete)
    )


@app.post("/api/trips/{trip_id}/itinerary/{item_id}/move")
def move_itinerary_item(
    trip_id: str, item_id: str, move: MoveRequest, store: TripStore = Depends(get_store)
) -> TripOverview:
    return _commit_trip(
        store, trip_id, lambda trips: editor.move_itinerary_item(trips, trip_id, item_id, move.direction)
    )


@app.delete("/api/trips/{trip_id}/itinerary/{item_id}")
def delete_itinerary_item(trip_id: str, item_id: str, store: TripStore = Depends(get_store)) -> TripOverview:
    return _commit_trip(store, trip_id, lambda trips: editor.delete_itinerary_item(trips, trip_id, item_id))
