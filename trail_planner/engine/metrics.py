"""Read-only metrics derived from a trip's state."""
from __future__ import annotations

from typing import Iterable

from trail_planner.engine.coerce import format_status, round_half_up
from trail_planner.engine.ordering import TRIP_VIEWS, sort_itinerary
from trail_planner.schemas import CollectionStats, InviteeSummary, Trip, TripOverview

PHASE_ADD_CAMPSITES = "Add campsite candidates"
PHASE_BOOK_CAMPSITE = "Choose and book a campsite"
PHASE_BUILD_ITINERARY = "Build itinerary"
PHASE_FINALIZE_ITINERARY = "Finalize itinerary"
PHASE_COMPLETE = "MVP planning complete"

# Progress score weights.
CANDIDATE_POINTS = 20
BOOKED_POINTS = 35
ITINERARY_WEIGHT = 0.35
INVITEE_POINTS = 10


def invitee_summary(trip: Trip) -> InviteeSummary:
    counts = {"accepted": 0, "pending": 0, "declined": 0}
    for invitee in trip.invitees:
        if invitee.status in counts:
            counts[invitee.status] += 1
    return InviteeSummary(**counts)


def itinerary_completion_percent(trip: Trip) -> int:
    total = len(trip.itinerary)
    if not total:
        return 0
    done = sum(1 for item in trip.itinerary if item.is_complete)
    return round_half_up(done / total * 100)


def campsite_booked(trip: Trip) -> bool:
    return any(site.status == "booked" for site in trip.campsites)


def phase_label(trip: Trip) -> str:
    if not trip.campsites:
        return PHASE_ADD_CAMPSITES
    if not campsite_booked(trip):
        return PHASE_BOOK_CAMPSITE
    if not trip.itinerary:
        return PHASE_BUILD_ITINERARY
    if itinerary_completion_percent(trip) < 100:
        return PHASE_FINALIZE_ITINERARY
    return PHASE_COMPLETE


def progress_score(trip: Trip) -> int:
    """Weighted 0-100 planning score.

    Candidates present (+20), a booked site (+35), itinerary completion scaled
    to 35 points, and at least one invitee (+10); saturates at 100.
    """
    score = CANDIDATE_POINTS if trip.campsites else 0
    score += BOOKED_POINTS if campsite_booked(trip) else 0
    score += round_half_up(itinerary_completion_percent(trip) * ITINERARY_WEIGHT)
    score += INVITEE_POINTS if trip.invitees else 0
    return min(100, score)


def trip_overview(trip: Trip) -> TripOverview:
    return TripOverview(
        trip=trip,
        itinerary=sort_itinerary(trip.itinerary),
        invitee_summary=invitee_summary(trip),
        itinerary_completion=itinerary_completion_percent(trip),
        campsite_booked=campsite_booked(trip),
        phase_label=phase_label(trip),
        progress=progress_score(trip),
        status_label=format_status(trip.status),
    )


def collection_stats(trips: Iterable[Trip]) -> CollectionStats:
    trips = list(trips)
    total = len(trips)
    avg_completion = (
        round_half_up(sum(itinerary_completion_percent(trip) for trip in trips) / total) if total else 0
    )
    return CollectionStats(
        total=total,
        planning=sum(1 for trip in trips if trip.status in TRIP_VIEWS["planning"]),
        booked=sum(1 for trip in trips if trip.status == "booked"),
        completed=sum(1 for trip in trips if trip.status == "completed"),
        with_booked_campsite=sum(1 for trip in trips if campsite_booked(trip)),
        avg_itinerary_completion=avg_completion,
    )
