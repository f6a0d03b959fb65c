from trail_planner.engine.invariants import enforce_single_booked
from trail_planner.engine.normalizer import normalize_campsite


def _sites(*statuses: str):
    return [normalize_campsite({"id": str(i), "name": f"Site {i}", "status": s}) for i, s in enumerate(statuses, 1)]


def test_booking_demotes_previous_booking():
    campsites = _sites("booked", "searching")

    result = enforce_single_booked(campsites, "2")

    assert [site.status for site in result] == ["searching", "booked"]
    assert campsites[0].status == "booked"  # input untouched


def test_exactly_one_booked_for_every_target():
    campsites = _sites("booked", "unsearched", "booked", "rejected")
    for site in campsites:
        result = enforce_single_booked(campsites, site.id)
        booked = [s.id for s in result if s.status == "booked"]
        assert booked == [site.id]


def test_other_fields_are_preserved():
    campsites = [
        normalize_campsite({"id": "a", "name": "A", "status": "booked", "upvotes": 4, "notes": "shade"}),
        normalize_campsite({"id": "b", "name": "B", "status": "rejected"}),
        normalize_campsite({"id": "c", "name": "C"}),
    ]

    result = enforce_single_booked(campsites, "c")

    assert result[0].upvotes == 4 and result[0].notes == "shade"
    assert result[1] == campsites[1]
    assert result[2].status == "booked"


def test_rebooking_the_booked_site_is_stable():
    campsites = _sites("booked", "searching")
    assert enforce_single_booked(campsites, "1") == campsites


def test_missing_target_leaves_bookings_alone():
    campsites = _sites("booked", "searching")

    result = enforce_single_booked(campsites, "nope")

    assert result == campsites
    assert result is not campsites
