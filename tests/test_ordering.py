from trail_planner.engine.normalizer import normalize_itinerary_item, normalize_trip
from trail_planner.engine.ordering import (
    filter_trips,
    move_itinerary_item,
    sort_itinerary,
    sort_trips_by_date,
)


def _item(item_id: str, day: int, order: int):
    return normalize_itinerary_item({"id": item_id, "title": item_id, "dayNumber": day, "sortOrder": order})


def test_trips_sort_by_start_date_with_undated_last():
    may = normalize_trip({"name": "May", "startDate": "2024-05-01"})
    undated = normalize_trip({"name": "Someday"})
    march = normalize_trip({"name": "March", "startDate": "2024-03-01"})

    ordered = sort_trips_by_date([may, undated, march])

    assert [trip.name for trip in ordered] == ["March", "May", "Someday"]


def test_unparseable_dates_sort_last_and_stay_stable():
    first = normalize_trip({"name": "first", "startDate": "soon"})
    second = normalize_trip({"name": "second"})
    dated = normalize_trip({"name": "dated", "startDate": "2025-01-01T08:00:00"})

    ordered = sort_trips_by_date([first, second, dated])

    assert [trip.name for trip in ordered] == ["dated", "first", "second"]


def test_itinerary_sorts_by_day_then_order():
    items = [_item("c", 2, 1), _item("b", 1, 5), _item("a", 1, 2)]
    assert [item.id for item in sort_itinerary(items)] == ["a", "b", "c"]


def test_move_up_swaps_sort_orders():
    a, b = _item("A", 1, 1), _item("B", 1, 2)

    moved = move_itinerary_item([a, b], "B", "up")

    by_id = {item.id: item for item in moved}
    assert by_id["A"].sort_order == 2
    assert by_id["B"].sort_order == 1
    assert [item.id for item in moved] == ["A", "B"]  # backing positions unchanged


def test_move_first_item_up_is_noop():
    items = [_item("A", 1, 1), _item("B", 1, 2)]
    assert move_itinerary_item(items, "A", "up") == items


def test_move_down_ignores_other_days():
    items = [_item("A", 1, 1), _item("X", 2, 1), _item("B", 1, 7)]

    moved = move_itinerary_item(items, "A", "down")

    by_id = {item.id: item for item in moved}
    assert (by_id["A"].sort_order, by_id["B"].sort_order, by_id["X"].sort_order) == (7, 1, 1)
    assert move_itinerary_item(moved, "A", "down") == moved


def test_move_unknown_item_or_direction_is_noop():
    items = [_item("A", 1, 1), _item("B", 1, 2)]
    assert move_itinerary_item(items, "missing", "up") == items
    assert move_itinerary_item(items, "B", "sideways") == items


def test_filter_trips_by_view():
    trips = [
        normalize_trip({"name": "idea", "status": "idea"}),
        normalize_trip({"name": "going", "status": "in_progress"}),
        normalize_trip({"name": "booked", "status": "booked"}),
        normalize_trip({"name": "done", "status": "completed"}),
        normalize_trip({"name": "off", "status": "cancelled"}),
    ]

    assert [t.name for t in filter_trips(trips, "planning")] == ["idea", "going"]
    assert [t.name for t in filter_trips(trips, "booked")] == ["booked"]
    assert [t.name for t in filter_trips(trips, "completed")] == ["done"]
    assert len(filter_trips(trips, "all")) == 5
    assert len(filter_trips(trips, "whatever")) == 5
