import json

from trail_planner.engine.normalizer import normalize_trip
from trail_planner.storage.backends import FileBackend, MemoryBackend
from trail_planner.storage.snapshot import CORRUPT_NOTE, SnapshotStore

KEY = "trail_planner_state"


def _saved(backend: MemoryBackend, key: str = KEY) -> dict:
    return json.loads(backend.items[key])


def test_empty_backend_loads_nothing():
    result = SnapshotStore(MemoryBackend()).load()

    assert result.trips == []
    assert result.migration_note is None
    assert result.schema_version == 1


def test_save_writes_versioned_camel_case_snapshot():
    backend = MemoryBackend()
    trip = normalize_trip({"name": "Zion", "startDate": "2024-04-01", "itinerary": [{"title": "Angels Landing"}]})

    SnapshotStore(backend).save([trip])

    saved = _saved(backend)
    assert saved["schemaVersion"] == 1
    assert saved["trips"][0]["startDate"] == "2024-04-01"
    assert saved["trips"][0]["itinerary"][0]["dayNumber"] == 1
    assert "start_date" not in saved["trips"][0]


def test_current_snapshot_round_trips():
    backend = MemoryBackend()
    store = SnapshotStore(backend)
    trip = normalize_trip({"name": "Zion", "campsites": [{"name": "Watchman", "status": "booked"}]})

    store.save([trip])
    result = store.load()

    assert result.trips == [trip]
    assert result.migration_note is None


def test_bare_list_is_migrated_and_resaved():
    backend = MemoryBackend({KEY: json.dumps([{"name": "A", "status": "booked"}, {"name": "B", "invitees": {"acceptedCount": 1}}])})

    result = SnapshotStore(backend).load()

    assert [trip.name for trip in result.trips] == ["A", "B"]
    assert result.trips[1].invitees[0].name == "Accepted invitee 1"
    assert result.migration_note == "Migrated 2 trip(s) from a legacy snapshot."
    saved = _saved(backend)
    assert saved["schemaVersion"] == 1
    assert [trip["id"] for trip in saved["trips"]] == [trip.id for trip in result.trips]


def test_wrapper_without_schema_version_is_migrated():
    backend = MemoryBackend({KEY: json.dumps({"trips": [{"name": "A"}]})})

    result = SnapshotStore(backend).load()

    assert [trip.name for trip in result.trips] == ["A"]
    assert _saved(backend)["schemaVersion"] == 1


def test_legacy_keys_are_checked_in_order():
    backend = MemoryBackend(
        {
            "trail_planner_trips_v2": json.dumps([{"name": "from v2"}]),
            "trail_planner_trips_v1": json.dumps([{"name": "from v1"}]),
        }
    )

    result = SnapshotStore(backend).load()

    assert [trip.name for trip in result.trips] == ["from v2"]
    assert _saved(backend)["trips"][0]["name"] == "from v2"


def test_migrated_state_is_stable_on_next_load():
    backend = MemoryBackend({KEY: json.dumps([{"name": "A"}, {"name": "B"}])})
    store = SnapshotStore(backend)

    first = store.load()
    second = store.load()

    assert second.trips == first.trips
    assert second.migration_note is None


def test_corrupt_json_yields_note_instead_of_raising():
    backend = MemoryBackend({KEY: "{not json"})

    result = SnapshotStore(backend).load()

    assert result.trips == []
    assert result.migration_note == CORRUPT_NOTE


def test_malformed_records_are_coerced():
    snapshot = {"schemaVersion": 1, "trips": [{"status": "???", "campsites": [{"upvotes": "-2"}]}, 5]}
    backend = MemoryBackend({KEY: json.dumps(snapshot)})

    result = SnapshotStore(backend).load()

    assert len(result.trips) == 1
    assert result.trips[0].status == "planning"
    assert result.trips[0].campsites[0].upvotes == 0


def test_newer_schema_version_still_loads():
    backend = MemoryBackend({KEY: json.dumps({"schemaVersion": 7, "trips": [{"name": "Future"}]})})
    assert SnapshotStore(backend).load().trips[0].name == "Future"


def test_file_backend_round_trip(tmp_path):
    store = SnapshotStore(FileBackend(tmp_path / "data"))
    trip = normalize_trip({"name": "Acadia", "startDate": "2024-08-01"})

    store.save([trip])

    assert (tmp_path / "data" / f"{KEY}.json").exists()
    assert SnapshotStore(FileBackend(tmp_path / "data")).load().trips == [trip]
    assert list((tmp_path / "data").glob("*.tmp")) == []


def test_file_backend_missing_file_reads_none(tmp_path):
    assert FileBackend(tmp_path).get_item(KEY) is None


def test_deeply_nested_json_yields_note_instead_of_raising():
    backend = MemoryBackend({KEY: "[" * 100000 + "]" * 100000})

    result = SnapshotStore(backend).load()

    assert result.trips == []
    assert result.migration_note == CORRUPT_NOTE


def test_float_schema_version_loads_trips():
    backend = MemoryBackend({KEY: json.dumps({"schemaVersion": 1.0, "trips": [{"name": "A"}]})})

    result = SnapshotStore(backend).load()

    assert [trip.name for trip in result.trips] == ["A"]
    assert result.migration_note is None


def test_unrecognised_shape_yields_note():
    for stored in ({"foo": 1}, {"schemaVersion": "1", "trips": [{"name": "A"}]}, "text", 42):
        backend = MemoryBackend({KEY: json.dumps(stored)})

        result = SnapshotStore(backend).load()

        assert result.trips == []
        assert result.migration_note == CORRUPT_NOTE


def test_inconsistent_stored_dates_are_kept():
    snapshot = {"schemaVersion": 1, "trips": [{"name": "Backwards", "startDate": "2024-06-10", "endDate": "2024-06-01"}]}
    backend = MemoryBackend({KEY: json.dumps(snapshot)})

    trip = SnapshotStore(backend).load().trips[0]

    assert (trip.start_date, trip.end_date) == ("2024-06-10", "2024-06-01")
