# debug_snapshot.py
import json
import sys

from trail_planner.config import get_settings
from trail_planner.engine.metrics import collection_stats, trip_overview
from trail_planner.engine.ordering import sort_trips_by_date
from trail_planner.storage.backends import FileBackend
from trail_planner.storage.snapshot import SnapshotStore


def main(data_dir: str | None = None):
    settings = get_settings()
    store = SnapshotStore(FileBackend(data_dir or settings.data_dir), key=settings.storage_key)
    loaded = store.load()
    if loaded.migration_note:
        print(f"⚠️ {loaded.migration_note}\n")

    for trip in sort_trips_by_date(loaded.trips):
        overview = trip_overview(trip)
        print(
            f"➡️ {trip.name} ({trip.start_date or '-'} to {trip.end_date or '-'}) "
            f"[{overview.status_label}] {overview.phase_label}: {overview.progress}%"
        )

    print("\nStats:")
    print(json.dumps(collection_stats(loaded.trips).model_dump(by_alias=True), indent=2))


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
