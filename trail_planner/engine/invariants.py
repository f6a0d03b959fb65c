"""Cross-entity rules that every campsite mutation must respect."""
from __future__ import annotations

from typing import Iterable, List

from trail_planner.log import get_logger
from trail_planner.schemas import Campsite

logger = get_logger(__name__)


def enforce_single_booked(campsites: Iterable[Campsite], target_id: str) -> List[Campsite]:
    """Book ``target_id`` and demote any other booked campsite to ``searching``.

    Returns a new list. When ``target_id`` is not in the list, the list comes
    back unchanged and existing bookings are left alone; callers confirm the
    target exists first.
    """
    sites = list(campsites)
    if not any(site.id == target_id for site in sites):
        logger.warning("Campsite %s not found; leaving %d campsite(s) untouched", target_id, len(sites))
        return sites

    reconciled: List[Campsite] = []
    for site in sites:
        if site.id == target_id:
            if site.status != "booked":
                site = site.model_copy(update={"status": "booked"})
        elif site.status == "booked":
            logger.debug("Demoting previously booked campsite %s to searching", site.id)
            site = site.model_copy(update={"status": "searching"})
        reconciled.append(site)
    return reconciled
