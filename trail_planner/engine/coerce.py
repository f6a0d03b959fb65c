"""Primitive coercions shared by the normalizer and the edit drafts."""
from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Sequence

_FALSE_STRINGS = {"", "false", "0", "no", "off"}


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current instant as ``2024-05-01T12:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_text(value: Any, default: str = "") -> str:
    if value is None or value is False or value == "":
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _as_number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def clamp_int(value: Any, floor: int) -> int:
    """Parse ``value`` as a number, truncate it and clamp it to ``floor``."""
    number = _as_number(value)
    if number is None:
        return floor
    return max(floor, int(number))


def clamp_count(value: Any) -> int:
    return clamp_int(value, 0)


def coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def coerce_choice(value: Any, choices: Sequence[str], default: str) -> str:
    """Closed-set membership check; anything outside ``choices`` becomes ``default``."""
    if isinstance(value, str) and value in choices:
        return value
    return default


def parse_iso_date(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        try:
            return datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            return None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_status(value: Any) -> str:
    """``"in_progress"`` -> ``"In Progress"``."""
    return " ".join(part[:1].upper() + part[1:] for part in str(value).split("_"))
