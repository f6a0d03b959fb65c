from typing import List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from trail_planner.engine.coerce import (
    clamp_int,
    coerce_choice,
    coerce_text,
    parse_iso_date,
)

TripStatus = Literal["idea", "planning", "booked", "in_progress", "completed", "cancelled"]
CampsiteStatus = Literal["unsearched", "searching", "booked", "rejected"]
InviteeStatus = Literal["pending", "accepted", "declined"]
MoveDirection = Literal["up", "down"]
VoteDirection = Literal["up", "down"]
TripView = Literal["all", "planning", "booked", "completed"]

TRIP_STATUSES = get_args(TripStatus)
CAMPSITE_STATUSES = get_args(CampsiteStatus)
INVITEE_STATUSES = get_args(InviteeStatus)

SCHEMA_VERSION = 1

# ------- Entities -------
# Persisted and JSON forms use camelCase keys (startDate, dayNumber, ...).
_ENTITY_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    frozen=True,
)


class Invitee(BaseModel):
    model_config = _ENTITY_CONFIG

    id: str
    name: str
    status: InviteeStatus = "pending"
    notes: str = ""
    created_at: str


class Campsite(BaseModel):
    model_config = _ENTITY_CONFIG

    id: str
    name: str
    source: str = ""
    status: CampsiteStatus = "unsearched"
    upvotes: int = Field(0, ge=0)
    downvotes: int = Field(0, ge=0)
    notes: str = ""
    created_at: str


class ItineraryItem(BaseModel):
    model_config = _ENTITY_CONFIG

    id: str
    day_number: int = Field(1, ge=1)
    title: str
    details: str = ""
    is_complete: bool = False
    sort_order: int = Field(1, ge=1)
    created_at: str


class Trip(BaseModel):
    model_config = _ENTITY_CONFIG

    id: str
    name: str
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    status: TripStatus = "planning"
    type: str = "Camping"
    notes: str = ""
    invitees: List[Invitee] = Field(default_factory=list)
    campsites: List[Campsite] = Field(default_factory=list)
    itinerary: List[ItineraryItem] = Field(default_factory=list)
    created_at: str
    updated_at: str


# ------- Drafts (validated edits submitted by the shell) -------
_DRAFT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    str_strip_whitespace=True,
    validate_default=True,
)


def _required(value: str, message: str) -> str:
    if not value:
        raise ValueError(message)
    return value


class TripDraft(BaseModel):
    model_config = _DRAFT_CONFIG

    name: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    status: TripStatus = "planning"
    type: str = "Camping"
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value):
        return coerce_choice(value, TRIP_STATUSES, "planning")

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value):
        return coerce_text(value, "Camping")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _required(value, "Trip name is required.")

    @field_validator("location")
    @classmethod
    def _check_location(cls, value: str) -> str:
        return _required(value, "Location is required.")

    @field_validator("start_date", "end_date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        _required(value, "Start and end dates are required.")
        if parse_iso_date(value) is None:
            raise ValueError(f"'{value}' is not an ISO calendar date (YYYY-MM-DD).")
        return value

    @model_validator(mode="after")
    def _check_range(self) -> "TripDraft":
        start, end = parse_iso_date(self.start_date), parse_iso_date(self.end_date)
        if start and end and end.date() < start.date():
            raise ValueError("End date must be the same as or after the start date.")
        return self


class InviteeDraft(BaseModel):
    model_config = _DRAFT_CONFIG

    name: str = ""
    status: InviteeStatus = "pending"
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value):
        return coerce_choice(value, INVITEE_STATUSES, "pending")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _required(value, "Invitee name is required.")


class CampsiteDraft(BaseModel):
    model_config = _DRAFT_CONFIG

    name: str = ""
    source: str = ""
    status: CampsiteStatus = "unsearched"
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value):
        return coerce_choice(value, CAMPSITE_STATUSES, "unsearched")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _required(value, "Campsite name is required.")


class ItineraryDraft(BaseModel):
    model_config = _DRAFT_CONFIG

    title: str = ""
    day_number: int = 1
    details: str = ""

    @field_validator("day_number", mode="before")
    @classmethod
    def _coerce_day(cls, value):
        return clamp_int(value, 1)

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        return _required(value, "Itinerary title is required.")


# ------- Small request bodies used by the HTTP shell -------
class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class InviteeStatusChange(_Body):
    status: str


class CampsiteStatusChange(_Body):
    status: str


class CompletionChange(_Body):
    is_complete: bool


class MoveRequest(_Body):
    direction: MoveDirection


class VoteRequest(_Body):
    direction: VoteDirection


# ------- Derived views -------
class InviteeSummary(_Body):
    accepted: int = 0
    pending: int = 0
    declined: int = 0


class TripOverview(_Body):
    trip: Trip
    itinerary: List[ItineraryItem] = Field(default_factory=list)  # display order
    invitee_summary: InviteeSummary
    itinerary_completion: int
    campsite_booked: bool
    phase_label: str
    progress: int
    status_label: str


class CollectionStats(_Body):
    total: int = 0
    planning: int = 0
    booked: int = 0
    completed: int = 0
    with_booked_campsite: int = 0
    avg_itinerary_completion: int = 0


# ------- Persistence -------
class LoadResult(_Body):
    schema_version: int = SCHEMA_VERSION
    trips: List[Trip] = Field(default_factory=list)
    migration_note: Optional[str] = None


class TripListResponse(_Body):
    trips: List[TripOverview] = Field(default_factory=list)
    migration_note: Optional[str] = None
