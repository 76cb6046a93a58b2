"""Trip planning request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..models.domain import DutyStatus, EventKind


class WaypointModel(BaseModel):
    address: str
    lat: float
    lng: float


class RouteModel(BaseModel):
    """Route geometry as returned by the mapping service."""

    distance_miles: float
    duration_hours: float
    polyline: List[Tuple[float, float]] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    origin: WaypointModel
    pickup: WaypointModel
    dropoff: WaypointModel


class TripPlanRequest(BaseModel):
    route: RouteModel
    start_time: str = Field(..., description="Trip start, ISO-8601 (e.g. '2024-03-01T08:00').")
    average_speed_mph: Optional[float] = Field(
        default=None,
        description="Defaults to route distance / route duration.",
    )
    profile_id: Optional[str] = Field(default=None, description="Built-in HOS profile to apply.")
    hos_profile: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Full HOS profile; takes precedence over profile_id.",
    )
    home_terminal_timezone: Optional[str] = Field(
        default=None,
        description="IANA zone the log is kept in; used when start_time carries an offset.",
    )
    cycle_hours_used: float = Field(
        default=0.0,
        ge=0,
        description="Recorded with the trip; cycle limits are not enforced by the scheduler.",
    )


class DutyEventModel(BaseModel):
    status: DutyStatus
    kind: EventKind
    start: datetime
    end: datetime
    duration_hours: float
    location: str
    remarks: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    miles: float = 0.0


class LogEntryModel(BaseModel):
    status: DutyStatus
    kind: EventKind
    start: datetime
    end: datetime
    start_hour: float
    end_hour: float
    duration_hours: float
    location: str
    remarks: str
    lat: Optional[float] = None
    lng: Optional[float] = None


class DailyLogModel(BaseModel):
    date: date
    events: List[LogEntryModel]
    totals: Dict[DutyStatus, float]
    total_miles: float


class TripSummaryModel(BaseModel):
    profile_id: str
    average_speed_mph: float
    start: datetime
    end: datetime
    total_miles: float
    log_days: int
    hours_by_status: Dict[DutyStatus, float]
    event_counts: Dict[EventKind, int]


class TripPlanResponse(BaseModel):
    summary: TripSummaryModel
    events: List[DutyEventModel]
    logs: List[DailyLogModel]
