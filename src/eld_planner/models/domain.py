"""Domain models for routes, duty events and daily logs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Sequence


class DutyStatus(str, Enum):
    """The four rows of the ELD duty grid."""

    OFF_DUTY = "off_duty"
    SLEEPER_BERTH = "sleeper_berth"
    DRIVING = "driving"
    ON_DUTY_NOT_DRIVING = "on_duty_not_driving"


class EventKind(str, Enum):
    """What a duty event represents, independent of its remark text."""

    PRE_TRIP = "pre_trip"
    DRIVING_LEG_1 = "driving_leg_1"
    DRIVING_LEG_2 = "driving_leg_2"
    PICKUP = "pickup"
    DROPOFF = "dropoff"
    POST_TRIP = "post_trip"
    BREAK = "break"
    FUEL_STOP = "fuel_stop"
    SLEEPER_REST = "sleeper_rest"
    PAD = "pad"


@dataclass(slots=True, frozen=True)
class Waypoint:
    address: str
    lat: float
    lng: float


@dataclass(slots=True, frozen=True)
class RouteGeometry:
    """Route supplied by the mapping service for an origin -> pickup -> dropoff trip."""

    distance_miles: float
    duration_hours: float
    polyline: Sequence[tuple[float, float]]
    origin: Waypoint
    pickup: Waypoint
    dropoff: Waypoint
    instructions: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class DutyEvent:
    """A single contiguous duty-status interval.

    ``route_miles_start``/``route_miles_end`` track distance actually driven
    along the route. ``lat``/``lng`` are map hints only and may include
    cosmetic marker offsets for stops.
    """

    status: DutyStatus
    kind: EventKind
    start: datetime
    end: datetime
    location: str
    remarks: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    route_miles_start: float = 0.0
    route_miles_end: float = 0.0

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    @property
    def miles(self) -> float:
        return self.route_miles_end - self.route_miles_start


@dataclass(slots=True, frozen=True)
class LogEntry:
    """A duty event clipped to a single calendar day."""

    status: DutyStatus
    kind: EventKind
    start: datetime
    end: datetime
    location: str
    remarks: str
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    @property
    def start_hour(self) -> float:
        midnight = datetime.combine(self.start.date(), datetime.min.time())
        return (self.start - midnight).total_seconds() / 3600

    @property
    def end_hour(self) -> float:
        return self.start_hour + self.duration_hours


@dataclass(slots=True)
class DailyLog:
    date: date
    events: list[LogEntry] = field(default_factory=list)
    totals: dict[DutyStatus, float] = field(
        default_factory=lambda: {status: 0.0 for status in DutyStatus}
    )
    total_miles: float = 0.0

    @property
    def total_hours(self) -> float:
        return sum(self.totals.values())
