"""Hours-of-Service duty event scheduler.

Simulates one origin -> pickup -> dropoff trip against a regulatory profile
and emits the gapless duty-status sequence a driver would log, padded with
off-duty time so the first and last calendar days are fully covered.

All arithmetic runs in whole minutes. Leg durations and profile caps are
rounded to the minute once, up front, so accumulated state never drifts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Mapping

from ...config import settings
from ...models.domain import DutyEvent, DutyStatus, EventKind, RouteGeometry
from ...schemas.hos import HosProfile
from ..geospatial import haversine_miles
from .errors import InvalidTripInputError, SchedulingError
from .positions import DisplayOffsets, annotate_positions
from .validation import coerce_profile, parse_start_time, validate_trip_inputs

END_OF_DAY = time(23, 59, 59, 999000)
LEG_ONE_EXHAUSTION_MODES = ("truncate", "raise")


def _to_minutes(hours: float) -> int:
    return int(round(hours * 60))


@dataclass(slots=True)
class TripAssumptions:
    pre_trip_hours: float = settings.pre_trip_hours
    pickup_hours: float = settings.pickup_hours
    dropoff_hours: float = settings.dropoff_hours
    post_trip_hours: float = settings.post_trip_hours
    fuel_stop_hours: float = settings.fuel_stop_hours
    fuel_interval_miles: float = settings.fuel_interval_miles
    max_iterations: int = settings.max_schedule_iterations
    leg_one_exhaustion: str = settings.leg_one_exhaustion


@dataclass(slots=True)
class ShiftState:
    """Counters carried through the simulation."""

    current_time: datetime
    route_miles: float = 0.0
    shift_driving_minutes: int = 0
    shift_duty_window_minutes: int = 0
    driving_since_break_minutes: int = 0
    miles_since_fuel: float = 0.0

    def record_duty(self, minutes: int) -> None:
        self.shift_duty_window_minutes += minutes

    def record_driving(self, minutes: int, miles: float) -> None:
        self.shift_driving_minutes += minutes
        self.shift_duty_window_minutes += minutes
        self.driving_since_break_minutes += minutes
        self.miles_since_fuel += miles
        self.route_miles += miles

    def take_break(self, minutes: int) -> None:
        # The 14-hour window keeps running through a short break.
        self.shift_duty_window_minutes += minutes
        self.driving_since_break_minutes = 0

    def take_rest(self) -> None:
        self.shift_driving_minutes = 0
        self.shift_duty_window_minutes = 0
        self.driving_since_break_minutes = 0

    def refuel(self, minutes: int) -> None:
        self.shift_duty_window_minutes += minutes
        self.miles_since_fuel = 0.0


def split_leg_minutes(route: RouteGeometry) -> tuple[int, int]:
    """Apportion the route duration between the two legs by waypoint distance."""

    total_minutes = _to_minutes(route.duration_hours)
    to_pickup = haversine_miles(route.origin.lat, route.origin.lng, route.pickup.lat, route.pickup.lng)
    to_dropoff = haversine_miles(route.pickup.lat, route.pickup.lng, route.dropoff.lat, route.dropoff.lng)
    total = to_pickup + to_dropoff
    if total <= 0:
        return 0, total_minutes
    leg_one = _to_minutes(to_pickup / total * route.duration_hours)
    return leg_one, total_minutes - leg_one


class DutyEventScheduler:
    """Greedy shift/break/rest/fuel simulation for a single trip."""

    def __init__(
        self,
        profile: HosProfile,
        average_speed: float,
        assumptions: TripAssumptions | None = None,
    ) -> None:
        self.profile = profile
        self.average_speed = average_speed
        self.assumptions = assumptions or TripAssumptions()

        shift = profile.shift_rules
        breaks = profile.break_rules
        self.max_driving = _to_minutes(shift.max_driving_hours)
        self.max_duty_window = _to_minutes(shift.max_duty_window_hours)
        self.rest_minutes = _to_minutes(shift.min_off_duty_before_shift_hours)
        self.break_after = _to_minutes(breaks.required_after_driving_hours)
        self.break_minutes = breaks.break_duration_minutes
        self.rest_hours = shift.min_off_duty_before_shift_hours

    def schedule(self, route: RouteGeometry, start_time: datetime) -> list[DutyEvent]:
        start_time = start_time.replace(second=0, microsecond=0)
        midnight = datetime.combine(start_time.date(), time.min)
        state = ShiftState(current_time=midnight)
        events: list[DutyEvent] = []
        a = self.assumptions

        if start_time > midnight:
            self._emit(
                events, state, DutyStatus.OFF_DUTY, EventKind.PAD,
                int((start_time - midnight).total_seconds() // 60),
                "Home Terminal", "Off Duty - Continuous Rest Period",
            )

        leg_one, leg_two = split_leg_minutes(route)

        self._on_duty(events, state, EventKind.PRE_TRIP, a.pre_trip_hours, route.origin.address, "Pre-trip Inspection")
        self._drive_to_pickup(events, state, leg_one)
        self._on_duty(events, state, EventKind.PICKUP, a.pickup_hours, route.pickup.address, "Pickup (Loading)")
        self._drive_to_dropoff(events, state, leg_two)
        self._on_duty(events, state, EventKind.DROPOFF, a.dropoff_hours, route.dropoff.address, "Dropoff (Unloading)")
        self._on_duty(events, state, EventKind.POST_TRIP, a.post_trip_hours, route.dropoff.address, "Post-trip Inspection")

        end_of_day = datetime.combine(state.current_time.date(), END_OF_DAY)
        events.append(
            DutyEvent(
                status=DutyStatus.OFF_DUTY,
                kind=EventKind.PAD,
                start=state.current_time,
                end=end_of_day,
                location="Home Terminal",
                remarks="Off Duty - End of Day Rest Period",
                route_miles_start=state.route_miles,
                route_miles_end=state.route_miles,
            )
        )
        state.current_time = end_of_day

        logging.info(
            f"Scheduled {len(events)} duty events from {events[0].start.isoformat()} "
            f"to {events[-1].end.isoformat()} ({state.route_miles:.1f} driven miles)"
        )
        return events

    def _drive_to_pickup(self, events: list[DutyEvent], state: ShiftState, remaining: int) -> None:
        iterations = 0
        while remaining > 0:
            iterations = self._tick(iterations, "first leg")
            if state.driving_since_break_minutes >= self.break_after:
                self._take_break(events, state)
                continue

            chunk = self._drivable_minutes(state, remaining)
            if chunk <= 0:
                self._first_leg_exhausted(remaining)
                return

            self._drive(events, state, EventKind.DRIVING_LEG_1, chunk, "En Route to Pickup", "Driving to Pickup Location")
            remaining -= chunk

    def _drive_to_dropoff(self, events: list[DutyEvent], state: ShiftState, remaining: int) -> None:
        a = self.assumptions
        iterations = 0
        while remaining > 0:
            iterations = self._tick(iterations, "second leg")
            if state.miles_since_fuel >= a.fuel_interval_miles:
                minutes = _to_minutes(a.fuel_stop_hours)
                self._emit(events, state, DutyStatus.ON_DUTY_NOT_DRIVING, EventKind.FUEL_STOP, minutes, "Fuel Station", "Fueling Stop")
                state.refuel(minutes)

            if (
                state.shift_driving_minutes >= self.max_driving
                or state.shift_duty_window_minutes >= self.max_duty_window
            ):
                self._emit(
                    events, state, DutyStatus.SLEEPER_BERTH, EventKind.SLEEPER_REST, self.rest_minutes,
                    "Truck Stop", f"{self.rest_hours:g}h Daily Rest",
                )
                state.take_rest()
                continue

            if state.driving_since_break_minutes >= self.break_after:
                self._take_break(events, state)
                continue

            # The checks above leave at least one drivable minute under every cap.
            chunk = self._drivable_minutes(state, remaining)
            self._drive(events, state, EventKind.DRIVING_LEG_2, chunk, "En Route to Dropoff", "Driving to Delivery Location")
            remaining -= chunk

    def _drivable_minutes(self, state: ShiftState, remaining: int) -> int:
        return min(
            remaining,
            self.max_driving - state.shift_driving_minutes,
            self.max_duty_window - state.shift_duty_window_minutes,
            self.break_after - state.driving_since_break_minutes,
        )

    def _first_leg_exhausted(self, remaining: int) -> None:
        message = (
            f"Shift limits reached before pickup with {remaining} minutes of first-leg driving left."
        )
        if self.assumptions.leg_one_exhaustion == "raise":
            raise SchedulingError(message)
        logging.warning(f"{message} Ending the first leg early.")

    def _tick(self, iterations: int, leg: str) -> int:
        iterations += 1
        if iterations > self.assumptions.max_iterations:
            raise SchedulingError(
                f"Scheduling the {leg} made no progress after {self.assumptions.max_iterations} steps; "
                "check the profile's driving, duty-window and break limits."
            )
        return iterations

    def _take_break(self, events: list[DutyEvent], state: ShiftState) -> None:
        self._emit(
            events, state, DutyStatus.OFF_DUTY, EventKind.BREAK, self.break_minutes,
            "Rest Area", f"{self.break_minutes}-min Break",
        )
        state.take_break(self.break_minutes)

    def _on_duty(
        self,
        events: list[DutyEvent],
        state: ShiftState,
        kind: EventKind,
        hours: float,
        location: str,
        remarks: str,
    ) -> None:
        minutes = _to_minutes(hours)
        self._emit(events, state, DutyStatus.ON_DUTY_NOT_DRIVING, kind, minutes, location, remarks)
        state.record_duty(minutes)

    def _drive(
        self,
        events: list[DutyEvent],
        state: ShiftState,
        kind: EventKind,
        minutes: int,
        location: str,
        remarks: str,
    ) -> None:
        miles = minutes / 60 * self.average_speed
        self._emit(events, state, DutyStatus.DRIVING, kind, minutes, location, remarks, miles=miles)
        state.record_driving(minutes, miles)

    def _emit(
        self,
        events: list[DutyEvent],
        state: ShiftState,
        status: DutyStatus,
        kind: EventKind,
        minutes: int,
        location: str,
        remarks: str,
        *,
        miles: float = 0.0,
    ) -> None:
        if minutes <= 0:
            raise SchedulingError(f"Refusing to emit a {kind.value} event of {minutes} minutes.")
        end = state.current_time + timedelta(minutes=minutes)
        events.append(
            DutyEvent(
                status=status,
                kind=kind,
                start=state.current_time,
                end=end,
                location=location,
                remarks=remarks,
                route_miles_start=state.route_miles,
                route_miles_end=state.route_miles + miles,
            )
        )
        state.current_time = end


def generate_duty_events(
    route: RouteGeometry,
    start_time: datetime | str,
    profile: HosProfile | Mapping[str, Any],
    average_speed: float,
    *,
    assumptions: TripAssumptions | None = None,
    offsets: DisplayOffsets | None = None,
    timezone: str | None = None,
) -> list[DutyEvent]:
    """Validate the inputs, schedule the trip and attach map positions."""

    validate_trip_inputs(route, average_speed)
    start = parse_start_time(start_time, timezone)
    hos_profile = coerce_profile(profile)
    assumptions = assumptions or TripAssumptions()
    for name in ("pre_trip_hours", "pickup_hours", "dropoff_hours", "post_trip_hours", "fuel_stop_hours"):
        if _to_minutes(getattr(assumptions, name)) <= 0:
            raise InvalidTripInputError(f"{name} must be at least one minute.")
    if not isinstance(assumptions.max_iterations, int) or assumptions.max_iterations < 1:
        raise InvalidTripInputError(
            f"max_iterations must be a positive integer, got {assumptions.max_iterations!r}."
        )
    if assumptions.leg_one_exhaustion not in LEG_ONE_EXHAUSTION_MODES:
        raise InvalidTripInputError(
            f"leg_one_exhaustion must be one of {', '.join(LEG_ONE_EXHAUSTION_MODES)}, "
            f"got {assumptions.leg_one_exhaustion!r}."
        )

    try:
        events = DutyEventScheduler(hos_profile, average_speed, assumptions).schedule(route, start)
    except OverflowError as exc:
        raise InvalidTripInputError(f"Trip times fall outside the supported calendar range: {exc}") from exc
    return annotate_positions(events, route.polyline, offsets)
