import logging
from datetime import datetime, timedelta

import pytest

from src.eld_planner.models.domain import DutyStatus, EventKind, RouteGeometry, Waypoint
from src.eld_planner.services.hos.errors import InvalidTripInputError, SchedulingError
from src.eld_planner.services.hos.profiles import US_FMCSA_PROPERTY_CARRYING
from src.eld_planner.services.hos.scheduler import (
    DutyEventScheduler,
    ShiftState,
    TripAssumptions,
    generate_duty_events,
    split_leg_minutes,
)


def _route(pickup_lat: float, dropoff_lat: float, distance: float, hours: float) -> RouteGeometry:
    """Waypoints on the prime meridian so leg ratios follow latitude."""
    return RouteGeometry(
        distance_miles=distance,
        duration_hours=hours,
        polyline=[(0.0, 0.0), (pickup_lat, 0.0), (dropoff_lat, 0.0)],
        origin=Waypoint("Origin Yard", 0.0, 0.0),
        pickup=Waypoint("Shipper Dock", pickup_lat, 0.0),
        dropoff=Waypoint("Receiver Dock", dropoff_lat, 0.0),
    )


def _profile(**shift_overrides):
    shift = US_FMCSA_PROPERTY_CARRYING.shift_rules.model_copy(update=shift_overrides)
    return US_FMCSA_PROPERTY_CARRYING.model_copy(update={"shift_rules": shift})


def _assumptions(**overrides) -> TripAssumptions:
    values = dict(
        pre_trip_hours=0.25,
        pickup_hours=1.0,
        dropoff_hours=1.0,
        post_trip_hours=0.25,
        fuel_stop_hours=0.5,
        fuel_interval_miles=1000.0,
        max_iterations=10_000,
        leg_one_exhaustion="truncate",
    )
    values.update(overrides)
    return TripAssumptions(**values)


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, day, hour, minute)


def _timeline(events):
    return [(e.status, e.kind, e.start, e.end) for e in events]


def test_short_single_day_trip_sequence():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    events = generate_duty_events(
        route, "2024-03-01T08:00:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
    )

    assert _timeline(events) == [
        (DutyStatus.OFF_DUTY, EventKind.PAD, _at(1, 0), _at(1, 8)),
        (DutyStatus.ON_DUTY_NOT_DRIVING, EventKind.PRE_TRIP, _at(1, 8), _at(1, 8, 15)),
        (DutyStatus.DRIVING, EventKind.DRIVING_LEG_1, _at(1, 8, 15), _at(1, 9, 3)),
        (DutyStatus.ON_DUTY_NOT_DRIVING, EventKind.PICKUP, _at(1, 9, 3), _at(1, 10, 3)),
        (DutyStatus.DRIVING, EventKind.DRIVING_LEG_2, _at(1, 10, 3), _at(1, 11, 15)),
        (DutyStatus.ON_DUTY_NOT_DRIVING, EventKind.DROPOFF, _at(1, 11, 15), _at(1, 12, 15)),
        (DutyStatus.ON_DUTY_NOT_DRIVING, EventKind.POST_TRIP, _at(1, 12, 15), _at(1, 12, 30)),
        (
            DutyStatus.OFF_DUTY,
            EventKind.PAD,
            _at(1, 12, 30),
            datetime(2024, 3, 1, 23, 59, 59, 999000),
        ),
    ]
    assert events[0].remarks == "Off Duty - Continuous Rest Period"
    assert events[2].miles == pytest.approx(40.0)
    assert events[4].miles == pytest.approx(60.0)
    assert events[2].location == "En Route to Pickup"
    assert events[3].location == "Shipper Dock"


def test_start_at_midnight_skips_leading_pad():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    events = generate_duty_events(
        route, datetime(2024, 3, 1), US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
    )

    assert events[0].kind is EventKind.PRE_TRIP
    assert events[0].start == _at(1, 0)


def test_events_are_contiguous_and_cover_whole_days():
    route = _route(0.1, 10.0, distance=1100.0, hours=22.0)
    events = generate_duty_events(
        route, "2024-03-01T06:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
    )

    for previous, current in zip(events, events[1:]):
        assert previous.end == current.start
    assert all(event.start < event.end for event in events)
    assert events[0].start == _at(1, 0)
    assert events[-1].end == datetime(2024, 3, 2, 23, 59, 59, 999000)
    total = sum((event.end - event.start for event in events), timedelta())
    assert total == events[-1].end - events[0].start


def test_forced_rest_inserted_once_when_driving_cap_reached():
    route = _route(0.1, 10.0, distance=1100.0, hours=22.0)
    events = generate_duty_events(
        route, "2024-03-01T06:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
    )

    rests = [event for event in events if event.status is DutyStatus.SLEEPER_BERTH]
    assert len(rests) == 1
    rest = rests[0]
    assert rest.kind is EventKind.SLEEPER_REST
    assert rest.remarks == "10h Daily Rest"
    assert rest.start == _at(1, 18, 45)
    assert rest.end == _at(2, 4, 45)

    index = events.index(rest)
    assert events[index - 1].status is DutyStatus.DRIVING
    assert events[index + 1].status is DutyStatus.DRIVING

    driving = [event for event in events if event.status is DutyStatus.DRIVING]
    assert sum(event.duration_hours for event in driving) == pytest.approx(22.0)
    breaks = [event for event in events if event.kind is EventKind.BREAK]
    assert [b.start for b in breaks] == [_at(1, 15, 15), _at(2, 12, 45)]
    assert all(b.remarks == "30-min Break" for b in breaks)


def test_shift_state_rest_resets_shift_counters():
    state = ShiftState(current_time=_at(1, 0))
    state.record_driving(600, 500.0)
    state.record_duty(60)
    state.take_rest()

    assert state.shift_driving_minutes == 0
    assert state.shift_duty_window_minutes == 0
    assert state.driving_since_break_minutes == 0
    assert state.miles_since_fuel == pytest.approx(500.0)
    assert state.route_miles == pytest.approx(500.0)


def test_break_keeps_duty_window_running():
    state = ShiftState(current_time=_at(1, 0))
    state.record_driving(480, 400.0)
    state.take_break(30)

    assert state.driving_since_break_minutes == 0
    assert state.shift_driving_minutes == 480
    assert state.shift_duty_window_minutes == 510


def test_fuel_stop_inserted_after_interval():
    route = _route(0.1, 10.0, distance=1100.0, hours=22.0)
    events = generate_duty_events(
        route,
        "2024-03-01T06:00",
        US_FMCSA_PROPERTY_CARRYING,
        50.0,
        assumptions=_assumptions(fuel_interval_miles=300.0),
    )

    fuel_stops = [event for event in events if event.kind is EventKind.FUEL_STOP]
    assert fuel_stops
    for stop in fuel_stops:
        assert stop.status is DutyStatus.ON_DUTY_NOT_DRIVING
        assert stop.duration_hours == pytest.approx(0.5)
        assert stop.remarks == "Fueling Stop"
    assert fuel_stops[0].start == _at(1, 15, 15)


def test_split_leg_minutes_follows_waypoint_distance():
    assert split_leg_minutes(_route(0.4, 1.0, distance=100.0, hours=2.0)) == (48, 72)


def test_split_leg_minutes_with_coincident_waypoints_uses_second_leg():
    route = RouteGeometry(
        distance_miles=0.0,
        duration_hours=1.5,
        polyline=[],
        origin=Waypoint("A", 10.0, 10.0),
        pickup=Waypoint("A", 10.0, 10.0),
        dropoff=Waypoint("A", 10.0, 10.0),
    )
    assert split_leg_minutes(route) == (0, 90)


def test_first_leg_exhaustion_truncates_and_warns(caplog):
    route = _route(10.0, 10.1, distance=1100.0, hours=22.0)
    with caplog.at_level(logging.WARNING):
        events = generate_duty_events(
            route, "2024-03-01T06:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
        )

    leg_one = [event for event in events if event.kind is EventKind.DRIVING_LEG_1]
    assert sum(event.duration_hours for event in leg_one) == pytest.approx(11.0)
    assert "before pickup" in caplog.text

    pickup_index = next(i for i, e in enumerate(events) if e.kind is EventKind.PICKUP)
    assert events[pickup_index + 1].kind is EventKind.SLEEPER_REST


def test_first_leg_exhaustion_can_raise():
    route = _route(10.0, 10.1, distance=1100.0, hours=22.0)
    with pytest.raises(SchedulingError):
        generate_duty_events(
            route,
            "2024-03-01T06:00",
            US_FMCSA_PROPERTY_CARRYING,
            50.0,
            assumptions=_assumptions(leg_one_exhaustion="raise"),
        )


def test_unsatisfiable_break_rule_raises_scheduling_error():
    breaks = US_FMCSA_PROPERTY_CARRYING.break_rules.model_copy(update={"required_after_driving_hours": 0.001})
    profile = US_FMCSA_PROPERTY_CARRYING.model_copy(update={"break_rules": breaks})
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)

    with pytest.raises(SchedulingError):
        generate_duty_events(route, "2024-03-01T08:00", profile, 50.0, assumptions=_assumptions(max_iterations=50))


def test_zero_driving_cap_raises_scheduling_error():
    route = _route(0.0, 1.0, distance=100.0, hours=2.0)
    with pytest.raises(SchedulingError):
        generate_duty_events(
            route,
            "2024-03-01T08:00",
            _profile(max_driving_hours=0.001),
            50.0,
            assumptions=_assumptions(max_iterations=50),
        )


@pytest.mark.parametrize("speed", [0, -10.0, float("nan")])
def test_invalid_average_speed_rejected(speed):
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    with pytest.raises(InvalidTripInputError):
        generate_duty_events(route, "2024-03-01T08:00", US_FMCSA_PROPERTY_CARRYING, speed)


def test_negative_duration_rejected():
    route = _route(0.4, 1.0, distance=100.0, hours=-2.0)
    with pytest.raises(InvalidTripInputError):
        generate_duty_events(route, "2024-03-01T08:00", US_FMCSA_PROPERTY_CARRYING, 50.0)


def test_unparseable_start_time_rejected():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    with pytest.raises(InvalidTripInputError):
        generate_duty_events(route, "first thing monday", US_FMCSA_PROPERTY_CARRYING, 50.0)


def test_profile_missing_shift_rules_rejected():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    profile = US_FMCSA_PROPERTY_CARRYING.model_dump()
    del profile["shift_rules"]["max_driving_hours"]

    with pytest.raises(InvalidTripInputError):
        generate_duty_events(route, "2024-03-01T08:00", profile, 50.0)


def test_profile_dict_is_accepted():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    from_dict = generate_duty_events(
        route, "2024-03-01T08:00", US_FMCSA_PROPERTY_CARRYING.model_dump(), 50.0, assumptions=_assumptions()
    )
    from_model = generate_duty_events(
        route, "2024-03-01T08:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
    )
    assert from_dict == from_model


def test_generation_is_deterministic():
    route = _route(0.1, 10.0, distance=1100.0, hours=22.0)
    first = generate_duty_events(route, "2024-03-01T06:00", US_FMCSA_PROPERTY_CARRYING, 50.0)
    second = generate_duty_events(route, "2024-03-01T06:00", US_FMCSA_PROPERTY_CARRYING, 50.0)
    assert first == second


def test_scheduler_without_positions_leaves_coordinates_empty():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    scheduler = DutyEventScheduler(US_FMCSA_PROPERTY_CARRYING, 50.0, _assumptions())
    events = scheduler.schedule(route, _at(1, 8))

    assert all(event.lat is None and event.lng is None for event in events)
    assert events[-1].route_miles_end == pytest.approx(100.0)


def test_rest_restarts_shift_counters_mid_trip():
    route = _route(0.1, 10.0, distance=1100.0, hours=22.0)
    scheduler = DutyEventScheduler(US_FMCSA_PROPERTY_CARRYING, 50.0, _assumptions())
    events = scheduler.schedule(route, _at(1, 6))

    rest_index = next(i for i, e in enumerate(events) if e.kind is EventKind.SLEEPER_REST)
    rest = events[rest_index]
    after = events[rest_index + 1 :]

    # 660 minutes of the second leg remain; the first chunk is capped by the
    # 8h break rule, not by anything carried over from the previous shift.
    first_drive = after[0]
    assert first_drive.kind is EventKind.DRIVING_LEG_2
    assert first_drive.start == rest.end
    assert first_drive.duration_hours == pytest.approx(8.0)

    assert after[1].kind is EventKind.BREAK
    assert after[1].start == _at(2, 12, 45)
    assert after[2].kind is EventKind.DRIVING_LEG_2
    assert after[2].duration_hours == pytest.approx(3.0)
    assert after[3].kind is EventKind.DROPOFF


@pytest.mark.parametrize(
    "section, field, value",
    [
        ("shift_rules", "min_off_duty_before_shift_hours", 1e9),
        ("shift_rules", "max_driving_hours", float("inf")),
        ("shift_rules", "max_duty_window_hours", float("nan")),
        ("break_rules", "required_after_driving_hours", 169.0),
        ("break_rules", "break_duration_minutes", 10**13),
    ],
)
def test_out_of_range_profile_values_rejected(section, field, value):
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    profile = US_FMCSA_PROPERTY_CARRYING.model_dump()
    profile[section][field] = value

    with pytest.raises(InvalidTripInputError):
        generate_duty_events(route, "2024-03-01T08:00", profile, 50.0, assumptions=_assumptions())


def test_unvalidated_profile_overflow_is_invalid_input():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)
    profile = _profile(max_driving_hours=float("inf"))

    with pytest.raises(InvalidTripInputError):
        generate_duty_events(route, "2024-03-01T08:00", profile, 50.0, assumptions=_assumptions())


def test_trip_running_past_calendar_end_is_invalid_input():
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)

    with pytest.raises(InvalidTripInputError, match="calendar range"):
        generate_duty_events(
            route, "9999-12-31T20:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions()
        )


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_iterations": 0},
        {"max_iterations": -5},
        {"leg_one_exhaustion": "Raise"},
        {"leg_one_exhaustion": "skip"},
    ],
)
def test_bad_assumptions_rejected(overrides):
    route = _route(0.4, 1.0, distance=100.0, hours=2.0)

    with pytest.raises(InvalidTripInputError):
        generate_duty_events(
            route, "2024-03-01T08:00", US_FMCSA_PROPERTY_CARRYING, 50.0, assumptions=_assumptions(**overrides)
        )
