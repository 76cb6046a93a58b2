"""Trip planning orchestration service."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from ...config import settings
from ...models.domain import DailyLog, DutyEvent, DutyStatus, EventKind, RouteGeometry, Waypoint
from ...schemas.hos import HosProfile
from ...schemas.trips import (
    DailyLogModel,
    DutyEventModel,
    RouteModel,
    TripPlanRequest,
    TripPlanResponse,
    TripSummaryModel,
)
from ..hos.errors import InvalidTripInputError
from ..hos.partitioner import split_events_into_days
from ..hos.profiles import get_profile
from ..hos.scheduler import generate_duty_events
from ..hos.validation import coerce_profile
from ..outputs.log_formatter import daily_logs_to_json, duty_events_to_json


def _build_route(model: RouteModel) -> RouteGeometry:
    return RouteGeometry(
        distance_miles=model.distance_miles,
        duration_hours=model.duration_hours,
        polyline=[(lat, lng) for lat, lng in model.polyline],
        origin=Waypoint(model.origin.address, model.origin.lat, model.origin.lng),
        pickup=Waypoint(model.pickup.address, model.pickup.lat, model.pickup.lng),
        dropoff=Waypoint(model.dropoff.address, model.dropoff.lat, model.dropoff.lng),
        instructions=tuple(model.instructions),
    )


def _resolve_profile(payload: TripPlanRequest) -> HosProfile:
    if payload.hos_profile is not None:
        return coerce_profile(payload.hos_profile)
    try:
        return get_profile(payload.profile_id)
    except ValueError as exc:
        raise InvalidTripInputError(str(exc)) from exc


def resolve_average_speed(route: RouteGeometry, requested: float | None) -> float:
    """Use the requested speed, else the route's own distance / duration."""

    if requested is not None:
        return requested
    if route.duration_hours > 0 and route.distance_miles > 0:
        return route.distance_miles / route.duration_hours
    return settings.default_average_speed_mph


def _summarize(
    events: Sequence[DutyEvent],
    logs: Sequence[DailyLog],
    profile: HosProfile,
    average_speed: float,
) -> TripSummaryModel:
    hours_by_status = {status: 0.0 for status in DutyStatus}
    for log in logs:
        for status, hours in log.totals.items():
            hours_by_status[status] += hours
    kinds = Counter(event.kind for event in events)
    return TripSummaryModel(
        profile_id=profile.profile_id,
        average_speed_mph=average_speed,
        start=events[0].start,
        end=events[-1].end,
        total_miles=sum(log.total_miles for log in logs),
        log_days=len(logs),
        hours_by_status=hours_by_status,
        event_counts={kind: kinds.get(kind, 0) for kind in EventKind},
    )


def build_trip_plan(payload: TripPlanRequest) -> tuple[list[DutyEvent], list[DailyLog], HosProfile, float]:
    """Run the scheduler and partitioner for a request and return the domain results."""

    route = _build_route(payload.route)
    profile = _resolve_profile(payload)
    average_speed = resolve_average_speed(route, payload.average_speed_mph)
    timezone = payload.home_terminal_timezone or settings.home_terminal_timezone

    events = generate_duty_events(route, payload.start_time, profile, average_speed, timezone=timezone)
    logs = split_events_into_days(events, average_speed)
    logging.info(
        f"Planned trip {route.origin.address} -> {route.pickup.address} -> {route.dropoff.address}: "
        f"{len(events)} events over {len(logs)} log day(s) using profile '{profile.profile_id}'"
    )
    return events, logs, profile, average_speed


def plan_trip(payload: TripPlanRequest) -> TripPlanResponse:
    events, logs, profile, average_speed = build_trip_plan(payload)
    return TripPlanResponse(
        summary=_summarize(events, logs, profile, average_speed),
        events=[DutyEventModel.model_validate(item) for item in duty_events_to_json(events)],
        logs=[DailyLogModel.model_validate(item) for item in daily_logs_to_json(logs)],
    )
