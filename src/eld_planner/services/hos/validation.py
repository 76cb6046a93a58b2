"""Input checks performed before a scheduling run."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from ...models.domain import RouteGeometry
from ...schemas.hos import HosProfile
from .errors import InvalidTripInputError


def _require_finite(name: str, value: float, *, allow_zero: bool = True) -> None:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidTripInputError(f"{name} must be a number, got {value!r}.")
    if not math.isfinite(value):
        raise InvalidTripInputError(f"{name} must be finite, got {value!r}.")
    if value < 0 or (not allow_zero and value == 0):
        bound = "positive" if not allow_zero else "non-negative"
        raise InvalidTripInputError(f"{name} must be {bound}, got {value!r}.")


def parse_start_time(value: Any, timezone: str | None = None) -> datetime:
    """Normalise a trip start into a naive local datetime truncated to the minute.

    Accepts a ``datetime`` or an ISO-8601 string. Timezone-aware values are
    converted to ``timezone`` (the home terminal zone) when one is given,
    otherwise their own wall-clock time is kept.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidTripInputError(f"Unparseable start time {value!r}.") from exc
    else:
        raise InvalidTripInputError(f"Start time must be a datetime or ISO-8601 string, got {value!r}.")

    if parsed.tzinfo is not None:
        if timezone:
            try:
                parsed = parsed.astimezone(ZoneInfo(timezone))
            except ZoneInfoNotFoundError as exc:
                raise InvalidTripInputError(f"Unknown timezone '{timezone}'.") from exc
        parsed = parsed.replace(tzinfo=None)
    return parsed.replace(second=0, microsecond=0)


def coerce_profile(profile: HosProfile | Mapping[str, Any]) -> HosProfile:
    if isinstance(profile, HosProfile):
        return profile
    try:
        return HosProfile.model_validate(profile)
    except ValidationError as exc:
        raise InvalidTripInputError(f"Invalid HOS profile: {exc}") from exc


def validate_trip_inputs(route: RouteGeometry, average_speed: float) -> None:
    _require_finite("average_speed", average_speed, allow_zero=False)
    _require_finite("distance_miles", route.distance_miles)
    _require_finite("duration_hours", route.duration_hours)
    for name, waypoint in (("origin", route.origin), ("pickup", route.pickup), ("dropoff", route.dropoff)):
        if waypoint is None:
            raise InvalidTripInputError(f"Route is missing the {name} waypoint.")
        if not (-90 <= waypoint.lat <= 90 and -180 <= waypoint.lng <= 180):
            raise InvalidTripInputError(
                f"{name} coordinates out of range: ({waypoint.lat}, {waypoint.lng})."
            )
