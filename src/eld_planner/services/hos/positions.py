"""Map positions for duty events.

Driving events are placed at the route mile where they begin. Stops that
happen mid-route (fuel, breaks, sleeper rests) would otherwise stack on top
of the preceding driving marker, so each one pushes later markers a few
miles further along the polyline. These offsets are cosmetic: they never
change ``route_miles_start``/``route_miles_end`` and must not be read as
odometer data.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from ...config import settings
from ...models.domain import DutyEvent, EventKind
from ..geospatial import Coordinate, position_at_distance


@dataclass(slots=True, frozen=True)
class DisplayOffsets:
    fuel_stop_miles: float = settings.fuel_marker_offset_miles
    break_miles: float = settings.break_marker_offset_miles
    sleeper_rest_miles: float = settings.rest_marker_offset_miles

    def for_kind(self, kind: EventKind) -> float:
        if kind is EventKind.FUEL_STOP:
            return self.fuel_stop_miles
        if kind is EventKind.BREAK:
            return self.break_miles
        if kind is EventKind.SLEEPER_REST:
            return self.sleeper_rest_miles
        return 0.0


def annotate_positions(
    events: Sequence[DutyEvent],
    polyline: Sequence[Coordinate],
    offsets: DisplayOffsets | None = None,
) -> list[DutyEvent]:
    offsets = offsets or DisplayOffsets()
    shift = 0.0
    annotated: list[DutyEvent] = []
    for event in events:
        lat, lng = position_at_distance(event.route_miles_start + shift, polyline)
        annotated.append(replace(event, lat=lat, lng=lng))
        shift += offsets.for_kind(event.kind)
    return annotated
