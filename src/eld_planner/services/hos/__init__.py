"""Hours-of-Service scheduling services."""

from .errors import InvalidTripInputError, SchedulingError
from .partitioner import split_events_into_days
from .positions import DisplayOffsets, annotate_positions
from .profiles import get_profile
from .scheduler import DutyEventScheduler, TripAssumptions, generate_duty_events

__all__ = [
    "DisplayOffsets",
    "DutyEventScheduler",
    "InvalidTripInputError",
    "SchedulingError",
    "TripAssumptions",
    "annotate_positions",
    "generate_duty_events",
    "get_profile",
    "split_events_into_days",
]
