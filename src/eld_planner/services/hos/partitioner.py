"""Split a duty event sequence into calendar-day logs."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Sequence

from ...models.domain import DailyLog, DutyEvent, DutyStatus, LogEntry


def _next_midnight(moment: datetime) -> datetime:
    return datetime.combine(moment.date() + timedelta(days=1), time.min)


def split_events_into_days(events: Sequence[DutyEvent], average_speed: float) -> list[DailyLog]:
    """Clip events at local midnight and total them per calendar date.

    Events are expected to be contiguous and ordered, as produced by the
    scheduler; this function does not re-check that.
    """

    logs: dict[date, DailyLog] = {}
    for event in events:
        current = event.start
        while current < event.end:
            segment_end = min(event.end, _next_midnight(current))
            entry = LogEntry(
                status=event.status,
                kind=event.kind,
                start=current,
                end=segment_end,
                location=event.location,
                remarks=event.remarks,
                lat=event.lat,
                lng=event.lng,
            )
            log = logs.get(current.date())
            if log is None:
                log = logs[current.date()] = DailyLog(date=current.date())
            log.events.append(entry)
            log.totals[event.status] += entry.duration_hours
            if event.status is DutyStatus.DRIVING:
                log.total_miles += entry.duration_hours * average_speed
            current = segment_end

    return [logs[key] for key in sorted(logs)]
