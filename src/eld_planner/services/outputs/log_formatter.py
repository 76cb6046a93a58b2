"""Serializers for duty events and daily logs."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ...models.domain import DailyLog, DutyEvent


def duty_events_to_json(events: Sequence[DutyEvent]) -> list[dict]:
    return [
        {
            "status": event.status.value,
            "kind": event.kind.value,
            "start": event.start.isoformat(),
            "end": event.end.isoformat(),
            "duration_hours": event.duration_hours,
            "location": event.location,
            "remarks": event.remarks,
            "lat": event.lat,
            "lng": event.lng,
            "miles": event.miles,
        }
        for event in events
    ]


def daily_logs_to_json(logs: Sequence[DailyLog]) -> list[dict]:
    return [
        {
            "date": log.date.isoformat(),
            "total_miles": log.total_miles,
            "totals": {status.value: hours for status, hours in log.totals.items()},
            "events": [
                {
                    "status": entry.status.value,
                    "kind": entry.kind.value,
                    "start": entry.start.isoformat(),
                    "end": entry.end.isoformat(),
                    "start_hour": entry.start_hour,
                    "end_hour": entry.end_hour,
                    "duration_hours": entry.duration_hours,
                    "location": entry.location,
                    "remarks": entry.remarks,
                    "lat": entry.lat,
                    "lng": entry.lng,
                }
                for entry in log.events
            ],
        }
        for log in logs
    ]


def daily_logs_to_csv(logs: Sequence[DailyLog]) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "date",
        "status",
        "kind",
        "start",
        "end",
        "duration_hours",
        "location",
        "remarks",
        "day_total_miles",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for log in logs:
        for entry in log.events:
            writer.writerow(
                {
                    "date": log.date.isoformat(),
                    "status": entry.status.value,
                    "kind": entry.kind.value,
                    "start": entry.start.strftime("%H:%M"),
                    "end": entry.end.strftime("%H:%M"),
                    "duration_hours": round(entry.duration_hours, 4),
                    "location": entry.location,
                    "remarks": entry.remarks,
                    "day_total_miles": round(log.total_miles, 1),
                }
            )
    return buffer.getvalue()
