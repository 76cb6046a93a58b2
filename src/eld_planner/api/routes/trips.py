"""Trip planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import PlainTextResponse

from ...schemas.trips import TripPlanRequest, TripPlanResponse
from ...services.hos.errors import SchedulingError
from ...services.outputs.log_formatter import daily_logs_to_csv
from ...services.trips.service import build_trip_plan, plan_trip

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/plan", response_model=TripPlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: TripPlanRequest) -> TripPlanResponse:
    try:
        return plan_trip(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SchedulingError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning trip: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan trip: {str(exc)}"
        ) from exc


@router.post("/logs.csv", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def plan_logs_csv(payload: TripPlanRequest) -> PlainTextResponse:
    """Daily log sub-events as CSV, one row per grid segment."""
    try:
        _, logs, _, _ = build_trip_plan(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SchedulingError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error exporting trip logs: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export trip logs: {str(exc)}"
        ) from exc
    return PlainTextResponse(daily_logs_to_csv(logs), media_type="text/csv")
