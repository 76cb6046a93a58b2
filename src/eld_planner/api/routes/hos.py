"""HOS profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.hos import HosProfile
from ...services.hos.profiles import PROFILES, get_profile

router = APIRouter(tags=["hos"])


@router.get("/hos-config", response_model=HosProfile, status_code=status.HTTP_200_OK)
def hos_config(
    profile_id: str | None = Query(default=None, description="Profile identifier; defaults to the configured profile."),
) -> HosProfile:
    try:
        return get_profile(profile_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/hos-config/profiles", status_code=status.HTTP_200_OK)
def list_profiles() -> list[dict]:
    return [{"profile_id": key, "label": profile.label} for key, profile in PROFILES.items()]
