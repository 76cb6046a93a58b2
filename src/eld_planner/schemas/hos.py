"""Hours-of-Service profile schemas."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import DutyStatus


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class DutyStatusRule(_Frozen):
    counts_toward_driving: bool
    counts_toward_on_duty: bool
    counts_toward_duty_window: bool
    qualifies_as_rest: bool


# One week.
MAX_RULE_HOURS = 168.0
MAX_BREAK_MINUTES = 24 * 60


class ShiftRules(_Frozen):
    min_off_duty_before_shift_hours: float = Field(..., gt=0, le=MAX_RULE_HOURS, allow_inf_nan=False)
    max_driving_hours: float = Field(..., gt=0, le=MAX_RULE_HOURS, allow_inf_nan=False)
    max_duty_window_hours: float = Field(..., gt=0, le=MAX_RULE_HOURS, allow_inf_nan=False)
    allow_driving_after_duty_window: bool = False


class BreakRules(_Frozen):
    required_after_driving_hours: float = Field(..., gt=0, le=MAX_RULE_HOURS, allow_inf_nan=False)
    break_duration_minutes: int = Field(..., gt=0, le=MAX_BREAK_MINUTES)
    qualifying_statuses: List[DutyStatus] = Field(
        default_factory=lambda: [
            DutyStatus.OFF_DUTY,
            DutyStatus.SLEEPER_BERTH,
            DutyStatus.ON_DUTY_NOT_DRIVING,
        ]
    )
    must_be_continuous: bool = True


class CycleOption(_Frozen):
    id: Literal["60_in_7", "70_in_8"]
    label: str
    max_on_duty_hours: float = Field(..., gt=0)
    period_days: int = Field(..., ge=1)


class CycleRestart(_Frozen):
    enabled: bool = True
    duration_hours: float = Field(34, gt=0)
    must_be_continuous: bool = True


class CycleRules(_Frozen):
    supported_cycles: List[CycleOption] = Field(default_factory=list)
    default_cycle_id: Literal["60_in_7", "70_in_8"] = "70_in_8"
    restart: CycleRestart = Field(default_factory=CycleRestart)


class SplitSleeperOption(_Frozen):
    sleeper_min_hours: float = Field(..., gt=0)
    other_min_hours: float = Field(..., gt=0)
    other_allowed_statuses: List[DutyStatus] = Field(default_factory=list)


class SleeperBerthRules(_Frozen):
    enabled: bool = False
    split_options: List[SplitSleeperOption] = Field(default_factory=list)
    sleeper_status: Literal["sleeper_berth"] = "sleeper_berth"
    allow_split_to_pause_duty_window: bool = False
    allow_split_to_satisfy_shift_off_duty: bool = False


class AdverseDrivingConditions(_Frozen):
    enabled: bool = False
    extra_driving_hours: float = Field(0, ge=0)
    extra_duty_window_hours: float = Field(0, ge=0)


class ShortHaul(_Frozen):
    enabled: bool = False
    max_radius_air_miles: float = Field(150, ge=0)
    max_duty_hours: float = Field(14, ge=0)
    max_driving_hours: float = Field(11, ge=0)
    logbook_not_required: bool = True


class ExceptionRules(_Frozen):
    adverse_driving_conditions: AdverseDrivingConditions = Field(default_factory=AdverseDrivingConditions)
    short_haul: ShortHaul = Field(default_factory=ShortHaul)


class TimeRules(_Frozen):
    timezone_strategy: Literal["home_terminal", "driver_device", "utc"] = "home_terminal"
    precision: Literal["minute"] = "minute"
    rolling_windows: bool = True
    require_audit_trail_for_edits: bool = True


class ApproachingLimitAlert(_Frozen):
    type: Literal["driving", "duty_window", "break", "cycle"]
    threshold_minutes: int = Field(..., ge=0)


class AlertRules(_Frozen):
    approaching: List[ApproachingLimitAlert] = Field(default_factory=list)


class HosProfile(_Frozen):
    """Regulatory profile for one scheduling run.

    Only ``shift_rules`` and ``break_rules`` drive the scheduler. The cycle,
    sleeper-berth, exception, time and alert sections are carried so callers
    can round-trip a complete profile.
    """

    profile_id: str
    label: str
    duty_statuses: Dict[DutyStatus, DutyStatusRule]
    shift_rules: ShiftRules
    break_rules: BreakRules
    cycle_rules: CycleRules = Field(default_factory=CycleRules)
    sleeper_berth_rules: SleeperBerthRules = Field(default_factory=SleeperBerthRules)
    exceptions: ExceptionRules = Field(default_factory=ExceptionRules)
    time_rules: TimeRules = Field(default_factory=TimeRules)
    alerts: AlertRules = Field(default_factory=AlertRules)
