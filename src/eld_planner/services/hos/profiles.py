"""Built-in HOS profiles."""

from __future__ import annotations

from ...config import settings
from ...models.domain import DutyStatus
from ...schemas.hos import (
    AdverseDrivingConditions,
    AlertRules,
    ApproachingLimitAlert,
    BreakRules,
    CycleOption,
    CycleRestart,
    CycleRules,
    DutyStatusRule,
    ExceptionRules,
    HosProfile,
    ShiftRules,
    ShortHaul,
    SleeperBerthRules,
    SplitSleeperOption,
    TimeRules,
)

_REST = DutyStatusRule(
    counts_toward_driving=False,
    counts_toward_on_duty=False,
    counts_toward_duty_window=False,
    qualifies_as_rest=True,
)

US_FMCSA_PROPERTY_CARRYING = HosProfile(
    profile_id="us_fmcsa_property_carrying_interstate",
    label="US FMCSA - Property-carrying (Interstate)",
    duty_statuses={
        DutyStatus.OFF_DUTY: _REST,
        DutyStatus.SLEEPER_BERTH: _REST,
        DutyStatus.DRIVING: DutyStatusRule(
            counts_toward_driving=True,
            counts_toward_on_duty=True,
            counts_toward_duty_window=True,
            qualifies_as_rest=False,
        ),
        DutyStatus.ON_DUTY_NOT_DRIVING: DutyStatusRule(
            counts_toward_driving=False,
            counts_toward_on_duty=True,
            counts_toward_duty_window=True,
            qualifies_as_rest=False,
        ),
    },
    shift_rules=ShiftRules(
        min_off_duty_before_shift_hours=10,
        max_driving_hours=11,
        max_duty_window_hours=14,
        allow_driving_after_duty_window=False,
    ),
    break_rules=BreakRules(
        required_after_driving_hours=8,
        break_duration_minutes=30,
        qualifying_statuses=[
            DutyStatus.OFF_DUTY,
            DutyStatus.SLEEPER_BERTH,
            DutyStatus.ON_DUTY_NOT_DRIVING,
        ],
        must_be_continuous=True,
    ),
    cycle_rules=CycleRules(
        supported_cycles=[
            CycleOption(id="60_in_7", label="60 hours / 7 days", max_on_duty_hours=60, period_days=7),
            CycleOption(id="70_in_8", label="70 hours / 8 days", max_on_duty_hours=70, period_days=8),
        ],
        default_cycle_id="70_in_8",
        restart=CycleRestart(enabled=True, duration_hours=34, must_be_continuous=True),
    ),
    sleeper_berth_rules=SleeperBerthRules(
        enabled=True,
        split_options=[
            SplitSleeperOption(
                sleeper_min_hours=8,
                other_min_hours=2,
                other_allowed_statuses=[DutyStatus.OFF_DUTY, DutyStatus.SLEEPER_BERTH],
            ),
            SplitSleeperOption(
                sleeper_min_hours=7,
                other_min_hours=3,
                other_allowed_statuses=[DutyStatus.OFF_DUTY, DutyStatus.SLEEPER_BERTH],
            ),
        ],
        allow_split_to_pause_duty_window=True,
        allow_split_to_satisfy_shift_off_duty=True,
    ),
    exceptions=ExceptionRules(
        adverse_driving_conditions=AdverseDrivingConditions(
            enabled=True, extra_driving_hours=2, extra_duty_window_hours=2
        ),
        short_haul=ShortHaul(
            enabled=False,
            max_radius_air_miles=150,
            max_duty_hours=14,
            max_driving_hours=11,
            logbook_not_required=True,
        ),
    ),
    time_rules=TimeRules(
        timezone_strategy="home_terminal",
        precision="minute",
        rolling_windows=True,
        require_audit_trail_for_edits=True,
    ),
    alerts=AlertRules(
        approaching=[
            ApproachingLimitAlert(type="driving", threshold_minutes=60),
            ApproachingLimitAlert(type="duty_window", threshold_minutes=60),
            ApproachingLimitAlert(type="break", threshold_minutes=30),
            ApproachingLimitAlert(type="cycle", threshold_minutes=120),
        ]
    ),
)

PROFILES: dict[str, HosProfile] = {
    US_FMCSA_PROPERTY_CARRYING.profile_id: US_FMCSA_PROPERTY_CARRYING,
}


def get_profile(profile_id: str | None = None) -> HosProfile:
    """Return a built-in profile, defaulting to the configured one."""
    key = profile_id or settings.default_profile_id
    try:
        return PROFILES[key]
    except KeyError as exc:
        raise ValueError(f"Unknown HOS profile '{key}'.") from exc
