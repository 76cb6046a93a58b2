"""Errors raised while planning duty events."""


class InvalidTripInputError(ValueError):
    """Trip inputs were rejected before any scheduling took place."""


class SchedulingError(RuntimeError):
    """The scheduler could not produce a compliant event sequence for valid inputs."""
