"""Validation of user-entered tariffs, usage assumptions and preferences."""

import math
import re

from .defaults import ACTIVE_TABS
from .models import FIXED, TARIFF_TYPES, Preferences, Tariff, UsageAssumptions

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ValidationError(ValueError):
    """Raised when user input breaks a form rule."""
    pass


def _non_negative(value: float) -> bool:
    return math.isfinite(value) and value >= 0


def validate_time(value: str | None, label: str) -> None:
    """Check an optional HH:MM (24-hour) time string."""
    if value is None:
        return
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(f"{label} must be a time in HH:MM format.")


def validate_tariff(tariff: Tariff) -> Tariff:
    """Validate a tariff, returning it unchanged if it is valid."""
    if not isinstance(tariff.name, str) or len(tariff.name.strip()) < 2:
        raise ValidationError("Tariff name must be at least 2 characters.")
    if not _non_negative(tariff.unit_rate):
        raise ValidationError("Unit rate must be a positive number.")
    if tariff.ev_rate is not None and not _non_negative(tariff.ev_rate):
        raise ValidationError("EV rate must be a positive number.")
    if not _non_negative(tariff.standing_charge):
        raise ValidationError("Standing charge must be a positive number.")
    if tariff.tariff_type not in TARIFF_TYPES:
        raise ValidationError(f"Tariff type must be one of: {', '.join(TARIFF_TYPES)}.")
    if tariff.fixed_term and tariff.tariff_type != FIXED:
        raise ValidationError("A fixed term only applies to Fixed tariffs.")
    validate_time(tariff.off_peak_start, "Off-peak start")
    validate_time(tariff.off_peak_end, "Off-peak end")
    return tariff


def validate_usage(usage: UsageAssumptions) -> UsageAssumptions:
    """Validate usage assumptions, returning them unchanged if valid."""
    if not math.isfinite(usage.household_usage) or usage.household_usage <= 0:
        raise ValidationError("Household usage must be a positive number.")
    if not _non_negative(usage.ev_usage):
        raise ValidationError("EV usage must be a non-negative number.")
    if not math.isfinite(usage.ev_off_peak_percentage) or not 0 <= usage.ev_off_peak_percentage <= 100:
        raise ValidationError("Percentage must be between 0 and 100.")
    return usage


def validate_preferences(preferences: Preferences) -> Preferences:
    """Validate display preferences."""
    if preferences.active_tab not in ACTIVE_TABS:
        raise ValidationError(f"Active tab must be one of: {', '.join(ACTIVE_TABS)}.")
    return preferences
