"""Tariff cost calculation.

All rates are in pence (per kWh, or per day for standing charges) and all
returned costs are in pounds.
"""

import math
from typing import Iterable

from .models import (
    ChargerPower,
    ChargingDuration,
    ChargingScenario,
    Tariff,
    TariffWithCost,
    UsageAssumptions,
)

DAYS_PER_YEAR = 365


class CalculationError(ValueError):
    """Raised when a calculation input is outside its numeric domain."""
    pass


def _check_non_negative(value: float, label: str) -> None:
    if not math.isfinite(value) or value < 0:
        raise CalculationError(f"{label} must be a non-negative number (got {value})")


def _check_percentage(value: float, label: str) -> None:
    if not math.isfinite(value) or not 0 <= value <= 100:
        raise CalculationError(f"{label} must be between 0 and 100 (got {value})")


def _check_fraction(value: float) -> None:
    if not math.isfinite(value) or not 0 <= value <= 1:
        raise CalculationError(f"Charge fraction must be between 0 and 1 (got {value})")


def _check_tariff(tariff: Tariff) -> None:
    _check_non_negative(tariff.unit_rate, "Unit rate")
    _check_non_negative(tariff.standing_charge, "Standing charge")
    if tariff.ev_rate is not None:
        _check_non_negative(tariff.ev_rate, "EV rate")


def calculate_annual_cost(tariff: Tariff, usage: UsageAssumptions) -> float:
    """Estimate the annual cost of a tariff in pounds.

    EV usage is split between the EV rate and the unit rate only when the
    tariff has an EV rate and some EV charging is assumed to be off-peak.
    A zero off-peak percentage puts all EV usage on the unit rate.
    """
    _check_tariff(tariff)
    _check_non_negative(usage.household_usage, "Household usage")
    _check_non_negative(usage.ev_usage, "EV usage")
    _check_percentage(usage.ev_off_peak_percentage, "EV off-peak percentage")

    household_cost = usage.household_usage * tariff.unit_rate

    if tariff.ev_rate is not None and usage.ev_off_peak_percentage > 0:
        ev_off_peak_usage = usage.ev_usage * (usage.ev_off_peak_percentage / 100)
        ev_peak_usage = usage.ev_usage - ev_off_peak_usage
        ev_cost = ev_off_peak_usage * tariff.ev_rate + ev_peak_usage * tariff.unit_rate
    else:
        ev_cost = usage.ev_usage * tariff.unit_rate

    standing_cost = tariff.standing_charge * DAYS_PER_YEAR

    return (household_cost + ev_cost + standing_cost) / 100


def calculate_scenario_cost(
    tariff: Tariff,
    battery_kwh: float,
    charge_fraction: float,
    off_peak_percentage: float,
) -> float:
    """Cost in pounds of adding `charge_fraction` of the battery.

    The charge is blended across the EV and unit rates whenever the tariff
    has an EV rate that differs from its unit rate, whatever the percentage.
    """
    _check_tariff(tariff)
    _check_non_negative(battery_kwh, "Battery capacity")
    _check_fraction(charge_fraction)
    _check_percentage(off_peak_percentage, "Off-peak percentage")

    kwh = battery_kwh * charge_fraction

    if tariff.ev_rate is not None and tariff.ev_rate != tariff.unit_rate:
        off_peak_kwh = kwh * (off_peak_percentage / 100)
        peak_kwh = kwh - off_peak_kwh
        return (off_peak_kwh * tariff.ev_rate + peak_kwh * tariff.unit_rate) / 100

    return (kwh * charging_rate_for(tariff)) / 100


def calculate_charging_duration(
    battery_kwh: float, charge_fraction: float, power_kw: float
) -> ChargingDuration:
    """Time to deliver a charge at a constant charger power."""
    _check_non_negative(battery_kwh, "Battery capacity")
    _check_fraction(charge_fraction)
    if not math.isfinite(power_kw) or power_kw <= 0:
        raise CalculationError(f"Charger power must be greater than 0 (got {power_kw})")

    hours = (battery_kwh * charge_fraction) / power_kw
    whole_hours = math.floor(hours)
    # Round half up, as a display clock would
    minutes = math.floor((hours - whole_hours) * 60 + 0.5)
    if minutes == 60:
        whole_hours += 1
        minutes = 0

    return ChargingDuration(hours=whole_hours, minutes=minutes)


def charging_rate_for(tariff: Tariff) -> float:
    """The headline rate for EV charging: the EV rate if set, else the unit rate."""
    return tariff.ev_rate if tariff.ev_rate is not None else tariff.unit_rate


def with_annual_costs(
    tariffs: Iterable[Tariff], usage: UsageAssumptions
) -> list[TariffWithCost]:
    """Attach an annual cost to each tariff, keeping input order."""
    return [TariffWithCost(tariff=t, annual_cost=calculate_annual_cost(t, usage)) for t in tariffs]


def rank_by_annual_cost(
    tariffs: Iterable[Tariff], usage: UsageAssumptions
) -> list[TariffWithCost]:
    """Tariffs with costs, cheapest first. Ties keep their input order."""
    return sorted(with_annual_costs(tariffs, usage), key=lambda t: t.annual_cost)


def charging_estimates(
    tariff: Tariff,
    usage: UsageAssumptions,
    battery_kwh: float,
    scenarios: Iterable[ChargingScenario],
    powers: Iterable[ChargerPower],
) -> list[dict]:
    """Build cost and charging time estimates for each scenario.

    Returns one dict per scenario with 'scenario', 'kwh', 'cost' and a
    'durations' list of (ChargerPower, ChargingDuration) pairs.
    """
    powers = list(powers)
    estimates = []
    for scenario in scenarios:
        estimates.append(
            {
                "scenario": scenario,
                "kwh": battery_kwh * scenario.charge_fraction,
                "cost": calculate_scenario_cost(
                    tariff,
                    battery_kwh,
                    scenario.charge_fraction,
                    usage.ev_off_peak_percentage,
                ),
                "durations": [
                    (
                        power,
                        calculate_charging_duration(
                            battery_kwh, scenario.charge_fraction, power.power_kw
                        ),
                    )
                    for power in powers
                ],
            }
        )
    return estimates
