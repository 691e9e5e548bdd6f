"""Default records written to the store on first use."""

from .models import (
    FIXED,
    VARIABLE,
    ChargerPower,
    ChargingScenario,
    Preferences,
    Tariff,
    UsageAssumptions,
    Vehicle,
)

DEFAULT_TARIFFS: tuple[Tariff, ...] = (
    Tariff(
        id="1",
        name="So Flex (Current)",
        unit_rate=26.17,
        ev_rate=None,
        standing_charge=58.63,
        tariff_type=VARIABLE,
        notes="Flat rate; no exit fee",
    ),
    Tariff(
        id="2",
        name="Fuse Off-Peak Fixed (12m) v2 – Ideal Case",
        unit_rate=27.58,
        ev_rate=12.76,
        standing_charge=48.13,
        tariff_type=FIXED,
        fixed_term="12 months",
        off_peak_start="01:30",
        off_peak_end="08:30",
        notes="EV charged between 01:30–08:30",
    ),
    Tariff(
        id="3",
        name="Fuse Off-Peak Fixed (12m) v2 – Worst Case",
        unit_rate=27.58,
        ev_rate=27.58,  # same as peak for the worst case
        standing_charge=48.13,
        tariff_type=FIXED,
        fixed_term="12 months",
        off_peak_start="01:30",
        off_peak_end="08:30",
        notes="EV charged outside off-peak hours",
    ),
    Tariff(
        id="4",
        name="Fuse Single Rate Variable",
        unit_rate=24.61,
        ev_rate=None,
        standing_charge=55.94,
        tariff_type=VARIABLE,
        notes="No peak/off-peak split",
    ),
    Tariff(
        id="5",
        name="So Chestnut One Year",
        unit_rate=21.97,
        ev_rate=None,
        standing_charge=61.2,
        tariff_type=FIXED,
        fixed_term="12 months",
        notes="Flat rate",
    ),
)

DEFAULT_USAGE = UsageAssumptions(
    household_usage=3190.5,
    ev_usage=834,
    ev_off_peak_percentage=100,
)

DEFAULT_PREFERENCES = Preferences(selected_tariff_for_view="", active_tab="ev-charging")

# 2021 Vauxhall Mokka-e
DEFAULT_VEHICLE = Vehicle(
    model="2021 Vauxhall Mokka-e",
    battery_kwh=50,
    efficiency_miles_per_kwh=3.6,
    range_miles=201,
)

CHARGING_SCENARIOS: tuple[ChargingScenario, ...] = (
    ChargingScenario("typical", "20% → 80% (typical daily charge)", 0.6),
    ChargingScenario("full", "0% → 100% (full charge)", 1.0),
    ChargingScenario("topup", "10% → 50% (short top-up)", 0.4),
    ChargingScenario("journey", "50% → 100% (long journey prep)", 0.5),
)

CHARGER_POWERS: tuple[ChargerPower, ...] = (
    ChargerPower(7.4, "7.4 kW (Home Wallbox)"),
    ChargerPower(3.6, "3.6 kW (Slow Charger)"),
    ChargerPower(22, "22 kW (Fast Charger)"),
    ChargerPower(50, "50 kW (Rapid Charger)"),
    ChargerPower(150, "150 kW (Ultra-Rapid Charger)"),
)

ACTIVE_TABS = ("ev-charging", "usage-assumptions")
