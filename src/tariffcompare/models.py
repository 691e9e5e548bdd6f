"""Data models for tariffs, usage assumptions and charging estimates."""

from dataclasses import dataclass

VARIABLE = "Variable"
FIXED = "Fixed"
TARIFF_TYPES = (VARIABLE, FIXED)


@dataclass(frozen=True)
class Tariff:
    """An electricity tariff with an optional EV (off-peak) rate."""

    id: str
    name: str
    unit_rate: float  # pence per kWh
    standing_charge: float  # pence per day
    ev_rate: float | None = None  # pence per kWh, None if not applicable
    tariff_type: str = VARIABLE
    fixed_term: str | None = None  # e.g. "12 months"
    off_peak_start: str | None = None  # HH:MM, only if ev_rate is set
    off_peak_end: str | None = None  # HH:MM, only if ev_rate is set
    notes: str | None = None


@dataclass(frozen=True)
class UsageAssumptions:
    """Household consumption profile used for every tariff."""

    household_usage: float  # kWh per year
    ev_usage: float  # kWh per year
    ev_off_peak_percentage: float  # 0-100


@dataclass(frozen=True)
class TariffWithCost:
    """A tariff with its estimated annual cost in pounds."""

    tariff: Tariff
    annual_cost: float


@dataclass(frozen=True)
class Preferences:
    """Display preferences persisted between runs."""

    selected_tariff_for_view: str = ""
    active_tab: str = "ev-charging"


@dataclass(frozen=True)
class ChargingScenario:
    """A named partial charge, e.g. 20% to 80%."""

    id: str
    name: str
    charge_fraction: float  # 0-1


@dataclass(frozen=True)
class ChargerPower:
    """A charger rating used for charging time estimates."""

    power_kw: float
    name: str


@dataclass(frozen=True)
class ChargingDuration:
    """Time to deliver a charge, split into whole hours and minutes."""

    hours: int
    minutes: int


@dataclass(frozen=True)
class Vehicle:
    """The electric vehicle charging estimates are made for."""

    model: str
    battery_kwh: float
    efficiency_miles_per_kwh: float
    range_miles: int
