"""Tariff list management and YAML import/export."""

import time as time_module
from dataclasses import replace
from datetime import time
from pathlib import Path

import yaml

from .models import FIXED, VARIABLE, Preferences, Tariff
from .store import (
    load_preferences,
    load_tariffs,
    save_preferences,
    save_tariffs,
    tariff_from_dict,
    tariff_to_dict,
)
from .validation import ValidationError, validate_tariff

EV_CHARGING_TAB = "ev-charging"


class TariffNotFoundError(ValueError):
    """Raised when a tariff id does not match any stored tariff."""
    pass


def parse_time(time_str: str) -> time:
    """Parse HH:MM string to time object."""
    parts = time_str.split(":")
    return time(int(parts[0]), int(parts[1]))


def load_tariffs_from_yaml(config_path: Path) -> list[Tariff]:
    """Load and validate tariff definitions from a YAML file."""
    with open(config_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"{config_path}: invalid YAML: {e}")

    if not isinstance(data, dict):
        raise ValidationError(f"{config_path}: expected a mapping with a 'tariffs' list")
    items = data.get("tariffs") or []
    if not isinstance(items, list):
        raise ValidationError(f"{config_path}: 'tariffs' must be a list")

    tariffs = []
    for i, t in enumerate(items):
        if not isinstance(t, dict):
            raise ValidationError(f"{config_path}: tariff {i + 1} must be a mapping")
        if "id" not in t:
            t = {**t, "id": f"yaml-{i + 1}"}
        tariffs.append(validate_tariff(tariff_from_dict(t)))
    return tariffs


def export_tariffs_to_yaml(tariffs: list[Tariff], config_path: Path) -> int:
    """Write tariffs to a YAML file. Returns number of tariffs written."""
    with open(config_path, "w") as f:
        yaml.safe_dump(
            {"tariffs": [tariff_to_dict(t) for t in tariffs]},
            f,
            sort_keys=False,
            allow_unicode=True,
        )
    return len(tariffs)


def import_tariffs(
    config_path: Path, db_path: Path | None = None, replace_existing: bool = False
) -> dict:
    """Import tariffs from YAML into the store.

    Tariffs whose id is already stored are skipped unless replace_existing
    is set. Returns dict with 'imported' and 'skipped' counts.
    """
    incoming = load_tariffs_from_yaml(config_path)
    tariffs = load_tariffs(db_path)
    by_id = {t.id: i for i, t in enumerate(tariffs)}

    imported = 0
    skipped = 0
    for tariff in incoming:
        if tariff.id in by_id:
            if not replace_existing:
                skipped += 1
                continue
            tariffs[by_id[tariff.id]] = tariff
        else:
            by_id[tariff.id] = len(tariffs)
            tariffs.append(tariff)
        imported += 1

    save_tariffs(tariffs, db_path)
    return {"imported": imported, "skipped": skipped}


def new_tariff_id(existing_ids: set[str]) -> str:
    """Generate an id from the current time in milliseconds."""
    candidate = int(time_module.time() * 1000)
    while str(candidate) in existing_ids:
        candidate += 1
    return str(candidate)


def get_tariff(tariff_id: str, db_path: Path | None = None) -> Tariff:
    """Get a stored tariff by id."""
    for tariff in load_tariffs(db_path):
        if tariff.id == tariff_id:
            return tariff
    raise TariffNotFoundError(f"No tariff found with id {tariff_id}")


def add_tariff(tariff: Tariff, db_path: Path | None = None) -> Tariff:
    """Validate and store a new tariff, assigning it a fresh id."""
    tariffs = load_tariffs(db_path)
    new = replace(validate_tariff(tariff), id=new_tariff_id({t.id for t in tariffs}))
    tariffs.append(new)
    save_tariffs(tariffs, db_path)
    return new


def update_tariff(tariff: Tariff, db_path: Path | None = None) -> Tariff:
    """Replace the stored tariff that has the same id."""
    validate_tariff(tariff)
    tariffs = load_tariffs(db_path)
    if not any(t.id == tariff.id for t in tariffs):
        raise TariffNotFoundError(f"No tariff found with id {tariff.id}")
    save_tariffs([tariff if t.id == tariff.id else t for t in tariffs], db_path)
    return tariff


def delete_tariff(tariff_id: str, db_path: Path | None = None) -> None:
    """Delete a tariff, moving the viewed tariff elsewhere if it was deleted."""
    tariffs = load_tariffs(db_path)
    remaining = [t for t in tariffs if t.id != tariff_id]
    if len(remaining) == len(tariffs):
        raise TariffNotFoundError(f"No tariff found with id {tariff_id}")
    save_tariffs(remaining, db_path)

    preferences = load_preferences(db_path)
    if preferences.selected_tariff_for_view == tariff_id:
        new_selected = remaining[0].id if remaining else ""
        save_preferences(replace(preferences, selected_tariff_for_view=new_selected), db_path)


def select_tariff_for_view(tariff_id: str, db_path: Path | None = None) -> Preferences:
    """Show EV estimates for a tariff, switching to the EV charging tab."""
    get_tariff(tariff_id, db_path)
    preferences = replace(
        load_preferences(db_path),
        selected_tariff_for_view=tariff_id,
        active_tab=EV_CHARGING_TAB,
    )
    save_preferences(preferences, db_path)
    return preferences


def get_selected_tariff(db_path: Path | None = None) -> Tariff | None:
    """Get the tariff selected for view.

    Falls back to (and stores) the first tariff when the selection is empty
    or no longer exists. Returns None when there are no tariffs.
    """
    tariffs = load_tariffs(db_path)
    if not tariffs:
        return None

    preferences = load_preferences(db_path)
    for tariff in tariffs:
        if tariff.id == preferences.selected_tariff_for_view:
            return tariff

    save_preferences(replace(preferences, selected_tariff_for_view=tariffs[0].id), db_path)
    return tariffs[0]


def build_tariff(
    name: str,
    unit_rate: float,
    standing_charge: float,
    ev_rate: float | None = None,
    tariff_type: str = VARIABLE,
    fixed_term: str | None = None,
    off_peak_start: str | None = None,
    off_peak_end: str | None = None,
    notes: str | None = None,
    tariff_id: str = "",
) -> Tariff:
    """Build a validated tariff from form-style inputs.

    The off-peak window is dropped when there is no EV rate, and the fixed
    term is dropped for Variable tariffs.
    """
    if ev_rate is None:
        off_peak_start = off_peak_end = None
    if tariff_type != FIXED:
        fixed_term = None
    tariff = Tariff(
        id=tariff_id,
        name=name,
        unit_rate=unit_rate,
        ev_rate=ev_rate,
        standing_charge=standing_charge,
        tariff_type=tariff_type,
        fixed_term=fixed_term or None,
        off_peak_start=off_peak_start or None,
        off_peak_end=off_peak_end or None,
        notes=notes or None,
    )
    return validate_tariff(tariff)
