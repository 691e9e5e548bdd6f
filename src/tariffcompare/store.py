"""Key-value store for tariffs, usage assumptions and preferences.

Each record is stored as a JSON string under a fixed key in a single
SQLite table. Reading a missing key writes and returns its default.
"""

import json
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from .defaults import DEFAULT_PREFERENCES, DEFAULT_TARIFFS, DEFAULT_USAGE
from .models import Preferences, Tariff, UsageAssumptions

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "tariff-compare" / "store.db"

TARIFFS_KEY = "tariffs"
USAGE_KEY = "usageAssumptions"
PREFERENCES_KEY = "preferences"
CHECK_KEY = "debug-test"

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

# Python field name -> stored JSON key
TARIFF_FIELDS = {
    "id": "id",
    "name": "name",
    "unit_rate": "unitRate",
    "ev_rate": "evRate",
    "standing_charge": "standingCharge",
    "tariff_type": "tariffType",
    "fixed_term": "fixedTerm",
    "off_peak_start": "offPeakStart",
    "off_peak_end": "offPeakEnd",
    "notes": "notes",
}
USAGE_FIELDS = {
    "household_usage": "householdUsage",
    "ev_usage": "evUsage",
    "ev_off_peak_percentage": "evOffPeakPercentage",
}
PREFERENCE_FIELDS = {
    "selected_tariff_for_view": "selectedTariffForView",
    "active_tab": "activeTab",
}


class StoreError(Exception):
    """Raised when stored data cannot be read or written."""
    pass


def get_db_path() -> Path:
    """Get the store path, creating parent directories if needed."""
    db_path = Path(os.environ.get("TARIFFS_DB_PATH") or DEFAULT_DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


@contextmanager
def get_connection(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Get a store connection with the schema in place."""
    path = db_path or get_db_path()
    conn = None
    try:
        conn = sqlite3.connect(path)
        conn.executescript(SCHEMA)
    except sqlite3.OperationalError as e:
        if conn is not None:
            conn.close()
        raise StoreError(f"Could not open store at {path}: {e}")
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Path | None = None) -> None:
    """Initialize the store schema."""
    with get_connection(db_path) as conn:
        conn.commit()


def get_value(key: str, db_path: Path | None = None) -> str | None:
    """Get the raw string stored under a key, or None."""
    with get_connection(db_path) as conn:
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def set_value(key: str, value: str, db_path: Path | None = None) -> None:
    """Store a raw string under a key, replacing any previous value."""
    with get_connection(db_path) as conn:
        conn.execute(
            "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now().isoformat()),
        )
        conn.commit()


def _load_json(key: str, default: Any, db_path: Path | None) -> Any:
    raw = get_value(key, db_path)
    if raw is not None:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Stored value for '{key}' is not valid JSON: {e}")
        if data is not None:
            return data

    # First read: persist the default
    set_value(key, json.dumps(default), db_path)
    return default


def tariff_to_dict(tariff: Tariff) -> dict:
    """Convert a tariff to its stored JSON form."""
    data = {}
    for field, key in TARIFF_FIELDS.items():
        value = getattr(tariff, field)
        if value is None and field != "ev_rate":
            continue
        data[key] = value
    return data


def tariff_from_dict(data: dict) -> Tariff:
    """Build a tariff from its stored JSON form."""
    try:
        kwargs = {field: data.get(key) for field, key in TARIFF_FIELDS.items() if key in data}
        for field in ("unit_rate", "standing_charge"):
            kwargs[field] = float(kwargs[field])
        if kwargs.get("ev_rate") is not None:
            kwargs["ev_rate"] = float(kwargs["ev_rate"])
        kwargs["id"] = str(kwargs["id"])
        return Tariff(**kwargs)
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Invalid tariff record {data!r}: {e}")


def usage_to_dict(usage: UsageAssumptions) -> dict:
    return {key: getattr(usage, field) for field, key in USAGE_FIELDS.items()}


def usage_from_dict(data: dict) -> UsageAssumptions:
    try:
        return UsageAssumptions(**{field: float(data[key]) for field, key in USAGE_FIELDS.items()})
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Invalid usage assumptions record {data!r}: {e}")


def preferences_to_dict(preferences: Preferences) -> dict:
    return {key: getattr(preferences, field) for field, key in PREFERENCE_FIELDS.items()}


def preferences_from_dict(data: dict) -> Preferences:
    defaults = asdict(Preferences())
    return Preferences(
        **{field: data.get(key, defaults[field]) for field, key in PREFERENCE_FIELDS.items()}
    )


def load_tariffs(db_path: Path | None = None) -> list[Tariff]:
    """Load the tariff list, initializing it with the defaults on first read."""
    data = _load_json(TARIFFS_KEY, [tariff_to_dict(t) for t in DEFAULT_TARIFFS], db_path)
    if not isinstance(data, list):
        raise StoreError(f"Stored value for '{TARIFFS_KEY}' is not a list")
    return [tariff_from_dict(item) for item in data]


def save_tariffs(tariffs: list[Tariff], db_path: Path | None = None) -> None:
    """Replace the stored tariff list."""
    set_value(TARIFFS_KEY, json.dumps([tariff_to_dict(t) for t in tariffs]), db_path)


def load_usage(db_path: Path | None = None) -> UsageAssumptions:
    """Load usage assumptions, initializing them with the defaults on first read."""
    return usage_from_dict(_load_json(USAGE_KEY, usage_to_dict(DEFAULT_USAGE), db_path))


def save_usage(usage: UsageAssumptions, db_path: Path | None = None) -> None:
    """Replace the stored usage assumptions."""
    set_value(USAGE_KEY, json.dumps(usage_to_dict(usage)), db_path)


def load_preferences(db_path: Path | None = None) -> Preferences:
    """Load preferences, initializing them with the defaults on first read."""
    data = _load_json(PREFERENCES_KEY, preferences_to_dict(DEFAULT_PREFERENCES), db_path)
    if not isinstance(data, dict):
        raise StoreError(f"Stored value for '{PREFERENCES_KEY}' is not an object")
    return preferences_from_dict(data)


def save_preferences(preferences: Preferences, db_path: Path | None = None) -> None:
    """Replace the stored preferences."""
    set_value(PREFERENCES_KEY, json.dumps(preferences_to_dict(preferences)), db_path)


def check_store(db_path: Path | None = None) -> dict:
    """Write and read back a probe value to check the store works.

    Returns dict with 'path', 'configured', 'connected' and 'error'.
    """
    path = db_path or get_db_path()
    result = {
        "path": str(path),
        "configured": bool(db_path or os.environ.get("TARIFFS_DB_PATH")),
        "connected": False,
        "error": None,
    }
    try:
        set_value(CHECK_KEY, "test-value", path)
        result["connected"] = get_value(CHECK_KEY, path) == "test-value"
    except (StoreError, sqlite3.Error) as e:
        result["error"] = str(e)
    return result


def get_stats(db_path: Path | None = None) -> dict:
    """Get store statistics: each key with its size and last update."""
    with get_connection(db_path) as conn:
        rows = conn.execute(
            "SELECT key, LENGTH(value) as size, updated_at FROM kv_store ORDER BY key"
        ).fetchall()
    return {
        row["key"]: {"size": row["size"], "updated_at": row["updated_at"]} for row in rows
    }
