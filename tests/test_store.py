"""Tests for the key-value store."""

import json

import pytest

from tariffcompare import store
from tariffcompare.defaults import DEFAULT_PREFERENCES, DEFAULT_TARIFFS, DEFAULT_USAGE
from tariffcompare.models import Tariff, UsageAssumptions


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "store.db"


def test_get_missing_key_returns_none(db_path):
    assert store.get_value("tariffs", db_path) is None


def test_set_replaces_value(db_path):
    store.set_value("k", "one", db_path)
    store.set_value("k", "two", db_path)
    assert store.get_value("k", db_path) == "two"


def test_first_read_writes_defaults(db_path):
    """Reading a missing record returns and stores its default."""
    assert store.load_tariffs(db_path) == list(DEFAULT_TARIFFS)
    assert store.load_usage(db_path) == DEFAULT_USAGE
    assert store.load_preferences(db_path) == DEFAULT_PREFERENCES

    stored = json.loads(store.get_value(store.TARIFFS_KEY, db_path))
    assert stored[0]["name"] == "So Flex (Current)"
    assert json.loads(store.get_value(store.USAGE_KEY, db_path)) == {
        "householdUsage": 3190.5,
        "evUsage": 834,
        "evOffPeakPercentage": 100,
    }


def test_saved_records_replace_wholesale(db_path):
    new_usage = UsageAssumptions(household_usage=2700, ev_usage=2000, ev_off_peak_percentage=80)
    store.save_usage(new_usage, db_path)
    assert store.load_usage(db_path) == new_usage

    store.save_tariffs([], db_path)
    assert store.load_tariffs(db_path) == []


def test_tariff_json_uses_camel_case_and_keeps_null_ev_rate():
    tariff = Tariff(id="9", name="Flat", unit_rate=20.0, standing_charge=50.0)
    assert store.tariff_to_dict(tariff) == {
        "id": "9",
        "name": "Flat",
        "unitRate": 20.0,
        "evRate": None,
        "standingCharge": 50.0,
        "tariffType": "Variable",
    }


def test_tariff_from_dict_ignores_extra_keys():
    data = {
        "id": 7,
        "name": "Old",
        "unitRate": "25",
        "evRate": None,
        "standingCharge": 40,
        "tariffType": "Variable",
        "annualCost": 999,
    }
    tariff = store.tariff_from_dict(data)
    assert tariff.id == "7"
    assert tariff.unit_rate == 25.0
    assert tariff.ev_rate is None


def test_corrupt_json_raises(db_path):
    store.set_value(store.USAGE_KEY, "{not json", db_path)
    with pytest.raises(store.StoreError, match="not valid JSON"):
        store.load_usage(db_path)


def test_null_value_is_reinitialized(db_path):
    store.set_value(store.PREFERENCES_KEY, "null", db_path)
    assert store.load_preferences(db_path) == DEFAULT_PREFERENCES


def test_tariff_missing_unit_rate_raises(db_path):
    store.set_value(store.TARIFFS_KEY, json.dumps([{"id": "1", "name": "X", "standingCharge": 1}]), db_path)
    with pytest.raises(store.StoreError, match="Invalid tariff record"):
        store.load_tariffs(db_path)


def test_check_store(db_path):
    result = store.check_store(db_path)
    assert result["connected"] is True
    assert result["error"] is None
    assert result["path"] == str(db_path)


def test_check_store_reports_unusable_path(tmp_path):
    result = store.check_store(tmp_path)
    assert result["connected"] is False
    assert result["error"]


def test_get_stats(db_path):
    store.load_tariffs(db_path)
    store.load_usage(db_path)
    stats = store.get_stats(db_path)
    assert set(stats) == {"tariffs", "usageAssumptions"}
    assert stats["tariffs"]["size"] > 0


def test_env_var_selects_db_path(tmp_path, monkeypatch):
    path = tmp_path / "nested" / "env.db"
    monkeypatch.setenv("TARIFFS_DB_PATH", str(path))
    assert store.get_db_path() == path
    assert path.parent.exists()
