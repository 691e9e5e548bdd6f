"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from tariffcompare.cli import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    db_path = str(tmp_path / "store.db")

    def invoke(*args):
        return runner.invoke(cli, ["--db-path", db_path, *args])

    return invoke


def test_tariff_list_json_sorted_by_cost(run):
    result = run("tariff", "list", "--json")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [t["id"] for t in data] == ["5", "2", "4", "1", "3"]
    assert data[1]["annualCost"] == pytest.approx(1162.03)


def test_tariff_list_table(run):
    result = run("tariff", "list")
    assert result.exit_code == 0
    assert "Tariff Comparison" in result.output


def test_add_tariff_then_list(run):
    result = run(
        "tariff", "add",
        "--name", "Octopus Go",
        "--unit-rate", "27.15",
        "--ev-rate", "8.5",
        "--standing-charge", "47.85",
        "--off-peak-start", "00:30",
        "--off-peak-end", "05:30",
    )
    assert result.exit_code == 0
    assert "Added tariff Octopus Go" in result.output

    data = json.loads(run("tariff", "list", "--json").output)
    go = next(t for t in data if t["name"] == "Octopus Go")
    assert go["evRate"] == 8.5
    assert go["offPeakStart"] == "00:30"


def test_add_tariff_invalid_name_fails(run):
    result = run("tariff", "add", "--name", "X", "--unit-rate", "20", "--standing-charge", "50")
    assert result.exit_code == 1
    assert "at least 2 characters" in result.output


def test_edit_tariff_keeps_unspecified_fields(run):
    result = run("tariff", "edit", "2", "--unit-rate", "25")
    assert result.exit_code == 0

    data = {t["id"]: t for t in json.loads(run("tariff", "list", "--json").output)}
    assert data["2"]["unitRate"] == 25
    assert data["2"]["evRate"] == 12.76
    assert data["2"]["fixedTerm"] == "12 months"


def test_edit_tariff_remove_ev_rate(run):
    assert run("tariff", "edit", "2", "--no-ev-rate").exit_code == 0
    data = {t["id"]: t for t in json.loads(run("tariff", "list", "--json").output)}
    assert data["2"]["evRate"] is None
    assert "offPeakStart" not in data["2"]


def test_delete_unknown_tariff_fails(run):
    result = run("tariff", "delete", "missing")
    assert result.exit_code == 1
    assert "No tariff found" in result.output


def test_usage_set_and_show(run):
    assert run("usage", "set", "--ev", "2000", "--off-peak", "80").exit_code == 0
    data = json.loads(run("usage", "show", "--json").output)
    assert data == {"householdUsage": 3190.5, "evUsage": 2000.0, "evOffPeakPercentage": 80.0}


def test_usage_set_rejects_bad_percentage(run):
    result = run("usage", "set", "--off-peak", "150")
    assert result.exit_code == 1
    assert "between 0 and 100" in result.output


def test_ev_estimates_json(run):
    result = run("ev", "--tariff", "2", "--json")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["chargingRate"] == 12.76
    typical = data["scenarios"][0]
    assert typical["id"] == "typical"
    assert typical["cost"] == pytest.approx(3.83)
    full = data["scenarios"][1]
    assert full["times"]["3.6 kW (Slow Charger)"] == {"hours": 13, "minutes": 53}


def test_ev_estimates_table_uses_selected_tariff(run):
    assert run("tariff", "select", "2").exit_code == 0
    result = run("ev")
    assert result.exit_code == 0
    assert "Charging Costs" in result.output
    assert "special EV rate" in result.output


def test_prefs_set_tab(run):
    assert run("prefs", "set-tab", "usage-assumptions").exit_code == 0
    result = run("prefs", "show")
    assert "Active tab: usage-assumptions" in result.output


def test_store_init_and_check(run):
    assert run("store", "init").exit_code == 0
    result = run("store", "check", "--json")
    assert result.exit_code == 0
    assert json.loads(result.output)["connected"] is True


def test_import_and_export(run, tmp_path):
    output = tmp_path / "export.yaml"
    assert run("tariff", "export", str(output)).exit_code == 0
    result = run("tariff", "import", "--config", str(output))
    assert result.exit_code == 0
    assert "Skipped 5 existing" in result.output


@pytest.mark.parametrize("option", ["--unit-rate", "--standing-charge", "--ev-rate"])
@pytest.mark.parametrize("value", ["nan", "inf"])
def test_add_tariff_rejects_non_finite_numbers(run, option, value):
    """Non-finite rates are refused rather than stored."""
    args = {"--unit-rate": "20", "--standing-charge": "50"}
    args[option] = value
    flat = [item for pair in args.items() for item in pair]
    result = run("tariff", "add", "--name", "Bad", *flat)
    assert result.exit_code == 1
    assert "must be a positive number" in result.output

    assert run("tariff", "list", "--json").exit_code == 0


@pytest.mark.parametrize("option", ["--household", "--ev", "--off-peak"])
def test_usage_set_rejects_infinity(run, option):
    result = run("usage", "set", option, "inf")
    assert result.exit_code == 1
    assert "Error:" in result.output

    assert run("tariff", "list", "--json").exit_code == 0


def test_usage_show_includes_total(run):
    result = run("usage", "show")
    assert result.exit_code == 0
    assert "4024.5 kWh/yr" in result.output


def test_prefs_set_tab_rejects_unknown_tab(run):
    result = run("prefs", "set-tab", "usage")
    assert result.exit_code != 0


@pytest.mark.parametrize(
    "content",
    [
        "tariffs:\n  - name: 123\n    unitRate: 20\n    standingCharge: 50\n",
        "tariffs:\n  - just a string\n",
        "tariffs: not a list\n",
        "- name: Flat\n",
        "tariffs: [unclosed\n",
        "tariffs:\n  - name: Go\n    unitRate: 27\n    evRate: 8.5\n    standingCharge: 48\n    offPeakStart: 1:30\n",
    ],
)
def test_import_malformed_yaml_reports_error(run, tmp_path, content):
    """Badly shaped YAML gives an error line, not a traceback."""
    config = tmp_path / "bad.yaml"
    config.write_text(content)
    result = run("tariff", "import", "--config", str(config))
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
