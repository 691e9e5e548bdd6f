"""Command-line interface for comparing tariffs and estimating EV charging."""

import json
from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import store
from .costs import charging_estimates, charging_rate_for, rank_by_annual_cost
from .defaults import ACTIVE_TABS, CHARGER_POWERS, CHARGING_SCENARIOS, DEFAULT_VEHICLE
from .formatting import format_currency, format_duration, format_rate, format_time
from .models import TARIFF_TYPES, VARIABLE, UsageAssumptions
from .store import StoreError
from .tariffs import (
    add_tariff,
    build_tariff,
    delete_tariff,
    export_tariffs_to_yaml,
    get_selected_tariff,
    get_tariff,
    import_tariffs,
    select_tariff_for_view,
    update_tariff,
)
from .validation import validate_preferences, validate_usage

# Load environment variables from .env file
load_dotenv()

console = Console()

# ValidationError, CalculationError and TariffNotFoundError are ValueErrors
USER_ERRORS = (ValueError, StoreError)


def _fail(e: Exception) -> None:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    raise SystemExit(1)


@click.group()
@click.option("--db-path", type=click.Path(), help="Path to the store (or set TARIFFS_DB_PATH)")
@click.pass_context
def cli(ctx, db_path):
    """Compare electricity tariffs and estimate EV charging costs."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path) if db_path else None


# Store commands
@cli.group("store")
def store_cmd():
    """Store management commands."""
    pass


@store_cmd.command("init")
@click.pass_context
def store_init(ctx):
    """Initialize the store and write default records."""
    try:
        db_path = ctx.obj["db_path"]
        store.init_db(db_path)
        tariffs = store.load_tariffs(db_path)
        store.load_usage(db_path)
        store.load_preferences(db_path)
    except USER_ERRORS as e:
        _fail(e)
    console.print("[green]Store initialized successfully[/green]")
    console.print(f"[green]{len(tariffs)} tariff(s) available[/green]")


@store_cmd.command("stats")
@click.pass_context
def store_stats(ctx):
    """Show stored keys."""
    try:
        stats = store.get_stats(ctx.obj["db_path"])
    except USER_ERRORS as e:
        _fail(e)

    if not stats:
        console.print("[yellow]Store is empty[/yellow]")
        return

    table = Table(title="Store Contents")
    table.add_column("Key", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Updated")

    for key, info in stats.items():
        table.add_row(key, f"{info['size']} bytes", info["updated_at"])

    console.print(table)


@store_cmd.command("check")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def store_check(ctx, as_json):
    """Check the store can be written and read back."""
    result = store.check_store(ctx.obj["db_path"])

    if as_json:
        click.echo(json.dumps(result, indent=2))
    elif result["connected"]:
        console.print(f"[green]Store OK[/green] at {escape(result['path'])}")
    else:
        console.print(f"[red]Store check failed at {escape(result['path'])}: {escape(str(result['error']))}[/red]")

    if not result["connected"]:
        raise SystemExit(1)


# Tariff commands
@cli.group()
def tariff():
    """Tariff management commands."""
    pass


@tariff.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tariff_list(ctx, as_json):
    """List tariffs by annual cost, cheapest first."""
    db_path = ctx.obj["db_path"]
    try:
        usage = store.load_usage(db_path)
        ranked = rank_by_annual_cost(store.load_tariffs(db_path), usage)
        selected = get_selected_tariff(db_path)
    except USER_ERRORS as e:
        _fail(e)

    if as_json:
        data = [
            {**store.tariff_to_dict(t.tariff), "annualCost": round(t.annual_cost, 2)}
            for t in ranked
        ]
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    if not ranked:
        console.print("[yellow]No tariffs added yet. Add your first tariff with 'tariff add'.[/yellow]")
        return

    table = Table(title="Tariff Comparison")
    table.add_column("ID", style="dim")
    table.add_column("Tariff", min_width=30)
    table.add_column("Unit Rate (p/kWh)", justify="right")
    table.add_column("EV Rate (p/kWh)", justify="right")
    table.add_column("Standing (p/day)", justify="right")
    table.add_column("Type")
    table.add_column("Annual Cost", justify="right")

    for index, item in enumerate(ranked):
        t = item.tariff
        name = escape(t.name)
        if index == 0:
            name += " [green]Best Value[/green]"
        if selected and t.id == selected.id:
            name += " [blue]Selected[/blue]"
        if t.ev_rate is not None and t.off_peak_start and t.off_peak_end:
            name += f"\n[dim]Off-peak: {format_time(t.off_peak_start)} - {format_time(t.off_peak_end)}[/dim]"
        if t.notes:
            name += f"\n[dim]{escape(t.notes)}[/dim]"

        tariff_type = t.tariff_type + (f" ({t.fixed_term})" if t.fixed_term else "")
        table.add_row(
            t.id,
            name,
            format_rate(t.unit_rate),
            format_rate(t.ev_rate),
            format_rate(t.standing_charge),
            escape(tariff_type),
            format_currency(item.annual_cost),
            style="on dark_green" if index == 0 else None,
        )

    console.print(table)
    console.print(
        f"[dim]Household {usage.household_usage:g} kWh/yr, EV {usage.ev_usage:g} kWh/yr, "
        f"{usage.ev_off_peak_percentage:g}% EV off-peak[/dim]"
    )


def _tariff_options(f):
    f = click.option("--notes", help="Additional notes")(f)
    f = click.option("--off-peak-end", help="Off-peak end time (HH:MM)")(f)
    f = click.option("--off-peak-start", help="Off-peak start time (HH:MM)")(f)
    f = click.option("--fixed-term", help="Fixed term, e.g. '12 months'")(f)
    f = click.option("--type", "tariff_type", type=click.Choice(TARIFF_TYPES), help="Tariff type")(f)
    f = click.option("--ev-rate", type=float, help="EV/off-peak rate in p/kWh")(f)
    return f


@tariff.command("add")
@click.option("--name", required=True, help="Tariff name")
@click.option("--unit-rate", type=float, required=True, help="Unit rate in p/kWh")
@click.option("--standing-charge", type=float, required=True, help="Standing charge in p/day")
@_tariff_options
@click.pass_context
def tariff_add(ctx, name, unit_rate, standing_charge, ev_rate, tariff_type, fixed_term,
               off_peak_start, off_peak_end, notes):
    """Add a new tariff."""
    try:
        new = add_tariff(
            build_tariff(
                name=name,
                unit_rate=unit_rate,
                standing_charge=standing_charge,
                ev_rate=ev_rate,
                tariff_type=tariff_type or VARIABLE,
                fixed_term=fixed_term,
                off_peak_start=off_peak_start,
                off_peak_end=off_peak_end,
                notes=notes,
            ),
            ctx.obj["db_path"],
        )
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Added tariff {escape(new.name)} (id {new.id})[/green]")


@tariff.command("edit")
@click.argument("tariff_id")
@click.option("--name", help="Tariff name")
@click.option("--unit-rate", type=float, help="Unit rate in p/kWh")
@click.option("--standing-charge", type=float, help="Standing charge in p/day")
@click.option("--no-ev-rate", is_flag=True, help="Remove the EV rate")
@_tariff_options
@click.pass_context
def tariff_edit(ctx, tariff_id, name, unit_rate, standing_charge, no_ev_rate, ev_rate,
                tariff_type, fixed_term, off_peak_start, off_peak_end, notes):
    """Edit a tariff. Options not given keep their current values."""
    db_path = ctx.obj["db_path"]
    try:
        current = get_tariff(tariff_id, db_path)
        if no_ev_rate:
            new_ev_rate = None
        else:
            new_ev_rate = ev_rate if ev_rate is not None else current.ev_rate

        updated = build_tariff(
            tariff_id=current.id,
            name=name if name is not None else current.name,
            unit_rate=unit_rate if unit_rate is not None else current.unit_rate,
            standing_charge=standing_charge if standing_charge is not None else current.standing_charge,
            ev_rate=new_ev_rate,
            tariff_type=tariff_type or current.tariff_type,
            fixed_term=fixed_term if fixed_term is not None else current.fixed_term,
            off_peak_start=off_peak_start if off_peak_start is not None else current.off_peak_start,
            off_peak_end=off_peak_end if off_peak_end is not None else current.off_peak_end,
            notes=notes if notes is not None else current.notes,
        )
        update_tariff(updated, db_path)
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Updated tariff {escape(updated.name)}[/green]")


@tariff.command("delete")
@click.argument("tariff_id")
@click.pass_context
def tariff_delete(ctx, tariff_id):
    """Delete a tariff."""
    try:
        delete_tariff(tariff_id, ctx.obj["db_path"])
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Deleted tariff {tariff_id}[/green]")


@tariff.command("select")
@click.argument("tariff_id")
@click.pass_context
def tariff_select(ctx, tariff_id):
    """Select a tariff for EV charging estimates."""
    try:
        select_tariff_for_view(tariff_id, ctx.obj["db_path"])
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Selected tariff {tariff_id}[/green]")


@tariff.command("import")
@click.option("--config", type=click.Path(exists=True), required=True, help="Path to tariffs.yaml")
@click.option("--replace", "replace_existing", is_flag=True, help="Replace tariffs with matching ids")
@click.pass_context
def tariff_import(ctx, config, replace_existing):
    """Import tariffs from a YAML file."""
    try:
        result = import_tariffs(Path(config), ctx.obj["db_path"], replace_existing)
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Imported {result['imported']} tariff(s)[/green]")
    if result["skipped"]:
        console.print(f"[yellow]Skipped {result['skipped']} existing[/yellow]")


@tariff.command("export")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def tariff_export(ctx, output):
    """Export tariffs to a YAML file."""
    try:
        count = export_tariffs_to_yaml(store.load_tariffs(ctx.obj["db_path"]), Path(output))
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Exported {count} tariff(s) to {escape(output)}[/green]")


# Usage commands
@cli.group()
def usage():
    """Usage assumption commands."""
    pass


@usage.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def usage_show(ctx, as_json):
    """Show the usage assumptions used for annual costs."""
    try:
        current = store.load_usage(ctx.obj["db_path"])
    except USER_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(store.usage_to_dict(current), indent=2))
        return

    table = Table(title="Usage Assumptions")
    table.add_column("Assumption", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Household usage", f"{current.household_usage:g} kWh/yr")
    table.add_row("EV usage", f"{current.ev_usage:g} kWh/yr")
    table.add_row("Total usage", f"{current.household_usage + current.ev_usage:.1f} kWh/yr")
    table.add_row("EV off-peak charging", f"{current.ev_off_peak_percentage:g}%")
    console.print(table)


@usage.command("set")
@click.option("--household", type=float, help="Household usage in kWh/year")
@click.option("--ev", type=float, help="EV usage in kWh/year")
@click.option("--off-peak", type=float, help="Percentage of EV charging off-peak (0-100)")
@click.pass_context
def usage_set(ctx, household, ev, off_peak):
    """Update usage assumptions. Options not given keep their current values."""
    db_path = ctx.obj["db_path"]
    try:
        current = store.load_usage(db_path)
        updated = validate_usage(
            UsageAssumptions(
                household_usage=household if household is not None else current.household_usage,
                ev_usage=ev if ev is not None else current.ev_usage,
                ev_off_peak_percentage=off_peak if off_peak is not None else current.ev_off_peak_percentage,
            )
        )
        store.save_usage(updated, db_path)
    except USER_ERRORS as e:
        _fail(e)
    console.print("[green]Usage assumptions updated[/green]")


# EV charging estimates
@cli.command()
@click.option("--tariff", "tariff_id", help="Tariff id (defaults to the selected tariff)")
@click.option("--battery", type=float, default=DEFAULT_VEHICLE.battery_kwh, show_default=True,
              help="Battery capacity in kWh")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def ev(ctx, tariff_id, battery, as_json):
    """Show EV charging costs and times for a tariff."""
    db_path = ctx.obj["db_path"]
    try:
        selected = get_tariff(tariff_id, db_path) if tariff_id else get_selected_tariff(db_path)
        if selected is None:
            console.print("[yellow]No tariffs added yet[/yellow]")
            return
        current_usage = store.load_usage(db_path)
        estimates = charging_estimates(
            selected, current_usage, battery, CHARGING_SCENARIOS, CHARGER_POWERS
        )
    except USER_ERRORS as e:
        _fail(e)

    rate = charging_rate_for(selected)

    if as_json:
        data = {
            "tariff": store.tariff_to_dict(selected),
            "batteryKWh": battery,
            "chargingRate": rate,
            "scenarios": [
                {
                    "id": e["scenario"].id,
                    "name": e["scenario"].name,
                    "kWh": e["kwh"],
                    "cost": round(e["cost"], 2),
                    "times": {
                        power.name: {"hours": d.hours, "minutes": d.minutes}
                        for power, d in e["durations"]
                    },
                }
                for e in estimates
            ],
        }
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    console.print(f"[cyan]EV charging estimates for {escape(selected.name)}[/cyan]")
    if selected.ev_rate is not None and selected.off_peak_start and selected.off_peak_end:
        console.print(
            f"Off-Peak Hours: {format_time(selected.off_peak_start)} - {format_time(selected.off_peak_end)}"
        )
        console.print(
            f"[dim]{current_usage.ev_off_peak_percentage:g}% of EV charging is assumed "
            f"to be during off-peak hours.[/dim]"
        )

    costs = Table(title="Charging Costs")
    costs.add_column("Scenario", style="cyan")
    costs.add_column("Cost", justify="right")
    for e in estimates:
        costs.add_row(e["scenario"].name, format_currency(e["cost"]))
    console.print(costs)
    rate_label = "special EV rate" if selected.ev_rate is not None else "standard rate"
    console.print(f"[dim]Using {rate_label} of {rate:g}p/kWh[/dim]")

    times = Table(title="Charging Times")
    times.add_column("Charger", style="cyan")
    for e in estimates:
        times.add_column(f"{e['scenario'].id}\n({round(e['kwh'])} kWh)", justify="right")
    for i, power in enumerate(CHARGER_POWERS):
        times.add_row(power.name, *(format_duration(e["durations"][i][1]) for e in estimates))
    console.print(times)

    if battery == DEFAULT_VEHICLE.battery_kwh:
        v = DEFAULT_VEHICLE
        console.print(
            f"[dim]Vehicle: {v.model}, {v.battery_kwh:g} kWh battery, "
            f"~{v.efficiency_miles_per_kwh:g} miles/kWh, ~{v.range_miles} miles (WLTP)[/dim]"
        )


# Preference commands
@cli.group()
def prefs():
    """Display preference commands."""
    pass


@prefs.command("show")
@click.pass_context
def prefs_show(ctx):
    """Show stored preferences."""
    try:
        current = store.load_preferences(ctx.obj["db_path"])
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"Selected tariff: {current.selected_tariff_for_view or 'N/A'}")
    console.print(f"Active tab: {current.active_tab}")


@prefs.command("set-tab")
@click.argument("tab", type=click.Choice(ACTIVE_TABS))
@click.pass_context
def prefs_set_tab(ctx, tab):
    """Set the active tab."""
    db_path = ctx.obj["db_path"]
    try:
        updated = validate_preferences(replace(store.load_preferences(db_path), active_tab=tab))
        store.save_preferences(updated, db_path)
    except USER_ERRORS as e:
        _fail(e)
    console.print(f"[green]Active tab set to {tab}[/green]")


if __name__ == "__main__":
    cli()
