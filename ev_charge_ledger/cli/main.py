"""
CLI interface for EV Charge Ledger.

Provides command-line access to logging sessions and viewing statistics.
"""

import logging
import sqlite3
import sys
import time
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ev_charge_ledger.config.loader import AppConfig, load_app_config
from ev_charge_ledger.core.aggregator import aggregate_monthly, latest_month
from ev_charge_ledger.core.breakdown import compute_expense_breakdown
from ev_charge_ledger.core.filters import RecordFilter, filter_records
from ev_charge_ledger.core.ledger import build_ledger, compute_trip, trip_metrics
from ev_charge_ledger.core.months import ALL
from ev_charge_ledger.core.overview import compute_fleet_stats, featured_feed, user_activity
from ev_charge_ledger.core.pricing import estimate_charge_cost
from ev_charge_ledger.core.share import compose_share_text, mask_email
from ev_charge_ledger.storage.models import (
    ChargingMode,
    ChargingRecord,
    ExpenseCategory,
    FixedExpenses,
    VariableExpense
)
from ev_charge_ledger.storage.repository import (
    get_repository,
    initialize_schema,
    insert_expense,
    insert_record,
    upsert_fixed_expenses
)

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

DATETIME_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%d"]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML configuration file"
    ),
    db: Optional[str] = typer.Option(
        None,
        "--db",
        help="Override the SQLite database path"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging"
    )
):
    """EV Charge Ledger CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        settings = load_app_config(config) if config else AppConfig()
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if db:
        settings = AppConfig(
            database_path=db,
            display=settings.display,
            share=settings.share,
            feed_limit=settings.feed_limit
        )
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        console.print("EV Charge Ledger - Use --help to see available commands")


@app.command()
def init(ctx: typer.Context):
    """Initialize the EV Charge Ledger database."""
    try:
        initialize_schema(ctx.obj.database_path)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    console.print("[green]✓[/] Database initialized successfully")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def add(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    email: str = typer.Option(..., "--email", "-e", help="Owner email"),
    location: str = typer.Option(..., "--location", "-l", help="Where the car was charged"),
    kwh: float = typer.Option(..., "--kwh", help="Energy delivered (kWh)"),
    amount: float = typer.Option(..., "--amount", "-a", help="Total amount paid"),
    odometer: float = typer.Option(0.0, "--odometer", "-o", help="Odometer reading in km (0 = not recorded)"),
    plate: Optional[str] = typer.Option(None, "--plate", "-p", help="License plate"),
    mode: ChargingMode = typer.Option(ChargingMode.METERED, "--mode", help="Billing mode"),
    duration: int = typer.Option(0, "--duration", help="Minutes plugged in"),
    rating: Optional[int] = typer.Option(None, "--rating", help="Rating from 1 to 5"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes"),
    at: Optional[datetime] = typer.Option(None, "--at", formats=DATETIME_FORMATS, help="When the session took place (local time)")
):
    """Log a charging session."""
    try:
        record = ChargingRecord.create(
            uid=uid,
            user_email=email,
            timestamp=_to_epoch_ms(at),
            location=location,
            kwh=kwh,
            total_amount=amount,
            mode=mode,
            odometer=odometer,
            license_plate=plate,
            duration_minutes=duration,
            rating=rating,
            notes=notes
        )
        record_id = insert_record(record, ctx.obj.database_path)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    currency = ctx.obj.display.currency
    console.print(
        f"[green]✓[/] Recorded {record.kwh:g} kWh at {record.location} "
        f"({currency}{record.cost_per_kwh:.2f}/kWh) [dim]{record_id}[/]"
    )


@app.command()
def expense(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    email: str = typer.Option(..., "--email", "-e", help="Owner email"),
    category: ExpenseCategory = typer.Option(..., "--category", help="Expense category"),
    amount: float = typer.Option(..., "--amount", "-a", help="Amount paid"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes"),
    at: Optional[datetime] = typer.Option(None, "--at", formats=DATETIME_FORMATS, help="When it was paid (local time)")
):
    """Log a variable (non-charging) expense."""
    try:
        item = VariableExpense(
            uid=uid,
            user_email=email,
            timestamp=_to_epoch_ms(at),
            category=category,
            amount=amount,
            notes=notes.strip() if notes else None
        )
        insert_expense(item, ctx.obj.database_path)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"[green]✓[/] Recorded {category.value} expense of {_format_currency(amount, ctx.obj)}")


@app.command()
def fixed(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    email: str = typer.Option(..., "--email", "-e", help="Owner email"),
    loan: float = typer.Option(0.0, "--loan", help="Monthly loan payment"),
    loan_day: Optional[int] = typer.Option(None, "--loan-day", help="Day of month the loan is paid"),
    parking: float = typer.Option(0.0, "--parking", help="Monthly parking rent"),
    parking_day: Optional[int] = typer.Option(None, "--parking-day", help="Day of month parking is paid"),
    insurance: float = typer.Option(0.0, "--insurance", help="Annual insurance premium"),
    insurance_expiry: Optional[datetime] = typer.Option(None, "--insurance-expiry", formats=["%Y-%m-%d"], help="Insurance expiry date"),
    license_fee: float = typer.Option(0.0, "--license", help="Annual license fee"),
    license_expiry: Optional[datetime] = typer.Option(None, "--license-expiry", formats=["%Y-%m-%d"], help="License expiry date")
):
    """Set the owner's recurring vehicle costs (replaces previous values)."""
    try:
        settings = FixedExpenses(
            uid=uid,
            user_email=email,
            monthly_loan=loan,
            monthly_loan_pay_day=loan_day,
            monthly_parking=parking,
            monthly_parking_pay_day=parking_day,
            insurance_expiry=_to_epoch_ms(insurance_expiry) if insurance_expiry else None,
            insurance_annual_cost=insurance,
            license_expiry=_to_epoch_ms(license_expiry) if license_expiry else None,
            license_annual_cost=license_fee,
            last_updated=_to_epoch_ms(None)
        )
        upsert_fixed_expenses(settings, ctx.obj.database_path)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    console.print("[green]✓[/] Fixed expenses saved")


@app.command(name="list")
def list_records(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    search: str = typer.Option("", "--search", "-s", help="Match location text"),
    plate: str = typer.Option(ALL, "--plate", "-p", help="License plate or 'all'"),
    month: str = typer.Option(ALL, "--month", "-m", help="Month as YYYY-MM or 'all'")
):
    """List charging sessions, newest first."""
    try:
        records = get_repository(ctx.obj.database_path).get_records(uid)
        shown = filter_records(
            records,
            RecordFilter(search_text=search, license_plate=plate, month=month)
        )
        trips = {id(entry.record): trip_metrics(entry) for entry in build_ledger(records)}
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    if not shown:
        console.print("\n[dim]No charging records found.[/]")
        return

    table = Table(title="Charging Records")
    table.add_column("Date")
    table.add_column("Location")
    table.add_column("Plate")
    table.add_column("kWh", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("/kWh", justify="right")
    table.add_column("Odometer", justify="right")
    table.add_column("Trip", justify="right")
    table.add_column("/km", justify="right")
    table.add_column("Id", style="dim")

    for record in shown:
        trip = trips[id(record)]
        table.add_row(
            datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d %H:%M"),
            record.location,
            record.license_plate or "--",
            f"{record.kwh:.2f}",
            _format_currency(record.total_amount, ctx.obj),
            f"{record.cost_per_kwh:.2f}",
            f"{record.odometer:,.0f}" if record.odometer > 0 else "--",
            f"{trip.distance:,.0f} km" if trip.distance > 0 else "--",
            _format_currency(trip.cost_per_km, ctx.obj) if trip.cost_per_km > 0 else "--",
            record.id or ""
        )
    console.print(table)


@app.command()
def stats(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id")
):
    """Show monthly trends for the last six months."""
    try:
        records = get_repository(ctx.obj.database_path).get_records(uid)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    buckets = aggregate_monthly(build_ledger(records))
    current = latest_month(buckets)
    if current is None:
        console.print("\n[dim]No charging records found.[/]")
        return

    table = Table(title="Monthly Trends")
    table.add_column("Month")
    table.add_column("kWh", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Distance", justify="right")
    for bucket in buckets:
        table.add_row(
            bucket.key,
            f"{bucket.kwh:.1f}",
            _format_currency(bucket.cost, ctx.obj),
            str(bucket.count),
            f"{bucket.distance:,.0f} km"
        )
    console.print(table)

    console.print(f"\n[bold]Latest month:[/bold] {current.key}")
    console.print(f"Energy: {current.kwh:.1f} kWh over {current.count} sessions")
    console.print(f"Distance: {current.distance:,.0f} km")
    console.print(f"Average price: {_format_currency(current.average_price, ctx.obj)}/kWh")
    console.print(f"Cost per km: {_format_currency(current.cost_per_km, ctx.obj)}/km")
    console.print(f"Efficiency: {current.efficiency:.2f} km/kWh")


@app.command()
def breakdown(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    month: Optional[datetime] = typer.Option(None, "--month", "-m", formats=["%Y-%m"], help="Month as YYYY-MM (default: current month)")
):
    """Show the month's expense structure."""
    try:
        repository = get_repository(ctx.obj.database_path)
        result = compute_expense_breakdown(
            records=repository.get_records(uid),
            expenses=repository.get_expenses(uid),
            fixed=repository.get_fixed_expenses(uid),
            reference=month
        )
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"\n[bold]Expense Structure {result.month}[/bold]")
    console.print("-" * 40)
    console.print(f"Charging: {_format_currency(result.charging_cost, ctx.obj)} ({result.charging_percent:.1f}%)")
    console.print(f"Variable: {_format_currency(result.variable_cost, ctx.obj)} ({result.variable_percent:.1f}%)")
    for category, amount in sorted(result.variable_by_category.items()):
        console.print(f"  {category}: {_format_currency(amount, ctx.obj)}")
    console.print(f"Fixed: {_format_currency(result.fixed_cost, ctx.obj)} ({result.fixed_percent:.1f}%)")
    console.print(f"[bold]Total:[/bold] {_format_currency(result.total, ctx.obj)}")


@app.command()
def share(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    record_id: str = typer.Argument(..., help="Id of the record to share")
):
    """Print share text for a charging session."""
    try:
        records = get_repository(ctx.obj.database_path).get_records(uid)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    record = next((r for r in records if r.id == record_id), None)
    if record is None:
        console.print(f"[red]Error:[/] No record {record_id} for owner {uid}")
        sys.exit(EXIT_CODE_FAIL)

    trip = compute_trip(record, records)
    text = compose_share_text(
        record,
        trip.distance,
        trip.cost_per_km,
        slogans=ctx.obj.share.slogans,
        site_url=ctx.obj.share.site_url,
        currency=ctx.obj.display.currency
    )
    # Plain print so the text can be piped or copied untouched
    print(text)


@app.command()
def calc(
    ctx: typer.Context,
    kwh: float = typer.Argument(..., help="Energy to charge (kWh)"),
    rate: float = typer.Argument(..., help="Price per kWh")
):
    """Estimate the cost of a charging session."""
    console.print(f"Estimated cost: {_format_currency(estimate_charge_cost(kwh, rate), ctx.obj)}")


@app.command()
def overview(ctx: typer.Context):
    """Show fleet-wide totals and per-owner activity."""
    try:
        records = get_repository(ctx.obj.database_path).get_all_records()
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    totals = compute_fleet_stats(records)
    console.print("\n[bold]Fleet Overview[/bold]")
    console.print("-" * 40)
    console.print(f"Total energy: {totals.total_kwh:,.1f} kWh")
    console.print(f"Total spend: {_format_currency(totals.total_amount, ctx.obj)}")
    console.print(f"Owners: {totals.unique_users}")

    table = Table(title="Owner Activity")
    table.add_column("Email")
    table.add_column("Records", justify="right")
    table.add_column("Last active")
    for activity in user_activity(records):
        table.add_row(
            activity.email,
            str(activity.count),
            datetime.fromtimestamp(activity.last_active / 1000).strftime("%Y-%m-%d")
        )
    console.print(table)


@app.command()
def feed(ctx: typer.Context):
    """Show the community feed of featured sessions."""
    try:
        records = get_repository(ctx.obj.database_path).get_all_records()
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    featured = featured_feed(records, limit=ctx.obj.feed_limit)
    if not featured:
        console.print("\n[dim]No featured records yet.[/]")
        return

    table = Table(title="Community Feed")
    table.add_column("Driver")
    table.add_column("Date")
    table.add_column("Location")
    table.add_column("kWh", justify="right")
    table.add_column("/kWh", justify="right")
    table.add_column("Notes")
    for record in featured:
        table.add_row(
            mask_email(record.user_email),
            datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d"),
            record.location,
            f"{record.kwh:.1f}",
            f"{record.cost_per_kwh:.2f}",
            record.notes or ""
        )
    console.print(table)


@app.command()
def feature(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Id of the record"),
    off: bool = typer.Option(False, "--off", help="Remove from the community feed")
):
    """Feature a record in the community feed."""
    try:
        found = get_repository(ctx.obj.database_path).set_featured(record_id, not off)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    if not found:
        console.print(f"[red]Error:[/] No record {record_id}")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"[green]✓[/] Record {'unfeatured' if off else 'featured'}")


@app.command()
def delete(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Owner id"),
    record_id: str = typer.Argument(..., help="Id of the record to delete")
):
    """Delete one of the owner's charging records."""
    try:
        deleted = get_repository(ctx.obj.database_path).delete_record(uid, record_id)
    except Exception as e:
        _report_error(e)
        sys.exit(EXIT_CODE_FAIL)

    if not deleted:
        console.print(f"[red]Error:[/] No record {record_id} for owner {uid}")
        sys.exit(EXIT_CODE_FAIL)
    console.print("[green]✓[/] Record deleted")


def _to_epoch_ms(moment: Optional[datetime]) -> int:
    """Local datetime to epoch milliseconds; None means now."""
    if moment is None:
        return int(time.time() * 1000)
    return int(moment.timestamp() * 1000)


def _format_currency(amount: float, settings: AppConfig) -> str:
    """Format currency with proper symbols and formatting."""
    return f"{settings.display.currency}{amount:,.2f}"


def _report_error(error: Exception) -> None:
    """Print a command failure, with a setup hint for a missing schema."""
    if isinstance(error, sqlite3.OperationalError) and "no such table" in str(error).lower():
        console.print("\n[bold yellow]No charging data found[/]")
        console.print("\nRun `ev-ledger init` to initialize the database first.\n")
        return
    console.print(f"[red]Error:[/] {str(error)}")


if __name__ == "__main__":
    app()
