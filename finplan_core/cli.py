from __future__ import annotations

import contextlib
import datetime as dt
import json
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from finplan_core.domain.errors import FinPlanError
from finplan_core.domain.models import (
    Frequency,
    Granularity,
    GrowthConfig,
    GrowthResult,
    InstallmentPlan,
    LedgerEntry,
    Money,
    ObligationKind,
    PatrimonyPoint,
    RecurringObligation,
    Schedule,
)
from finplan_core.io import batch_import
from finplan_core.io import config as config_io
from finplan_core.io import ledger as ledger_io
from finplan_core.io.repository import InMemoryLedgerRepository
from finplan_core.logging_config import configure_logging
from finplan_core.services import annuity, growth, installments, materializer, patrimony
from finplan_core.services import schedule as schedule_service

app = typer.Typer(help="Recurrence, installment and projection engine for personal finance.")


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _emit(payload, out: Optional[Path], what: str) -> None:
    if out:
        _save_json(out, payload)
        typer.echo(f"{what} written to {out}")
    else:
        typer.echo(json.dumps(payload, indent=2))


def _parse_date(raw: Optional[str], name: str) -> Optional[dt.date]:
    if raw is None or raw == "":
        return None
    try:
        return dt.date.fromisoformat(raw)
    except ValueError as exc:
        raise typer.BadParameter(f"{name} must be YYYY-MM-DD, got {raw!r}") from exc


@contextlib.contextmanager
def _engine_errors() -> Iterator[None]:
    try:
        yield
    except FinPlanError as exc:
        typer.echo(f"Error [{exc.code}]: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _settings(ctx: typer.Context) -> config_io.EngineSettings:
    return ctx.obj if isinstance(ctx.obj, config_io.EngineSettings) else config_io.EngineSettings()


def _entries_to_json(entries: List[LedgerEntry]) -> list:
    return [
        {
            "id": e.id,
            "date": e.date.isoformat(),
            "type": e.entry_type.value,
            "category": e.category,
            "amount": str(e.amount),
            "description": e.description,
            "source_type": e.source_type.value,
            "source_id": e.source_id,
        }
        for e in entries
    ]


def _plan_to_json(result: InstallmentPlan) -> dict:
    return {
        "installment_amount": str(result.installment_amount),
        "total": str(result.total),
        "installments": [
            {"number": i.number, "date": i.date.isoformat(), "amount": str(i.amount)} for i in result.installments
        ],
    }


def _growth_to_json(result: GrowthResult) -> dict:
    return {
        "config": vars(result.config),
        "samples": [
            {"year": s.year, "balance": s.balance, "total_contributed": s.total_contributed} for s in result.samples
        ],
        "final_amount": result.final_amount,
        "total_contributed": result.total_contributed,
        "total_interest": result.total_interest,
    }


def _points_to_json(points: List[PatrimonyPoint]) -> list:
    return [
        {
            "label": p.label,
            "month_end": p.month_end.isoformat(),
            "assets_value": str(p.assets_value),
            "investments_value": str(p.investments_value),
            "total": str(p.total),
        }
        for p in points
    ]


@app.callback()
def main(
    ctx: typer.Context,
    settings: Optional[Path] = typer.Option(None, help="Engine settings JSON (defaults to $FINPLAN_SETTINGS)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    cfg = config_io.load_engine_settings(settings)
    configure_logging("DEBUG" if verbose else cfg.log_level)
    ctx.obj = cfg


@app.command()
def occurrences(
    ctx: typer.Context,
    start: str = typer.Option(..., help="First occurrence, YYYY-MM-DD"),
    frequency: Frequency = typer.Option(Frequency.MONTHLY, help="daily|weekly|monthly|yearly"),
    end: Optional[str] = typer.Option(None, help="Last possible date, YYYY-MM-DD"),
    cap: Optional[int] = typer.Option(None, help="Horizon cap (defaults to settings)"),
    table: bool = typer.Option(False, help="Render a table instead of JSON"),
):
    """List the dates a recurrence rule produces."""
    with _engine_errors():
        rule = Schedule(
            start_date=_parse_date(start, "start"),
            frequency=frequency,
            end_date=_parse_date(end, "end"),
            horizon_cap=cap if cap is not None else _settings(ctx).horizon_cap,
        )
        dates = schedule_service.occurrences(rule)
    if table:
        view = Table(title=f"{rule.frequency.label} occurrences")
        view.add_column("#", justify="right")
        view.add_column("Date")
        for n, d in enumerate(dates, start=1):
            view.add_row(str(n), d.isoformat())
        Console().print(view)
        return
    typer.echo(json.dumps([d.isoformat() for d in dates], indent=2))


@app.command()
def materialize(
    ctx: typer.Context,
    category: str = typer.Option(..., help="Ledger category"),
    amount: str = typer.Option(..., help="Amount per occurrence, e.g. 150.00"),
    start: str = typer.Option(..., help="First occurrence, YYYY-MM-DD"),
    frequency: Frequency = typer.Option(Frequency.MONTHLY, help="daily|weekly|monthly|yearly"),
    end: Optional[str] = typer.Option(None, help="Last possible date, YYYY-MM-DD"),
    kind: ObligationKind = typer.Option(ObligationKind.EXPENSE, help="income|expense"),
    description: str = typer.Option("", help="Entry description"),
    out: Optional[Path] = typer.Option(None, help="Write the entries to this ledger CSV"),
):
    """Turn a recurring obligation into dated ledger entries."""
    cfg = _settings(ctx)
    with _engine_errors():
        obligation = RecurringObligation(
            schedule=Schedule(
                start_date=_parse_date(start, "start"),
                frequency=frequency,
                end_date=_parse_date(end, "end"),
                horizon_cap=cfg.horizon_cap,
            ),
            category=category,
            amount=Money.parse(amount, cfg.currency),
            kind=kind,
            description=description,
        )
        repository = InMemoryLedgerRepository()
        entries = materializer.materialize_into(repository, obligation)
    if out:
        ledger_io.write_ledger(entries, out)
        typer.echo(f"{len(entries)} entries written to {out}")
    else:
        typer.echo(json.dumps(_entries_to_json(entries), indent=2))


@app.command("installments")
def installments_cmd(
    ctx: typer.Context,
    total: str = typer.Option(..., help="Purchase total, e.g. 1000.00"),
    count: int = typer.Option(..., help="Number of installments"),
    start: str = typer.Option(..., help="First installment date, YYYY-MM-DD"),
    table: bool = typer.Option(False, help="Render a table instead of JSON"),
    out: Optional[Path] = typer.Option(None, help="Output path for the plan JSON"),
):
    """Split a purchase into monthly installments."""
    with _engine_errors():
        result = installments.plan(Money.parse(total, _settings(ctx).currency), count, _parse_date(start, "start"))
    if table:
        view = Table(title=f"{count}x of {result.installment_amount}")
        view.add_column("#", justify="right")
        view.add_column("Date")
        view.add_column("Amount", justify="right")
        for item in result.installments:
            view.add_row(str(item.number), item.date.isoformat(), str(item.amount))
        Console().print(view)
        return
    _emit(_plan_to_json(result), out, "Installment plan")


@app.command()
def pmt(
    target: float = typer.Option(..., help="Target future value"),
    annual_rate: float = typer.Option(..., help="Annual rate in percent, e.g. 12"),
    months: int = typer.Option(..., help="Months to reach the target"),
):
    """Monthly contribution needed to reach a target."""
    with _engine_errors():
        result = annuity.plan_contribution(target, annual_rate, months)
    typer.echo(
        json.dumps(
            {
                "monthly_payment": result.monthly_payment,
                "total_contributed": result.total_contributed,
                "total_interest": result.total_interest,
                "months": result.months,
            },
            indent=2,
        )
    )


@app.command("future-value")
def future_value_cmd(
    principal: float = typer.Option(0.0, help="Amount invested today"),
    contribution: float = typer.Option(0.0, help="Monthly contribution"),
    annual_rate: float = typer.Option(..., help="Annual rate in percent"),
    months: int = typer.Option(..., help="Number of months"),
):
    """Closed-form future value of a principal plus monthly contributions."""
    with _engine_errors():
        value = annuity.future_value(principal, contribution, annuity.monthly_rate(annual_rate), months)
    typer.echo(json.dumps({"future_value": value}, indent=2))


@app.command()
def simulate(
    config: Optional[Path] = typer.Option(None, help="Growth config JSON (overrides the options below)"),
    initial: float = typer.Option(0.0, help="Initial amount"),
    monthly: float = typer.Option(0.0, help="Monthly contribution"),
    annual_rate: float = typer.Option(0.0, help="Annual rate in percent"),
    years: int = typer.Option(1, help="Years to simulate"),
    out: Optional[Path] = typer.Option(None, help="Output path for simulation JSON"),
):
    """Month-by-month growth projection with yearly checkpoints."""
    with _engine_errors():
        growth_config = (
            config_io.load_growth_config(config)
            if config
            else GrowthConfig(initial=initial, monthly_contribution=monthly, annual_rate=annual_rate, years=years)
        )
        result = growth.simulate_growth(growth_config)
    _emit(_growth_to_json(result), out, "Simulation")


@app.command("patrimony")
def patrimony_cmd(
    ctx: typer.Context,
    portfolio: Path = typer.Option(..., help="Portfolio JSON with investments, events and assets"),
    granularity: Granularity = typer.Option(Granularity.MONTHLY, help="monthly|quarterly|yearly"),
    as_of: Optional[str] = typer.Option(None, help="Reference date, YYYY-MM-DD (defaults to today)"),
    table: bool = typer.Option(False, help="Render a table instead of JSON"),
    out: Optional[Path] = typer.Option(None, help="Output path for the series JSON"),
):
    """Reconstruct net worth history from the current portfolio."""
    currency = _settings(ctx).currency
    with _engine_errors():
        snapshot = config_io.load_portfolio(portfolio, currency)
        points = patrimony.reconstruct(
            snapshot.investments,
            snapshot.events,
            snapshot.assets,
            granularity,
            now=_parse_date(as_of, "as-of"),
            currency=currency,
        )
        summary = patrimony.summarize(snapshot.investments, snapshot.assets, currency)
    if table:
        view = Table(title=f"Net worth ({granularity.value})")
        view.add_column("Period")
        view.add_column("Assets", justify="right")
        view.add_column("Investments", justify="right")
        view.add_column("Total", justify="right")
        for p in points:
            view.add_row(p.label, str(p.assets_value), str(p.investments_value), str(p.total))
        console = Console()
        console.print(view)
        console.print(f"Current total: [bold]{summary.total}[/bold] | average rate {summary.average_rate:.2f}% p.a.")
        return
    payload = {
        "summary": {
            "total_assets": str(summary.total_assets),
            "total_investments": str(summary.total_investments),
            "total": str(summary.total),
            "average_rate": summary.average_rate,
        },
        "points": _points_to_json(points),
    }
    _emit(payload, out, "Patrimony series")


@app.command("import-batch")
def import_batch(
    ctx: typer.Context,
    file: Path = typer.Option(..., help="Tab-separated text: type, category, value, description, date, mode"),
    out: Optional[Path] = typer.Option(None, help="Write the resulting ledger CSV here"),
    today: Optional[str] = typer.Option(None, help="Date used for rows without a date"),
):
    """Parse a pasted spreadsheet and materialize every valid row."""
    with _engine_errors():
        rows = batch_import.parse_batch_text(file.read_text(encoding="utf-8"), _parse_date(today, "today"))
        repository = InMemoryLedgerRepository()
        report = batch_import.import_rows(repository, rows, horizon_cap=_settings(ctx).horizon_cap)
    for line, reason in report.failures:
        typer.echo(f"line {line}: {reason}", err=True)
    if out:
        ledger_io.write_ledger(repository.all_entries(), out)
    typer.echo(json.dumps({"saved": report.saved, "skipped": report.skipped}, indent=2))


if __name__ == "__main__":
    app()
