import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from finplan_core.cli import app
from finplan_core.io.ledger import load_ledger
from finplan_core.logging_config import reset_logging


runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("FINPLAN_SETTINGS", raising=False)
    yield
    reset_logging()


def test_cli_occurrences_clamps_month_end():
    result = runner.invoke(
        app,
        ["occurrences", "--start", "2025-01-31", "--frequency", "monthly", "--cap", "3"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == ["2025-01-31", "2025-02-28", "2025-03-31"]


def test_cli_materialize_and_installments(tmp_path: Path):
    ledger_path = tmp_path / "ledger.csv"
    plan_path = tmp_path / "plan.json"

    result_materialize = runner.invoke(
        app,
        [
            "materialize",
            "--category",
            "Housing",
            "--amount",
            "1500.00",
            "--start",
            "2025-01-10",
            "--description",
            "Rent",
            "--out",
            str(ledger_path),
        ],
    )
    assert result_materialize.exit_code == 0, result_materialize.output
    entries = load_ledger(ledger_path)
    assert len(entries) == 12
    assert entries[0].description == "Rent (Recurring - Monthly)"
    assert len({e.source_id for e in entries}) == 1

    result_plan = runner.invoke(
        app,
        ["installments", "--total", "1000", "--count", "3", "--start", "2025-01-01", "--out", str(plan_path)],
    )
    assert result_plan.exit_code == 0, result_plan.output
    payload = json.loads(plan_path.read_text())
    assert payload["total"] == "1000.00"
    assert [i["amount"] for i in payload["installments"]] == ["333.33", "333.33", "333.34"]
    assert [i["date"] for i in payload["installments"]] == ["2025-01-01", "2025-02-01", "2025-03-01"]


def test_cli_simulate_and_patrimony(tmp_path: Path):
    sim_path = tmp_path / "sim.json"
    portfolio_path = tmp_path / "portfolio.json"
    series_path = tmp_path / "series.json"

    result_sim = runner.invoke(
        app,
        [
            "simulate",
            "--initial",
            "1000",
            "--monthly",
            "100",
            "--annual-rate",
            "12",
            "--years",
            "1",
            "--out",
            str(sim_path),
        ],
    )
    assert result_sim.exit_code == 0, result_sim.output
    sim = json.loads(sim_path.read_text())
    assert len(sim["samples"]) == 1
    assert sim["total_contributed"] == pytest.approx(2200)
    assert sim["final_amount"] > sim["total_contributed"]

    portfolio_path.write_text(
        json.dumps(
            {
                "investments": [{"id": "cdb", "name": "CDB", "current_value": "1000.00"}],
                "events": [{"kind": "withdrawal", "amount": "200", "occurred_at": "2025-03-10T12:00:00"}],
                "assets": [{"name": "Car", "estimated_value": "30000", "created_at": "2025-01-05"}],
            }
        )
    )
    result_patrimony = runner.invoke(
        app,
        [
            "patrimony",
            "--portfolio",
            str(portfolio_path),
            "--granularity",
            "quarterly",
            "--as-of",
            "2025-06-15",
            "--out",
            str(series_path),
        ],
    )
    assert result_patrimony.exit_code == 0, result_patrimony.output
    series = json.loads(series_path.read_text())
    assert series["summary"]["total"] == "31000.00"
    assert [p["label"] for p in series["points"]] == ["Jun/24", "Sep/24", "Dec/24", "Mar/25", "Jun/25"]
    assert series["points"][2]["total"] == "1200.00"
    assert series["points"][-1]["total"] == "31000.00"


def test_cli_import_batch(tmp_path: Path):
    batch_path = tmp_path / "batch.tsv"
    ledger_path = tmp_path / "imported.csv"
    batch_path.write_text(
        "type\tcategory\tvalue\tdescription\tdate\tmode\n"
        "income\tSalary\t5000\tPaycheck\t05/01/2025\t\n"
        "expense\tElectronics\t900\tTV\t10/01/2025\t3x\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["import-batch", "--file", str(batch_path), "--out", str(ledger_path)])
    assert result.exit_code == 0, result.output
    entries = load_ledger(ledger_path)
    assert len(entries) == 4
    assert sum(e.amount.cents for e in entries) == 500000 + 90000


def test_cli_reports_engine_errors():
    result = runner.invoke(app, ["pmt", "--target", "1000", "--annual-rate", "12", "--months", "0"])
    assert result.exit_code == 1
    assert "VALIDATION_FAILED" in result.output


def test_cli_rejects_zero_cap():
    result = runner.invoke(app, ["occurrences", "--start", "2025-01-01", "--cap", "0"])
    assert result.exit_code == 1
    assert "VALIDATION_FAILED" in result.output


def test_cli_reports_malformed_portfolio(tmp_path: Path):
    portfolio_path = tmp_path / "portfolio.json"
    portfolio_path.write_text(json.dumps({"investments": [{"name": "CDB", "current_value": "lots"}]}))
    result = runner.invoke(app, ["patrimony", "--portfolio", str(portfolio_path)])
    assert result.exit_code == 1
    assert "VALIDATION_FAILED" in result.output
    assert "Traceback" not in result.output
