from __future__ import annotations

import json
from pathlib import Path

from sheetcrm.cli import main as cli_main
from sheetcrm.logging.init import reset_logging


def _run(argv: list[str], capsys) -> tuple[int, str]:
    reset_logging()
    code = cli_main(argv)
    return code, capsys.readouterr().out


def test_cli_sync_seeds_file_store(write_config, temp_workdir: Path, capsys):
    code, out = _run(["sync"], capsys)
    assert code == 0
    assert "SUMMARY customers=3 products=4 orders=3 invoices=3 mockups=2 samples=1 last_sync=" in out
    stored = json.loads((temp_workdir / "data" / "starter_box_crm_data_v1.json").read_text(encoding="utf-8"))
    assert len(stored["Orders"]["rows"]) == 3


def test_cli_without_config_file_uses_defaults(temp_workdir: Path, capsys):
    code, out = _run(["sync"], capsys)
    assert code == 0
    assert "SUMMARY customers=3" in out


def test_cli_explicit_missing_config_is_fatal(temp_workdir: Path, capsys):
    code, out = _run(["--config", "config/missing.yml", "sync"], capsys)
    assert code == 1
    assert "ERROR config:" in out


def test_cli_order_create_persists_across_runs(write_config, capsys):
    code, out = _run(["order", "create", "Pine Valley", "500 scorecards", "1200"], capsys)
    assert code == 0
    assert "INFO order created id=" in out
    code, out = _run(["sync"], capsys)
    assert "orders=4 invoices=4" in out


def test_cli_order_status(write_config, capsys):
    code, _ = _run(["order", "status", "1001", "cancelled"], capsys)
    assert code == 0
    code, out = _run(["tool", "check_sheet_status", '{"queryType": "RECENT_ORDERS"}'], capsys)
    assert code == 0
    result = json.loads(out.strip().splitlines()[-1])
    assert "Order #1001 (cancelled)" in result["recentOrders"]


def test_cli_order_status_unknown_order(write_config, capsys):
    code, out = _run(["order", "status", "9999", "scheduled"], capsys)
    assert code == 1
    assert "ERROR order not found: 9999" in out


def test_cli_sample_add(write_config, capsys):
    code, out = _run(["sample", "add", "Pat Smith", "1 Main St", "Scorecards"], capsys)
    assert code == 0
    assert "sample request logged id=SMP-" in out


def test_cli_import_partial_failure(write_config, temp_workdir: Path, capsys):
    good = temp_workdir / "good.csv"
    good.write_text("SKU,Name\nSC-201,Scorecard\n", encoding="utf-8")
    bad = temp_workdir / "bad.csv"
    bad.write_bytes(b"\xff\xfe\xfa")
    code, out = _run(["import", "Products", str(good), str(bad)], capsys)
    assert code == 2
    assert "SUMMARY files=2/2 success=1 failed=1 rows=1" in out
    assert "WARN error log written:" in out
    assert list((temp_workdir / "logs").glob("errors-*.log"))


def test_cli_import_success(write_config, temp_workdir: Path, capsys):
    good = temp_workdir / "good.csv"
    good.write_text("SC-201,Scorecard\nSC-202,Pencil\n", encoding="utf-8")
    code, out = _run(["import", "Products", str(good)], capsys)
    assert code == 0
    assert "SUMMARY files=1/1 success=1 failed=0 rows=2" in out
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_cli_import_missing_path(write_config, temp_workdir: Path, capsys):
    code, out = _run(["import", "Products", str(temp_workdir / "nope.csv")], capsys)
    assert code == 1
    assert "ERROR import: path not found" in out


def test_cli_export_csv_directory(write_config, temp_workdir: Path, capsys):
    code, _ = _run(["export", str(temp_workdir / "out")], capsys)
    assert code == 0
    assert (temp_workdir / "out" / "Customers.csv").exists()


def test_cli_reset_requires_yes(write_config, capsys):
    _run(["order", "create", "Harbor", "Tees", "10"], capsys)
    code, out = _run(["reset"], capsys)
    assert code == 1
    assert "ERROR reset requires --yes" in out
    code, out = _run(["reset", "--yes"], capsys)
    assert code == 0
    assert "orders=3 invoices=3" in out


def test_cli_tool_unknown_and_bad_json(write_config, capsys):
    code, out = _run(["tool", "nope"], capsys)
    assert code == 1
    assert json.loads(out.strip().splitlines()[-1]) == {"error": "Unknown function"}
    code, out = _run(["tool", "lookup_product", "{not json"], capsys)
    assert code == 1
    assert "ERROR tool arguments are not valid JSON" in out


def test_cli_env_file_selects_memory_backend(write_config, temp_workdir: Path, monkeypatch, capsys):
    # recorded so the value load_dotenv writes is undone after the test
    monkeypatch.setenv("CRM_STORAGE_BACKEND", "file")
    (temp_workdir / ".env").write_text("CRM_STORAGE_BACKEND=memory\n", encoding="utf-8")
    code, _ = _run(["sync"], capsys)
    assert code == 0
    assert not (temp_workdir / "data" / "starter_box_crm_data_v1.json").exists()


def test_cli_debug_flag(write_config, capsys):
    code, out = _run(["--debug", "sync"], capsys)
    assert code == 0
    assert "DEBUG debug mode enabled" in out
