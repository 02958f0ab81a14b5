from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from schedule_board.cli import main


def _has_openpyxl() -> bool:
    try:
        import openpyxl  # noqa: F401
        return True
    except Exception:
        return False


OPENPYXL_OK = _has_openpyxl()


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "schedules.json")


@pytest.fixture
def run(store_path):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(main, ["--store", store_path, *args])

    return _run


def test_show_month(run) -> None:
    result = run("show", "2026", "5")
    assert result.exit_code == 0, result.output

    lines = result.output.splitlines()
    assert lines[1].split() == ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"]
    # Sunday the 3rd and Children's day in brackets, Saturday the 9th in parentheses
    assert "[ 3]" in result.output
    assert "[ 5]" in result.output
    assert "( 9)" in result.output
    assert "2026-05-05  어린이날" in result.output


def test_add_list_and_show(run, store_path) -> None:
    result = run("add", "2026-05-05", "Picnic", "--start", "11:00", "--end", "15:00")
    assert result.exit_code == 0, result.output
    assert "Added 'Picnic' on 2026-05-05 11:00-15:00" in result.output

    result = run("list", "2026", "5")
    assert result.output.strip() == "2026-05-05  11:00-15:00  Picnic"

    result = run("show", "2026", "5")
    assert "2026-05-05  어린이날 | 1 schedule" in result.output

    with open(store_path, encoding="utf-8") as f:
        assert len(json.load(f)["metal_schedules"]) == 1


def test_list_empty_month(run) -> None:
    result = run("list", "2026", "7")
    assert result.exit_code == 0
    assert "No schedules in 2026-07." in result.output


def test_copy_and_delete(run) -> None:
    run("add", "2026-05-05", "A")
    run("add", "2026-05-05", "B")

    result = run("copy", "2026-05-05", "2026-05-06", "2026-05-07")
    assert result.exit_code == 0, result.output
    assert "Captured 2 schedules from 2026-05-05" in result.output
    assert "Pasted 2 schedules into 2026-05-06" in result.output
    assert "Pasted 2 schedules into 2026-05-07" in result.output

    result = run("delete", "2026-05-06", "2026-05-20")
    assert "Deleted 2 schedules on 2026-05-06" in result.output
    assert "No schedules on 2026-05-20" in result.output

    result = run("list", "2026", "5")
    assert len(result.output.strip().splitlines()) == 4


def test_copy_from_empty_day_fails(run) -> None:
    result = run("copy", "2026-05-05", "2026-05-06")
    assert result.exit_code == 1
    assert "Nothing to copy on 2026-05-05." in result.output


def test_bad_date_reports_error(run) -> None:
    result = run("add", "20260505", "A")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_bad_config_reports_error(run, tmp_path) -> None:
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"column_locale": "xx"}), encoding="utf-8")

    result = CliRunner().invoke(main, ["--config", str(config), "show"])
    assert result.exit_code == 1
    assert "column_locale" in result.output


def test_export_empty_month(run, tmp_path) -> None:
    out = tmp_path / "out.xlsx"
    result = run("export", "2026", "8", "-o", str(out))
    assert result.exit_code == 0
    assert "No schedules in 2026-08, nothing to export." in result.output
    assert not out.exists()


@pytest.mark.skipif(not OPENPYXL_OK, reason="openpyxl not installed")
def test_export_then_import(run, tmp_path) -> None:
    run("add", "2026-05-05", "A", "--start", "10:00")
    run("add", "2026-05-01", "B")
    out = tmp_path / "2026-05.xlsx"

    result = run("export", "2026", "5", "-o", str(out))
    assert result.exit_code == 0, result.output
    assert f"Exported 2 schedules to {out}" in result.output

    result = run("import", str(out))
    assert "Imported 2 schedules (append)" in result.output
    assert len(run("list", "2026", "5").output.strip().splitlines()) == 4

    result = run("import", str(out), "--overwrite")
    assert "Imported 2 schedules (overwrite)" in result.output
    assert run("list", "2026", "5").output.strip().splitlines() == [
        "2026-05-01  09:00-10:00  B",
        "2026-05-05  10:00-10:00  A",
    ]


def test_delete_then_undo_across_runs(run) -> None:
    run("add", "2026-05-05", "A")
    run("add", "2026-05-06", "B")
    run("delete", "2026-05-05", "2026-05-06")
    assert "No schedules in 2026-05." in run("list", "2026", "5").output

    result = run("undo")
    assert result.exit_code == 0, result.output
    assert "Restored 1 schedules (1 more to undo)" in result.output
    assert run("list", "2026", "5").output.strip() == "2026-05-06  09:00-10:00  B"

    run("undo")
    assert len(run("list", "2026", "5").output.strip().splitlines()) == 2
    assert "Nothing to undo." in run("undo").output


def test_delete_reports_storage_failure(run, monkeypatch) -> None:
    run("add", "2026-05-05", "A")

    def disk_full(self, schedules):
        raise OSError("disk full")

    monkeypatch.setattr("schedule_board.storage.JsonFileStorage.save", disk_full)
    result = run("delete", "2026-05-05")

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "disk full" in result.output
    assert "Traceback" not in result.output
