# Pytest suite for SpreadsheetBridge:
#   - export rows (month filter, ordering, column labels)
#   - row parsing (Korean / English keys, defaults, cell normalization)
#   - append / overwrite import
#   - .xlsx files through pandas + openpyxl
#
# Run:
#   pytest -q tests/test_spreadsheet.py

from __future__ import annotations

import io
import itertools
from datetime import date, datetime, time

import pytest

from schedule_board import (
    ImportMode,
    Schedule,
    ScheduleStore,
    SpreadsheetBridge,
    SpreadsheetImportError,
    default_export_name,
)


# -------------------------
# Dependency gates
# -------------------------
def _has_openpyxl() -> bool:
    try:
        import openpyxl  # noqa: F401
        return True
    except Exception:
        return False


OPENPYXL_OK = _has_openpyxl()


# -------------------------
# Fixtures
# -------------------------
@pytest.fixture
def bridge() -> SpreadsheetBridge:
    counter = itertools.count(1)
    return SpreadsheetBridge(id_factory=lambda: f"imp-{next(counter)}")


@pytest.fixture
def store() -> ScheduleStore:
    return ScheduleStore([
        Schedule("1", "2026-05-07", "14:00", "15:00", "Review"),
        Schedule("2", "2026-04-30", "09:00", "10:00", "April"),
        Schedule("3", "2026-05-05", "13:00", "14:00", "Lunch"),
        Schedule("4", "2026-05-05", "08:30", "09:00", "Standup"),
        Schedule("5", "2026-06-01", "09:00", "10:00", "June"),
    ])


# ============================================================
# 1) Export
# ============================================================
def test_export_rows_filtered_and_sorted(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    rows = bridge.export_rows(store, date(2026, 5, 1))

    assert rows == [
        {"날짜": "2026-05-05", "시작시간": "08:30", "종료시간": "09:00", "제목": "Standup"},
        {"날짜": "2026-05-05", "시작시간": "13:00", "종료시간": "14:00", "제목": "Lunch"},
        {"날짜": "2026-05-07", "시작시간": "14:00", "종료시간": "15:00", "제목": "Review"},
    ]


def test_export_with_english_labels(store: ScheduleStore) -> None:
    rows = SpreadsheetBridge(locale="en").export_rows(store, "2026-06-15")
    assert rows == [{"date": "2026-06-01", "startTime": "09:00", "endTime": "10:00", "title": "June"}]


def test_export_empty_month(bridge: SpreadsheetBridge, store: ScheduleStore, tmp_path) -> None:
    target = tmp_path / "empty.xlsx"

    assert bridge.export_rows(store, "2026-07-01") == []
    assert bridge.write_month(store, "2026-07-01", str(target)) is None
    assert not target.exists()


def test_frame_columns_in_fixed_order(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    df = bridge.to_frame(bridge.export_rows(store, "2026-05-01"))
    assert list(df.columns) == ["날짜", "시작시간", "종료시간", "제목"]
    assert len(df) == 3


def test_default_export_name() -> None:
    assert default_export_name(date(2026, 5, 17)) == "2026-05_일정관리.xlsx"


def test_unknown_locale_rejected() -> None:
    with pytest.raises(ValueError):
        SpreadsheetBridge(locale="fr")


# ============================================================
# 2) Row parsing
# ============================================================
def test_missing_fields_get_defaults(bridge: SpreadsheetBridge) -> None:
    row = bridge.parse_row({"날짜": "2026-05-05"})

    assert row.date == "2026-05-05"
    assert row.start_time == "09:00"
    assert row.end_time == "10:00"
    assert row.title == "새 일정"


def test_english_keys_are_accepted(bridge: SpreadsheetBridge) -> None:
    row = bridge.parse_row({"date": "2026-05-05", "startTime": "8:30", "endTime": "9:15", "title": "Standup"})
    assert (row.date, row.start_time, row.end_time, row.title) == ("2026-05-05", "08:30", "09:15", "Standup")


def test_korean_label_wins_over_english_key(bridge: SpreadsheetBridge) -> None:
    row = bridge.parse_row({"날짜": "2026-05-05", "제목": "회의", "title": "Meeting"})
    assert row.title == "회의"


def test_blank_korean_value_falls_back_to_english(bridge: SpreadsheetBridge) -> None:
    row = bridge.parse_row({"날짜": "2026-05-05", "제목": "  ", "title": "Meeting"})
    assert row.title == "Meeting"


def test_spreadsheet_cells_are_normalized(bridge: SpreadsheetBridge) -> None:
    row = bridge.parse_row({
        "날짜": datetime(2026, 5, 5, 0, 0),
        "시작시간": time(7, 5),
        "종료시간": float("nan"),
        "제목": 3.0,
    })

    assert row.date == "2026-05-05"
    assert row.start_time == "07:05"
    assert row.end_time == "10:00"
    assert row.title == "3"


def test_title_text_is_kept_verbatim(bridge: SpreadsheetBridge) -> None:
    assert bridge.parse_row({"날짜": "2026-05-05", "제목": " padded "}).title == " padded "
    assert bridge.parse_row({"날짜": "2026-05-05", "제목": "NA"}).title == "NA"
    # trimmed only to decide whether the cell is blank
    assert bridge.parse_row({"날짜": " 2026-05-05 ", "제목": "   "}).title == "새 일정"
    assert bridge.parse_row({"날짜": " 2026-05-05 "}).date == "2026-05-05"


def test_date_is_copied_without_validation(bridge: SpreadsheetBridge) -> None:
    assert bridge.parse_row({"날짜": "5월 5일"}).date == "5월 5일"


def test_missing_date_becomes_empty_string(bridge: SpreadsheetBridge, caplog) -> None:
    with caplog.at_level("WARNING"):
        row = bridge.parse_row({"제목": "No date"})

    assert row.date == ""
    assert "without a date" in caplog.text


def test_custom_defaults() -> None:
    bridge = SpreadsheetBridge(default_start_time="10:00", default_end_time="11:00", placeholder_title="TBD")
    row = bridge.parse_row({"date": "2026-05-05"})
    assert (row.start_time, row.end_time, row.title) == ("10:00", "11:00", "TBD")


# ============================================================
# 3) Import into a store
# ============================================================
ROWS = [
    {"날짜": "2026-05-05", "시작시간": "09:00", "종료시간": "10:00", "제목": "Lunch"},
    {"날짜": "2026-05-05", "시작시간": "09:00", "종료시간": "10:00", "제목": "Lunch"},
    {"date": "2026-05-08", "title": "Trip"},
]


def test_append_keeps_existing_and_assigns_fresh_ids(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    imported = bridge.import_rows(store, ROWS)

    assert [s.id for s in imported] == ["imp-1", "imp-2", "imp-3"]
    assert len(store) == 8
    # identical rows are not deduplicated
    assert [s.title for s in store.for_date("2026-05-05")] == ["Lunch", "Standup", "Lunch", "Lunch"]


def test_overwrite_replaces_everything(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    imported = bridge.import_rows(store, ROWS, mode="overwrite")

    assert store.get_all() == imported
    assert store.ids() == {"imp-1", "imp-2", "imp-3"}


def test_import_is_a_single_store_change(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    changes = []
    store.subscribe(changes.append)

    bridge.import_rows(store, ROWS, ImportMode.APPEND)
    assert len(changes) == 1


def test_malformed_bytes_leave_store_unchanged(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    before = store.get_all()

    with pytest.raises(SpreadsheetImportError):
        bridge.import_file(store, b"this is not a spreadsheet", ImportMode.OVERWRITE)

    assert store.get_all() == before


# ============================================================
# 4) .xlsx files
# ============================================================
@pytest.mark.skipif(not OPENPYXL_OK, reason="openpyxl not installed")
def test_xlsx_export_then_import(bridge: SpreadsheetBridge, store: ScheduleStore, tmp_path) -> None:
    path = tmp_path / default_export_name("2026-05-01")
    assert bridge.write_month(store, "2026-05-01", str(path)) == str(path)

    import openpyxl
    wb = openpyxl.load_workbook(path)
    assert wb.sheetnames == ["월간일정"]

    target = ScheduleStore()
    bridge.import_file(target, str(path))

    def fields(s: Schedule):
        return (s.date, s.start_time, s.end_time, s.title)

    expected = sorted(fields(s) for s in store.in_month("2026-05-01"))
    assert [fields(s) for s in target.get_all()] == expected


@pytest.mark.skipif(not OPENPYXL_OK, reason="openpyxl not installed")
@pytest.mark.parametrize("title", ["NA", "None", "null", "n/a", "NaN", " padded "])
def test_xlsx_round_trip_keeps_title_text(bridge: SpreadsheetBridge, title: str) -> None:
    source = ScheduleStore([Schedule("1", "2026-05-05", "09:30", "11:00", title)])
    data = bridge.month_to_bytes(source, "2026-05-01")

    target = ScheduleStore()
    bridge.import_file(target, data)

    [imported] = target.get_all()
    assert (imported.date, imported.start_time, imported.end_time, imported.title) == (
        "2026-05-05", "09:30", "11:00", title,
    )


@pytest.mark.skipif(not OPENPYXL_OK, reason="openpyxl not installed")
def test_month_to_bytes_is_readable(bridge: SpreadsheetBridge, store: ScheduleStore) -> None:
    data = bridge.month_to_bytes(store, "2026-06-01")
    assert data is not None

    rows = bridge.read_rows(io.BytesIO(data))
    assert rows == [{"날짜": "2026-06-01", "시작시간": "09:00", "종료시간": "10:00", "제목": "June"}]

    assert bridge.month_to_bytes(store, "2026-08-01") is None
