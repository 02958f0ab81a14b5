import io
import logging
import datetime as dt
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .errors import MissingDependencyError, SpreadsheetImportError
from .mapping import (
    COLUMN_LABELS,
    DEFAULT_END_TIME,
    DEFAULT_SHEET_NAME,
    DEFAULT_START_TIME,
    DEFAULT_TITLE,
    EXPORT_FILENAME_SUFFIX,
    IMPORT_KEYS,
)
from .models import ImportMode, Schedule
from .store import ScheduleStore
from .utils import DateLike, format_time, month_key, new_schedule_id

logger = logging.getLogger(__name__)

SpreadsheetSource = Union[str, bytes, bytearray, BinaryIO]

FIELDS = ("date", "start_time", "end_time", "title")


@dataclass(frozen=True)
class ImportRow:
    """
    A spreadsheet row after validation: every field present, defaults already applied.
    """
    date: str
    start_time: str
    end_time: str
    title: str

    def to_schedule(self, schedule_id: str) -> Schedule:
        return Schedule(id=schedule_id, date=self.date, start_time=self.start_time,
                        end_time=self.end_time, title=self.title)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _cell_text(field: str, value: Any) -> str:
    """Render one cell as the string stored on a Schedule field."""
    if field == "date":
        if isinstance(value, dt.datetime):
            return value.date().isoformat()
        if isinstance(value, dt.date):
            return value.isoformat()
    elif field in ("start_time", "end_time"):
        return format_time(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if field == "title":
        return str(value)
    return str(value).strip()


def default_export_name(month: DateLike) -> str:
    """File name of a monthly export, e.g. 2026-05_일정관리.xlsx."""
    return f"{month_key(month)}{EXPORT_FILENAME_SUFFIX}"


class SpreadsheetBridge:
    """
    Maps schedules to flat spreadsheet rows and back.

    Export keeps the schedules of one month, sorted by (date, start time), under
    localized column labels. Import accepts rows keyed either by the Korean labels
    or by the English keys, fills missing fields with defaults and assigns fresh ids.
    Imported rows are never deduplicated.
    """

    def __init__(self,
                 *,
                 locale: str = "ko",
                 sheet_name: str = DEFAULT_SHEET_NAME,
                 default_start_time: str = DEFAULT_START_TIME,
                 default_end_time: str = DEFAULT_END_TIME,
                 placeholder_title: str = DEFAULT_TITLE,
                 id_factory: Callable[[], str] = new_schedule_id):
        """
        Parameters
        ----------
        locale: str, default "ko"
            Column label set used on export, "ko" or "en".
        sheet_name: str, default "월간일정"
            Name of the exported sheet.
        default_start_time, default_end_time: str
            Values used when an imported row has no start or end time.
        placeholder_title: str
            Title used when an imported row has none.
        id_factory: Callable[[], str]
            Generator of ids for imported schedules.
        """
        if locale not in COLUMN_LABELS:
            raise ValueError(f"Unknown column locale: {locale!r}, please choose one of {sorted(COLUMN_LABELS)}.")
        self.labels = COLUMN_LABELS[locale]
        self.sheet_name = sheet_name
        self.defaults = {
            "date": "",
            "start_time": default_start_time,
            "end_time": default_end_time,
            "title": placeholder_title,
        }
        self.id_factory = id_factory

    # ---------------------------------------
    # |                Export               |
    # ---------------------------------------

    def export_rows(self, store: ScheduleStore, month: DateLike) -> List[Dict[str, str]]:
        """
        Rows of the given month, sorted by (date, start time).

        Both keys are zero-padded strings, so plain string ordering is chronological.

        Returns
        -------
        List[Dict[str, str]]
            One dict per schedule, keyed by column label. Empty when the month has no schedule.
        """
        monthly = sorted(store.in_month(month), key=lambda s: (s.date, s.start_time))
        return [
            {
                self.labels["date"]: s.date,
                self.labels["start_time"]: s.start_time,
                self.labels["end_time"]: s.end_time,
                self.labels["title"]: s.title,
            }
            for s in monthly
        ]

    def to_frame(self, rows: List[Dict[str, str]]) -> pd.DataFrame:
        columns = [self.labels[f] for f in FIELDS]
        return pd.DataFrame(rows, columns=columns)

    def write_month(self, store: ScheduleStore, month: DateLike, target: Union[str, BinaryIO]) -> Optional[Union[str, BinaryIO]]:
        """
        Write the month to a single-sheet .xlsx file.

        Parameters
        ----------
        store: ScheduleStore
            Where schedules are read from.
        month: DateLike
            Any date within the month to export.
        target: str or binary file object
            Destination path or buffer.

        Returns
        -------
        The target, or None when the month has nothing to export (no file is written then).
        """
        rows = self.export_rows(store, month)
        if not rows:
            logger.warning("Nothing to export for %s", month_key(month))
            return None

        try:
            with pd.ExcelWriter(target, engine="openpyxl") as writer:
                self.to_frame(rows).to_excel(writer, sheet_name=self.sheet_name, index=False)
        except ImportError as e:
            raise MissingDependencyError(
                "openpyxl is required to write .xlsx files. Install it with 'pip install openpyxl'."
            ) from e

        logger.info("Exported %d schedules for %s", len(rows), month_key(month))
        return target

    def month_to_bytes(self, store: ScheduleStore, month: DateLike) -> Optional[bytes]:
        buffer = io.BytesIO()
        if self.write_month(store, month, buffer) is None:
            return None
        return buffer.getvalue()

    # ---------------------------------------
    # |                Import               |
    # ---------------------------------------

    def read_rows(self, source: SpreadsheetSource) -> List[Dict[str, Any]]:
        """
        Read the first sheet of a spreadsheet into loosely-typed rows.

        Parameters
        ----------
        source: str, bytes or binary file object
            Path, raw bytes or open file of an .xlsx / .xls workbook.

        Raises
        ------
        SpreadsheetImportError
            If the content cannot be parsed as a spreadsheet.
        """
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))

        try:
            # no NA strings: a title such as "NA" or "None" is text, blank cells come back as ""
            df = pd.read_excel(source, sheet_name=0, dtype=object, keep_default_na=False, na_values=[])
        except ImportError as e:
            raise MissingDependencyError(
                "A spreadsheet engine is missing: openpyxl reads .xlsx files, xlrd reads .xls files."
            ) from e
        except Exception as e:
            raise SpreadsheetImportError(f"Cannot read spreadsheet: {e}") from e

        df.columns = [str(c).strip() for c in df.columns]
        return df.to_dict(orient="records")

    def parse_row(self, row: Mapping[str, Any]) -> ImportRow:
        """
        Turn one loosely-typed row into an ImportRow.

        For each field, the Korean label is looked up first and the English key second;
        the first non-blank value wins, otherwise the field default applies. The date
        is copied as-is, without any format check.
        """
        values: Dict[str, str] = {}
        for field in FIELDS:
            text = None
            for key in IMPORT_KEYS[field]:
                value = row.get(key)
                if not _is_missing(value):
                    text = _cell_text(field, value)
                    break
            values[field] = text if text else self.defaults[field]

        if not values["date"]:
            logger.warning("Imported row without a date: %r", dict(row))
        return ImportRow(**values)

    def build_schedules(self, rows: Iterable[Mapping[str, Any]]) -> List[Schedule]:
        return [self.parse_row(row).to_schedule(self.id_factory()) for row in rows]

    def import_rows(self,
                    store: ScheduleStore,
                    rows: Iterable[Mapping[str, Any]],
                    mode: Union[ImportMode, str] = ImportMode.APPEND) -> List[Schedule]:
        """
        Apply imported rows to the store in a single mutation.

        Parameters
        ----------
        store: ScheduleStore
            The store to update.
        rows: Iterable[Mapping[str, Any]]
            Rows keyed by column label or English key.
        mode: ImportMode, default APPEND
            APPEND keeps the existing schedules, OVERWRITE replaces all of them.

        Returns
        -------
        List[Schedule]
            The newly created schedules.
        """
        mode = ImportMode(mode)
        imported = self.build_schedules(rows)
        if mode is ImportMode.OVERWRITE:
            store.replace_all(imported)
        else:
            store.add_batch(imported)
        logger.info("Imported %d schedules (%s)", len(imported), mode.value)
        return imported

    def import_file(self,
                    store: ScheduleStore,
                    source: SpreadsheetSource,
                    mode: Union[ImportMode, str] = ImportMode.APPEND) -> List[Schedule]:
        """Read a spreadsheet and import its rows. The store is left unchanged if reading fails."""
        return self.import_rows(store, self.read_rows(source), mode)
