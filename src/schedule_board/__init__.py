"""
schedule_board

Interaction engine of a monthly schedule board:
  - month grid generation (Sunday-first, whole weeks)
  - day classification (Sundays, Saturdays, per-year holiday and rest-day tables)
  - select / copy / delete click modes, with a clipboard and a multi-level undo of deletions
  - spreadsheet export of a month and import of rows (pandas + openpyxl)

Install:
  pip install schedule-board            # core
  pip install schedule-board[country]   # workalendar holiday tables

Usage:
  board = ScheduleBoard.default()
  board.set_mode("copy")
  board.on_cell_click("2026-05-05")     # capture
  board.on_cell_click("2026-05-06")     # paste
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from .calendar import DayClassifier, month_grid
from .clipboard import ClipboardBuffer
from .config import BoardConfig
from .controller import InteractionModeController
from .errors import (
    ChangeNotificationError,
    ConfigError,
    DuplicateScheduleError,
    MissingDependencyError,
    ScheduleBoardError,
    SpreadsheetImportError,
)
from .models import CalendarCell, ClickOutcome, DayStatus, GridDay, ImportMode, Mode, Schedule
from .providers import (
    AbstractHolidayProvider,
    CombinedHolidayProvider,
    HolidayTable,
    StaticHolidayProvider,
    WorkalendarHolidayProvider,
)
from .spreadsheet import ImportRow, SpreadsheetBridge, default_export_name
from .storage import JsonFileStorage, MemoryStorage, ScheduleStorage
from .store import ScheduleStore
from .undo import UndoStack
from .utils import DateLike, date_key, format_time, new_schedule_id

logger = logging.getLogger(__name__)


class ScheduleBoard:
    """
    Façade wiring the store, the classifier, the click controller and the spreadsheet bridge.

    Usage:
        board = ScheduleBoard.default(BoardConfig(storage_path="board.json"))

        cells = board.get_grid("2026-05-01")
        board.set_mode(Mode.DELETE)
        board.on_cell_click("2026-05-05")
        board.undo()
        rows = board.export_month("2026-05-01")
    """

    def __init__(
        self,
        store: Optional[ScheduleStore] = None,
        classifier: Optional[DayClassifier] = None,
        config: Optional[BoardConfig] = None,
        storage: Optional[ScheduleStorage] = None,
        *,
        id_factory: Callable[[], str] = new_schedule_id,
        on_select: Optional[Callable[[str], None]] = None,
    ):
        self.config = config if config is not None else BoardConfig()
        self.store = store if store is not None else ScheduleStore()
        self.classifier = classifier if classifier is not None else self.config.build_classifier()
        self.storage = storage

        history = None
        if storage is not None:
            saved = storage.load()
            if saved is not None:
                self.store.replace_all(saved)
            history = storage.load_history()
            self.store.subscribe(storage.save)

        self.controller = InteractionModeController(
            self.store, id_factory=id_factory, on_select=on_select, undo_stack=UndoStack(history),
        )
        self.bridge = SpreadsheetBridge(
            locale=self.config.column_locale,
            sheet_name=self.config.sheet_name,
            default_start_time=self.config.default_start_time,
            default_end_time=self.config.default_end_time,
            placeholder_title=self.config.placeholder_title,
            id_factory=id_factory,
        )

    # ---------- factories
    @classmethod
    def default(cls, config: Optional[BoardConfig] = None) -> "ScheduleBoard":
        """
        Builds a board from a configuration:
          - classifier from the built-in, JSON and workalendar holiday tables
          - JSON file storage when storage_path is set, memory only otherwise
        """
        config = config if config is not None else BoardConfig()
        storage = JsonFileStorage(config.storage_path, key=config.storage_key) if config.storage_path else None
        return cls(config=config, storage=storage)

    # ---------- state
    @property
    def mode(self) -> Mode:
        return self.controller.mode

    @property
    def undo_depth(self) -> int:
        return self.controller.undo_depth

    @property
    def clipboard(self) -> ClipboardBuffer:
        return self.controller.clipboard

    # ---------- grid
    def get_grid(self, month: DateLike) -> List[CalendarCell]:
        """
        Cells of the month board containing the given date, recomputed from the store on every call.
        """
        by_day = {}
        for s in self.store.get_all():
            by_day.setdefault(s.date, []).append(s)

        cells: List[CalendarCell] = []
        for gd in month_grid(month):
            status = self.classifier.classify(gd.date)
            cells.append(CalendarCell(
                date=gd.date,
                is_current_month=gd.is_current_month,
                is_weekend=self.classifier.is_weekend(gd.date),
                is_saturday=status.is_saturday,
                is_rest_day=status.is_rest_day,
                holiday_label=status.holiday_label,
                schedules=tuple(by_day.get(gd.date.isoformat(), ())),
            ))
        return cells

    # ---------- interaction
    def set_mode(self, mode: Union[Mode, str]) -> None:
        self.controller.set_mode(mode)

    def on_cell_click(self, day: DateLike) -> ClickOutcome:
        depth = self.undo_depth
        try:
            return self.controller.on_cell_click(day)
        finally:
            if self.undo_depth != depth:
                self._save_history()

    def undo(self) -> List[Schedule]:
        depth = self.undo_depth
        try:
            return self.controller.undo()
        finally:
            if self.undo_depth != depth:
                self._save_history()

    def _save_history(self) -> None:
        if self.storage is not None:
            self.storage.save_history(self.controller.undo_stack.batches())

    def add_schedule(self, day: DateLike, title: str, start_time: Optional[str] = None,
                     end_time: Optional[str] = None) -> Schedule:
        """Direct entry of one schedule, with the configured default times."""
        schedule = Schedule(
            id=self.controller.id_factory(),
            date=date_key(day),
            start_time=format_time(start_time) if start_time else self.config.default_start_time,
            end_time=format_time(end_time) if end_time else self.config.default_end_time,
            title=title,
        )
        self.store.add(schedule)
        logger.info("Added schedule %r on %s", title, schedule.date)
        return schedule

    # ---------- spreadsheet
    def export_month(self, month: DateLike) -> List[dict]:
        return self.bridge.export_rows(self.store, month)

    def write_month(self, month: DateLike, target: Any) -> Any:
        return self.bridge.write_month(self.store, month, target)

    def import_rows(self, rows: Iterable[Mapping[str, Any]],
                    mode: Union[ImportMode, str] = ImportMode.APPEND) -> List[Schedule]:
        return self.bridge.import_rows(self.store, rows, mode)

    def import_file(self, source: Any, mode: Union[ImportMode, str] = ImportMode.APPEND) -> List[Schedule]:
        return self.bridge.import_file(self.store, source, mode)


__all__ = [
    "AbstractHolidayProvider",
    "BoardConfig",
    "CalendarCell",
    "ChangeNotificationError",
    "ClickOutcome",
    "ClipboardBuffer",
    "CombinedHolidayProvider",
    "ConfigError",
    "DayClassifier",
    "DayStatus",
    "DuplicateScheduleError",
    "GridDay",
    "HolidayTable",
    "ImportMode",
    "ImportRow",
    "InteractionModeController",
    "JsonFileStorage",
    "MemoryStorage",
    "MissingDependencyError",
    "Mode",
    "Schedule",
    "ScheduleBoard",
    "ScheduleBoardError",
    "ScheduleStorage",
    "ScheduleStore",
    "SpreadsheetBridge",
    "SpreadsheetImportError",
    "StaticHolidayProvider",
    "UndoStack",
    "WorkalendarHolidayProvider",
    "default_export_name",
    "month_grid",
]
