import json
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from .calendar import DayClassifier
from .errors import ConfigError
from .mapping import COLUMN_LABELS, DEFAULT_END_TIME, DEFAULT_SHEET_NAME, DEFAULT_START_TIME, DEFAULT_TITLE
from .providers import (
    AbstractHolidayProvider,
    CombinedHolidayProvider,
    StaticHolidayProvider,
    WorkalendarHolidayProvider,
    load_holiday_tables,
)
from .storage import DEFAULT_STORAGE_KEY

logger = logging.getLogger(__name__)


@dataclass
class BoardConfig:
    """
    Settings of a schedule board.

    Attributes
    ----------
    default_start_time, default_end_time: str
        Times given to imported rows that have none.
    placeholder_title: str
        Title given to imported rows that have none.
    column_locale: str
        Label set of exported columns, "ko" or "en".
    sheet_name: str
        Name of the exported sheet.
    storage_path: Optional[str]
        JSON file the schedules are persisted to. None keeps them in memory only.
    storage_key: str
        Key of the schedule list inside the storage file.
    holiday_tables: List[str]
        JSON files with extra per-year holiday tables.
    holiday_country: Optional[str]
        workalendar country code whose holidays are added to the tables (e.g. "KR").
    """
    default_start_time: str = DEFAULT_START_TIME
    default_end_time: str = DEFAULT_END_TIME
    placeholder_title: str = DEFAULT_TITLE
    column_locale: str = "ko"
    sheet_name: str = DEFAULT_SHEET_NAME
    storage_path: Optional[str] = None
    storage_key: str = DEFAULT_STORAGE_KEY
    holiday_tables: List[str] = field(default_factory=list)
    holiday_country: Optional[str] = None

    def __post_init__(self):
        if self.column_locale not in COLUMN_LABELS:
            raise ConfigError(f"Unknown column_locale: {self.column_locale!r}, please choose 'ko' or 'en'.")
        if isinstance(self.holiday_tables, str):
            self.holiday_tables = [self.holiday_tables]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: str) -> "BoardConfig":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file {path!r}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path!r} must hold a JSON object.")
        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data)

    def build_provider(self) -> AbstractHolidayProvider:
        """
        workalendar country if any, then the built-in 2026 table and the JSON tables.
        Labels of the fixed tables win over the country ones.
        """
        tables = []
        for path in self.holiday_tables:
            tables.extend(load_holiday_tables(path))
        providers: List[AbstractHolidayProvider] = []
        if self.holiday_country:
            providers.append(WorkalendarHolidayProvider(self.holiday_country))
        providers.append(StaticHolidayProvider(list(_default_tables()) + tables))
        if len(providers) == 1:
            return providers[0]
        return CombinedHolidayProvider(providers)

    def build_classifier(self) -> DayClassifier:
        return DayClassifier(self.build_provider())


def _default_tables():
    default = StaticHolidayProvider.default()
    return [default.table(y) for y in default.years()]
