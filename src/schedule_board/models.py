from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Mode(str, Enum):
    """Active behaviour of a day-cell click."""
    NORMAL = "normal"
    COPY = "copy"
    DELETE = "delete"


class ImportMode(str, Enum):
    """How imported schedules are applied to the store."""
    APPEND = "append"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class Schedule:
    """
    A single calendar entry.

    Attributes
    ----------
    id: str
        Opaque identifier, unique within a store.
    date: str
        Day of the entry as a YYYY-MM-DD string, the partition key of every day-level operation.
    start_time: str
        HH:MM, 24-hour clock. Display only, no ordering is enforced against end_time.
    end_time: str
        HH:MM, 24-hour clock.
    title: str
        Free-text label.
    """
    id: str
    date: str
    start_time: str
    end_time: str
    title: str

    def moved_to(self, day: str, new_id: str) -> "Schedule":
        """Return a copy with another id and date, every other field kept verbatim."""
        return replace(self, id=new_id, date=day)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            start_time=str(data.get("startTime", data.get("start_time", ""))),
            end_time=str(data.get("endTime", data.get("end_time", ""))),
            title=str(data.get("title", "")),
        )


@dataclass(frozen=True)
class DayStatus:
    is_rest_day: bool
    is_saturday: bool
    holiday_label: Optional[str] = None

    @property
    def color_category(self) -> str:
        # rest day wins over Saturday
        if self.is_rest_day:
            return "rest"
        if self.is_saturday:
            return "saturday"
        return "weekday"


@dataclass(frozen=True)
class GridDay:
    date: date
    is_current_month: bool


@dataclass(frozen=True)
class CalendarCell:
    """
    One rendered day of the month grid, derived from the store and the displayed month.
    """
    date: date
    is_current_month: bool
    is_weekend: bool
    is_saturday: bool
    is_rest_day: bool
    holiday_label: Optional[str] = None
    schedules: Tuple[Schedule, ...] = field(default_factory=tuple)

    @property
    def key(self) -> str:
        return self.date.isoformat()

    @property
    def color_category(self) -> str:
        return DayStatus(self.is_rest_day, self.is_saturday, self.holiday_label).color_category


@dataclass(frozen=True)
class ClickOutcome:
    """
    What a day-cell click did.

    action is one of "selected", "captured", "pasted", "deleted" or "noop".
    schedules holds the records the action touched: the captured snapshots,
    the newly pasted records or the deleted batch.
    """
    action: str
    date: str
    schedules: Tuple[Schedule, ...] = ()
