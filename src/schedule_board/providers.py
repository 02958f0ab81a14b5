import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from .errors import ConfigError, MissingDependencyError
from .mapping import HOLIDAY_LABELS_2026, REST_DAYS_2026

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidayTable:
    """
    Fixed holiday data for one calendar year.

    Attributes
    ----------
    year: int
        The year the table applies to.
    labels: Mapping[str, str]
        YYYY-MM-DD key -> holiday label shown on the board.
    rest_days: FrozenSet[str]
        YYYY-MM-DD keys rendered as days off. Labelled holidays are not rest days unless listed here.
    """
    year: int
    labels: Mapping[str, str] = field(default_factory=dict)
    rest_days: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if not isinstance(self.rest_days, frozenset):
            object.__setattr__(self, "rest_days", frozenset(self.rest_days))
        object.__setattr__(self, "labels", dict(self.labels))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HolidayTable":
        try:
            year = int(data["year"])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Holiday table needs an integer 'year': {data!r}") from e
        labels = data.get("holidays") or {}
        rest_days = data.get("rest_days") or []
        if not isinstance(labels, dict) or not isinstance(rest_days, list):
            raise ConfigError(f"Holiday table for {year} must map 'holidays' to an object and 'rest_days' to a list.")
        return cls(year=year, labels={str(k): str(v) for k, v in labels.items()}, rest_days=frozenset(map(str, rest_days)))

    def merged(self, other: "HolidayTable") -> "HolidayTable":
        labels = dict(self.labels)
        labels.update(other.labels)
        return HolidayTable(self.year, labels, self.rest_days | other.rest_days)


def load_holiday_tables(path: str) -> List[HolidayTable]:
    """
    Read holiday tables from a JSON file.

    The file holds either a single table object or a list of them:
        {"year": 2027, "holidays": {"2027-01-01": "신정"}, "rest_days": ["2027-01-01"]}
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read holiday tables from {path!r}: {e}") from e

    items = raw if isinstance(raw, list) else [raw]
    return [HolidayTable.from_dict(item) for item in items]


class AbstractHolidayProvider(ABC):
    """
    Abstract base class for sources of per-year holiday tables.
    """
    @abstractmethod
    def table(self, year: int) -> Optional[HolidayTable]:
        """
        Return the holiday table of the given year, or None when the source knows nothing about it.

        Parameters
        ----------
        year: int
            The calendar year to look up.
        """
        pass


class StaticHolidayProvider(AbstractHolidayProvider):
    """
    Provider backed by fixed tables supplied at construction.
    """
    def __init__(self, tables: Iterable[HolidayTable] = ()):
        self._tables: Dict[int, HolidayTable] = {}
        for t in tables:
            if t.year in self._tables:
                self._tables[t.year] = self._tables[t.year].merged(t)
            else:
                self._tables[t.year] = t

    @classmethod
    def default(cls) -> "StaticHolidayProvider":
        return cls([HolidayTable(2026, HOLIDAY_LABELS_2026, REST_DAYS_2026)])

    def years(self) -> List[int]:
        return sorted(self._tables)

    def table(self, year: int) -> Optional[HolidayTable]:
        return self._tables.get(year)


@dataclass(frozen=True)
class WorkalendarHolidayProvider(AbstractHolidayProvider):
    """
    Provider based on country calendars from the workalendar package.
    Every public holiday it lists is a rest day and carries its label.

    Specific documentation : https://pypi.org/project/workalendar/
    """
    country_code: str = "KR"

    def __post_init__(self):
        object.__setattr__(self, "country_code", self.country_code.strip().upper())
        _ = self._calendar_class()

    def _calendar_class(self):
        try:
            from workalendar.registry import registry
        except Exception as e:
            raise MissingDependencyError(
                "workalendar is required for country holiday tables. "
                "Install extra: pip install schedule-board[country]"
            ) from e

        cal_cls = registry.get(self.country_code)
        if cal_cls is None:
            raise ConfigError(f"Unknown workalendar country code: {self.country_code!r}")
        return cal_cls

    def table(self, year: int) -> Optional[HolidayTable]:
        cal = self._calendar_class()()
        labels: Dict[str, str] = {}
        for day, label in cal.holidays(year):
            labels[day.isoformat()] = label
        return HolidayTable(year, labels, frozenset(labels))


class CombinedHolidayProvider(AbstractHolidayProvider):
    """
    Union of several providers: labels of later providers override earlier ones, rest days add up.
    """
    def __init__(self, providers: Iterable[AbstractHolidayProvider]):
        self.providers = tuple(providers)

    def table(self, year: int) -> Optional[HolidayTable]:
        result = None
        for provider in self.providers:
            t = provider.table(year)
            if t is None:
                continue
            result = t if result is None else result.merged(t)
        return result

