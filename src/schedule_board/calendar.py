import logging
import numpy as np
from typing import Dict, List, Optional

from .models import DayStatus, GridDay
from .providers import AbstractHolidayProvider, HolidayTable, StaticHolidayProvider
from .utils import DateLike, _to_date, _to_internal_date, _d64_to_pydate

logger = logging.getLogger(__name__)


def _weekday(days64: np.ndarray) -> np.ndarray:
    """Weekday as int (Monday=1, Sunday=7) of an array of datetime64[D]."""
    days_int = days64.astype("datetime64[D]").astype("int64")
    return ((days_int + 3) % 7 + 1).astype("uint8")


def month_bounds(day: DateLike) -> np.ndarray:
    """
    Return the first and last day of the month containing day.

    Returns
    -------
    np.ndarray
        Two np.datetime64[D] values: first day and last day of the month.
    """
    m64 = _to_internal_date(day).astype("datetime64[M]")
    first = m64.astype("datetime64[D]")
    last = (m64 + np.timedelta64(1, "M")).astype("datetime64[D]") - np.timedelta64(1, "D")
    return np.array([first, last], dtype="datetime64[D]")


def month_grid(day: DateLike) -> List[GridDay]:
    """
    Produce the ordered days of a month board.

    The board spans from the Sunday starting the week of the first day of the month
    to the Saturday ending the week of its last day, so it always holds whole weeks
    (4 to 6 rows of 7 days). Days from the neighbouring months are flagged with
    is_current_month=False.

    Parameters
    ----------
    day: DateLike
        Any date within the target month. Can be any date-like object (str, datetime, date, np.datetime64, etc.).

    Returns
    -------
    List[GridDay]
        The days of the board, in order.
    """
    first, last = month_bounds(day)
    # Sunday-first offsets: Sunday -> 0, Monday -> 1, ..., Saturday -> 6
    lead = int(_weekday(np.array([first]))[0]) % 7
    trail = 6 - int(_weekday(np.array([last]))[0]) % 7

    start = first - np.timedelta64(lead, "D")
    n_days = int((last - start) / np.timedelta64(1, "D")) + 1 + trail
    days = start + np.arange(n_days, dtype="int64").astype("timedelta64[D]")
    in_month = (days >= first) & (days <= last)

    return [GridDay(date=_d64_to_pydate(d), is_current_month=bool(flag)) for d, flag in zip(days, in_month)]


class DayClassifier:
    """
    Maps a calendar date to its rest-day / Saturday / holiday-label status.

    Sundays are always rest days; any other date is a rest day when its key is listed
    in the rest-day set of its year's holiday table. When a date is both a Saturday
    and a rest day, the rest day decides the display colour.

    Tables come from an injectable provider, looked up once per year and cached.
    Years the provider knows nothing about only follow the Sunday rule.
    """

    def __init__(self, provider: Optional[AbstractHolidayProvider] = None):
        """
        Parameters
        ----------
        provider: Optional[AbstractHolidayProvider]
            Source of the per-year tables. Defaults to the built-in 2026 table.
        """
        self.provider = provider if provider is not None else StaticHolidayProvider.default()
        self._cache: Dict[int, Optional[HolidayTable]] = {}

    def _table(self, year: int) -> Optional[HolidayTable]:
        if year not in self._cache:
            self._cache[year] = self.provider.table(year)
            if self._cache[year] is None:
                logger.debug("No holiday table for %s, applying the Sunday rule only", year)
        return self._cache[year]

    def classify(self, day: DateLike) -> DayStatus:
        """
        Return the status of the given date.

        Parameters
        ----------
        day: DateLike
            The date to classify.

        Returns
        -------
        DayStatus
            is_rest_day, is_saturday and the holiday label (None if the date has none).
        """
        d = _to_date(day)
        key = d.isoformat()
        weekday = d.weekday()
        table = self._table(d.year)

        is_rest_day = weekday == 6 or (table is not None and key in table.rest_days)
        label = table.labels.get(key) if table is not None else None
        return DayStatus(is_rest_day=is_rest_day, is_saturday=weekday == 5, holiday_label=label)

    def color_category(self, day: DateLike) -> str:
        """Return "rest", "saturday" or "weekday"."""
        return self.classify(day).color_category

    def is_weekend(self, day: DateLike) -> bool:
        return _to_date(day).weekday() >= 5

