import re
import uuid
import numpy as np
import datetime as dt
from typing import Union, Any

PandasTimestamp = Any
DateLike = Union[dt.date, dt.datetime, str, np.datetime64, PandasTimestamp, Any]

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")


def _parse_date_str(s: str, dayfirst: bool = True) -> dt.date:
    """
    Robust parsing of date strings without ambiguity.

    Rules:
        1. Only accept strings with exactly 3 numeric components (whatever the separators are).
        2. The year must be the only 4-digit component, and it must be either the first or the last component.
        3. If the year is first, the format is Y-M-D.
        4. If not, the format is either D-M-Y or M-D-Y, and the dayfirst flag disambiguates.
        5. Reject all other formats (e.g. "20260131" or "01-02-03") as ambiguous.

    Parameters
    ----------
    s: str
        The date string to parse.
    dayfirst: bool, default True
        When parsing strings without a year-first format, interpret them as day-first.

    Returns
    -------
    dt.date
        The parsed date.
    """
    s = s.strip()
    if not s:
        raise ValueError("Empty date string.")

    if re.fullmatch(r"\d{8}", s):
        raise ValueError(
            f"Ambiguous date string without separators: {s!r}. "
            "Please use a separator and a 4-digit year (e.g. '2026-05-05')."
        )

    parts = re.findall(r"\d+", s)
    if len(parts) != 3:
        raise ValueError(
            f"Invalid date string: {s!r}. Expected exactly 3 numeric components "
            "(e.g. '2026-05-05' or '05/05/2026')."
        )

    a, b, c = parts
    if len(a) == 4 and len(c) != 4:
        y, m, d = int(a), int(b), int(c)
    elif len(c) == 4 and len(a) != 4:
        y = int(c)
        if dayfirst:
            d, m = int(a), int(b)
        else:
            m, d = int(a), int(b)
    else:
        raise ValueError(
            f"Ambiguous date string: {s!r}. "
            "A single 4-digit year must be either the first or the last component."
        )

    try:
        return dt.date(y, m, d)
    except ValueError as e:
        raise ValueError(f"Invalid calendar date parsed from {s!r}: (y={y}, m={m}, d={d}).") from e


def _to_date(x: DateLike, *, dayfirst: bool = True) -> dt.date:
    """
    Convert various date-like inputs to a plain datetime.date.

    Supported input types :
        - datetime.date and datetime.datetime (time part ignored)
        - np.datetime64
        - str (parsed robustly, see _parse_date_str)
        - pandas.Timestamp or anything exposing to_pydatetime()
    """
    if isinstance(x, dt.datetime):
        return x.date()
    if isinstance(x, dt.date):
        return x
    if isinstance(x, np.datetime64):
        return _d64_to_pydate(x)
    if isinstance(x, str):
        return _parse_date_str(x, dayfirst=dayfirst)
    if hasattr(x, "to_pydatetime"):
        py = x.to_pydatetime()
        if isinstance(py, dt.datetime):
            return py.date()
    raise ValueError(f"Unsupported date type: {type(x)}")


def _to_internal_date(x: DateLike, *, dayfirst: bool = True) -> np.datetime64:
    """Convert a date-like input to np.datetime64[D]."""
    if isinstance(x, np.datetime64):
        return x.astype("datetime64[D]")
    return np.datetime64(_to_date(x, dayfirst=dayfirst)).astype("datetime64[D]")


def _d64_to_pydate(d64: np.datetime64) -> dt.date:
    """Small helper to convert np.datetime64[D] to datetime.date."""
    s = np.datetime_as_string(d64.astype("datetime64[D]"), unit="D")
    return dt.date.fromisoformat(s)


def date_key(day: DateLike) -> str:
    """Return the YYYY-MM-DD key used to partition schedules by day."""
    return _to_date(day).isoformat()


def month_key(day: DateLike) -> str:
    """Return the YYYY-MM key of the month containing day."""
    return date_key(day)[:7]


def shift_month(day: DateLike, n: int) -> dt.date:
    """
    Return the first day of the month n months away from the month containing day.

    Parameters
    ----------
    day: DateLike
        Any date within the reference month.
    n: int
        Number of months to move, negative to go back.
    """
    m64 = _to_internal_date(day).astype("datetime64[M]") + np.timedelta64(n, "M")
    return _d64_to_pydate(m64.astype("datetime64[D]"))


def format_time(value: Any) -> str:
    """
    Normalize a time-like value to a zero-padded HH:MM string.

    Strings that do not look like a clock time are returned stripped but otherwise unchanged.
    """
    if isinstance(value, (dt.datetime, dt.time)):
        return f"{value.hour:02d}:{value.minute:02d}"
    s = str(value).strip()
    match = _TIME_RE.match(s)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"
    return s


def new_schedule_id() -> str:
    return str(uuid.uuid4())
