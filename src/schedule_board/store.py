import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Optional, Set

from .errors import ChangeNotificationError, DuplicateScheduleError
from .models import Schedule
from .utils import DateLike, date_key, month_key

logger = logging.getLogger(__name__)

ChangeListener = Callable[[List[Schedule]], None]


class ScheduleStore:
    """
    In-memory collection of schedules, the single owner of the board's mutable state.

    All mutations go through the methods below, run under one re-entrant lock and
    either apply completely or not at all. Listeners registered with subscribe()
    receive the full list after every mutation. A failing listener does not undo
    the mutation nor stop the other listeners: every listener is called, then
    ChangeNotificationError is raised.
    """

    def __init__(self, schedules: Optional[Iterable[Schedule]] = None):
        self._lock = threading.RLock()
        self._items: List[Schedule] = []
        self._listeners: List[ChangeListener] = []
        if schedules is not None:
            self.replace_all(schedules)

    # ---------------------------------------
    # |            Helper methods           |
    # ---------------------------------------

    def _check_unique(self, new_items: List[Schedule], existing: Set[str]) -> None:
        seen = set(existing)
        for s in new_items:
            if s.id in seen:
                raise DuplicateScheduleError(f"Schedule id already in the store: {s.id!r}")
            seen.add(s.id)

    def _commit(self, items: List[Schedule]) -> None:
        self._items = items
        snapshot = list(items)
        failures: List[Exception] = []
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Change listener %r failed: %s", listener, e)
                failures.append(e)
        if failures:
            raise ChangeNotificationError(
                f"{len(failures)} change listener(s) failed, the store change itself is applied: {failures[0]}",
                failures,
            ) from failures[0]

    @contextmanager
    def locked(self) -> Iterator["ScheduleStore"]:
        """Hold the store lock across several operations that must not interleave."""
        with self._lock:
            yield self

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns
        -------
        Callable[[], None]
            A function removing the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---------------------------------------
    # |               Queries               |
    # ---------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def get_all(self) -> List[Schedule]:
        with self._lock:
            return list(self._items)

    def ids(self) -> Set[str]:
        with self._lock:
            return {s.id for s in self._items}

    def for_date(self, day: DateLike) -> List[Schedule]:
        """Schedules of one day, in store order."""
        key = day if isinstance(day, str) else date_key(day)
        with self._lock:
            return [s for s in self._items if s.date == key]

    def in_month(self, month: DateLike) -> List[Schedule]:
        """Schedules whose date starts with the YYYY-MM key of the given month, in store order."""
        prefix = month_key(month)
        with self._lock:
            return [s for s in self._items if s.date.startswith(prefix)]

    # ---------------------------------------
    # |              Mutations              |
    # ---------------------------------------

    def replace_all(self, schedules: Iterable[Schedule]) -> None:
        new_items = list(schedules)
        with self._lock:
            self._check_unique(new_items, set())
            self._commit(new_items)
        logger.debug("Store replaced with %d schedules", len(new_items))

    def add(self, schedule: Schedule) -> None:
        self.add_batch([schedule])

    def add_batch(self, schedules: Iterable[Schedule]) -> List[Schedule]:
        """
        Append several schedules in one mutation.

        Raises
        ------
        DuplicateScheduleError
            If any id is already used, in the store or within the batch. Nothing is added then.
        """
        batch = list(schedules)
        if not batch:
            return []
        with self._lock:
            self._check_unique(batch, {s.id for s in self._items})
            self._commit(self._items + batch)
        logger.debug("Added %d schedules", len(batch))
        return batch

    def remove_by_date(self, day: DateLike) -> List[Schedule]:
        """
        Remove every schedule of one day.

        Returns
        -------
        List[Schedule]
            The removed schedules, in store order. Empty if the day had none, in which case listeners are not called.
        """
        key = day if isinstance(day, str) else date_key(day)
        with self._lock:
            removed = [s for s in self._items if s.date == key]
            if not removed:
                return []
            self._commit([s for s in self._items if s.date != key])
        logger.debug("Removed %d schedules on %s", len(removed), key)
        return removed
