import logging
from typing import Callable, List, Optional, Union

from .clipboard import ClipboardBuffer
from .errors import ChangeNotificationError
from .models import ClickOutcome, Mode, Schedule
from .store import ScheduleStore
from .undo import UndoStack
from .utils import DateLike, date_key, new_schedule_id

logger = logging.getLogger(__name__)


class InteractionModeController:
    """
    State machine deciding what a click on a day cell does.

    States :
        - normal : the clicked date is reported to the caller, the store is untouched.
        - copy   : a day with schedules is captured into the clipboard; an empty day
                   receives a copy of the clipboard (fresh ids, date rewritten).
        - delete : every schedule of the day is removed and the batch is pushed on the undo stack.

    Transitions only happen through set_mode(). Every store access of one click or one
    undo runs under the store lock, so collect-then-remove and pop-then-reinsert are atomic.
    """

    def __init__(self,
                 store: ScheduleStore,
                 *,
                 id_factory: Callable[[], str] = new_schedule_id,
                 on_select: Optional[Callable[[str], None]] = None,
                 undo_stack: Optional[UndoStack] = None):
        """
        Parameters
        ----------
        store: ScheduleStore
            The store every action reads and mutates.
        id_factory: Callable[[], str], default uuid4 strings
            Generator of ids for pasted schedules.
        on_select: Optional[Callable[[str], None]]
            Called with the YYYY-MM-DD key of a date clicked in normal mode.
        undo_stack: Optional[UndoStack]
            History to start from, e.g. batches saved by a previous session. Empty by default.
        """
        self.store = store
        self.id_factory = id_factory
        self.on_select = on_select
        self.clipboard = ClipboardBuffer()
        self.undo_stack = undo_stack if undo_stack is not None else UndoStack()
        self._mode = Mode.NORMAL

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def undo_depth(self) -> int:
        return self.undo_stack.depth

    def set_mode(self, mode: Union[Mode, str]) -> None:
        """
        Switch the active mode.

        Leaving the current mode drops any pending clipboard content, and so does
        selecting normal mode even when it is already active.
        """
        new_mode = Mode(mode)
        if new_mode != self._mode or new_mode is Mode.NORMAL:
            if not self.clipboard.is_empty():
                logger.debug("Clipboard cleared (%d snapshots dropped)", len(self.clipboard))
            self.clipboard.clear()
        if new_mode != self._mode:
            logger.debug("Mode %s -> %s", self._mode.value, new_mode.value)
        self._mode = new_mode

    def on_cell_click(self, day: DateLike) -> ClickOutcome:
        key = date_key(day)
        if self._mode is Mode.COPY:
            return self._copy_action(key)
        if self._mode is Mode.DELETE:
            return self._delete_action(key)

        if self.on_select is not None:
            self.on_select(key)
        return ClickOutcome("selected", key)

    def _copy_action(self, key: str) -> ClickOutcome:
        with self.store.locked():
            day_schedules = self.store.for_date(key)
            if day_schedules:
                self.clipboard.capture(key, day_schedules)
                logger.debug("Captured %d schedules from %s", len(day_schedules), key)
                return ClickOutcome("captured", key, tuple(day_schedules))

            if self.clipboard.is_empty():
                return ClickOutcome("noop", key)

            pasted = [s.moved_to(key, self.id_factory()) for s in self.clipboard.snapshots]
            try:
                self.store.add_batch(pasted)
            except ChangeNotificationError:
                # the copies are in the store, only a listener failed
                self.clipboard.paste_count += 1
                raise
            self.clipboard.paste_count += 1

        logger.info("Pasted %d schedules from %s to %s", len(pasted), self.clipboard.source_date, key)
        return ClickOutcome("pasted", key, tuple(pasted))

    def _delete_action(self, key: str) -> ClickOutcome:
        with self.store.locked():
            removed = self.store.for_date(key)
            if not removed:
                return ClickOutcome("noop", key)

            # every removed batch is on the undo stack, even when a listener fails
            self.undo_stack.push(removed)
            try:
                self.store.remove_by_date(key)
            except ChangeNotificationError:
                logger.warning("Deleted %d schedules on %s, kept on the undo stack", len(removed), key)
                raise
            except Exception:
                self.undo_stack.pop()
                raise

        logger.info("Deleted %d schedules on %s (undo depth %d)", len(removed), key, self.undo_stack.depth)
        return ClickOutcome("deleted", key, tuple(removed))

    def undo(self) -> List[Schedule]:
        """
        Restore the most recent deletion batch.

        The batch is put back with its original ids, without looking at what happened
        to its date since. Records whose id is back in the store already are skipped so
        that ids stay unique.

        Returns
        -------
        List[Schedule]
            The records actually restored. Empty when there was nothing to undo.
        """
        with self.store.locked():
            batch = self.undo_stack.pop()
            if batch is None:
                return []
            present = self.store.ids()
            restored = [s for s in batch if s.id not in present]
            skipped = len(batch) - len(restored)
            self.store.add_batch(restored)

        if skipped:
            logger.warning("Undo skipped %d schedules whose id is already in the store", skipped)
        logger.info("Undo restored %d schedules (undo depth %d)", len(restored), self.undo_stack.depth)
        return restored
