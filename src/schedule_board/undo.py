from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Schedule


class UndoStack:
    """
    LIFO history of deletion batches.

    A batch is the full list of schedules removed by one delete action on one date.
    The stack is unbounded.
    """

    def __init__(self, batches: Optional[Iterable[Sequence[Schedule]]] = None):
        self._batches: List[Tuple[Schedule, ...]] = []
        for batch in batches or ():
            self.push(list(batch))

    def __len__(self) -> int:
        return len(self._batches)

    @property
    def depth(self) -> int:
        return len(self._batches)

    def push(self, batch: List[Schedule]) -> None:
        if not batch:
            raise ValueError("Cannot push an empty deletion batch.")
        self._batches.append(tuple(batch))

    def pop(self) -> Optional[Tuple[Schedule, ...]]:
        """Remove and return the latest batch, or None when the stack is empty."""
        if not self._batches:
            return None
        return self._batches.pop()

    def peek(self) -> Optional[Tuple[Schedule, ...]]:
        return self._batches[-1] if self._batches else None

    def batches(self) -> List[Tuple[Schedule, ...]]:
        return list(self._batches)

    def clear(self) -> None:
        self._batches.clear()
