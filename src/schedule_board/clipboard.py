from dataclasses import dataclass, field
from typing import Iterable, Tuple

from .models import Schedule


@dataclass
class ClipboardBuffer:
    """
    Snapshots of the schedules of one source day, waiting to be pasted.

    Stores immutable Schedule values (not live store entries) so the same capture
    can be pasted into several days, each paste getting fresh ids.
    """

    snapshots: Tuple[Schedule, ...] = field(default_factory=tuple)
    source_date: str = ""
    paste_count: int = 0

    def capture(self, day: str, schedules: Iterable[Schedule]) -> None:
        """Replace the content, whatever was held before."""
        self.snapshots = tuple(schedules)
        self.source_date = day
        self.paste_count = 0

    def clear(self) -> None:
        self.snapshots = ()
        self.source_date = ""
        self.paste_count = 0

    def is_empty(self) -> bool:
        return len(self.snapshots) == 0

    def __len__(self) -> int:
        return len(self.snapshots)
