import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .errors import ScheduleBoardError
from .models import Schedule

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "metal_schedules"


class ScheduleStorage(Protocol):
    def load(self) -> Optional[List[Schedule]]:
        """Full saved list, or None when nothing was ever saved."""
        ...

    def save(self, schedules: List[Schedule]) -> None:
        """Replace the saved state with the full current list."""
        ...

    def load_history(self) -> List[List[Schedule]]:
        """Saved deletion batches, oldest first. Empty when none were saved."""
        ...

    def save_history(self, batches: Sequence[Sequence[Schedule]]) -> None:
        """Replace the saved deletion batches."""
        ...


class MemoryStorage:
    def __init__(self, schedules: Optional[List[Schedule]] = None):
        self.saved: Optional[List[Schedule]] = list(schedules) if schedules is not None else None
        self.save_count = 0
        self.history: List[List[Schedule]] = []

    def load(self) -> Optional[List[Schedule]]:
        return list(self.saved) if self.saved is not None else None

    def save(self, schedules: List[Schedule]) -> None:
        self.saved = list(schedules)
        self.save_count += 1

    def load_history(self) -> List[List[Schedule]]:
        return [list(b) for b in self.history]

    def save_history(self, batches: Sequence[Sequence[Schedule]]) -> None:
        self.history = [list(b) for b in batches]


class JsonFileStorage:
    """
    Key-value JSON file holding the schedule list under one key.

    Deletion batches of the undo history live under "<key>_undo" in the same file.
    Other keys of the file are preserved on save. Writes go to a temporary file
    in the same directory, then replace the original.
    """

    def __init__(self, path: str, key: str = DEFAULT_STORAGE_KEY):
        self.path = path
        self.key = key
        self.history_key = f"{key}_undo"

    def _read_document(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ScheduleBoardError(f"Cannot read storage file {self.path!r}: {e}") from e
        if not isinstance(doc, dict):
            raise ScheduleBoardError(f"Storage file {self.path!r} must hold a JSON object.")
        return doc

    def _write_document(self, doc: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=directory, prefix=".schedules_", suffix=".json")
        except OSError as e:
            raise ScheduleBoardError(f"Cannot write storage file {self.path!r}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise ScheduleBoardError(f"Cannot write storage file {self.path!r}: {e}") from e
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)

    def _parse(self, items: Any, key: str) -> List[Schedule]:
        try:
            return [Schedule.from_dict(item) for item in items]
        except (KeyError, TypeError) as e:
            raise ScheduleBoardError(f"Malformed schedule list under {key!r} in {self.path!r}: {e}") from e

    def load(self) -> Optional[List[Schedule]]:
        doc = self._read_document()
        if self.key not in doc:
            return None
        schedules = self._parse(doc[self.key], self.key)
        logger.debug("Loaded %d schedules from %s", len(schedules), self.path)
        return schedules

    def save(self, schedules: List[Schedule]) -> None:
        doc = self._read_document()
        doc[self.key] = [s.to_dict() for s in schedules]
        self._write_document(doc)
        logger.debug("Saved %d schedules to %s", len(schedules), self.path)

    def load_history(self) -> List[List[Schedule]]:
        batches = self._read_document().get(self.history_key) or []
        if not isinstance(batches, list):
            raise ScheduleBoardError(f"Malformed undo history under {self.history_key!r} in {self.path!r}")
        return [self._parse(batch, self.history_key) for batch in batches]

    def save_history(self, batches: Sequence[Sequence[Schedule]]) -> None:
        doc = self._read_document()
        doc[self.history_key] = [[s.to_dict() for s in batch] for batch in batches]
        self._write_document(doc)
        logger.debug("Saved %d undo batches to %s", len(batches), self.path)
