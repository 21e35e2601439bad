"""Cut/copy staging shared by every panel of the application."""

import threading
from typing import Iterable, Optional

from myfilemanager.core.errors import EngineContractError
from myfilemanager.core.logging import get_logger
from myfilemanager.core.models import ClipboardMode, ClipboardPayload
from myfilemanager.core.paths import normalize

log = get_logger(__name__)


def unique_paths(paths: Iterable[str]) -> list[str]:
    """Normalise paths and drop repeats, keeping first-seen order."""
    seen = {}
    for p in paths:
        seen.setdefault(normalize(p), None)
    return list(seen)


class ClipboardStager:
    """Holds at most one staged selection until a paste consumes it."""

    def __init__(self):
        self._lock = threading.Lock()
        self._data: Optional[ClipboardPayload] = None

    def stage(self, paths: Iterable[str], mode: ClipboardMode) -> ClipboardPayload:
        if not isinstance(mode, ClipboardMode):
            raise EngineContractError(f"mode must be a ClipboardMode, got {mode!r}")
        selection = unique_paths(paths)
        if not selection:
            raise EngineContractError("nothing to stage: selection is empty")
        payload = ClipboardPayload(paths=tuple(selection), mode=mode)
        with self._lock:
            # Last copy/cut wins
            self._data = payload
        log.info("Staged %d paths for %s", len(selection), mode.value)
        return payload

    def take_payload(self) -> Optional[ClipboardPayload]:
        """Return the staged payload and clear it in one step."""
        with self._lock:
            payload, self._data = self._data, None
        return payload

    def peek(self) -> Optional[ClipboardPayload]:
        with self._lock:
            return self._data

    def clear(self) -> None:
        with self._lock:
            self._data = None

    @property
    def empty(self) -> bool:
        return self.peek() is None
