"""The file operation engine as seen by a front-end.

FileOperationEngine owns one clipboard stager and one batch coordinator. A
front-end hands it a selection and a target directory and gets BatchReports
back.
"""

import os
from typing import Iterable, Optional

from myfilemanager.core.batch import BatchCoordinator
from myfilemanager.core.clipboard import ClipboardStager
from myfilemanager.core.config import Config
from myfilemanager.core.errors import EngineContractError
from myfilemanager.core.logging import get_logger
from myfilemanager.core.models import (
    BatchReport,
    CancelToken,
    ClipboardMode,
    ClipboardPayload,
    OperationKind,
    TransferItem,
)
from myfilemanager.core.paths import normalize, validate_name

log = get_logger(__name__)


class FileOperationEngine:
    """Copy/cut/paste, delete, rename and new-folder entry points."""

    def __init__(self, clipboard: Optional[ClipboardStager] = None,
                 coordinator: Optional[BatchCoordinator] = None):
        self.clipboard = clipboard if clipboard is not None else ClipboardStager()
        self.coordinator = coordinator if coordinator is not None else BatchCoordinator()

    @classmethod
    def from_config(cls, config: Config, clipboard: Optional[ClipboardStager] = None) -> "FileOperationEngine":
        coordinator = BatchCoordinator(overwrite=config.overwrite_existing, max_workers=config.max_workers)
        return cls(clipboard=clipboard, coordinator=coordinator)

    def copy(self, selection: Iterable[str]) -> ClipboardPayload:
        return self.clipboard.stage(selection, ClipboardMode.COPY)

    def cut(self, selection: Iterable[str]) -> ClipboardPayload:
        return self.clipboard.stage(selection, ClipboardMode.CUT)

    def paste(self, target_dir: str, cancel: Optional[CancelToken] = None) -> Optional[BatchReport]:
        """Apply the staged payload to target_dir.

        The payload is consumed by every paste that gets as far as running,
        whatever the per-item outcome. Returns None if nothing was staged.
        """
        if not target_dir:
            raise EngineContractError("target directory is required")
        target_dir = normalize(target_dir)

        payload = self.clipboard.take_payload()
        if payload is None:
            log.info("Paste into %s: clipboard is empty", target_dir)
            return None
        return self.coordinator.execute(payload.paths, payload.mode.operation, target_dir, cancel)

    def delete(self, selection: Iterable[str], cancel: Optional[CancelToken] = None) -> BatchReport:
        return self.coordinator.execute(selection, OperationKind.DELETE, cancel=cancel)

    def transfer(self, selection: Iterable[str], target_dir: str, mode: ClipboardMode,
                 cancel: Optional[CancelToken] = None) -> BatchReport:
        """Copy or move without going through the clipboard (drag and drop, F5/F6 style)."""
        return self.coordinator.execute(selection, mode.operation, target_dir, cancel)

    def rename(self, path: str, new_name: str) -> TransferItem:
        """Rename path in place. On success item.destination is the new path."""
        source = normalize(path)
        validate_name(new_name)
        item = TransferItem(source=source, kind=OperationKind.RENAME,
                            destination=os.path.join(os.path.dirname(source), new_name))
        return self.coordinator.executor().rename(item)

    def make_directory(self, parent: str, name: str) -> TransferItem:
        parent = normalize(parent)
        validate_name(name)
        item = TransferItem(source=parent, kind=OperationKind.MKDIR, destination=os.path.join(parent, name))
        return self.coordinator.executor().mkdir(item)
