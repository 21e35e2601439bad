"""Data model shared by the engine components."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from myfilemanager.core.errors import ErrorKind, TransferError


class OperationKind(Enum):
    """Kinds of file operations the engine performs."""
    COPY = "copy"
    MOVE = "move"
    DELETE = "delete"
    RENAME = "rename"
    MKDIR = "mkdir"


class ClipboardMode(Enum):
    """What a paste does with the staged paths."""
    COPY = "copy"
    CUT = "cut"

    @property
    def operation(self) -> OperationKind:
        return OperationKind.MOVE if self is ClipboardMode.CUT else OperationKind.COPY


class ItemStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ClipboardPayload:
    """Paths staged by a copy or cut, waiting for a paste."""
    paths: tuple[str, ...]
    mode: ClipboardMode


@dataclass
class TransferItem:
    """One source path and the outcome of the operation applied to it."""
    source: str
    kind: OperationKind
    destination: Optional[str] = None
    status: ItemStatus = ItemStatus.PENDING
    error: Optional[TransferError] = None
    child_errors: list[TransferError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is ItemStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is ItemStatus.FAILED

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    def succeed(self) -> "TransferItem":
        self.status = ItemStatus.SUCCEEDED
        self.error = None
        return self

    def fail(self, error: TransferError) -> "TransferItem":
        self.status = ItemStatus.FAILED
        self.error = error
        return self


@dataclass
class BatchReport:
    """Outcome of one user-invoked operation, one item per selected path."""
    kind: OperationKind
    target_dir: Optional[str] = None
    items: list[TransferItem] = field(default_factory=list)

    @property
    def succeeded(self) -> list[TransferItem]:
        return [item for item in self.items if item.succeeded]

    @property
    def failed(self) -> list[TransferItem]:
        return [item for item in self.items if item.failed]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        """One-line description suitable for a status notification."""
        verb = {
            OperationKind.COPY: "Copied",
            OperationKind.MOVE: "Moved",
            OperationKind.DELETE: "Deleted",
            OperationKind.RENAME: "Renamed",
            OperationKind.MKDIR: "Created",
        }[self.kind]
        failed = len(self.failed)
        if failed:
            return f"{verb} {len(self.succeeded)} items, {failed} failed"
        return f"{verb} {len(self.succeeded)} items"


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a running batch."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
