"""Error types for the file operation engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Why a single transfer item failed."""
    NOT_FOUND = "not_found"
    INVALID_TARGET = "invalid_target"
    ALREADY_EXISTS = "already_exists"
    CYCLIC_TRANSFER = "cyclic_transfer"
    COPY_FAILED = "copy_failed"
    PARTIAL_COPY = "partial_copy"
    CROSS_DEVICE_DIRECTORY_MOVE_UNSUPPORTED = "cross_device_directory_move_unsupported"
    DELETE_FAILED = "delete_failed"
    MOVE_FAILED = "move_failed"
    RENAME_FAILED = "rename_failed"
    CREATE_FAILED = "create_failed"
    CANCELLED = "cancelled"


@dataclass
class TransferError:
    """A failure attached to one path."""
    kind: ErrorKind
    path: str
    message: str
    cause: Optional[OSError] = None

    @property
    def permission_denied(self) -> bool:
        return isinstance(self.cause, PermissionError)

    @classmethod
    def from_os_error(cls, kind: ErrorKind, path: str, exc: OSError) -> "TransferError":
        return cls(kind, path, exc.strerror or str(exc), cause=exc)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.path}: {self.message}"


class EngineContractError(ValueError):
    """Raised for invalid arguments to a public entry point."""


class TransferFailure(Exception):
    """Carries a TransferError out of the resolver to the item that owns it."""

    def __init__(self, error: TransferError):
        super().__init__(str(error))
        self.error = error
