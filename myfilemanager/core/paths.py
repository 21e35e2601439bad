"""Path validation and destination resolution."""

import os

from myfilemanager.core.errors import (
    EngineContractError,
    ErrorKind,
    TransferError,
    TransferFailure,
)
from myfilemanager.core.models import OperationKind


def normalize(path: str) -> str:
    """Return an absolute, normalised form of path."""
    if not isinstance(path, (str, os.PathLike)) or not os.fspath(path):
        raise EngineContractError("path must be a non-empty string")
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def _key(path: str) -> str:
    return os.path.normcase(os.path.realpath(path))


def is_within(path: str, parent: str) -> bool:
    """True if path is parent or lies somewhere below it."""
    path_key, parent_key = _key(path), _key(parent)
    try:
        return os.path.commonpath([path_key, parent_key]) == parent_key
    except ValueError:
        # Different drives on Windows
        return False


def same_entry(a: str, b: str) -> bool:
    """True if a and b name the same directory entry. The final component is not followed."""
    def entry_key(path):
        head, tail = os.path.split(os.path.normpath(path))
        return os.path.normcase(os.path.join(os.path.realpath(head), tail))
    return entry_key(a) == entry_key(b)


def validate_name(name: str) -> str:
    """Check a bare file name typed by the user for rename or new folder."""
    if not isinstance(name, str) or not name.strip():
        raise EngineContractError("name must be a non-empty string")
    if name in (".", ".."):
        raise EngineContractError(f"invalid name: {name!r}")
    separators = [sep for sep in (os.sep, os.altsep) if sep]
    if any(sep in name for sep in separators):
        raise EngineContractError(f"name must not contain a path separator: {name!r}")
    return name


def check_source(source: str) -> None:
    # lexists so that dangling symlinks can still be moved or deleted
    if not os.path.lexists(source):
        raise TransferFailure(TransferError(ErrorKind.NOT_FOUND, source, "No such file or directory"))


def check_target_dir(target_dir: str) -> None:
    if not os.path.exists(target_dir):
        raise TransferFailure(TransferError(ErrorKind.INVALID_TARGET, target_dir, "Target directory does not exist"))
    if not os.path.isdir(target_dir):
        raise TransferFailure(TransferError(ErrorKind.INVALID_TARGET, target_dir, "Target is not a directory"))


def destination_for(source: str, target_dir: str) -> str:
    """Target directory joined with the source's final path component."""
    return os.path.join(target_dir, os.path.basename(os.path.normpath(source)))


def resolve_destination(source: str, target_dir: str, kind: OperationKind,
                        overwrite: bool = False) -> str:
    """Validate a copy or move of source into target_dir and return the destination path.

    Raises TransferFailure with NOT_FOUND, INVALID_TARGET, CYCLIC_TRANSFER or
    ALREADY_EXISTS. A move whose destination is the source itself is allowed
    through; the executor treats it as a no-op.
    """
    source = normalize(source)
    target_dir = normalize(target_dir)
    check_source(source)
    check_target_dir(target_dir)

    destination = destination_for(source, target_dir)
    if not os.path.basename(destination):
        raise TransferFailure(TransferError(ErrorKind.CYCLIC_TRANSFER, source,
                                            "Cannot transfer a filesystem root"))

    if same_entry(source, destination):
        if kind is OperationKind.MOVE:
            return destination
        raise TransferFailure(TransferError(ErrorKind.ALREADY_EXISTS, destination,
                                            "Source and destination are the same"))

    source_is_dir = os.path.isdir(source) and not os.path.islink(source)
    if source_is_dir and is_within(target_dir, source):
        raise TransferFailure(TransferError(ErrorKind.CYCLIC_TRANSFER, source,
                                            "Cannot copy or move a directory into itself"))
    if os.path.lexists(destination) and is_within(source, destination):
        raise TransferFailure(TransferError(ErrorKind.CYCLIC_TRANSFER, source,
                                            "Destination contains the source"))

    if os.path.lexists(destination):
        dest_is_dir = os.path.isdir(destination) and not os.path.islink(destination)
        if not overwrite or dest_is_dir != source_is_dir:
            raise TransferFailure(TransferError(ErrorKind.ALREADY_EXISTS, destination,
                                                "Destination already exists"))
        if dest_is_dir and kind is OperationKind.MOVE:
            raise TransferFailure(TransferError(ErrorKind.ALREADY_EXISTS, destination,
                                                "Cannot move a directory over an existing directory"))
    return destination
