"""File operations for MyFileManager.

Each method applies one operation to one TransferItem and records the outcome
on that item. Failures never propagate as exceptions; they become item errors.
"""

import errno
import os
import shutil
from typing import Optional

from myfilemanager.core.errors import ErrorKind, TransferError, TransferFailure
from myfilemanager.core.logging import get_logger
from myfilemanager.core.models import CancelToken, OperationKind, TransferItem
from myfilemanager.core.paths import check_source, check_target_dir, same_entry
from myfilemanager.core.walker import WalkOrder, walk

log = get_logger(__name__)


def _is_real_dir(path: str) -> bool:
    return os.path.isdir(path) and not os.path.islink(path)


class TransferExecutor:
    """Copy, move, delete, rename and mkdir for single items."""

    def __init__(self, overwrite: bool = False, cancel: Optional[CancelToken] = None):
        self.overwrite = overwrite
        self.cancel = cancel

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.cancelled

    def _cancelled_error(self, path: str) -> TransferError:
        return TransferError(ErrorKind.CANCELLED, path, "Operation cancelled")

    # Filesystem primitives, kept as methods so tests can inject faults

    def _copy_file(self, src: str, dst: str) -> None:
        if self.overwrite:
            if os.path.islink(dst):
                # Replace the link itself, never the file it points at
                os.unlink(dst)
            shutil.copy2(src, dst, follow_symlinks=False)
            return
        # Exclusive create: a destination that appeared since resolving is not replaced
        if os.path.islink(src):
            os.symlink(os.readlink(src), dst)
            return
        with open(src, "rb") as fsrc, open(dst, "xb") as fdst:
            shutil.copyfileobj(fsrc, fdst)
        shutil.copystat(src, dst)

    def _rename(self, src: str, dst: str) -> None:
        if self.overwrite:
            os.replace(src, dst)
            return
        if os.path.lexists(dst):
            raise FileExistsError(errno.EEXIST, "File exists", dst)
        os.rename(src, dst)

    def _remove_file(self, path: str) -> None:
        os.unlink(path)

    def _remove_dir(self, path: str) -> None:
        os.rmdir(path)

    def _make_dir(self, path: str, exist_ok: bool = False) -> None:
        try:
            os.mkdir(path)
        except FileExistsError:
            if not (exist_ok and _is_real_dir(path)):
                raise

    # Operations

    def run(self, item: TransferItem) -> TransferItem:
        """Dispatch on item.kind."""
        handlers = {
            OperationKind.COPY: self.copy,
            OperationKind.MOVE: self.move,
            OperationKind.DELETE: self.delete,
            OperationKind.RENAME: self.rename,
            OperationKind.MKDIR: self.mkdir,
        }
        return handlers[item.kind](item)

    def copy(self, item: TransferItem) -> TransferItem:
        """Copy item.source to item.destination, recursively for directories."""
        src, dst = item.source, item.destination
        if not os.path.lexists(src):
            return item.fail(TransferError(ErrorKind.NOT_FOUND, src, "No such file or directory"))

        if not _is_real_dir(src):
            try:
                self._copy_file(src, dst)
            except FileExistsError:
                log.warning("Copy refused, %s already exists", dst)
                return item.fail(TransferError(ErrorKind.ALREADY_EXISTS, dst, "Destination already exists"))
            except OSError as e:
                log.warning("Copy failed %s -> %s: %s", src, dst, e)
                return item.fail(TransferError.from_os_error(ErrorKind.COPY_FAILED, src, e))
            log.info("Copied %s -> %s", src, dst)
            return item.succeed()

        self._copy_tree(item)
        return item

    def _copy_tree(self, item: TransferItem) -> None:
        src, dst = item.source, item.destination
        failed_dirs: set[str] = set()

        for entry in walk(src, WalkOrder.PRE_ORDER, self.cancel):
            target = os.path.join(dst, entry.relpath) if entry.relpath else dst
            parent_rel = os.path.dirname(entry.relpath)
            if entry.relpath and parent_rel in failed_dirs:
                # Its parent was never created
                if entry.is_dir:
                    failed_dirs.add(entry.relpath)
                continue

            if entry.is_dir:
                try:
                    self._make_dir(target, exist_ok=self.overwrite)
                except OSError as e:
                    if not entry.relpath:
                        log.warning("Copy failed %s -> %s: %s", src, dst, e)
                        item.fail(TransferError.from_os_error(ErrorKind.COPY_FAILED, src, e))
                        return
                    failed_dirs.add(entry.relpath)
                    item.child_errors.append(TransferError.from_os_error(ErrorKind.COPY_FAILED, entry.path, e))
                    continue
                if entry.error is not None:
                    item.child_errors.append(
                        TransferError.from_os_error(ErrorKind.COPY_FAILED, entry.path, entry.error))
            else:
                try:
                    self._copy_file(entry.path, target)
                except OSError as e:
                    log.warning("Copy failed %s -> %s: %s", entry.path, target, e)
                    item.child_errors.append(TransferError.from_os_error(ErrorKind.COPY_FAILED, entry.path, e))

        if self.cancelled:
            item.fail(self._cancelled_error(src))
        elif item.child_errors:
            first = item.child_errors[0]
            item.fail(TransferError(ErrorKind.PARTIAL_COPY, src,
                                    f"{len(item.child_errors)} entries failed, first: {first.path}: {first.message}",
                                    cause=first.cause))
        else:
            log.info("Copied directory %s -> %s", src, dst)
            item.succeed()

    def move(self, item: TransferItem) -> TransferItem:
        """Rename item.source to item.destination, copying then deleting across devices."""
        src, dst = item.source, item.destination
        if not os.path.lexists(src):
            return item.fail(TransferError(ErrorKind.NOT_FOUND, src, "No such file or directory"))
        if same_entry(src, dst):
            return item.succeed()

        try:
            self._rename(src, dst)
        except FileExistsError:
            log.warning("Move refused, %s already exists", dst)
            return item.fail(TransferError(ErrorKind.ALREADY_EXISTS, dst, "Destination already exists"))
        except OSError as e:
            if e.errno != errno.EXDEV:
                log.warning("Move failed %s -> %s: %s", src, dst, e)
                return item.fail(TransferError.from_os_error(ErrorKind.MOVE_FAILED, src, e))
            if _is_real_dir(src):
                log.warning("Cross-device directory move refused: %s -> %s", src, dst)
                return item.fail(TransferError(ErrorKind.CROSS_DEVICE_DIRECTORY_MOVE_UNSUPPORTED, src,
                                               "Directories cannot be moved to another volume", cause=e))
            return self._move_across_devices(item)

        log.info("Moved %s -> %s", src, dst)
        return item.succeed()

    def _move_across_devices(self, item: TransferItem) -> TransferItem:
        src, dst = item.source, item.destination
        log.info("Cross-device move, copying %s -> %s", src, dst)
        self.copy(item)
        if not item.succeeded:
            # Source stays untouched whenever the copy reported anything
            return item
        try:
            self._remove_file(src)
        except OSError as e:
            log.warning("Copied %s but could not remove source: %s", src, e)
            return item.fail(TransferError.from_os_error(ErrorKind.DELETE_FAILED, src, e))
        log.info("Moved %s -> %s", src, dst)
        return item

    def delete(self, item: TransferItem) -> TransferItem:
        """Delete item.source; directories are removed children first."""
        src = item.source
        if not os.path.lexists(src):
            return item.fail(TransferError(ErrorKind.NOT_FOUND, src, "No such file or directory"))

        if not _is_real_dir(src):
            try:
                self._remove_file(src)
            except OSError as e:
                log.warning("Delete failed %s: %s", src, e)
                return item.fail(TransferError.from_os_error(ErrorKind.DELETE_FAILED, src, e))
            log.info("Deleted %s", src)
            return item.succeed()

        # Directories holding an entry that could not be removed
        blocked: set[str] = set()

        def block_ancestors(relpath: str) -> None:
            while relpath:
                relpath = os.path.dirname(relpath)
                blocked.add(relpath)

        for entry in walk(src, WalkOrder.POST_ORDER, self.cancel):
            if entry.error is not None:
                item.child_errors.append(TransferError.from_os_error(ErrorKind.DELETE_FAILED, entry.path, entry.error))
                block_ancestors(entry.relpath)
                continue
            if entry.is_dir and entry.relpath in blocked:
                continue
            try:
                if entry.is_dir:
                    self._remove_dir(entry.path)
                else:
                    self._remove_file(entry.path)
            except OSError as e:
                log.warning("Delete failed %s: %s", entry.path, e)
                item.child_errors.append(TransferError.from_os_error(ErrorKind.DELETE_FAILED, entry.path, e))
                block_ancestors(entry.relpath)

        if self.cancelled:
            return item.fail(self._cancelled_error(src))
        if item.child_errors:
            first = item.child_errors[0]
            return item.fail(TransferError(ErrorKind.DELETE_FAILED, src,
                                           f"{first.path}: {first.message}", cause=first.cause))
        log.info("Deleted directory %s", src)
        return item.succeed()

    def rename(self, item: TransferItem) -> TransferItem:
        """Rename within the same directory. An identical name is a no-op."""
        src, dst = item.source, item.destination
        try:
            check_source(src)
        except TransferFailure as failure:
            return item.fail(failure.error)
        if src == dst:
            return item.succeed()

        # A case-only rename on a case-insensitive filesystem sees dst as existing
        if os.path.lexists(dst) and not self._is_same_file(src, dst):
            return item.fail(TransferError(ErrorKind.ALREADY_EXISTS, dst, "Destination already exists"))
        try:
            os.rename(src, dst)
        except OSError as e:
            log.warning("Rename failed %s -> %s: %s", src, dst, e)
            return item.fail(TransferError.from_os_error(ErrorKind.RENAME_FAILED, src, e))
        log.info("Renamed %s -> %s", src, dst)
        return item.succeed()

    @staticmethod
    def _is_same_file(a: str, b: str) -> bool:
        try:
            return os.path.samefile(a, b)
        except OSError:
            return False

    def mkdir(self, item: TransferItem) -> TransferItem:
        """Create the directory item.destination."""
        path = item.destination
        try:
            check_target_dir(os.path.dirname(path))
        except TransferFailure as failure:
            return item.fail(failure.error)
        if os.path.lexists(path):
            return item.fail(TransferError(ErrorKind.ALREADY_EXISTS, path, "Already exists"))
        try:
            self._make_dir(path)
        except OSError as e:
            log.warning("Create directory failed %s: %s", path, e)
            return item.fail(TransferError.from_os_error(ErrorKind.CREATE_FAILED, path, e))
        log.info("Created directory %s", path)
        return item.succeed()
