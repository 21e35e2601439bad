"""Lazy depth-first traversal of a directory subtree."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from myfilemanager.core.logging import get_logger
from myfilemanager.core.models import CancelToken

log = get_logger(__name__)


class WalkOrder(Enum):
    PRE_ORDER = "pre"    # a directory before its children (copy)
    POST_ORDER = "post"  # children before their directory (delete)


@dataclass
class WalkEntry:
    """One entry of a walked subtree.

    relpath is relative to the walk root ("" for the root itself). error holds
    the OSError raised while listing a directory; such a directory is yielded
    but its children are not.
    """
    path: str
    relpath: str
    is_dir: bool
    depth: int
    error: Optional[OSError] = None


def _is_real_dir(path: str) -> bool:
    return os.path.isdir(path) and not os.path.islink(path)


def _list_children(path: str) -> list[tuple[str, bool]]:
    with os.scandir(path) as it:
        children = []
        for entry in it:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            children.append((entry.name, is_dir))
    children.sort(key=lambda child: child[0])
    return children


class _Frame:
    """A directory on the walk stack and the children not yet visited."""

    def __init__(self, entry: WalkEntry, children: list[tuple[str, bool]]):
        self.entry = entry
        self.children = children
        self.next_child = 0


def _cancelled(cancel: Optional[CancelToken]) -> bool:
    return cancel is not None and cancel.cancelled


def _enter(path: str, relpath: str, depth: int) -> _Frame:
    children: list[tuple[str, bool]] = []
    error = None
    try:
        children = _list_children(path)
    except OSError as e:
        log.warning("Cannot list %s: %s", path, e)
        error = e
    log.debug("walk dir %s", path)
    return _Frame(WalkEntry(path, relpath, True, depth, error=error), children)


def walk(root: str, order: WalkOrder = WalkOrder.PRE_ORDER,
         cancel: Optional[CancelToken] = None) -> Iterator[WalkEntry]:
    """Yield root and every entry below it, depth first.

    Symlinks are never followed. Directories are listed one at a time as the
    walk reaches them. The walk keeps its own stack, so depth is bounded by
    the filesystem rather than the interpreter. When cancel fires, the
    generator stops.
    """
    if _cancelled(cancel):
        return
    if not _is_real_dir(root):
        log.debug("walk file %s", root)
        yield WalkEntry(root, "", False, 0)
        return

    frame = _enter(root, "", 0)
    if order is WalkOrder.PRE_ORDER:
        yield frame.entry
    stack = [frame]

    while stack:
        if _cancelled(cancel):
            return
        frame = stack[-1]
        if frame.next_child >= len(frame.children):
            stack.pop()
            if order is WalkOrder.POST_ORDER:
                yield frame.entry
            continue

        name, is_dir = frame.children[frame.next_child]
        frame.next_child += 1
        parent = frame.entry
        path = os.path.join(parent.path, name)
        relpath = os.path.join(parent.relpath, name) if parent.relpath else name

        if not is_dir:
            log.debug("walk file %s", path)
            yield WalkEntry(path, relpath, False, parent.depth + 1)
            continue

        child = _enter(path, relpath, parent.depth + 1)
        if order is WalkOrder.PRE_ORDER:
            yield child.entry
        stack.append(child)
