"""Shared fixtures: a small source tree and an empty destination."""
import os

import pytest

from myfilemanager.core.models import OperationKind, TransferItem
from myfilemanager.core.transfer import TransferExecutor


@pytest.fixture
def temp_tree(tmp_path):
    """Create a temporary directory tree for testing file operations."""
    # Create structure:
    #   tmp/
    #     src_dir/
    #       file1.txt  (content: "hello")
    #       file2.py   (content: "print('hi')")
    #       subdir/
    #         nested.md (content: "# Title")
    #     dest_dir/
    src_dir = tmp_path / "src_dir"
    src_dir.mkdir()
    (src_dir / "file1.txt").write_text("hello", encoding="utf-8")
    (src_dir / "file2.py").write_text("print('hi')", encoding="utf-8")
    sub = src_dir / "subdir"
    sub.mkdir()
    (sub / "nested.md").write_text("# Title", encoding="utf-8")

    dest_dir = tmp_path / "dest_dir"
    dest_dir.mkdir()

    return {"src": src_dir, "dest": dest_dir, "root": tmp_path}


@pytest.fixture
def deep_tree(tmp_path):
    """A chain of nested directories deeper than the interpreter's recursion limit."""
    # tmp/deep/d/d/.../d/bottom.txt
    depth = 1100
    root = tmp_path / "deep"
    bottom = str(root)
    os.mkdir(bottom)
    for _ in range(depth):
        bottom = os.path.join(bottom, "d")
        os.mkdir(bottom)
    with open(os.path.join(bottom, "bottom.txt"), "w", encoding="utf-8") as f:
        f.write("bottom")

    copy = tmp_path / "deep_copy"
    yield {"root": root, "depth": depth, "bottom": bottom, "copy": copy}

    # Leave nothing this deep for tmp_path cleanup to recurse into
    executor = TransferExecutor()
    for path in (root, copy):
        if path.exists():
            executor.delete(TransferItem(source=str(path), kind=OperationKind.DELETE))
