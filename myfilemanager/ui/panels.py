"""File panel widget for the browser."""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from textual.app import ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import Static, ListView, ListItem, Label
from textual.reactive import reactive
from textual.message import Message


def format_size(size: float) -> str:
    """Format size in human-readable format."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:3.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


class FileListItem(ListItem):
    """One directory entry in the panel."""

    is_selected: reactive[bool] = reactive(False)

    def __init__(self, path: Path, filename: str, is_dir: bool, size: int,
                 mtime: float = 0, **kwargs):
        super().__init__(**kwargs)
        self.file_path = path
        self.filename = filename
        self.is_dir = is_dir
        self.file_size = size
        self.mtime = mtime

    def _label_text(self, selected: bool) -> str:
        size_str = "<DIR>" if self.is_dir else format_size(self.file_size)
        date_str = datetime.fromtimestamp(self.mtime).strftime("%Y-%m-%d %H:%M") if self.mtime > 0 else ""
        marker = ">" if selected else " "
        return f"{marker} {self.filename:<30} {size_str:>10}  {date_str:>16}"

    def compose(self) -> ComposeResult:
        yield Label(self._label_text(self.is_selected),
                    classes="directory" if self.is_dir else "file", id="item-label")

    def watch_is_selected(self, new_value: bool) -> None:
        if self.is_mounted:
            self.query_one("#item-label", Label).update(self._label_text(new_value))


class FilePanel(Container):
    """A file panel showing directory contents.

    The selection keeps the order in which entries were marked.
    """

    current_path: reactive[str] = reactive(os.getcwd)

    class PathChanged(Message):
        """Message sent when path changes."""

        def __init__(self, path: str) -> None:
            self.path = path
            super().__init__()

    class FileSelected(Message):
        """Message sent when a file is activated."""

        def __init__(self, path: Path) -> None:
            self.path = path
            super().__init__()

    def __init__(self, initial_path: Optional[str] = None, show_hidden: bool = False, **kwargs):
        super().__init__(**kwargs)
        self._initial_path = initial_path or os.getcwd()
        self.selected_files: dict[str, None] = {}
        self.show_hidden = show_hidden

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self._initial_path, classes="file-panel--header", id="path-header")
            yield ListView(id="file-list")

    def on_mount(self) -> None:
        self.current_path = self._initial_path
        self.refresh_file_list()

    def watch_current_path(self, new_path: str) -> None:
        if not self.is_mounted:
            return
        self.selected_files.clear()
        self.refresh_file_list()
        self.update_header()
        self.post_message(self.PathChanged(new_path))

    def update_header(self) -> None:
        if not self.is_mounted:
            return
        header = self.query_one("#path-header", Static)
        sel_count = len(self.selected_files)
        if sel_count > 0:
            header.update(f"{self.current_path} [{sel_count} selected]")
        else:
            header.update(self.current_path)

    def refresh_file_list(self) -> None:
        """Re-read the current directory."""
        file_list = self.query_one("#file-list", ListView)
        file_list.clear()
        path = Path(self.current_path)

        if path.parent != path:
            file_list.append(FileListItem(path.parent, "..", True, 0))

        entries = []
        try:
            for entry in path.iterdir():
                if not self.show_hidden and entry.name.startswith('.'):
                    continue
                try:
                    stat = entry.stat()
                    entries.append((entry.name, entry.is_dir(), stat.st_size, stat.st_mtime, entry))
                except OSError:
                    # Dangling link or no permission to stat
                    entries.append((entry.name, False, 0, 0, entry))
        except OSError as e:
            file_list.append(ListItem(Label(f"Error: {e}")))

        # Directories first, then by name
        entries.sort(key=lambda x: (not x[1], x[0].lower()))
        for name, is_dir, size, mtime, entry_path in entries:
            item = FileListItem(entry_path, name, is_dir, size, mtime=mtime)
            item.is_selected = str(entry_path) in self.selected_files
            file_list.append(item)

        # Drop selections that vanished from disk
        for selected in [p for p in self.selected_files if not os.path.lexists(p)]:
            del self.selected_files[selected]

        if file_list.children:
            file_list.index = 0

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, FileListItem):
            if event.item.is_dir:
                self.current_path = str(event.item.file_path)
            else:
                self.post_message(self.FileSelected(event.item.file_path))

    def navigate_up(self) -> None:
        path = Path(self.current_path)
        if path.parent != path:
            self.current_path = str(path.parent)

    def navigate_to(self, path: str) -> bool:
        if os.path.isdir(path):
            self.current_path = path
            return True
        return False

    def get_focused_item(self) -> Optional[FileListItem]:
        file_list = self.query_one("#file-list", ListView)
        item = file_list.highlighted_child
        if isinstance(item, FileListItem):
            return item
        return None

    def toggle_selection(self) -> None:
        """Toggle selection of the focused item and move down."""
        item = self.get_focused_item()
        if item and item.filename != "..":
            item_path = str(item.file_path)
            if item_path in self.selected_files:
                del self.selected_files[item_path]
                item.is_selected = False
            else:
                self.selected_files[item_path] = None
                item.is_selected = True
            self.update_header()

            file_list = self.query_one("#file-list", ListView)
            if file_list.index is not None and file_list.index < len(file_list.children) - 1:
                file_list.index += 1

    def clear_selection(self) -> None:
        file_list = self.query_one("#file-list", ListView)
        for child in file_list.children:
            if isinstance(child, FileListItem):
                child.is_selected = False
        self.selected_files.clear()
        self.update_header()

    def get_selection(self) -> list[str]:
        """Marked entries in marking order, or the focused entry when nothing is marked."""
        if self.selected_files:
            return list(self.selected_files)
        item = self.get_focused_item()
        if item and item.filename != "..":
            return [str(item.file_path)]
        return []

    def on_key(self, event) -> None:
        if event.key == "space":
            self.toggle_selection()
            event.prevent_default()
            event.stop()
        elif event.key == "backspace":
            self.navigate_up()
            event.stop()
