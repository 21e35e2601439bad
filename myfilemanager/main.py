"""Main application for MyFileManager - a small file browser around the file operation engine."""

from pathlib import Path
from typing import Callable, Optional

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header

from myfilemanager.core.config import Config
from myfilemanager.core.engine import FileOperationEngine
from myfilemanager.core.errors import EngineContractError
from myfilemanager.core.logging import get_logger, install_excepthook, setup_logging
from myfilemanager.core.models import BatchReport, CancelToken, ClipboardMode
from myfilemanager.ui.dialogs import ConfirmDialog, InputDialog, ReportScreen, describe_failure
from myfilemanager.ui.panels import FilePanel

log = get_logger(__name__)


class MyFileManager(App):
    """File browser: one panel, clipboard-staged copy/cut/paste, delete, rename, new folder."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-container {
        height: 1fr;
    }

    FilePanel {
        height: 1fr;
        margin: 0 1;
    }

    .file-panel--header {
        dock: top;
        height: 1;
        padding: 0 1;
        text-style: bold;
    }

    #file-list {
        height: 1fr;
        padding: 0 1;
        scrollbar-gutter: stable;
    }

    #file-list > ListItem {
        width: 1fr;
        height: 1;
    }

    .directory {
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=False),
        Binding("ctrl+c", "copy", "Copy", show=True, priority=True),
        Binding("ctrl+x", "cut", "Cut", show=True),
        Binding("ctrl+v", "paste", "Paste", show=True),
        Binding("f2", "rename", "Rename", show=True),
        Binding("f7", "mkdir", "MkDir", show=True),
        Binding("f8", "delete", "Delete", show=True),
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("ctrl+r", "refresh", "Refresh", show=False),
        Binding("ctrl+h", "toggle_hidden", "Hidden", show=False),
        Binding("ctrl+g", "home", "Home", show=False),
        Binding("alt+up", "up", "Up", show=False),
        Binding("f10", "quit", "Quit", show=True),
    ]

    def __init__(self, config: Optional[Config] = None):
        super().__init__()
        self.config = config or Config()
        self.engine = FileOperationEngine.from_config(self.config)
        self.panel: Optional[FilePanel] = None
        self._cancel: Optional[CancelToken] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main-container"):
            self.panel = FilePanel(
                initial_path=self.config.get_start_path(),
                show_hidden=self.config.get("show_hidden", False),
                id="panel",
            )
            yield self.panel
        yield Footer()

    def on_mount(self) -> None:
        self.title = "MyFileManager"
        self.sub_title = self.config.get_start_path()

    def on_file_panel_path_changed(self, message: FilePanel.PathChanged) -> None:
        self.sub_title = message.path

    # Clipboard

    def _stage(self, mode: ClipboardMode) -> None:
        selection = self.panel.get_selection()
        if not selection:
            self.notify("Nothing selected", severity="warning")
            return
        self.engine.clipboard.stage(selection, mode)
        verb = "cut" if mode is ClipboardMode.CUT else "copied"
        self.notify(f"{len(selection)} items {verb} to clipboard")
        self.panel.clear_selection()

    def action_copy(self) -> None:
        self._stage(ClipboardMode.COPY)

    def action_cut(self) -> None:
        self._stage(ClipboardMode.CUT)

    def action_paste(self) -> None:
        if self.engine.clipboard.empty:
            self.notify("Clipboard is empty")
            return
        target = self.panel.current_path
        self._run_batch(lambda cancel: self.engine.paste(target, cancel))

    # Other operations

    def action_delete(self) -> None:
        selection = self.panel.get_selection()
        if not selection:
            self.notify("Nothing selected", severity="warning")
            return

        def handle_confirm(confirmed: bool) -> None:
            if confirmed:
                self._run_batch(lambda cancel: self.engine.delete(selection, cancel))

        if self.config.get("confirm_operations", True):
            self.push_screen(
                ConfirmDialog("Confirm Delete", f"Are you sure you want to delete {len(selection)} item(s)?"),
                handle_confirm,
            )
        else:
            handle_confirm(True)

    def action_rename(self) -> None:
        item = self.panel.get_focused_item()
        if not item or item.filename == "..":
            self.notify("Select a file or directory to rename", severity="warning")
            return

        def check_result(new_name: Optional[str]) -> None:
            if not new_name:
                return
            try:
                result = self.engine.rename(str(item.file_path), new_name)
            except EngineContractError as e:
                self.notify(str(e), severity="error")
                return
            if result.succeeded:
                self.panel.refresh_file_list()
                self.call_after_refresh(self._focus_path, result.destination)
            else:
                self.notify(describe_failure(result), severity="error")

        self.push_screen(InputDialog("Rename", "New name:", item.filename), check_result)

    def action_mkdir(self) -> None:
        def check_result(name: Optional[str]) -> None:
            if not name:
                return
            try:
                result = self.engine.make_directory(self.panel.current_path, name)
            except EngineContractError as e:
                self.notify(str(e), severity="error")
                return
            if result.succeeded:
                self.panel.refresh_file_list()
                self.call_after_refresh(self._focus_path, result.destination)
            else:
                self.notify(describe_failure(result), severity="error")

        self.push_screen(InputDialog("New Folder", "Folder name:", "New Folder"), check_result)

    def action_cancel(self) -> None:
        if self._cancel is not None:
            self._cancel.cancel()
            self.notify("Cancelling...")

    # Navigation

    def action_refresh(self) -> None:
        self.panel.refresh_file_list()

    def action_toggle_hidden(self) -> None:
        show_hidden = not self.config.get("show_hidden", False)
        self.config.set("show_hidden", show_hidden)
        self.panel.show_hidden = show_hidden
        self.panel.refresh_file_list()
        self.notify(f"Hidden files are now {'shown' if show_hidden else 'hidden'}")

    def action_home(self) -> None:
        self.panel.navigate_to(str(Path.home()))

    def action_up(self) -> None:
        self.panel.navigate_up()

    # Batch plumbing

    @work(thread=True, exclusive=True)
    def _run_batch(self, operation: Callable[[CancelToken], Optional[BatchReport]]) -> None:
        cancel = self._begin_batch()
        try:
            report = operation(cancel)
        except EngineContractError as e:
            self.call_from_thread(self.notify, str(e), severity="error")
            return
        finally:
            self._end_batch(cancel)
        self.call_from_thread(self._show_report, report)

    def _begin_batch(self) -> CancelToken:
        cancel = CancelToken()
        self._cancel = cancel
        return cancel

    def _end_batch(self, cancel: CancelToken) -> None:
        # A superseded worker finishing late must not drop the newer token
        if self._cancel is cancel:
            self._cancel = None

    def _show_report(self, report: Optional[BatchReport]) -> None:
        self.panel.refresh_file_list()
        if report is None:
            self.notify("Clipboard is empty")
            return
        if report.ok:
            self.notify(report.summary())
        else:
            self.notify(report.summary(), severity="error")
            self.push_screen(ReportScreen(report))

    def _focus_path(self, path: Optional[str]) -> None:
        """Put the cursor on path after it was created or renamed."""
        if not path:
            return
        file_list = self.panel.query_one("#file-list")
        for index, child in enumerate(file_list.children):
            if str(getattr(child, "file_path", "")) == path:
                file_list.index = index
                break


def main():
    """Main entry point."""
    config = Config()
    setup_logging(config.get("log_level", "INFO"))
    install_excepthook()
    log.info("=== App startup ===")
    app = MyFileManager(config)
    app.run()


if __name__ == "__main__":
    main()
