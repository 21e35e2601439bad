"""Modal screens used by the browser."""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, TextArea

from myfilemanager.core.errors import ErrorKind
from myfilemanager.core.models import BatchReport, TransferItem

ERROR_TEXT = {
    ErrorKind.NOT_FOUND: "not found",
    ErrorKind.INVALID_TARGET: "invalid target folder",
    ErrorKind.ALREADY_EXISTS: "already exists",
    ErrorKind.CYCLIC_TRANSFER: "cannot be placed inside itself",
    ErrorKind.COPY_FAILED: "copy failed",
    ErrorKind.PARTIAL_COPY: "copied partially",
    ErrorKind.CROSS_DEVICE_DIRECTORY_MOVE_UNSUPPORTED: "folders cannot be moved to another drive",
    ErrorKind.DELETE_FAILED: "delete failed",
    ErrorKind.MOVE_FAILED: "move failed",
    ErrorKind.RENAME_FAILED: "rename failed",
    ErrorKind.CREATE_FAILED: "could not be created",
    ErrorKind.CANCELLED: "cancelled",
}


def describe_failure(item: TransferItem) -> str:
    """One line for a failed item, e.g. "notes.txt: already exists"."""
    error = item.error
    if error is None:
        return item.source
    text = ERROR_TEXT.get(error.kind, error.kind.value)
    if error.permission_denied:
        text += " (permission denied)"
    line = f"{item.source}: {text}"
    if error.message:
        line += f" - {error.message}"
    return line


def format_report(report: BatchReport) -> str:
    """Text body of the report screen: the summary then every failure."""
    lines = [report.summary()]
    for item in report.failed:
        lines.append(describe_failure(item))
        for child in item.child_errors:
            lines.append(f"    {child.path}: {child.message}")
    return "\n".join(lines)


class ReportScreen(ModalScreen[None]):
    """Lists the failures of one batch in a single dialog."""

    DEFAULT_CSS = """
    ReportScreen {
        align: center middle;
    }

    #report-dialog {
        width: 80%;
        height: 70%;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #report-title {
        width: 100%;
        text-style: bold;
        color: $warning;
    }

    #report-body {
        height: 1fr;
        margin: 1 0;
    }
    """

    def __init__(self, report: BatchReport):
        super().__init__()
        self.report = report

    def compose(self) -> ComposeResult:
        with Vertical(id="report-dialog"):
            yield Label(f"{self.report.kind.value.capitalize()} finished with errors", id="report-title")
            yield TextArea(format_report(self.report), id="report-body", read_only=True)
            yield Button("Close", variant="primary", id="close")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def on_key(self, event) -> None:
        if event.key == "escape":
            self.dismiss(None)


class InputDialog(ModalScreen[Optional[str]]):
    """Modal dialog for text input."""

    DEFAULT_CSS = """
    InputDialog {
        align: center middle;
    }

    #dialog {
        width: 60;
        height: 11;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #dialog-title {
        width: 100%;
        content-align: center middle;
        text-style: bold;
    }

    #dialog-input {
        width: 100%;
        margin: 1 0;
    }

    #dialog-buttons {
        width: 100%;
        height: auto;
        align: center middle;
        layout: horizontal;
    }

    #dialog-buttons Button {
        margin: 0 1;
    }
    """

    def __init__(self, title: str, prompt: str, default: str = ""):
        super().__init__()
        self.dialog_title = title
        self.dialog_prompt = prompt
        self.default_value = default

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label(self.dialog_title, id="dialog-title")
            yield Label(self.dialog_prompt)
            yield Input(value=self.default_value, id="dialog-input")
            with Horizontal(id="dialog-buttons"):
                yield Button("OK", variant="primary", id="ok")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ok":
            self.dismiss(self.query_one(Input).value)
        else:
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def on_key(self, event) -> None:
        if event.key == "escape":
            self.dismiss(None)


class ConfirmDialog(ModalScreen[bool]):
    """Yes/No confirmation."""

    DEFAULT_CSS = """
    ConfirmDialog {
        align: center middle;
    }

    #confirm-dialog {
        width: 60;
        height: 11;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #confirm-title {
        width: 100%;
        content-align: center middle;
        text-style: bold;
        color: $warning;
    }

    #confirm-message {
        width: 100%;
        margin: 1 0;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        align: center middle;
        layout: horizontal;
    }

    #confirm-buttons Button {
        margin: 0 1;
    }
    """

    def __init__(self, title: str, message: str):
        super().__init__()
        self.dialog_title = title
        self.dialog_message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.dialog_title, id="confirm-title")
            yield Label(self.dialog_message, id="confirm-message")
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="error", id="yes")
                yield Button("No (N)", variant="primary", id="no")

    def on_mount(self) -> None:
        self.query_one("#no", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def on_key(self, event) -> None:
        if event.key == "y":
            self.dismiss(True)
        elif event.key == "n" or event.key == "escape":
            self.dismiss(False)
