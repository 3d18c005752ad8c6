"""Modal prompt for editing an integer or text field of the editor."""

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label


class FieldInputScreen(ModalScreen[str | None]):
    """Single-line input prefilled with the field's current value.

    Dismisses with the submitted text, or None when cancelled. The caller
    decides whether the text is valid.
    """

    BINDINGS = [
        Binding("escape", "dismiss_cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    FieldInputScreen {
        align: center middle;
    }

    #field-input-dialog {
        width: 70;
        height: auto;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    #field-input-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #field-input-footer {
        margin-top: 1;
        color: $text-muted;
    }
    """

    def __init__(self, *, label: str, value: str) -> None:
        """Initialize the prompt.

        Args:
            label: Label of the field being edited
            value: Current value, used to prefill the input
        """
        super().__init__()
        self._label = label.strip()
        self._value = value

    def compose(self) -> ComposeResult:
        with Vertical(id="field-input-dialog"):
            yield Label(self._label, id="field-input-title")
            yield Input(value=self._value, id="field-input")
            yield Label("Enter Save  |  Esc Cancel", id="field-input-footer")

    def on_mount(self) -> None:
        self.query_one("#field-input", Input).focus()

    @on(Input.Submitted, "#field-input")
    def on_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_dismiss_cancel(self) -> None:
        self.dismiss(None)
