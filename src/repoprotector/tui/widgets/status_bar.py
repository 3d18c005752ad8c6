"""Status bar widget showing loading, errors, messages and key hints."""

from rich.text import Text
from textual.widgets import Static


class StatusBar(Static):
    """Bottom bar: one feedback line above the key hints of the current screen."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: auto;
        max-height: 8;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._loading = False
        self._error: str | None = None
        self._message: str | None = None
        self._hints = ""

    def set_status(
        self, *, loading: bool, error: str | None, message: str | None, hints: str
    ) -> None:
        """Replace everything the bar shows and re-render.

        Args:
            loading: Whether a background operation is running
            error: Error to show, None for none
            message: Informational message, shown when there is no error
            hints: Key hints of the current screen
        """
        self._loading = loading
        self._error = error
        self._message = message
        self._hints = hints
        self._refresh_display()

    @property
    def feedback(self) -> str:
        """Plain text of the feedback line."""
        if self._loading:
            return "Loading..."
        if self._error is not None:
            return f"Error: {self._error}"
        return self._message or ""

    def _refresh_display(self) -> None:
        text = Text()
        if self._loading:
            text.append(self.feedback, style="yellow")
        elif self._error is not None:
            text.append(self.feedback, style="bold red")
        elif self._message:
            text.append(self._message, style="green")
        text.append("\n")
        text.append(self._hints, style="dim")
        self.update(text)
