"""Modal screen showing keyboard shortcuts."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label

# (section title, [(keys, description)])
HELP_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Navigation",
        [
            ("↑/k", "Move cursor up"),
            ("↓/j", "Move cursor down"),
            ("Tab", "Next field (editor)"),
            ("Enter", "Select / toggle / edit"),
            ("Esc", "Back"),
        ],
    ),
    (
        "Repositories",
        [("Space", "Toggle repository")],
    ),
    (
        "Editor",
        [
            ("Ctrl+A", "Preview and apply"),
            ("Ctrl+S", "Save as template"),
            ("Ctrl+T", "Open templates"),
        ],
    ),
    (
        "Templates",
        [("Enter", "Load template"), ("d", "Delete template")],
    ),
    (
        "General",
        [("?", "Show this help"), ("q", "Quit")],
    ),
]


class HelpScreen(ModalScreen):
    """Modal screen showing keyboard shortcuts."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("q", "dismiss", "Close"),
        Binding("?", "dismiss", "Close"),
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 60;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    #help-title {
        text-style: bold;
        text-align: center;
        margin-bottom: 1;
        width: 100%;
    }

    .help-section {
        margin-top: 1;
        height: auto;
    }

    .help-section-title {
        text-style: bold;
        color: $primary;
    }

    .help-binding {
        margin-left: 2;
    }
    """

    def compose(self) -> ComposeResult:
        """Create help dialog content."""
        with Vertical(id="help-dialog"):
            yield Label("RepoProtector - Keyboard Shortcuts", id="help-title")
            for title, bindings in HELP_SECTIONS:
                with Vertical(classes="help-section"):
                    yield Label(title, classes="help-section-title")
                    for keys, description in bindings:
                        yield Label(f"{keys:<8}{description}", classes="help-binding")
            yield Label("")
            yield Label("Press Esc to close", id="help-footer")
