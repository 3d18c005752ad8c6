"""Main Textual application."""

import asyncio
import functools
from collections.abc import Callable
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Header, Static

from repoprotector.core.app_state import AppState, Screen, breadcrumb
from repoprotector.core.field_editor import BooleanField, IntegerField, TextField
from repoprotector.core.flow import ScreenFlowController
from repoprotector.tui.cursor import ListCursor
from repoprotector.tui.render import (
    render_branches,
    render_editor,
    render_organizations,
    render_preview,
    render_repositories,
    render_templates,
    render_workflow_picker,
    screen_hints,
)
from repoprotector.tui.screens.field_input_screen import FieldInputScreen
from repoprotector.tui.screens.help_screen import HelpScreen
from repoprotector.tui.widgets.status_bar import StatusBar

# Screens whose rows are navigated with a ListCursor.
_LIST_SCREENS = (Screen.ORGS, Screen.REPOS, Screen.BRANCHES, Screen.TEMPLATES)
_TEMPLATE_ENTRY_SCREENS = (Screen.ORGS, Screen.REPOS, Screen.EDITOR)


class FlowView(Static, can_focus=True):
    """Focusable body showing the current screen.

    Key bindings live here rather than on the app so that a modal screen
    with an Input does not trigger them.
    """

    BINDINGS = [
        Binding("up", "app.cursor_up", "Up", show=False),
        Binding("k", "app.cursor_up", "Up", show=False),
        Binding("shift+tab", "app.cursor_up", "Up", show=False),
        Binding("down", "app.cursor_down", "Down", show=False),
        Binding("j", "app.cursor_down", "Down", show=False),
        Binding("tab", "app.cursor_down", "Down", show=False),
        Binding("enter", "app.select", "Select"),
        Binding("space", "app.toggle", "Toggle"),
        Binding("escape", "app.back", "Back"),
        Binding("ctrl+a", "app.apply", "Apply"),
        Binding("ctrl+s", "app.save_template", "Save template"),
        Binding("ctrl+t", "app.templates", "Templates"),
        Binding("d", "app.delete_template", "Delete template", show=False),
        Binding("?", "app.help", "Help"),
        Binding("q", "app.exit_app", "Quit"),
    ]


class RepoProtectorApp(App):
    """Interactive editor for GitHub branch protection.

    Renders the controller's current screen and turns key presses into
    controller calls. Calls that reach GitHub or the template store run in a
    worker thread, one at a time; keys other than help and quit are ignored
    until the call returns.
    """

    CSS_PATH = Path(__file__).parent / "styles" / "app.tcss"
    TITLE = "RepoProtector"

    def __init__(self, controller: ScreenFlowController, *, local_mode: bool) -> None:
        """Initialize the app.

        Args:
            controller: Flow controller holding the application state
            local_mode: Start from the repository checked out in the working directory
        """
        super().__init__()
        self._controller = controller
        self._local_mode = local_mode
        self._busy = False
        self._cursors: dict[Screen, ListCursor] = {
            screen: ListCursor() for screen in _LIST_SCREENS
        }
        self._toggled: set[str] = set()
        self._view: FlowView | None = None
        self._status_bar: StatusBar | None = None

    @property
    def controller(self) -> ScreenFlowController:
        return self._controller

    @property
    def local_mode(self) -> bool:
        return self._local_mode

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def toggled_repositories(self) -> set[str]:
        return set(self._toggled)

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="main-container"):
            yield FlowView(id="flow-view")
        yield StatusBar()

    def on_mount(self) -> None:
        self._view = self.query_one(FlowView)
        self._status_bar = self.query_one(StatusBar)
        self._view.focus()
        self._dispatch(functools.partial(self._controller.start, local_mode=self._local_mode))

    # ------------------------------------------------------------------
    # Background operations
    # ------------------------------------------------------------------

    def _dispatch(self, operation: Callable[[], object]) -> None:
        """Run a blocking controller call off the event loop, then re-render."""
        if self._busy:
            return
        self._busy = True
        self._render_state()
        self.run_worker(self._run_operation(operation), exclusive=True, group="flow")

    async def _run_operation(self, operation: Callable[[], object]) -> None:
        previous = self._controller.state
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, operation)
        finally:
            self._busy = False
            self._sync_selection(previous)
            self._render_state()

    def _sync_selection(self, previous: AppState) -> None:
        """Reset cursors and toggles whose underlying list changed."""
        state = self._controller.state
        if state.organizations != previous.organizations:
            self._cursors[Screen.ORGS].reset()
        if state.repositories != previous.repositories:
            self._cursors[Screen.REPOS].reset()
            self._toggled.clear()
        if state.screen == Screen.REPOS and previous.screen != Screen.REPOS:
            self._toggled.clear()
        if state.branches != previous.branches:
            self._cursors[Screen.BRANCHES].reset()
        if state.screen == Screen.TEMPLATES and previous.screen != Screen.TEMPLATES:
            self._cursors[Screen.TEMPLATES].reset()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_state(self) -> None:
        if self._view is None or self._status_bar is None:
            return
        state = self._controller.state
        editor = self._controller.editor
        self.sub_title = breadcrumb(state)
        self._view.update(self._render_body(state))
        self._status_bar.set_status(
            loading=self._busy or state.loading,
            error=state.error,
            message=state.message,
            hints=screen_hints(state, picker_open=editor.picker is not None),
        )

    def _render_body(self, state: AppState) -> Text:
        editor = self._controller.editor
        match state.screen:
            case Screen.ORGS:
                return render_organizations(state.organizations, self._cursor_index(Screen.ORGS))
            case Screen.REPOS:
                return render_repositories(
                    state.repositories, self._cursor_index(Screen.REPOS), self._toggled
                )
            case Screen.BRANCHES:
                return render_branches(state.branches, self._cursor_index(Screen.BRANCHES))
            case Screen.EDITOR:
                if editor.picker is not None:
                    return render_workflow_picker(editor.picker)
                return render_editor(editor)
            case Screen.TEMPLATES:
                return render_templates(state.templates, self._cursor_index(Screen.TEMPLATES))
            case Screen.PREVIEW:
                return render_preview(state)

    def _list_length(self, screen: Screen) -> int:
        state = self._controller.state
        match screen:
            case Screen.ORGS:
                return len(state.organizations)
            case Screen.REPOS:
                return len(state.repositories)
            case Screen.BRANCHES:
                return len(state.branches)
            case Screen.TEMPLATES:
                return len(state.templates)
        return 0

    def _cursor_index(self, screen: Screen) -> int:
        return self._cursors[screen].clamp(self._list_length(screen))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_cursor_up(self) -> None:
        self._move(-1)

    def action_cursor_down(self) -> None:
        self._move(1)

    def _move(self, direction: int) -> None:
        if self._busy:
            return
        screen = self._controller.state.screen
        editor = self._controller.editor
        if screen == Screen.EDITOR:
            if editor.picker is not None:
                editor.picker.move_focus(direction)
            else:
                editor.move_focus(direction)
        elif screen in _LIST_SCREENS:
            self._cursors[screen].move(direction, self._list_length(screen))
        self._render_state()

    def action_select(self) -> None:
        """Enter: choose the highlighted row, activate the focused field, or confirm."""
        if self._busy:
            return
        state = self._controller.state
        controller = self._controller
        match state.screen:
            case Screen.ORGS:
                if state.organizations:
                    org = state.organizations[self._cursor_index(Screen.ORGS)]
                    self._dispatch(functools.partial(controller.choose_org, org.login))
            case Screen.REPOS:
                if state.repositories:
                    selected = [r for r in state.repositories if r.full_name in self._toggled]
                    if not selected:
                        selected = [state.repositories[self._cursor_index(Screen.REPOS)]]
                    self._dispatch(functools.partial(controller.choose_repositories, selected))
            case Screen.BRANCHES:
                if state.branches:
                    branch = state.branches[self._cursor_index(Screen.BRANCHES)]
                    self._dispatch(functools.partial(controller.choose_branch, branch.name))
            case Screen.EDITOR:
                self._select_in_editor()
            case Screen.TEMPLATES:
                if state.templates:
                    template = state.templates[self._cursor_index(Screen.TEMPLATES)]
                    self._dispatch(functools.partial(controller.choose_template, template.name))
            case Screen.PREVIEW:
                self._dispatch(controller.confirm_preview)

    def _select_in_editor(self) -> None:
        editor = self._controller.editor
        if editor.picker is not None:
            editor.confirm_workflow_picker()
            self._render_state()
            return

        match editor.focused_field:
            case IntegerField(label=label, value=value):
                self._prompt_field(label, str(value))
            case TextField(label=label, value=value):
                self._prompt_field(label, value)
            case _:
                self._controller.activate_editor_field()
                self._render_state()

    def _prompt_field(self, label: str, value: str) -> None:
        def on_dismiss(result: str | None) -> None:
            if result is not None:
                self._controller.editor.edit_focused_field(result)
            self._render_state()

        self.push_screen(FieldInputScreen(label=label, value=value), on_dismiss)

    def action_toggle(self) -> None:
        """Space: toggle a repository, a workflow in the picker, or a boolean field."""
        if self._busy:
            return
        state = self._controller.state
        editor = self._controller.editor
        if state.screen == Screen.REPOS and state.repositories:
            repo = state.repositories[self._cursor_index(Screen.REPOS)]
            self._toggled.symmetric_difference_update({repo.full_name})
        elif state.screen == Screen.EDITOR:
            if editor.picker is not None:
                editor.picker.toggle_focused()
            elif isinstance(editor.focused_field, BooleanField):
                self._controller.activate_editor_field()
        self._render_state()

    def action_back(self) -> None:
        if self._busy:
            return
        state = self._controller.state
        editor = self._controller.editor
        if state.screen == Screen.EDITOR and editor.picker is not None:
            editor.cancel_workflow_picker()
            self._render_state()
            return
        if state.screen == Screen.ORGS:
            return
        self._dispatch(self._controller.go_back)

    def action_apply(self) -> None:
        if self._busy:
            return
        state = self._controller.state
        if state.screen == Screen.EDITOR and self._controller.editor.picker is None:
            self._controller.confirm_editor()
            self._render_state()

    def action_save_template(self) -> None:
        if self._busy or self._controller.state.screen != Screen.EDITOR:
            return
        self._dispatch(self._controller.save_editor_as_template)

    def action_templates(self) -> None:
        if self._busy:
            return
        if self._controller.state.screen in _TEMPLATE_ENTRY_SCREENS:
            self._controller.editor.cancel_workflow_picker()
            self._dispatch(self._controller.open_templates)

    def action_delete_template(self) -> None:
        if self._busy:
            return
        state = self._controller.state
        if state.screen == Screen.TEMPLATES and state.templates:
            template = state.templates[self._cursor_index(Screen.TEMPLATES)]
            self._dispatch(functools.partial(self._controller.delete_template, template.name))

    def action_help(self) -> None:
        """Show help screen."""
        self.push_screen(HelpScreen())

    def action_exit_app(self) -> None:
        """Quit the application."""
        self.exit()
