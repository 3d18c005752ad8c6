"""Rich text rendering of each screen.

These functions are pure: they take the data to show plus cursor positions
and return a ``rich.text.Text``, so they can be tested without a running app.
"""

from rich.text import Text

from repoprotector.core.app_state import AppState, PreviewMode, Screen
from repoprotector.core.batch_apply import ApplyResult, summarize
from repoprotector.core.diff import format_diff_summary, render_proposed
from repoprotector.core.field_editor import (
    ActionField,
    BooleanField,
    DividerField,
    EditableField,
    FieldEditorModel,
    IntegerField,
    TextField,
    WorkflowPicker,
    WorkflowPickerField,
)
from repoprotector.github.types import Branch, Organization, Repository
from repoprotector.templates.types import Template

CURSOR = "▶ "
NO_CURSOR = "  "

SCREEN_HINTS: dict[Screen, str] = {
    Screen.ORGS: "↑/↓ Navigate  |  Enter Select  |  Ctrl+T Templates  |  q Quit",
    Screen.REPOS: (
        "↑/↓ Navigate  |  Space Toggle  |  Enter Confirm  |  Ctrl+T Templates  |  Esc Back"
    ),
    Screen.BRANCHES: "↑/↓ Navigate  |  Enter Select  |  Esc Back",
    Screen.EDITOR: (
        "↑/↓ Nav  |  Enter Toggle/Edit  |  Tab Next  |  Ctrl+A Apply  |  Ctrl+S Save  |  "
        "Ctrl+T Templates  |  Esc Back"
    ),
    Screen.TEMPLATES: "Enter Load  |  d Delete  |  Esc Back",
    Screen.PREVIEW: "Enter Apply  |  Esc Cancel",
}
PICKER_HINTS = "Space Toggle  |  Enter Apply  |  Esc Cancel"
RESULTS_HINTS = "Enter Back to editor  |  Esc Back to editor"


def screen_hints(state: AppState, *, picker_open: bool) -> str:
    if state.screen == Screen.EDITOR and picker_open:
        return PICKER_HINTS
    if state.screen == Screen.PREVIEW and state.preview_mode == PreviewMode.RESULTS:
        return RESULTS_HINTS
    return SCREEN_HINTS[state.screen]


def _title(text: Text, title: str) -> None:
    text.append(title, style="bold cyan")
    text.append("\n\n")


def _row(text: Text, focused: bool, label: str, detail: str | None = None) -> None:
    text.append(CURSOR if focused else NO_CURSOR, style="bold cyan")
    text.append(label, style="bold" if focused else "")
    if detail:
        text.append(f"  {detail}", style="dim")
    text.append("\n")


def render_organizations(organizations: tuple[Organization, ...], cursor: int) -> Text:
    text = Text()
    _title(text, "Select Organization")
    if not organizations:
        text.append("No organizations found", style="dim")
        return text
    for index, org in enumerate(organizations):
        _row(text, index == cursor, org.login, org.description or "No description")
    return text


def render_repositories(
    repositories: tuple[Repository, ...], cursor: int, toggled: set[str]
) -> Text:
    text = Text()
    _title(text, "Select Repositories")
    if not repositories:
        text.append("No repositories found", style="dim")
        return text
    for index, repo in enumerate(repositories):
        selected = repo.full_name in toggled
        marker = "✓" if selected else "○"
        _row(
            text,
            index == cursor,
            f"{marker} {repo.name}",
            "private" if repo.private else "public",
        )
    text.append(f"\n{len(toggled)} selected", style="magenta")
    return text


def render_branches(branches: tuple[Branch, ...], cursor: int) -> Text:
    text = Text()
    _title(text, "Select Branch")
    if not branches:
        text.append("No branches found", style="dim")
        return text
    for index, branch in enumerate(branches):
        detail = "🔒 protected" if branch.protected else "unprotected"
        _row(text, index == cursor, branch.name, detail)
    return text


def render_templates(templates: tuple[Template, ...], cursor: int) -> Text:
    text = Text()
    _title(text, "Templates")
    if not templates:
        text.append("No templates saved", style="dim")
        return text
    for index, template in enumerate(templates):
        _row(text, index == cursor, template.name, template.description or "No description")
    return text


def render_field(field: EditableField, focused: bool) -> Text:
    """Render one editor row."""
    text = Text()
    match field:
        case DividerField(label=label):
            text.append(f"{NO_CURSOR}{label}", style="dim")
            return text
        case ActionField(label=label):
            style = "bold reverse green" if focused else "bold green"
            text.append(CURSOR if focused else NO_CURSOR, style="bold cyan")
            text.append(label, style=style)
            return text

    text.append(CURSOR if focused else NO_CURSOR, style="bold cyan")
    label_style = "dim" if field.parent_key is not None else ""
    if focused:
        label_style = "bold"
    text.append(field.label, style=label_style)
    text.append("  ")
    match field:
        case BooleanField(value=value):
            text.append("[✓]" if value else "[ ]", style="green" if value else "dim")
        case IntegerField(value=value):
            text.append(str(value), style="yellow")
        case TextField(value=value):
            text.append(value or "(none)", style="yellow" if value else "dim")
        case WorkflowPickerField():
            text.append("<Enter to select>", style="cyan")
    return text


def render_editor(editor: FieldEditorModel) -> Text:
    text = Text()
    _title(text, "Branch Protection Settings")
    for index, field in enumerate(editor.fields):
        text.append_text(render_field(field, index == editor.focus_index))
        text.append("\n")
    return text


def render_workflow_picker(picker: WorkflowPicker) -> Text:
    text = Text()
    _title(text, "Select Workflows to Add as Status Checks")
    for index, item in enumerate(picker.items):
        focused = index == picker.focus_index
        text.append(CURSOR if focused else NO_CURSOR, style="bold cyan")
        text.append("✓ " if item.selected else "○ ", style="green" if item.selected else "dim")
        text.append(item.check.name, style="bold cyan" if focused else "")
        if item.check.path:
            text.append(f"  {item.check.path}", style="dim")
        text.append("\n")
    text.append(f"\n{picker.selected_count} selected", style="magenta")
    return text


def render_preview(state: AppState) -> Text:
    if state.preview_mode == PreviewMode.RESULTS:
        return render_results(state.results)

    text = Text()
    _title(text, "Preview Changes")
    if state.proposed is None:
        text.append("No changes to preview", style="dim")
        return text

    for line in format_diff_summary(state.diff):
        style = {"+": "green", "-": "red", "~": "yellow"}.get(line[:1], "dim")
        text.append(line + "\n", style=style)
    text.append("\n--- Proposed Settings ---\n", style="bold")
    for line in render_proposed(state.proposed):
        text.append(line + "\n")
    return text


def render_results(results: tuple[ApplyResult, ...]) -> Text:
    text = Text()
    _title(text, "Apply Results:")
    for result in results:
        target = f"{result.full_name}:{result.branch}"
        if result.success:
            text.append(f"✓ {target}\n", style="green")
        else:
            text.append(f"✗ {target} - {result.error}\n", style="red")
    summary = summarize(results)
    text.append(
        f"\nTotal: {summary.total} | Success: {summary.succeeded} | Failed: {summary.failed}",
        style="bold",
    )
    return text
