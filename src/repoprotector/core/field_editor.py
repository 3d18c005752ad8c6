"""Editable field list over a ProtectionConfig.

The editor shows a nested, partially optional config as a flat list of
fields. The list is never edited directly: every edit produces a new
ProtectionConfig and the list is rebuilt from it with ``build_fields``, a
pure function whose output order is what navigation and rendering rely on::

    six boolean flags
    PR reviews enable toggle   [+ dismiss stale, code owners, approvals]
    status checks enable toggle [+ strict, contexts, add-workflow action]
    divider
    apply action
"""

import logging
from dataclasses import dataclass, replace

from repoprotector.core.protection import (
    BOOLEAN_FLAGS,
    ActorAllowlist,
    ProtectionConfig,
    as_proposed,
    default_protection,
    default_pull_request_reviews,
    default_status_checks,
    unique_in_order,
)
from repoprotector.github.types import ExternalCheck

logger = logging.getLogger(__name__)

PULL_REQUEST_REVIEWS = "pull_request_reviews"
STATUS_CHECKS = "status_checks"
RESTRICTIONS = "restrictions"

PULL_REQUEST_REVIEWS_ENABLED = "pull_request_reviews_enabled"
STATUS_CHECKS_ENABLED = "status_checks_enabled"
ADD_WORKFLOW_CHECKS = "add_workflow_checks"
DIVIDER = "divider"
APPLY = "apply"

# Enable toggle key -> substructure it switches on and off.
ENABLE_TOGGLES: dict[str, str] = {
    PULL_REQUEST_REVIEWS_ENABLED: PULL_REQUEST_REVIEWS,
    STATUS_CHECKS_ENABLED: STATUS_CHECKS,
}

FLAG_LABELS: dict[str, str] = {
    "enforce_admins": "Enforce for admins",
    "required_linear_history": "Require linear history",
    "allow_force_pushes": "Allow force pushes",
    "allow_deletions": "Allow deletions",
    "block_creations": "Block creations",
    "required_conversation_resolution": "Require conversation resolution",
}

DIVIDER_LABEL = "─" * 25
APPLY_LABEL = ">>> APPLY PROTECTION <<<"


# ---------------------------------------------------------------------------
# Field variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BooleanField:
    key: str
    label: str
    value: bool
    parent_key: str | None = None


@dataclass(frozen=True)
class IntegerField:
    key: str
    label: str
    value: int
    parent_key: str | None = None


@dataclass(frozen=True)
class TextField:
    key: str
    label: str
    value: str
    parent_key: str | None = None


@dataclass(frozen=True)
class ActionField:
    key: str
    label: str
    parent_key: str | None = None


@dataclass(frozen=True)
class WorkflowPickerField:
    key: str
    label: str
    parent_key: str | None = None


@dataclass(frozen=True)
class DividerField:
    key: str
    label: str
    parent_key: str | None = None


EditableField = (
    BooleanField | IntegerField | TextField | ActionField | WorkflowPickerField | DividerField
)


@dataclass(frozen=True)
class EditorConfirmed:
    """Signal that the operator asked to apply the edited config."""

    config: ProtectionConfig


def build_fields(
    config: ProtectionConfig, *, has_external_checks: bool
) -> tuple[EditableField, ...]:
    """Project a config onto the ordered field list shown by the editor.

    Args:
        config: Config being edited
        has_external_checks: Whether workflows are known, which adds the
            add-workflow action to an enabled status checks block

    Returns:
        Fields in display order
    """
    fields: list[EditableField] = [
        BooleanField(key=key, label=FLAG_LABELS[key], value=getattr(config, key))
        for key in BOOLEAN_FLAGS
    ]

    reviews = config.pull_request_reviews
    fields.append(
        BooleanField(
            key=PULL_REQUEST_REVIEWS_ENABLED,
            label="PR Reviews Enabled",
            value=reviews is not None,
            parent_key=PULL_REQUEST_REVIEWS,
        )
    )
    if reviews is not None:
        fields.extend(
            [
                BooleanField(
                    key="dismiss_stale_reviews",
                    label="  Dismiss stale reviews",
                    value=reviews.dismiss_stale_reviews,
                    parent_key=PULL_REQUEST_REVIEWS,
                ),
                BooleanField(
                    key="require_code_owner_reviews",
                    label="  Require code owner reviews",
                    value=reviews.require_code_owner_reviews,
                    parent_key=PULL_REQUEST_REVIEWS,
                ),
                IntegerField(
                    key="required_approving_review_count",
                    label="  Required approvals",
                    value=reviews.required_approving_review_count,
                    parent_key=PULL_REQUEST_REVIEWS,
                ),
            ]
        )

    checks = config.status_checks
    fields.append(
        BooleanField(
            key=STATUS_CHECKS_ENABLED,
            label="Status Checks Enabled",
            value=checks is not None,
            parent_key=STATUS_CHECKS,
        )
    )
    if checks is not None:
        fields.extend(
            [
                BooleanField(
                    key="strict",
                    label="  Require branches up-to-date",
                    value=checks.strict,
                    parent_key=STATUS_CHECKS,
                ),
                TextField(
                    key="contexts",
                    label="  Status checks (comma-sep)",
                    value=", ".join(checks.contexts),
                    parent_key=STATUS_CHECKS,
                ),
            ]
        )
        if has_external_checks:
            fields.append(
                WorkflowPickerField(
                    key=ADD_WORKFLOW_CHECKS,
                    label="  [+] Add workflow checks",
                    parent_key=STATUS_CHECKS,
                )
            )

    fields.append(DividerField(key=DIVIDER, label=DIVIDER_LABEL))
    fields.append(ActionField(key=APPLY, label=APPLY_LABEL))
    return tuple(fields)


# ---------------------------------------------------------------------------
# Workflow picker
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PickerItem:
    check: ExternalCheck
    selected: bool


class WorkflowPicker:
    """Selection state of the add-workflow-checks overlay."""

    def __init__(self, items: list[PickerItem]) -> None:
        self._items = items
        self._focus_index = 0

    @property
    def items(self) -> tuple[PickerItem, ...]:
        return tuple(self._items)

    @property
    def focus_index(self) -> int:
        return self._focus_index

    @property
    def selected_count(self) -> int:
        return sum(1 for item in self._items if item.selected)

    def move_focus(self, direction: int) -> None:
        if not self._items:
            return
        self._focus_index = (self._focus_index + direction) % len(self._items)

    def toggle_focused(self) -> None:
        if not self._items:
            return
        item = self._items[self._focus_index]
        self._items[self._focus_index] = replace(item, selected=not item.selected)

    def selected_names(self) -> list[str]:
        return [item.check.name for item in self._items if item.selected]


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class FieldEditorModel:
    """Editor state: the config being edited, its field list and the focus.

    Every mutating method replaces the config and rebuilds the field list
    before returning, so ``fields`` is always consistent with ``config``.
    """

    def __init__(self) -> None:
        self._config = default_protection()
        self._external_checks: tuple[ExternalCheck, ...] = ()
        self._fields = build_fields(self._config, has_external_checks=False)
        self._focus_index = 0
        self._picker: WorkflowPicker | None = None

    @property
    def config(self) -> ProtectionConfig:
        return self._config

    @property
    def fields(self) -> tuple[EditableField, ...]:
        return self._fields

    @property
    def focus_index(self) -> int:
        return self._focus_index

    @property
    def focused_field(self) -> EditableField:
        return self._fields[self._focus_index]

    @property
    def external_checks(self) -> tuple[ExternalCheck, ...]:
        return self._external_checks

    @property
    def picker(self) -> WorkflowPicker | None:
        """Open workflow picker, None when closed."""
        return self._picker

    def seed(self, config: ProtectionConfig | None) -> None:
        """Start editing config, or the default config when None.

        Live-only fields are dropped; focus returns to the first field and an
        open picker is closed. Known external checks are kept.
        """
        self._config = as_proposed(config) if config is not None else default_protection()
        self._focus_index = 0
        self._picker = None
        self.rebuild_fields()

    def set_external_checks(self, checks: list[ExternalCheck]) -> None:
        self._external_checks = tuple(checks)
        self.rebuild_fields()

    def rebuild_fields(self) -> None:
        """Re-derive the field list from the config.

        Focus stays on the same field key when it still exists, otherwise the
        index is clamped to the new list.
        """
        focused_key = self._fields[self._focus_index].key if self._fields else None
        self._fields = build_fields(
            self._config, has_external_checks=bool(self._external_checks)
        )
        keys = [field.key for field in self._fields]
        if focused_key in keys:
            self._focus_index = keys.index(focused_key)
        else:
            self._focus_index = min(self._focus_index, len(self._fields) - 1)

    def move_focus(self, direction: int, *, wrapping: bool = True) -> None:
        """Move focus by direction steps; every field, the divider included, is a stop."""
        count = len(self._fields)
        target = self._focus_index + direction
        if wrapping:
            self._focus_index = target % count
        else:
            self._focus_index = max(0, min(target, count - 1))

    def activate_focused_field(self) -> EditorConfirmed | None:
        """Run the action of the focused field.

        Booleans toggle (enable toggles switch their substructure on or off),
        the add-workflow field opens the picker and the apply field confirms.
        Integer, text and divider fields do nothing here; they are changed
        through edit_focused_field().

        Returns:
            EditorConfirmed for the apply field, None otherwise
        """
        match self.focused_field:
            case BooleanField(key=key, value=value) if key in ENABLE_TOGGLES:
                self.set_substructure_enabled(ENABLE_TOGGLES[key], not value)
            case BooleanField(key=key, value=value, parent_key=parent_key):
                self._set_boolean(key, not value, parent_key)
            case WorkflowPickerField():
                self.open_workflow_picker()
            case ActionField(key=key) if key == APPLY:
                return self.confirm()
        return None

    def edit_focused_field(self, raw: str) -> bool:
        """Replace the value of the focused integer or text field from raw input.

        Integer input must be a non-negative decimal number. Text input for the
        status check contexts is split on commas, trimmed, and stripped of
        empty entries and exact duplicates. Invalid input leaves the config
        untouched.

        Returns:
            True if the config changed
        """
        match self.focused_field:
            case IntegerField(key=key):
                count = _parse_non_negative_int(raw)
                if count is None or self._config.pull_request_reviews is None:
                    logger.debug("Rejected value %r for %s", raw, key)
                    return False
                reviews = replace(self._config.pull_request_reviews, **{key: count})
                self._config = replace(self._config, pull_request_reviews=reviews)
            case TextField(key="contexts"):
                if self._config.status_checks is None:
                    return False
                contexts = unique_in_order(
                    [part.strip() for part in raw.split(",") if part.strip()]
                )
                self._set_contexts(contexts)
            case _:
                return False
        self.rebuild_fields()
        return True

    def set_substructure_enabled(self, parent_key: str, enabled: bool) -> None:
        """Switch a substructure on (with its defaults) or off (dropping its settings).

        Raises:
            ValueError: If parent_key does not name a substructure
        """
        if parent_key == PULL_REQUEST_REVIEWS:
            reviews = default_pull_request_reviews() if enabled else None
            self._config = replace(self._config, pull_request_reviews=reviews)
        elif parent_key == STATUS_CHECKS:
            checks = default_status_checks() if enabled else None
            self._config = replace(self._config, status_checks=checks)
        elif parent_key == RESTRICTIONS:
            allowlist = ActorAllowlist(users=(), teams=(), apps=()) if enabled else None
            self._config = replace(self._config, restrictions=allowlist)
        else:
            raise ValueError(f"Unknown substructure: {parent_key}")
        self.rebuild_fields()

    def confirm(self) -> EditorConfirmed:
        return EditorConfirmed(config=self._config)

    def open_workflow_picker(self) -> bool:
        """Open the picker with checks already required pre-selected.

        Returns:
            False when no external checks are known and nothing was opened
        """
        if not self._external_checks:
            return False
        checks = self._config.status_checks
        contexts = checks.contexts if checks is not None else ()
        self._picker = WorkflowPicker(
            [
                PickerItem(check=check, selected=check.name in contexts)
                for check in self._external_checks
            ]
        )
        return True

    def confirm_workflow_picker(self) -> None:
        """Add the newly selected workflow names to the required contexts and close.

        Existing contexts keep their order and new names follow in workflow
        order. Deselecting a pre-selected workflow does not remove it.
        """
        if self._picker is None:
            return
        selected = self._picker.selected_names()
        self._picker = None

        checks = self._config.status_checks
        existing = checks.contexts if checks is not None else ()
        added = [name for name in unique_in_order(selected) if name not in existing]
        if added:
            if checks is None:
                self._config = replace(self._config, status_checks=default_status_checks())
            self._set_contexts((*existing, *added))
        self.rebuild_fields()

    def cancel_workflow_picker(self) -> None:
        self._picker = None

    def _set_boolean(self, key: str, value: bool, parent_key: str | None) -> None:
        if parent_key is None:
            self._config = replace(self._config, **{key: value})
        elif parent_key == PULL_REQUEST_REVIEWS and self._config.pull_request_reviews is not None:
            reviews = replace(self._config.pull_request_reviews, **{key: value})
            self._config = replace(self._config, pull_request_reviews=reviews)
        elif parent_key == STATUS_CHECKS and self._config.status_checks is not None:
            checks = replace(self._config.status_checks, **{key: value})
            self._config = replace(self._config, status_checks=checks)
        self.rebuild_fields()

    def _set_contexts(self, contexts: tuple[str, ...]) -> None:
        # App-pinned descriptors describe the old list; GitHub rebuilds them from contexts.
        checks = self._config.status_checks
        if checks is None:
            return
        self._config = replace(
            self._config, status_checks=replace(checks, contexts=contexts, checks=None)
        )


def _parse_non_negative_int(raw: str) -> int | None:
    text = raw.strip()
    if not text or not text.isascii() or not text.isdigit():
        return None
    return int(text)
