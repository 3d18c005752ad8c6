"""Screen flow controller: selection -> editor -> preview -> apply.

The controller owns the AppState and the FieldEditorModel and is the only
code that calls the GitHub gateway and the template store. Every public
method runs to completion synchronously; the UI runs them one at a time off
its event loop and re-renders from ``state`` afterwards.

Fetch failures (RuntimeError from the gateway) never escape: the message is
stored in ``state.error`` and the rest of the state is left as it was.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from repoprotector.core import app_state
from repoprotector.core.app_state import AppState, PreviewMode, Screen
from repoprotector.core.batch_apply import ApplyTarget, apply_all
from repoprotector.core.field_editor import FieldEditorModel
from repoprotector.core.protection import ProtectionConfig, to_submission
from repoprotector.github.abc import GitHubProtectionGateway
from repoprotector.github.types import ProtectionApplied, ProtectionApplyError, Repository
from repoprotector.templates.abc import TemplateStore
from repoprotector.templates.types import Template
from repoprotector.time.abc import Time

logger = logging.getLogger(__name__)

LOCAL_DETECTION_FAILED = "Not in a git repository or gh not configured"
SAVED_TEMPLATE_DESCRIPTION = "Saved from editor"


class ScreenFlowController:
    """State machine driving the screens of the application."""

    def __init__(
        self,
        *,
        github: GitHubProtectionGateway,
        templates: TemplateStore,
        time: Time,
        cwd: Path,
    ) -> None:
        self._github = github
        self._templates = templates
        self._time = time
        self._cwd = cwd
        self._state = app_state.initial_state()
        self._editor = FieldEditorModel()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def editor(self) -> FieldEditorModel:
        return self._editor

    # ------------------------------------------------------------------
    # Startup and selection
    # ------------------------------------------------------------------

    def start(self, *, local_mode: bool) -> None:
        """Enter the initial screen.

        In local mode the repository checked out in the working directory is
        preselected and the flow starts on its branches. When detection
        fails the flow starts on the orgs screen with an error shown.
        """
        if not local_mode:
            self.load_organizations()
            return

        with self._loading():
            local = self._github.detect_local_repository(self._cwd)
        if local is None:
            logger.debug("Local repository detection failed in %s", self._cwd)
            self.load_organizations()
            self._set_error(LOCAL_DETECTION_FAILED)
            return

        repository = Repository(
            owner=local.owner,
            name=local.repo,
            full_name=f"{local.owner}/{local.repo}",
            private=local.private,
            default_branch=local.default_branch,
        )
        self._state = app_state.select_org(self._state, local.owner, [])
        self.choose_repositories([repository])

    def load_organizations(self) -> None:
        self._clear_feedback()
        try:
            with self._loading():
                organizations = self._github.list_organizations()
        except RuntimeError as e:
            self._report_fetch_error("Failed to load organizations", e)
            self._state = app_state.show_organizations(self._state, [])
            return
        self._state = app_state.show_organizations(self._state, organizations)

    def choose_org(self, login: str) -> None:
        self._clear_feedback()
        try:
            with self._loading():
                repositories = self._github.list_repositories(login)
        except RuntimeError as e:
            self._report_fetch_error("Failed to load repositories", e)
            return
        self._state = app_state.select_org(self._state, login, repositories)

    def choose_repositories(self, repositories: list[Repository]) -> None:
        """Select the repositories to protect and list the branches of the first one."""
        self._clear_feedback()
        if not repositories:
            self._set_error("Select at least one repository")
            return
        first = repositories[0]
        try:
            with self._loading():
                branches = self._github.list_branches(first.owner, first.name)
        except RuntimeError as e:
            self._report_fetch_error("Failed to load branches", e)
            return
        self._state = app_state.select_repositories(self._state, repositories, branches)

    def choose_branch(self, branch: str) -> None:
        """Fetch the live config of the branch and open the editor on it."""
        self._clear_feedback()
        if not self._state.selected_repos:
            self._set_error("Select at least one repository")
            return
        first = self._state.selected_repos[0]
        try:
            with self._loading():
                live = self._github.get_protection(first.owner, first.name, branch)
                checks = self._github.list_external_checks(first.owner, first.name)
        except RuntimeError as e:
            self._report_fetch_error("Failed to load protection", e)
            return
        self._editor.set_external_checks(checks)
        self._editor.seed(live)
        self._state = app_state.select_branch(self._state, branch, live)

    # ------------------------------------------------------------------
    # Editor and preview
    # ------------------------------------------------------------------

    def activate_editor_field(self) -> None:
        """Activate the focused editor field, moving to preview when it is the apply field."""
        if self._editor.activate_focused_field() is not None:
            self.confirm_editor()

    def confirm_editor(self) -> None:
        self._clear_feedback()
        self._state = app_state.enter_preview(self._state, self._editor.confirm().config)

    def confirm_preview(self) -> None:
        """Apply the proposed config, or leave the results view for the editor."""
        self._clear_feedback()
        state = self._state
        if state.preview_mode == PreviewMode.RESULTS:
            self._state = app_state.go_back(state)
            return

        if state.proposed is None:
            self._set_error("Nothing to apply")
            return
        if state.branch is None or not state.selected_repos:
            self._set_error("Select repositories and a branch before applying")
            return

        targets = [
            ApplyTarget(owner=repo.owner, repo=repo.name, branch=state.branch)
            for repo in state.selected_repos
        ]
        with self._loading():
            results = apply_all(targets, state.proposed, self._apply_one)
        self._state = app_state.show_results(self._state, results)

    def go_back(self) -> None:
        self._clear_feedback()
        self._editor.cancel_workflow_picker()
        self._state = app_state.go_back(self._state)
        # Local mode skips the org and repo listings; fetch them on the way back.
        if self._state.screen == Screen.REPOS and not self._state.repositories:
            self._refresh_repositories()
        elif self._state.screen == Screen.ORGS and not self._state.organizations:
            self.load_organizations()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def open_templates(self) -> None:
        self._clear_feedback()
        with self._loading():
            templates = self._list_templates()
        self._state = app_state.open_templates(self._state, templates)

    def choose_template(self, name: str) -> None:
        """Load a template into the editor."""
        self._clear_feedback()
        with self._loading():
            template = self._templates.load(name)
        if template is None:
            self._set_error(f"Template not found: {name}")
            return
        self._editor.seed(template.protection)
        self._state = app_state.load_template(self._state)
        self._set_message(f"Loaded template: {name}")

    def delete_template(self, name: str) -> None:
        self._clear_feedback()
        with self._loading():
            deleted = self._templates.delete(name)
            templates = self._list_templates()
        self._state = app_state.open_templates(self._state, templates)
        if deleted:
            self._set_message(f"Deleted template: {name}")
        else:
            self._set_error(f"Template not found: {name}")

    def save_editor_as_template(self) -> Template | None:
        """Save the editor's current config under a generated name.

        Returns:
            Saved template, or None when the save failed (the error is shown)
        """
        self._clear_feedback()
        name = self._unused_template_name()
        try:
            with self._loading():
                template = self._templates.save(
                    name, self._editor.config, SAVED_TEMPLATE_DESCRIPTION
                )
        except (OSError, ValueError) as e:
            logger.debug("Saving template %s failed: %s", name, e)
            self._set_error(f"Failed to save template: {e}")
            return None
        self._set_message(f"Saved as template: {name}")
        return template

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_one(
        self, owner: str, repo: str, branch: str, config: ProtectionConfig
    ) -> ProtectionApplied | ProtectionApplyError:
        return self._github.set_protection(owner, repo, branch, to_submission(config))

    def _unused_template_name(self) -> str:
        """Name a saved template after the current time, to the millisecond.

        A numeric suffix is added when the name is already taken.
        """
        now = self._time.now()
        base = f"template-{now:%Y%m%d-%H%M%S}-{now.microsecond // 1000:03d}"
        name = base
        suffix = 2
        while self._templates.load(name) is not None:
            name = f"{base}-{suffix}"
            suffix += 1
        return name

    def _refresh_repositories(self) -> None:
        if self._state.org is None:
            return
        try:
            with self._loading():
                repositories = self._github.list_repositories(self._state.org)
        except RuntimeError as e:
            self._report_fetch_error("Failed to load repositories", e)
            return
        self._state = app_state.show_repositories(self._state, repositories)

    def _list_templates(self) -> list[Template]:
        try:
            return self._templates.list_templates()
        except OSError as e:
            logger.warning("Could not list templates: %s", e)
            return []

    @contextmanager
    def _loading(self) -> Iterator[None]:
        self._state = app_state.with_loading(self._state, True)
        try:
            yield
        finally:
            self._state = app_state.with_loading(self._state, False)

    def _report_fetch_error(self, prefix: str, error: RuntimeError) -> None:
        logger.debug("%s: %s", prefix, error)
        self._set_error(f"{prefix}: {error}")

    def _set_error(self, error: str) -> None:
        self._state = app_state.with_error(self._state, error)

    def _set_message(self, message: str) -> None:
        self._state = app_state.with_message(self._state, message)

    def _clear_feedback(self) -> None:
        self._state = app_state.with_message(app_state.with_error(self._state, None), None)
