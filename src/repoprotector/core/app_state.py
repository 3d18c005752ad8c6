"""Application state and its pure transition functions.

AppState is an immutable snapshot. Each transition takes a state and
returns a new one, applying the reset rules of the selection flow:

- choosing an org clears repositories, branch, configs and results;
- choosing repositories clears branch, configs and results;
- choosing a branch replaces the live config and clears proposed config
  and results.
"""

from dataclasses import dataclass, replace
from enum import Enum

from repoprotector.core.batch_apply import ApplyResult
from repoprotector.core.diff import NO_CHANGES, ProtectionDiff, compute_diff
from repoprotector.core.protection import ProtectionConfig
from repoprotector.github.types import Branch, Organization, Repository
from repoprotector.templates.types import Template


class Screen(Enum):
    ORGS = "orgs"
    REPOS = "repos"
    BRANCHES = "branches"
    EDITOR = "editor"
    TEMPLATES = "templates"
    PREVIEW = "preview"


class PreviewMode(Enum):
    DIFF = "diff"
    RESULTS = "results"


# Screen reached by going back from each screen of the main sequence.
_PREVIOUS_SCREEN: dict[Screen, Screen] = {
    Screen.ORGS: Screen.ORGS,
    Screen.REPOS: Screen.ORGS,
    Screen.BRANCHES: Screen.REPOS,
    Screen.EDITOR: Screen.BRANCHES,
    Screen.PREVIEW: Screen.EDITOR,
}


@dataclass(frozen=True)
class AppState:
    """Everything the flow has selected, fetched and computed so far.

    Attributes:
        screen: Screen currently shown
        organizations: Organizations listed on the orgs screen
        org: Login of the selected organization (or repository owner in local mode)
        repositories: Repositories of the selected org
        selected_repos: Repositories the config will be applied to
        branches: Branches of the first selected repository
        branch: Branch name the config will be applied to
        live: Live config of (first selected repo, branch), None when unprotected
        proposed: Config confirmed in the editor, None until confirmed
        diff: Difference between live and proposed
        preview_mode: Whether the preview shows the diff or the apply results
        results: Results of the last batch apply
        templates: Templates listed on the templates screen
        templates_return: Screen the templates screen was opened from
        loading: Whether a collaborator call is in flight
        error: Last error message, None when cleared
        message: Last informational message, None when cleared
    """

    screen: Screen
    organizations: tuple[Organization, ...] = ()
    org: str | None = None
    repositories: tuple[Repository, ...] = ()
    selected_repos: tuple[Repository, ...] = ()
    branches: tuple[Branch, ...] = ()
    branch: str | None = None
    live: ProtectionConfig | None = None
    proposed: ProtectionConfig | None = None
    diff: ProtectionDiff = NO_CHANGES
    preview_mode: PreviewMode = PreviewMode.DIFF
    results: tuple[ApplyResult, ...] = ()
    templates: tuple[Template, ...] = ()
    templates_return: Screen | None = None
    loading: bool = False
    error: str | None = None
    message: str | None = None


def initial_state() -> AppState:
    return AppState(screen=Screen.ORGS)


def show_organizations(state: AppState, organizations: list[Organization]) -> AppState:
    return replace(state, screen=Screen.ORGS, organizations=tuple(organizations))


def select_org(state: AppState, org: str, repositories: list[Repository]) -> AppState:
    return replace(
        state,
        screen=Screen.REPOS,
        org=org,
        repositories=tuple(repositories),
        selected_repos=(),
        branches=(),
        branch=None,
        live=None,
        proposed=None,
        diff=NO_CHANGES,
        preview_mode=PreviewMode.DIFF,
        results=(),
    )


def show_repositories(state: AppState, repositories: list[Repository]) -> AppState:
    return replace(state, screen=Screen.REPOS, repositories=tuple(repositories))


def select_repositories(
    state: AppState, repositories: list[Repository], branches: list[Branch]
) -> AppState:
    return replace(
        state,
        screen=Screen.BRANCHES,
        selected_repos=tuple(repositories),
        branches=tuple(branches),
        branch=None,
        live=None,
        proposed=None,
        diff=NO_CHANGES,
        preview_mode=PreviewMode.DIFF,
        results=(),
    )


def select_branch(state: AppState, branch: str, live: ProtectionConfig | None) -> AppState:
    return replace(
        state,
        screen=Screen.EDITOR,
        branch=branch,
        live=live,
        proposed=None,
        diff=NO_CHANGES,
        preview_mode=PreviewMode.DIFF,
        results=(),
    )


def enter_preview(state: AppState, proposed: ProtectionConfig | None) -> AppState:
    return replace(
        state,
        screen=Screen.PREVIEW,
        proposed=proposed,
        diff=compute_diff(state.live, proposed),
        preview_mode=PreviewMode.DIFF,
        results=(),
    )


def show_results(state: AppState, results: list[ApplyResult]) -> AppState:
    return replace(state, preview_mode=PreviewMode.RESULTS, results=tuple(results))


def open_templates(state: AppState, templates: list[Template]) -> AppState:
    return_to = state.templates_return if state.screen == Screen.TEMPLATES else state.screen
    return replace(
        state, screen=Screen.TEMPLATES, templates=tuple(templates), templates_return=return_to
    )


def load_template(state: AppState) -> AppState:
    """Leave the templates screen for the editor, which now holds the template's config."""
    return replace(
        state,
        screen=Screen.EDITOR,
        templates_return=None,
        preview_mode=PreviewMode.DIFF,
        results=(),
    )


def go_back(state: AppState) -> AppState:
    """Return to the previous screen, discarding what was chosen on the current one.

    The templates screen returns to the screen it was opened from.
    """
    if state.screen == Screen.TEMPLATES:
        target = state.templates_return or (Screen.REPOS if state.org else Screen.ORGS)
        return replace(state, screen=target, templates_return=None)

    target = _PREVIOUS_SCREEN[state.screen]
    match target:
        case Screen.ORGS:
            return replace(
                state,
                screen=Screen.ORGS,
                org=None,
                repositories=(),
                selected_repos=(),
                branches=(),
                branch=None,
                live=None,
                proposed=None,
                diff=NO_CHANGES,
                results=(),
            )
        case Screen.REPOS:
            return replace(
                state,
                screen=Screen.REPOS,
                selected_repos=(),
                branches=(),
                branch=None,
                live=None,
                proposed=None,
                diff=NO_CHANGES,
                results=(),
            )
        case Screen.BRANCHES:
            return replace(
                state,
                screen=Screen.BRANCHES,
                branch=None,
                live=None,
                proposed=None,
                diff=NO_CHANGES,
                results=(),
            )
        case _:
            return replace(state, screen=target, preview_mode=PreviewMode.DIFF, results=())


def with_loading(state: AppState, loading: bool) -> AppState:
    return replace(state, loading=loading)


def with_error(state: AppState, error: str | None) -> AppState:
    return replace(state, error=error)


def with_message(state: AppState, message: str | None) -> AppState:
    return replace(state, message=message)


def breadcrumb(state: AppState) -> str:
    """Render "org > repo > branch"; several selected repos show as "N repos"."""
    parts: list[str] = []
    if state.org:
        parts.append(state.org)
    if len(state.selected_repos) == 1:
        parts.append(state.selected_repos[0].name)
    elif state.selected_repos:
        parts.append(f"{len(state.selected_repos)} repos")
    if state.branch:
        parts.append(state.branch)
    return " > ".join(parts)
