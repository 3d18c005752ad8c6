"""Tests for AppState transitions and reset rules."""

from dataclasses import replace

from repoprotector.core import app_state
from repoprotector.core.app_state import AppState, PreviewMode, Screen
from repoprotector.core.batch_apply import ApplyResult
from repoprotector.core.diff import NO_CHANGES
from repoprotector.core.protection import default_protection
from repoprotector.github.types import Branch, Organization, Repository


def _repo(name: str) -> Repository:
    return Repository(
        owner="acme", name=name, full_name=f"acme/{name}", private=False, default_branch="main"
    )


API = _repo("api")
WEB = _repo("web")
MAIN = Branch(name="main", protected=True)


def _state_in_preview_results() -> AppState:
    state = app_state.show_organizations(
        app_state.initial_state(), [Organization(login="acme", id=1)]
    )
    state = app_state.select_org(state, "acme", [API, WEB])
    state = app_state.select_repositories(state, [API, WEB], [MAIN])
    state = app_state.select_branch(state, "main", None)
    state = app_state.enter_preview(state, default_protection())
    return app_state.show_results(
        state, [ApplyResult(owner="acme", repo="api", branch="main", success=True)]
    )


def test_initial_state() -> None:
    state = app_state.initial_state()

    assert state.screen == Screen.ORGS
    assert state.org is None
    assert state.loading is False
    assert app_state.breadcrumb(state) == ""


def test_select_org_clears_deeper_selection() -> None:
    state = _state_in_preview_results()

    state = app_state.select_org(state, "other", [WEB])

    assert state.screen == Screen.REPOS
    assert state.org == "other"
    assert state.repositories == (WEB,)
    assert state.selected_repos == ()
    assert state.branch is None
    assert state.proposed is None
    assert state.results == ()
    assert state.preview_mode == PreviewMode.DIFF


def test_select_repositories_clears_branch_and_configs() -> None:
    state = _state_in_preview_results()

    state = app_state.select_repositories(state, [WEB], [MAIN])

    assert state.screen == Screen.BRANCHES
    assert state.selected_repos == (WEB,)
    assert state.branches == (MAIN,)
    assert state.branch is None
    assert state.live is None
    assert state.proposed is None
    assert state.diff == NO_CHANGES


def test_select_branch_replaces_live_and_clears_proposed() -> None:
    live = replace(default_protection(), enforce_admins=True)
    state = _state_in_preview_results()

    state = app_state.select_branch(state, "develop", live)

    assert state.screen == Screen.EDITOR
    assert state.branch == "develop"
    assert state.live == live
    assert state.proposed is None
    assert state.results == ()


def test_enter_preview_computes_diff() -> None:
    state = app_state.select_branch(app_state.initial_state(), "main", default_protection())

    state = app_state.enter_preview(state, replace(default_protection(), enforce_admins=True))

    assert state.screen == Screen.PREVIEW
    assert state.diff.changed == ("enforce_admins",)
    assert state.preview_mode == PreviewMode.DIFF


def test_go_back_sequence_resets_deeper_state() -> None:
    state = _state_in_preview_results()

    state = app_state.go_back(state)
    assert state.screen == Screen.EDITOR
    assert state.preview_mode == PreviewMode.DIFF
    assert state.results == ()
    assert state.branch == "main"

    state = app_state.go_back(state)
    assert state.screen == Screen.BRANCHES
    assert state.branch is None
    assert state.proposed is None
    assert state.selected_repos == (API, WEB)

    state = app_state.go_back(state)
    assert state.screen == Screen.REPOS
    assert state.selected_repos == ()
    assert state.repositories == (API, WEB)

    state = app_state.go_back(state)
    assert state.screen == Screen.ORGS
    assert state.org is None
    assert state.repositories == ()
    assert len(state.organizations) == 1

    assert app_state.go_back(state) == state


def test_templates_return_to_origin() -> None:
    state = app_state.select_branch(
        app_state.select_org(app_state.initial_state(), "acme", [API]), "main", None
    )

    state = app_state.open_templates(state, [])
    assert state.screen == Screen.TEMPLATES
    assert state.templates_return == Screen.EDITOR

    # Re-listing after a delete keeps the original return screen
    state = app_state.open_templates(state, [])
    assert state.templates_return == Screen.EDITOR

    state = app_state.go_back(state)
    assert state.screen == Screen.EDITOR
    assert state.templates_return is None
    assert state.branch == "main"


def test_templates_without_origin_fall_back_on_org() -> None:
    with_org = AppState(screen=Screen.TEMPLATES, org="acme")
    without_org = AppState(screen=Screen.TEMPLATES)

    assert app_state.go_back(with_org).screen == Screen.REPOS
    assert app_state.go_back(without_org).screen == Screen.ORGS


def test_load_template_opens_editor() -> None:
    state = app_state.open_templates(app_state.initial_state(), [])

    state = app_state.load_template(state)

    assert state.screen == Screen.EDITOR
    assert state.templates_return is None


def test_feedback_helpers() -> None:
    state = app_state.initial_state()

    state = app_state.with_loading(state, True)
    state = app_state.with_error(state, "boom")
    state = app_state.with_message(state, "hello")

    assert (state.loading, state.error, state.message) == (True, "boom", "hello")


def test_breadcrumb() -> None:
    state = _state_in_preview_results()

    assert app_state.breadcrumb(state) == "acme > 2 repos > main"
    assert app_state.breadcrumb(replace(state, selected_repos=(API,))) == "acme > api > main"
    assert app_state.breadcrumb(replace(state, branch=None, selected_repos=())) == "acme"
