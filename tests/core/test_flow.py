"""Tests for ScreenFlowController using fake gateways."""

from dataclasses import replace
from pathlib import Path

from repoprotector.core.app_state import PreviewMode, Screen
from repoprotector.core.field_editor import APPLY, FieldEditorModel
from repoprotector.core.flow import (
    LOCAL_DETECTION_FAILED,
    SAVED_TEMPLATE_DESCRIPTION,
    ScreenFlowController,
)
from repoprotector.core.protection import (
    StatusChecks,
    as_proposed,
    default_protection,
    normalize,
    to_submission,
)
from repoprotector.github.fake import FakeGitHubProtectionGateway
from repoprotector.github.types import (
    Branch,
    ExternalCheck,
    LocalRepository,
    Organization,
    Repository,
)
from repoprotector.templates.fake import FakeTemplateStore
from repoprotector.templates.types import Template
from repoprotector.time.fake import FakeTime


def _repo(name: str, owner: str = "acme") -> Repository:
    return Repository(
        owner=owner, name=name, full_name=f"{owner}/{name}", private=True, default_branch="main"
    )


ACME = Organization(login="acme", id=1, description="Acme Corp")
API = _repo("api")
WEB = _repo("web")
DOCS = _repo("docs")
LOCAL_API = LocalRepository(owner="acme", repo="api", private=True, default_branch="main")
LIVE = normalize(
    {
        "url": "https://api.github.com/repos/acme/api/branches/main/protection",
        "enforce_admins": {"enabled": False},
        "required_status_checks": {"strict": True, "contexts": ["ci/build"]},
    }
)


def _github(**overrides: object) -> FakeGitHubProtectionGateway:
    kwargs: dict[str, object] = {
        "organizations": [ACME],
        "repositories": {"acme": [API, WEB, DOCS]},
        "branches": {
            ("acme", "api"): [
                Branch(name="main", protected=True),
                Branch(name="dev", protected=False),
            ],
            ("acme", "web"): [Branch(name="trunk", protected=False)],
        },
        "protections": {("acme", "api", "main"): LIVE},
        "external_checks": {("acme", "api"): [ExternalCheck(name="ci/build", path="b.yml")]},
    }
    kwargs.update(overrides)
    return FakeGitHubProtectionGateway(**kwargs)  # type: ignore[arg-type]


def _controller(
    github: FakeGitHubProtectionGateway | None = None,
    templates: FakeTemplateStore | None = None,
    time: FakeTime | None = None,
) -> ScreenFlowController:
    test_time = time or FakeTime()
    return ScreenFlowController(
        github=github or _github(),
        templates=templates or FakeTemplateStore(time=test_time),
        time=test_time,
        cwd=Path("/test/repo"),
    )


def _at_editor(controller: ScreenFlowController, repos: list[Repository]) -> None:
    controller.start(local_mode=False)
    controller.choose_org("acme")
    controller.choose_repositories(repos)
    controller.choose_branch("main")


def _focus(editor: FieldEditorModel, key: str) -> None:
    for _ in range(len(editor.fields)):
        if editor.focused_field.key == key:
            return
        editor.move_focus(1)
    raise AssertionError(f"No field with key {key!r}")


class TestStart:
    def test_lists_organizations(self) -> None:
        controller = _controller()

        controller.start(local_mode=False)

        assert controller.state.screen == Screen.ORGS
        assert controller.state.organizations == (ACME,)
        assert controller.state.error is None
        assert controller.state.loading is False

    def test_local_mode_starts_on_branches(self) -> None:
        github = _github(local_repository=LOCAL_API)
        controller = _controller(github)

        controller.start(local_mode=True)

        state = controller.state
        assert state.screen == Screen.BRANCHES
        assert state.org == "acme"
        assert state.selected_repos == (API,)
        assert [b.name for b in state.branches] == ["main", "dev"]
        assert github.branch_requests == [("acme", "api")]

    def test_local_mode_keeps_detected_visibility_and_default_branch(self) -> None:
        local = replace(LOCAL_API, private=False, default_branch="trunk")
        controller = _controller(_github(local_repository=local))

        controller.start(local_mode=True)

        (repository,) = controller.state.selected_repos
        assert repository.private is False
        assert repository.default_branch == "trunk"

    def test_local_mode_detection_failure_falls_back_to_orgs(self) -> None:
        controller = _controller()

        controller.start(local_mode=True)

        assert controller.state.screen == Screen.ORGS
        assert controller.state.organizations == (ACME,)
        assert controller.state.error == LOCAL_DETECTION_FAILED

    def test_organization_fetch_failure(self) -> None:
        controller = _controller(_github(fetch_errors={"list_organizations": "HTTP 502"}))

        controller.start(local_mode=False)

        assert controller.state.screen == Screen.ORGS
        assert controller.state.organizations == ()
        assert controller.state.error == "Failed to load organizations: HTTP 502"
        assert controller.state.loading is False


class TestSelection:
    def test_choose_org_lists_repositories(self) -> None:
        github = _github()
        controller = _controller(github)
        controller.start(local_mode=False)

        controller.choose_org("acme")

        assert controller.state.screen == Screen.REPOS
        assert controller.state.org == "acme"
        assert controller.state.repositories == (API, WEB, DOCS)
        assert github.repository_requests == ["acme"]

    def test_choose_org_failure_keeps_state(self) -> None:
        controller = _controller(_github(fetch_errors={"list_repositories": "HTTP 403"}))
        controller.start(local_mode=False)
        before = controller.state

        controller.choose_org("acme")

        assert controller.state.screen == Screen.ORGS
        assert controller.state.org is None
        assert controller.state.error == "Failed to load repositories: HTTP 403"
        assert controller.state.organizations == before.organizations

    def test_branches_come_from_first_repository(self) -> None:
        github = _github()
        controller = _controller(github)
        controller.start(local_mode=False)
        controller.choose_org("acme")

        controller.choose_repositories([WEB, API])

        assert controller.state.screen == Screen.BRANCHES
        assert controller.state.selected_repos == (WEB, API)
        assert [b.name for b in controller.state.branches] == ["trunk"]
        assert github.branch_requests == [("acme", "web")]

    def test_no_repositories_selected(self) -> None:
        controller = _controller()
        controller.start(local_mode=False)
        controller.choose_org("acme")

        controller.choose_repositories([])

        assert controller.state.screen == Screen.REPOS
        assert controller.state.error == "Select at least one repository"

    def test_choose_branch_seeds_editor_with_live_config(self) -> None:
        github = _github()
        controller = _controller(github)

        _at_editor(controller, [API, WEB])

        assert controller.state.screen == Screen.EDITOR
        assert controller.state.branch == "main"
        assert controller.state.live == LIVE
        assert controller.editor.config == as_proposed(LIVE)
        assert [c.name for c in controller.editor.external_checks] == ["ci/build"]
        assert github.protection_requests == [("acme", "api", "main")]

    def test_unprotected_branch_seeds_default(self) -> None:
        controller = _controller()
        controller.start(local_mode=False)
        controller.choose_org("acme")
        controller.choose_repositories([API])

        controller.choose_branch("dev")

        assert controller.state.screen == Screen.EDITOR
        assert controller.state.live is None
        assert controller.editor.config == default_protection()

    def test_protection_fetch_failure_stays_on_branches(self) -> None:
        controller = _controller(_github(fetch_errors={"get_protection": "HTTP 500"}))
        controller.start(local_mode=False)
        controller.choose_org("acme")
        controller.choose_repositories([API])

        controller.choose_branch("main")

        assert controller.state.screen == Screen.BRANCHES
        assert controller.state.branch is None
        assert controller.state.error == "Failed to load protection: HTTP 500"

    def test_external_check_failure_is_not_an_error(self) -> None:
        controller = _controller(_github(fetch_errors={"list_external_checks": "HTTP 404"}))

        _at_editor(controller, [API])

        assert controller.state.screen == Screen.EDITOR
        assert controller.state.error is None
        assert controller.editor.external_checks == ()


class TestPreviewAndApply:
    def test_confirm_editor_computes_diff(self) -> None:
        controller = _controller()
        _at_editor(controller, [API])
        _focus(controller.editor, "enforce_admins")
        controller.activate_editor_field()

        controller.confirm_editor()

        state = controller.state
        assert state.screen == Screen.PREVIEW
        assert state.preview_mode == PreviewMode.DIFF
        assert state.proposed == controller.editor.config
        assert state.diff.changed == ("enforce_admins",)
        assert state.diff.added == ()
        assert state.diff.removed == ()

    def test_apply_field_moves_to_preview(self) -> None:
        controller = _controller()
        _at_editor(controller, [API])
        _focus(controller.editor, APPLY)

        controller.activate_editor_field()

        assert controller.state.screen == Screen.PREVIEW

    def test_apply_reaches_every_selected_repository(self) -> None:
        github = _github(apply_errors={("acme", "web", "main"): "Branch not found"})
        controller = _controller(github)
        _at_editor(controller, [API, WEB, DOCS])
        controller.confirm_editor()
        proposed = controller.state.proposed
        assert proposed is not None

        controller.confirm_preview()

        state = controller.state
        assert state.screen == Screen.PREVIEW
        assert state.preview_mode == PreviewMode.RESULTS
        assert [(r.repo, r.success, r.error) for r in state.results] == [
            ("api", True, None),
            ("web", False, "Branch not found"),
            ("docs", True, None),
        ]
        assert [(u.repo, u.branch) for u in github.protection_updates] == [
            ("api", "main"),
            ("web", "main"),
            ("docs", "main"),
        ]
        assert github.protection_updates[0].submission == to_submission(proposed)
        assert state.loading is False

    def test_confirm_in_results_returns_to_editor(self) -> None:
        controller = _controller()
        _at_editor(controller, [API])
        controller.confirm_editor()
        controller.confirm_preview()

        controller.confirm_preview()

        assert controller.state.screen == Screen.EDITOR
        assert controller.state.preview_mode == PreviewMode.DIFF
        assert controller.state.results == ()

    def test_nothing_to_apply(self) -> None:
        controller = _controller()

        controller.confirm_preview()

        assert controller.state.error == "Nothing to apply"

    def test_apply_without_targets(self) -> None:
        time = FakeTime()
        template = Template(
            name="basic",
            description=None,
            created_at=time.now(),
            updated_at=time.now(),
            protection=default_protection(),
        )
        github = _github()
        controller = _controller(
            github, templates=FakeTemplateStore(time=time, templates=[template]), time=time
        )
        controller.start(local_mode=False)
        controller.open_templates()
        controller.choose_template("basic")
        controller.confirm_editor()

        controller.confirm_preview()

        assert controller.state.error == "Select repositories and a branch before applying"
        assert github.protection_updates == []


class TestGoBack:
    def test_back_from_editor_discards_branch(self) -> None:
        controller = _controller()
        _at_editor(controller, [API])
        controller.editor.open_workflow_picker()

        controller.go_back()

        assert controller.state.screen == Screen.BRANCHES
        assert controller.state.branch is None
        assert controller.state.live is None
        assert controller.editor.picker is None

    def test_local_mode_back_fetches_skipped_lists(self) -> None:
        github = _github(local_repository=LOCAL_API)
        controller = _controller(github)
        controller.start(local_mode=True)

        controller.go_back()

        assert controller.state.screen == Screen.REPOS
        assert controller.state.repositories == (API, WEB, DOCS)
        assert github.repository_requests == ["acme"]

        controller.go_back()

        assert controller.state.screen == Screen.ORGS
        assert controller.state.organizations == (ACME,)


class TestTemplates:
    def test_save_editor_as_template(self) -> None:
        time = FakeTime()
        templates = FakeTemplateStore(time=time)
        controller = _controller(templates=templates, time=time)
        _at_editor(controller, [API])

        saved = controller.save_editor_as_template()

        assert saved is not None
        assert saved.name == "template-20240101-000000-000"
        assert saved.description == SAVED_TEMPLATE_DESCRIPTION
        assert saved.protection == controller.editor.config
        assert templates.saved_names == ["template-20240101-000000-000"]
        assert controller.state.screen == Screen.EDITOR
        assert controller.state.message == "Saved as template: template-20240101-000000-000"

    def test_saves_within_the_same_second_keep_both_configs(self) -> None:
        time = FakeTime()
        templates = FakeTemplateStore(time=time)
        controller = _controller(templates=templates, time=time)
        _at_editor(controller, [API])

        first = controller.save_editor_as_template()
        controller.activate_editor_field()
        time.advance(0.5)
        second = controller.save_editor_as_template()

        assert first is not None and second is not None
        assert (first.name, second.name) == (
            "template-20240101-000000-000",
            "template-20240101-000000-500",
        )
        assert first.protection.enforce_admins != second.protection.enforce_admins
        assert templates.load(first.name) == first

    def test_save_at_the_same_instant_adds_suffix(self) -> None:
        time = FakeTime()
        templates = FakeTemplateStore(time=time)
        controller = _controller(templates=templates, time=time)
        _at_editor(controller, [API])

        controller.save_editor_as_template()
        controller.save_editor_as_template()
        controller.save_editor_as_template()

        assert templates.saved_names == [
            "template-20240101-000000-000",
            "template-20240101-000000-000-2",
            "template-20240101-000000-000-3",
        ]

    def test_save_failure_is_shown(self) -> None:
        time = FakeTime()
        controller = _controller(
            templates=FakeTemplateStore(time=time, save_error="disk full"), time=time
        )
        _at_editor(controller, [API])

        assert controller.save_editor_as_template() is None
        assert controller.state.error == "Failed to save template: disk full"
        assert controller.state.screen == Screen.EDITOR

    def test_load_template_replaces_editor_config(self) -> None:
        time = FakeTime()
        protection = replace(
            default_protection(),
            required_linear_history=True,
            status_checks=StatusChecks(strict=True, contexts=("lint",)),
        )
        template = Template(
            name="strict",
            description="Strict",
            created_at=time.now(),
            updated_at=time.now(),
            protection=protection,
        )
        controller = _controller(
            templates=FakeTemplateStore(time=time, templates=[template]), time=time
        )
        _at_editor(controller, [API])

        controller.open_templates()
        assert controller.state.screen == Screen.TEMPLATES
        assert controller.state.templates == (template,)

        controller.choose_template("strict")

        assert controller.state.screen == Screen.EDITOR
        assert controller.state.branch == "main"
        assert controller.editor.config == protection
        assert controller.state.message == "Loaded template: strict"

    def test_missing_template(self) -> None:
        controller = _controller()
        controller.start(local_mode=False)
        controller.open_templates()

        controller.choose_template("gone")

        assert controller.state.screen == Screen.TEMPLATES
        assert controller.state.error == "Template not found: gone"

    def test_delete_template(self) -> None:
        time = FakeTime()
        templates = FakeTemplateStore(time=time)
        templates.save("basic", default_protection())
        templates.save("strict", default_protection())
        controller = _controller(templates=templates, time=time)
        controller.start(local_mode=False)
        controller.open_templates()

        controller.delete_template("basic")

        assert [t.name for t in controller.state.templates] == ["strict"]
        assert templates.deleted_names == ["basic"]
        assert controller.state.message == "Deleted template: basic"
        assert controller.state.screen == Screen.TEMPLATES

        controller.delete_template("basic")
        assert controller.state.error == "Template not found: basic"

    def test_back_from_templates_returns_to_origin(self) -> None:
        controller = _controller()
        controller.start(local_mode=False)
        controller.choose_org("acme")
        controller.open_templates()

        controller.go_back()

        assert controller.state.screen == Screen.REPOS
        assert controller.state.repositories == (API, WEB, DOCS)
