"""Tests for the diff engine and preview rendering."""

from dataclasses import replace

from repoprotector.core.diff import (
    NO_CHANGES,
    compute_diff,
    format_diff_summary,
    format_value,
    render_proposed,
)
from repoprotector.core.protection import (
    ProtectionConfig,
    PullRequestReviews,
    StatusChecks,
    default_protection,
    normalize,
)


def _unprotected() -> ProtectionConfig:
    return replace(default_protection(), pull_request_reviews=None)


def test_enabling_reviews_and_enforce_admins() -> None:
    """Turning on enforce_admins and reviews reports one change and one addition."""
    live = _unprotected()
    proposed = replace(
        live,
        enforce_admins=True,
        pull_request_reviews=PullRequestReviews(
            dismiss_stale_reviews=False,
            require_code_owner_reviews=False,
            required_approving_review_count=1,
        ),
    )

    diff = compute_diff(live, proposed)

    assert diff.changed == ("enforce_admins",)
    assert diff.added == ("required_pull_request_reviews",)
    assert diff.removed == ()


def test_no_live_config_never_reports_removals() -> None:
    for proposed in (default_protection(), _unprotected(), normalize({})):
        diff = compute_diff(None, proposed)
        assert diff.removed == ()
        assert diff.changed == ()


def test_no_live_config_reports_present_keys_as_added() -> None:
    diff = compute_diff(None, default_protection())

    assert "enforce_admins" in diff.added
    assert "required_pull_request_reviews" in diff.added
    assert "required_status_checks" not in diff.added


def test_same_config_has_no_changes() -> None:
    config = replace(
        default_protection(),
        status_checks=StatusChecks(strict=True, contexts=("ci/build",)),
    )

    assert compute_diff(config, config) == NO_CHANGES
    assert compute_diff(config, config).has_changes is False


def test_absent_proposed_is_no_changes() -> None:
    assert compute_diff(default_protection(), None) == NO_CHANGES
    assert compute_diff(None, None) == NO_CHANGES


def test_disabling_substructure_is_removal() -> None:
    live = replace(default_protection(), status_checks=StatusChecks(strict=False, contexts=()))
    proposed = replace(live, status_checks=None)

    diff = compute_diff(live, proposed)

    assert diff.removed == ("required_status_checks",)


def test_reordered_contexts_are_not_a_change() -> None:
    live = replace(
        default_protection(), status_checks=StatusChecks(strict=False, contexts=("a", "b"))
    )
    proposed = replace(live, status_checks=StatusChecks(strict=False, contexts=("b", "a")))

    assert compute_diff(live, proposed).has_changes is False


def test_url_is_never_reported() -> None:
    live = normalize({"url": "https://api.github.com/x", "enforce_admins": {"enabled": True}})
    proposed = replace(live, url=None)

    diff = compute_diff(live, proposed)

    assert "url" not in diff.removed
    assert diff.has_changes is False


def test_live_only_flags_show_as_removed() -> None:
    live = normalize({"lock_branch": {"enabled": False}})
    proposed = replace(live, lock_branch=None)

    assert compute_diff(live, proposed).removed == ("lock_branch",)


def test_format_diff_summary() -> None:
    live = _unprotected()
    proposed = replace(default_protection(), enforce_admins=True)

    lines = format_diff_summary(compute_diff(live, proposed))

    assert lines == [
        "+ Added: required_pull_request_reviews",
        "~ Changed: enforce_admins",
    ]
    assert format_diff_summary(NO_CHANGES) == ["No changes detected"]


def test_format_value_nested() -> None:
    lines = format_value({"a": True, "b": {"c": [1, "x"]}, "d": None, "e": []})

    assert lines == [
        "a: true",
        "b:",
        "  c:",
        "    - 1",
        '    - "x"',
        "d: null",
        "e: []",
    ]


def test_format_value_collapses_past_max_depth() -> None:
    lines = format_value({"a": {"b": {"c": 1}}}, max_depth=1)

    assert lines == ["a:", "  b: {...}"]


def test_render_proposed_truncates() -> None:
    full = render_proposed(default_protection())
    truncated = render_proposed(default_protection(), max_lines=3)

    assert len(truncated) == 4
    assert truncated[:3] == full[:3]
    assert truncated[3] == f"... ({len(full) - 3} more lines)"
    assert "required_status_checks: null" in full
