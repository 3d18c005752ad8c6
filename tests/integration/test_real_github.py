"""Integration tests for RealGitHubProtectionGateway.

A stub ``gh`` shell script is put first on PATH so the gateway runs real
subprocesses without network access.
"""

import json
import os
import sys
from pathlib import Path

import pytest

from repoprotector.github.real import RealGitHubProtectionGateway
from repoprotector.github.types import (
    LocalRepository,
    Organization,
    ProtectionApplied,
    ProtectionApplyError,
)

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script")

GH_STUB = """#!/bin/sh
dir=$(dirname "$0")
echo "$*" >> "$dir/calls.log"
case "$*" in
  *"/web/"*"-X PUT"*) cat > /dev/null; echo "gh: Validation Failed (HTTP 422)" >&2; exit 1 ;;
  *"-X PUT"*) cat > "$dir/stdin.json"; echo '{"url": "https://api.github.com/x"}' ;;
  *"/user/orgs"*) echo '[{"login": "acme", "id": 1}]' ;;
  *"/repos/acme/error-404-page/"*) echo "gh: Bad credentials (HTTP 401)" >&2; exit 1 ;;
  *"/branches/fix%2F404/protection"*) echo "gh: Server Error (HTTP 502)" >&2; exit 1 ;;
  *"/repos/acme/gone/"*) echo "gh: Not Found (HTTP 404)" >&2; exit 1 ;;
  *"/branches/release%2F1.0/protection"*)
    echo "gh: Branch not protected (HTTP 404)" >&2; exit 1 ;;
  *"/protection"*) echo '{"enforce_admins": {"enabled": true}}' ;;
  *"/branches?"*) echo 'not json' ;;
  *"/actions/workflows"*) echo "gh: HTTP 403" >&2; exit 1 ;;
  *"repo view"*)
    echo '{"owner": {"login": "acme"}, "name": "api", "isPrivate": true,'
    echo ' "defaultBranchRef": {"name": "trunk"}}' ;;
esac
"""


@pytest.fixture
def gh_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    gh = bin_dir / "gh"
    gh.write_text(GH_STUB, encoding="utf-8")
    gh.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir


def _calls(gh_dir: Path) -> list[str]:
    return (gh_dir / "calls.log").read_text(encoding="utf-8").splitlines()


def test_list_organizations(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    assert github.list_organizations() == [Organization(login="acme", id=1)]
    assert _calls(gh_dir) == [
        "api /user/orgs?per_page=100 -H Accept: application/vnd.github+json"
    ]


def test_get_protection_normalizes_response(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    config = github.get_protection("acme", "api", "main")

    assert config is not None
    assert config.enforce_admins is True


def test_unprotected_branch_is_none_and_branch_is_encoded(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    assert github.get_protection("acme", "api", "release/1.0") is None
    assert "/repos/acme/api/branches/release%2F1.0/protection" in _calls(gh_dir)[0]


def test_fetch_failure_is_not_unprotected_when_names_contain_404(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    with pytest.raises(RuntimeError, match="Bad credentials"):
        github.get_protection("acme", "error-404-page", "main")
    with pytest.raises(RuntimeError, match="Server Error"):
        github.get_protection("acme", "api", "fix/404")


def test_not_found_response_is_none(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    assert github.get_protection("acme", "gone", "main") is None


def test_invalid_json_is_runtime_error(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    with pytest.raises(RuntimeError, match="invalid JSON"):
        github.list_branches("acme", "api")


def test_set_protection_sends_body_on_stdin(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)
    submission = {"enforce_admins": True, "restrictions": None}

    result = github.set_protection("acme", "api", "main", submission)

    assert isinstance(result, ProtectionApplied)
    assert json.loads((gh_dir / "stdin.json").read_text(encoding="utf-8")) == submission
    assert "-X PUT --input -" in _calls(gh_dir)[0]


def test_set_protection_failure_is_error_result(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    result = github.set_protection("acme", "web", "main", {})

    assert isinstance(result, ProtectionApplyError)
    assert "Validation Failed" in result.message


def test_external_check_failure_is_empty(gh_dir: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    assert github.list_external_checks("acme", "api") == []


def test_detect_local_repository(gh_dir: Path, tmp_path: Path) -> None:
    github = RealGitHubProtectionGateway(timeout=10)

    assert github.detect_local_repository(tmp_path) == LocalRepository(
        owner="acme", repo="api", private=True, default_branch="trunk"
    )
    assert "repo view --json owner,name,isPrivate,defaultBranchRef" in _calls(gh_dir)[0]


def test_missing_gh_is_runtime_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATH", str(tmp_path))
    github = RealGitHubProtectionGateway(timeout=10)

    with pytest.raises(RuntimeError, match="Command not found"):
        github.list_organizations()
    assert github.detect_local_repository(tmp_path) is None
