"""Production implementation of GitHub protection operations using the gh CLI."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any
from urllib.parse import quote

from repoprotector.core.protection import ProtectionConfig, normalize
from repoprotector.github.abc import GitHubProtectionGateway
from repoprotector.github.parsing import (
    is_not_found_error,
    parse_branches,
    parse_organizations,
    parse_repositories,
    parse_workflows,
)
from repoprotector.github.types import (
    Branch,
    ExternalCheck,
    LocalRepository,
    Organization,
    ProtectionApplied,
    ProtectionApplyError,
    Repository,
)
from repoprotector.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)

# GitHub caps per_page at 100; listings beyond that are not shown.
_PAGE_SIZE = 100


class RealGitHubProtectionGateway(GitHubProtectionGateway):
    """Production implementation using ``gh api``.

    All operations execute actual gh commands via subprocess and rely on the
    credentials of ``gh auth login``.
    """

    def __init__(self, *, timeout: float | None) -> None:
        """Initialize the gateway.

        Args:
            timeout: Seconds allowed per gh invocation, None for no limit
        """
        self._timeout = timeout

    def list_organizations(self) -> list[Organization]:
        data = self._gh_api(f"/user/orgs?per_page={_PAGE_SIZE}", "list organizations")
        return parse_organizations(data)

    def list_repositories(self, org: str) -> list[Repository]:
        data = self._gh_api(
            f"/orgs/{org}/repos?per_page={_PAGE_SIZE}", f"list repositories of '{org}'"
        )
        return parse_repositories(data)

    def list_branches(self, owner: str, repo: str) -> list[Branch]:
        data = self._gh_api(
            f"/repos/{owner}/{repo}/branches?per_page={_PAGE_SIZE}",
            f"list branches of {owner}/{repo}",
        )
        return parse_branches(data)

    def get_protection(self, owner: str, repo: str, branch: str) -> ProtectionConfig | None:
        """Fetch live protection, mapping "Branch not protected" (404) to None."""
        try:
            data = self._gh_api(
                _protection_endpoint(owner, repo, branch),
                f"fetch protection of {owner}/{repo}:{branch}",
            )
        except RuntimeError as e:
            cause = e.__cause__
            if isinstance(cause, subprocess.CalledProcessError) and is_not_found_error(
                cause.stderr or ""
            ):
                logger.debug("No protection on %s/%s:%s", owner, repo, branch)
                return None
            raise
        return normalize(data)

    def set_protection(
        self, owner: str, repo: str, branch: str, submission: dict[str, Any]
    ) -> ProtectionApplied | ProtectionApplyError:
        try:
            self._gh_api(
                _protection_endpoint(owner, repo, branch),
                f"update protection of {owner}/{repo}:{branch}",
                method="PUT",
                body=submission,
            )
        except RuntimeError as e:
            logger.debug("Protection update failed for %s/%s:%s: %s", owner, repo, branch, e)
            return ProtectionApplyError(message=str(e))
        return ProtectionApplied()

    def list_external_checks(self, owner: str, repo: str) -> list[ExternalCheck]:
        """List workflows, returning an empty list when the call fails."""
        try:
            data = self._gh_api(
                f"/repos/{owner}/{repo}/actions/workflows?per_page={_PAGE_SIZE}",
                f"list workflows of {owner}/{repo}",
            )
        except RuntimeError as e:
            logger.warning("Could not list workflows of %s/%s: %s", owner, repo, e)
            return []
        return parse_workflows(data)

    def detect_local_repository(self, cwd: Path) -> LocalRepository | None:
        """Identify the checkout at cwd via ``gh repo view``."""
        try:
            result = run_subprocess_with_context(
                ["gh", "repo", "view", "--json", "owner,name,isPrivate,defaultBranchRef"],
                operation_context="detect the local repository",
                cwd=cwd,
                check=False,
                timeout=self._timeout,
            )
        except RuntimeError as e:
            logger.debug("Local repository detection failed: %s", e)
            return None

        if result.returncode != 0 or not result.stdout.strip():
            return None

        try:
            data = json.loads(result.stdout)
            return LocalRepository(
                owner=data["owner"]["login"],
                repo=data["name"],
                private=bool(data["isPrivate"]),
                default_branch=(data.get("defaultBranchRef") or {}).get("name") or "",
            )
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError):
            return None

    def _gh_api(
        self,
        endpoint: str,
        operation_context: str,
        *,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Run ``gh api`` and decode its JSON output.

        Returns:
            Decoded JSON, or None when the response body is empty

        Raises:
            RuntimeError: If gh fails, times out, is not installed, or prints invalid JSON
        """
        cmd = ["gh", "api", endpoint, "-H", "Accept: application/vnd.github+json"]
        if method != "GET":
            cmd.extend(["-X", method])
        stdin: str | None = None
        if body is not None:
            cmd.extend(["--input", "-"])
            stdin = json.dumps(body)

        logger.debug("gh api %s %s", method, endpoint)
        result = run_subprocess_with_context(
            cmd,
            operation_context=operation_context,
            timeout=self._timeout,
            input=stdin,
        )
        if not result.stdout.strip():
            return None
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Failed to {operation_context}: invalid JSON from gh: {e}") from e


def _protection_endpoint(owner: str, repo: str, branch: str) -> str:
    return f"/repos/{owner}/{repo}/branches/{quote(branch, safe='')}/protection"
