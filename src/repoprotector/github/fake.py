"""Fake implementation of GitHub protection operations for testing."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from repoprotector.core.protection import ProtectionConfig, normalize
from repoprotector.github.abc import GitHubProtectionGateway
from repoprotector.github.types import (
    Branch,
    ExternalCheck,
    LocalRepository,
    Organization,
    ProtectionApplied,
    ProtectionApplyError,
    Repository,
)


@dataclass(frozen=True)
class ProtectionUpdate:
    """A recorded set_protection() call."""

    owner: str
    repo: str
    branch: str
    submission: dict[str, Any]


class FakeGitHubProtectionGateway(GitHubProtectionGateway):
    """In-memory fake implementation of GitHub protection operations.

    This fake accepts pre-configured state in its constructor and tracks
    mutations for test assertions.

    Constructor Injection:
    ---------------------
    - organizations: Organizations returned by list_organizations()
    - repositories: Mapping of org -> repositories
    - branches: Mapping of (owner, repo) -> branches
    - protections: Mapping of (owner, repo, branch) -> live config; missing means unprotected
    - external_checks: Mapping of (owner, repo) -> workflows
    - local_repository: Result of detect_local_repository()
    - fetch_errors: Mapping of method name -> message raised as RuntimeError by that method
    - apply_errors: Mapping of (owner, repo, branch) -> message returned as ProtectionApplyError

    Mutation Tracking:
    -----------------
    - protection_updates: ProtectionUpdate per set_protection() call, failed ones included
    - protection_requests: (owner, repo, branch) per get_protection() call
    - branch_requests: (owner, repo) per list_branches() call
    - repository_requests: org per list_repositories() call

    A successful set_protection() also replaces the stored live config, so a
    later get_protection() observes the write.
    """

    def __init__(
        self,
        *,
        organizations: list[Organization] | None = None,
        repositories: dict[str, list[Repository]] | None = None,
        branches: dict[tuple[str, str], list[Branch]] | None = None,
        protections: dict[tuple[str, str, str], ProtectionConfig] | None = None,
        external_checks: dict[tuple[str, str], list[ExternalCheck]] | None = None,
        local_repository: LocalRepository | None = None,
        fetch_errors: dict[str, str] | None = None,
        apply_errors: dict[tuple[str, str, str], str] | None = None,
    ) -> None:
        self._organizations = organizations if organizations is not None else []
        self._repositories = repositories if repositories is not None else {}
        self._branches = branches if branches is not None else {}
        self._protections = dict(protections) if protections is not None else {}
        self._external_checks = external_checks if external_checks is not None else {}
        self._local_repository = local_repository
        self._fetch_errors = fetch_errors if fetch_errors is not None else {}
        self._apply_errors = apply_errors if apply_errors is not None else {}

        self._protection_updates: list[ProtectionUpdate] = []
        self._protection_requests: list[tuple[str, str, str]] = []
        self._branch_requests: list[tuple[str, str]] = []
        self._repository_requests: list[str] = []

    def list_organizations(self) -> list[Organization]:
        self._raise_if_configured("list_organizations")
        return list(self._organizations)

    def list_repositories(self, org: str) -> list[Repository]:
        self._repository_requests.append(org)
        self._raise_if_configured("list_repositories")
        return list(self._repositories.get(org, []))

    def list_branches(self, owner: str, repo: str) -> list[Branch]:
        self._branch_requests.append((owner, repo))
        self._raise_if_configured("list_branches")
        return list(self._branches.get((owner, repo), []))

    def get_protection(self, owner: str, repo: str, branch: str) -> ProtectionConfig | None:
        self._protection_requests.append((owner, repo, branch))
        self._raise_if_configured("get_protection")
        return self._protections.get((owner, repo, branch))

    def set_protection(
        self, owner: str, repo: str, branch: str, submission: dict[str, Any]
    ) -> ProtectionApplied | ProtectionApplyError:
        self._protection_updates.append(
            ProtectionUpdate(owner=owner, repo=repo, branch=branch, submission=submission)
        )
        message = self._apply_errors.get((owner, repo, branch))
        if message is not None:
            return ProtectionApplyError(message=message)
        self._protections[(owner, repo, branch)] = normalize(submission)
        return ProtectionApplied()

    def list_external_checks(self, owner: str, repo: str) -> list[ExternalCheck]:
        if "list_external_checks" in self._fetch_errors:
            return []
        return list(self._external_checks.get((owner, repo), []))

    def detect_local_repository(self, cwd: Path) -> LocalRepository | None:
        return self._local_repository

    def _raise_if_configured(self, method: str) -> None:
        message = self._fetch_errors.get(method)
        if message is not None:
            raise RuntimeError(message)

    @property
    def protection_updates(self) -> list[ProtectionUpdate]:
        """Recorded set_protection() calls.

        This property is for test assertions only.
        """
        return list(self._protection_updates)

    @property
    def protection_requests(self) -> list[tuple[str, str, str]]:
        return list(self._protection_requests)

    @property
    def branch_requests(self) -> list[tuple[str, str]]:
        return list(self._branch_requests)

    @property
    def repository_requests(self) -> list[str]:
        return list(self._repository_requests)
