"""Abstract base class for GitHub branch protection operations."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from repoprotector.core.protection import ProtectionConfig
from repoprotector.github.types import (
    Branch,
    ExternalCheck,
    LocalRepository,
    Organization,
    ProtectionApplied,
    ProtectionApplyError,
    Repository,
)


class GitHubProtectionGateway(ABC):
    """Abstract interface for the GitHub reads and writes the editor needs.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def list_organizations(self) -> list[Organization]:
        """List organizations the authenticated user belongs to.

        Raises:
            RuntimeError: If the request fails
        """
        ...

    @abstractmethod
    def list_repositories(self, org: str) -> list[Repository]:
        """List repositories of an organization.

        Args:
            org: Organization login

        Raises:
            RuntimeError: If the request fails
        """
        ...

    @abstractmethod
    def list_branches(self, owner: str, repo: str) -> list[Branch]:
        """List branches of a repository with their protected flag.

        Raises:
            RuntimeError: If the request fails
        """
        ...

    @abstractmethod
    def get_protection(self, owner: str, repo: str, branch: str) -> ProtectionConfig | None:
        """Fetch the live protection config of a branch.

        Returns:
            Normalized live config, or None when the branch is not protected

        Raises:
            RuntimeError: If the request fails for any other reason
        """
        ...

    @abstractmethod
    def set_protection(
        self, owner: str, repo: str, branch: str, submission: dict[str, Any]
    ) -> ProtectionApplied | ProtectionApplyError:
        """Replace the protection of a branch.

        Args:
            owner: Repository owner login
            repo: Repository name
            branch: Branch name
            submission: Request body produced by ``protection.to_submission``

        Returns:
            ProtectionApplied on success, ProtectionApplyError with the failure message otherwise
        """
        ...

    @abstractmethod
    def list_external_checks(self, owner: str, repo: str) -> list[ExternalCheck]:
        """List workflows that can be required as status checks.

        Best effort: returns an empty list on any failure, never raises.
        """
        ...

    @abstractmethod
    def detect_local_repository(self, cwd: Path) -> LocalRepository | None:
        """Identify the GitHub repository checked out at cwd.

        Returns:
            LocalRepository, or None when cwd is not a GitHub checkout or gh is unavailable
        """
        ...
