"""Types returned by the GitHub protection gateway."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Organization:
    """A GitHub organization the authenticated user belongs to."""

    login: str
    id: int
    avatar_url: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class RepositoryPermissions:
    """The authenticated user's permissions on a repository."""

    admin: bool
    maintain: bool
    push: bool
    pull: bool


@dataclass(frozen=True)
class Repository:
    """Snapshot of a repository as listed by GitHub.

    Attributes:
        owner: Owner login (organization or user)
        name: Repository name
        full_name: "owner/name"
        private: Whether the repository is private
        default_branch: Name of the default branch
        permissions: Caller's permissions, None when GitHub did not report them
    """

    owner: str
    name: str
    full_name: str
    private: bool
    default_branch: str
    permissions: RepositoryPermissions | None = None


@dataclass(frozen=True)
class Branch:
    """A branch name and whether GitHub reports it as protected."""

    name: str
    protected: bool


@dataclass(frozen=True)
class ExternalCheck:
    """A GitHub Actions workflow offered as a required status check.

    Attributes:
        name: Workflow name, used as the status check context
        path: Workflow file path (e.g., ".github/workflows/ci.yml")
        state: Workflow state reported by GitHub (e.g., "active")
    """

    name: str
    path: str
    state: str = "active"


@dataclass(frozen=True)
class LocalRepository:
    """The repository checked out in the working directory.

    Attributes:
        owner: Owner login
        repo: Repository name
        private: Whether the repository is private
        default_branch: Name of the default branch, empty for a repository with no commits
    """

    owner: str
    repo: str
    private: bool
    default_branch: str


@dataclass(frozen=True)
class ProtectionApplied:
    """Success result from updating branch protection."""


@dataclass(frozen=True)
class ProtectionApplyError:
    """Error result from updating branch protection. Implements NonIdealState."""

    message: str

    @property
    def error_type(self) -> str:
        return "protection-apply-failed"
