"""Parsing of gh api JSON payloads into gateway types.

Entries missing required fields are skipped rather than failing the whole
listing.
"""

from typing import Any

from repoprotector.github.types import (
    Branch,
    ExternalCheck,
    Organization,
    Repository,
    RepositoryPermissions,
)


def parse_organizations(data: Any) -> list[Organization]:
    """Parse the ``/user/orgs`` payload."""
    if not isinstance(data, list):
        return []
    orgs: list[Organization] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        login = item.get("login")
        org_id = item.get("id")
        if not isinstance(login, str) or not isinstance(org_id, int):
            continue
        orgs.append(
            Organization(
                login=login,
                id=org_id,
                avatar_url=item.get("avatar_url"),
                description=item.get("description"),
            )
        )
    return orgs


def parse_repositories(data: Any) -> list[Repository]:
    """Parse the ``/orgs/{org}/repos`` payload."""
    if not isinstance(data, list):
        return []
    repos: list[Repository] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        owner = item.get("owner")
        if not isinstance(name, str) or not isinstance(owner, dict):
            continue
        owner_login = owner.get("login")
        if not isinstance(owner_login, str):
            continue
        repos.append(
            Repository(
                owner=owner_login,
                name=name,
                full_name=item.get("full_name") or f"{owner_login}/{name}",
                private=bool(item.get("private", False)),
                default_branch=item.get("default_branch") or "main",
                permissions=_parse_permissions(item.get("permissions")),
            )
        )
    return repos


def _parse_permissions(data: Any) -> RepositoryPermissions | None:
    if not isinstance(data, dict):
        return None
    return RepositoryPermissions(
        admin=bool(data.get("admin", False)),
        maintain=bool(data.get("maintain", False)),
        push=bool(data.get("push", False)),
        pull=bool(data.get("pull", False)),
    )


def parse_branches(data: Any) -> list[Branch]:
    """Parse the ``/repos/{owner}/{repo}/branches`` payload."""
    if not isinstance(data, list):
        return []
    return [
        Branch(name=item["name"], protected=bool(item.get("protected", False)))
        for item in data
        if isinstance(item, dict) and isinstance(item.get("name"), str)
    ]


def parse_workflows(data: Any) -> list[ExternalCheck]:
    """Parse the ``/repos/{owner}/{repo}/actions/workflows`` payload."""
    if not isinstance(data, dict):
        return []
    workflows = data.get("workflows")
    if not isinstance(workflows, list):
        return []
    checks: list[ExternalCheck] = []
    for item in workflows:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            continue
        checks.append(
            ExternalCheck(
                name=item["name"],
                path=item.get("path") or "",
                state=item.get("state") or "active",
            )
        )
    return checks


def is_not_found_error(stderr: str) -> bool:
    """Whether gh's stderr reports that the resource (or its protection) does not exist.

    Only stderr is inspected; the command line can contain "404" in repository
    or branch names.
    """
    return "(HTTP 404)" in stderr or "Branch not protected" in stderr
