"""Built-in templates installed into an empty store."""

import logging
from dataclasses import dataclass

from repoprotector.core.protection import (
    ProtectionConfig,
    PullRequestReviews,
    StatusChecks,
    default_protection,
)
from repoprotector.templates.abc import TemplateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefaultTemplate:
    name: str
    description: str
    protection: ProtectionConfig


def default_templates() -> list[DefaultTemplate]:
    base = default_protection()
    return [
        DefaultTemplate(
            name="basic",
            description="Basic protection: requires 1 PR approval",
            protection=base,
        ),
        DefaultTemplate(
            name="strict",
            description=(
                "Strict protection: 2 approvals, code owners, status checks, admin enforcement"
            ),
            protection=ProtectionConfig(
                pull_request_reviews=PullRequestReviews(
                    dismiss_stale_reviews=True,
                    require_code_owner_reviews=True,
                    required_approving_review_count=2,
                ),
                status_checks=StatusChecks(strict=True, contexts=()),
                enforce_admins=True,
                required_linear_history=True,
                allow_force_pushes=False,
                allow_deletions=False,
                block_creations=False,
                required_conversation_resolution=True,
                restrictions=None,
            ),
        ),
        DefaultTemplate(
            name="unprotected",
            description="Unprotected: allows force pushes, no PR required",
            protection=ProtectionConfig(
                pull_request_reviews=None,
                status_checks=None,
                enforce_admins=False,
                required_linear_history=False,
                allow_force_pushes=True,
                allow_deletions=False,
                block_creations=False,
                required_conversation_resolution=False,
                restrictions=None,
            ),
        ),
    ]


def install_default_templates(store: TemplateStore) -> list[str]:
    """Save every built-in template that the store does not already hold.

    Returns:
        Names of the templates that were installed
    """
    installed: list[str] = []
    for template in default_templates():
        if store.load(template.name) is not None:
            continue
        store.save(template.name, template.protection, template.description)
        installed.append(template.name)
    if installed:
        logger.debug("Installed default templates: %s", ", ".join(installed))
    return installed
