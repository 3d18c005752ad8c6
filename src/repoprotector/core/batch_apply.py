"""Apply one proposed config to many (owner, repo, branch) targets."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from repoprotector.core.protection import ProtectionConfig
from repoprotector.github.types import ProtectionApplied, ProtectionApplyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApplyTarget:
    owner: str
    repo: str
    branch: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of applying the proposed config to one target.

    Attributes:
        owner: Repository owner login
        repo: Repository name
        branch: Branch the config was applied to
        success: Whether GitHub accepted the update
        error: Failure message, None on success
    """

    owner: str
    repo: str
    branch: str
    success: bool
    error: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class BatchSummary:
    total: int
    succeeded: int
    failed: int


ApplyOne = Callable[[str, str, str, ProtectionConfig], ProtectionApplied | ProtectionApplyError]


def apply_all(
    targets: Sequence[ApplyTarget],
    proposed: ProtectionConfig,
    apply_one: ApplyOne,
) -> list[ApplyResult]:
    """Apply proposed to every target, one at a time, in order.

    A failing target never stops the batch: an error result, or an exception
    raised by apply_one, is recorded as a failed ApplyResult and processing
    continues with the next target.

    Args:
        targets: Targets in the order they should be updated
        proposed: Config to apply
        apply_one: Applies the config to a single (owner, repo, branch)

    Returns:
        Exactly one result per target, in target order
    """
    results: list[ApplyResult] = []
    for target in targets:
        result = _apply_target(target, proposed, apply_one)
        if result.success:
            logger.debug("Applied protection to %s:%s", target.full_name, target.branch)
        else:
            logger.debug(
                "Failed to apply protection to %s:%s: %s",
                target.full_name,
                target.branch,
                result.error,
            )
        results.append(result)
    return results


def _apply_target(
    target: ApplyTarget, proposed: ProtectionConfig, apply_one: ApplyOne
) -> ApplyResult:
    try:
        outcome = apply_one(target.owner, target.repo, target.branch, proposed)
    # Error boundary: one target's failure must not abort the rest of the batch
    except Exception as e:
        return _failed(target, str(e) or type(e).__name__)

    if isinstance(outcome, ProtectionApplyError):
        return _failed(target, outcome.message)
    return ApplyResult(owner=target.owner, repo=target.repo, branch=target.branch, success=True)


def _failed(target: ApplyTarget, message: str) -> ApplyResult:
    return ApplyResult(
        owner=target.owner,
        repo=target.repo,
        branch=target.branch,
        success=False,
        error=message,
    )


def summarize(results: Sequence[ApplyResult]) -> BatchSummary:
    succeeded = sum(1 for result in results if result.success)
    return BatchSummary(total=len(results), succeeded=succeeded, failed=len(results) - succeeded)
