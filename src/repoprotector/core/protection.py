"""Branch protection configuration model.

ProtectionConfig is the central value of the application: the live settings
fetched from GitHub and the proposed settings produced by the editor are both
ProtectionConfig instances. Nested settings that can be switched off entirely
(pull request reviews, status checks, push restrictions) are modelled as
``X | None`` where None means "disabled".

Two conversions sit at the edges:

- normalize(): loosely typed record (GitHub API response or stored template)
  -> ProtectionConfig. Never raises.
- to_submission(): ProtectionConfig -> record accepted by
  ``PUT /repos/{owner}/{repo}/branches/{branch}/protection``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

DEFAULT_APPROVING_REVIEW_COUNT = 1

# Boolean flags in editor/display order, with the value used when a record omits them.
BOOLEAN_FLAG_DEFAULTS: dict[str, bool] = {
    "enforce_admins": False,
    "required_linear_history": False,
    "allow_force_pushes": False,
    "allow_deletions": False,
    "block_creations": False,
    "required_conversation_resolution": True,
}

BOOLEAN_FLAGS: tuple[str, ...] = tuple(BOOLEAN_FLAG_DEFAULTS)

# Keys that only ever appear on a config fetched from GitHub.
LIVE_ONLY_KEYS: tuple[str, ...] = ("url", "required_signatures", "lock_branch")


@dataclass(frozen=True)
class ActorAllowlist:
    """Users, teams and apps allowed to perform a restricted action."""

    users: tuple[str, ...]
    teams: tuple[str, ...]
    apps: tuple[str, ...]


@dataclass(frozen=True)
class PullRequestReviews:
    """Required pull request review settings.

    Attributes:
        dismiss_stale_reviews: Dismiss approvals when new commits are pushed
        require_code_owner_reviews: Require an approval from a code owner
        required_approving_review_count: Approvals required; 0 disables the requirement
        dismissal_restrictions: Who may dismiss reviews, None when unrestricted
        bypass_pull_request_allowances: Who may bypass the requirement, None when nobody
    """

    dismiss_stale_reviews: bool
    require_code_owner_reviews: bool
    required_approving_review_count: int
    dismissal_restrictions: ActorAllowlist | None = None
    bypass_pull_request_allowances: ActorAllowlist | None = None


@dataclass(frozen=True)
class StatusCheckDescriptor:
    """A required check pinned to the app that reports it."""

    context: str
    app_id: int | None


@dataclass(frozen=True)
class StatusChecks:
    """Required status check settings.

    Attributes:
        strict: Require branches to be up to date before merging
        contexts: Required check names, in order, without duplicates
        checks: App-pinned check descriptors reported by GitHub, None when not known
    """

    strict: bool
    contexts: tuple[str, ...]
    checks: tuple[StatusCheckDescriptor, ...] | None = None


@dataclass(frozen=True)
class ProtectionConfig:
    """Branch protection settings, either live or proposed.

    ``url``, ``required_signatures`` and ``lock_branch`` are read-only values
    reported by GitHub. They are None on every proposed config.
    """

    pull_request_reviews: PullRequestReviews | None
    status_checks: StatusChecks | None
    enforce_admins: bool
    required_linear_history: bool
    allow_force_pushes: bool
    allow_deletions: bool
    block_creations: bool
    required_conversation_resolution: bool
    restrictions: ActorAllowlist | None
    url: str | None = None
    required_signatures: bool | None = None
    lock_branch: bool | None = None

    @property
    def is_live(self) -> bool:
        """True when any read-only field reported by GitHub is present."""
        return any(getattr(self, key) is not None for key in LIVE_ONLY_KEYS)


def default_pull_request_reviews() -> PullRequestReviews:
    """Settings installed when pull request reviews are switched on."""
    return PullRequestReviews(
        dismiss_stale_reviews=False,
        require_code_owner_reviews=False,
        required_approving_review_count=DEFAULT_APPROVING_REVIEW_COUNT,
    )


def default_status_checks() -> StatusChecks:
    """Settings installed when status checks are switched on."""
    return StatusChecks(strict=False, contexts=())


def default_protection() -> ProtectionConfig:
    """Config the editor starts from when a branch has no protection."""
    return ProtectionConfig(
        pull_request_reviews=default_pull_request_reviews(),
        status_checks=None,
        restrictions=None,
        **BOOLEAN_FLAG_DEFAULTS,
    )


def as_proposed(config: ProtectionConfig) -> ProtectionConfig:
    """Drop the read-only live fields so the config can be submitted."""
    return replace(config, url=None, required_signatures=None, lock_branch=None)


def unique_in_order(values: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Collapse exact duplicates, keeping the first occurrence of each value."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return tuple(result)


# ---------------------------------------------------------------------------
# normalize
# ---------------------------------------------------------------------------


def normalize(raw: Mapping[str, Any] | None) -> ProtectionConfig:
    """Build a ProtectionConfig from a loosely typed record.

    Accepts both the GitHub API response shape, where flags are wrapped as
    ``{"enabled": bool, "url": ...}`` and allowlists hold user/team objects,
    and the flat submission shape stored in templates.

    Missing flags take their documented default. Flag values that are neither
    a bool nor an ``{"enabled": bool}`` wrapper become False. Absent or
    malformed substructures become None.

    Args:
        raw: Record to normalize; None or a non-mapping is treated as empty

    Returns:
        Normalized ProtectionConfig
    """
    if not isinstance(raw, Mapping):
        raw = {}

    flags = {
        key: _coerce_flag(raw.get(key), default) for key, default in BOOLEAN_FLAG_DEFAULTS.items()
    }

    url = raw.get("url")
    return ProtectionConfig(
        pull_request_reviews=_normalize_reviews(raw.get("required_pull_request_reviews")),
        status_checks=_normalize_status_checks(raw.get("required_status_checks")),
        restrictions=_normalize_allowlist(raw.get("restrictions")),
        url=url if isinstance(url, str) else None,
        required_signatures=_coerce_optional_flag(raw.get("required_signatures")),
        lock_branch=_coerce_optional_flag(raw.get("lock_branch")),
        **flags,
    )


def _coerce_flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, Mapping):
        enabled = value.get("enabled")
        return enabled if isinstance(enabled, bool) else False
    return False


def _coerce_optional_flag(value: Any) -> bool | None:
    if value is None:
        return None
    return _coerce_flag(value, False)


def _normalize_reviews(value: Any) -> PullRequestReviews | None:
    if not isinstance(value, Mapping):
        return None

    count = value.get("required_approving_review_count")
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        count = DEFAULT_APPROVING_REVIEW_COUNT

    return PullRequestReviews(
        dismiss_stale_reviews=_coerce_flag(value.get("dismiss_stale_reviews"), False),
        require_code_owner_reviews=_coerce_flag(value.get("require_code_owner_reviews"), False),
        required_approving_review_count=count,
        dismissal_restrictions=_normalize_allowlist(value.get("dismissal_restrictions")),
        bypass_pull_request_allowances=_normalize_allowlist(
            value.get("bypass_pull_request_allowances")
        ),
    )


def _normalize_status_checks(value: Any) -> StatusChecks | None:
    if not isinstance(value, Mapping):
        return None

    contexts_raw = value.get("contexts")
    contexts: list[str] = []
    if isinstance(contexts_raw, list):
        contexts = [item for item in contexts_raw if isinstance(item, str) and item]

    checks: tuple[StatusCheckDescriptor, ...] | None = None
    checks_raw = value.get("checks")
    if isinstance(checks_raw, list):
        descriptors: list[StatusCheckDescriptor] = []
        for item in checks_raw:
            if not isinstance(item, Mapping) or not isinstance(item.get("context"), str):
                continue
            app_id = item.get("app_id")
            if isinstance(app_id, bool) or not isinstance(app_id, int):
                app_id = None
            descriptors.append(StatusCheckDescriptor(context=item["context"], app_id=app_id))
        checks = tuple(descriptors)

    return StatusChecks(
        strict=_coerce_flag(value.get("strict"), False),
        contexts=unique_in_order(contexts),
        checks=checks,
    )


def _normalize_allowlist(value: Any) -> ActorAllowlist | None:
    if not isinstance(value, Mapping):
        return None
    return ActorAllowlist(
        users=_actor_names(value.get("users"), "login"),
        teams=_actor_names(value.get("teams"), "slug"),
        apps=_actor_names(value.get("apps"), "slug"),
    )


def _actor_names(value: Any, name_key: str) -> tuple[str, ...]:
    """Extract actor names from plain strings or GitHub user/team/app objects."""
    if not isinstance(value, list):
        return ()
    names: list[str] = []
    for item in value:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, Mapping) and isinstance(item.get(name_key), str):
            names.append(item[name_key])
    return unique_in_order(names)


# ---------------------------------------------------------------------------
# records
# ---------------------------------------------------------------------------


def to_submission(config: ProtectionConfig) -> dict[str, Any]:
    """Convert a config to the request body of the update-protection endpoint.

    Read-only live fields are dropped. Disabled substructures are sent as an
    explicit null so GitHub removes them rather than leaving them untouched.

    Args:
        config: Live or proposed config

    Returns:
        JSON-serializable submission record
    """
    record: dict[str, Any] = {
        "required_pull_request_reviews": _reviews_record(config.pull_request_reviews),
        "required_status_checks": _status_checks_record(config.status_checks),
        "restrictions": _allowlist_record(config.restrictions),
    }
    for key in BOOLEAN_FLAGS:
        record[key] = getattr(config, key)
    return record


def to_record(config: ProtectionConfig) -> dict[str, Any]:
    """Convert a config to a record holding only the keys that are present.

    Disabled substructures and unset live-only fields are omitted, which makes
    this the shape the diff engine compares.
    """
    record: dict[str, Any] = {}
    if config.url is not None:
        record["url"] = config.url
    for key, value in to_submission(config).items():
        if value is not None:
            record[key] = value
    if config.required_signatures is not None:
        record["required_signatures"] = config.required_signatures
    if config.lock_branch is not None:
        record["lock_branch"] = config.lock_branch
    return record


def _reviews_record(reviews: PullRequestReviews | None) -> dict[str, Any] | None:
    if reviews is None:
        return None
    record: dict[str, Any] = {
        "dismiss_stale_reviews": reviews.dismiss_stale_reviews,
        "require_code_owner_reviews": reviews.require_code_owner_reviews,
        "required_approving_review_count": reviews.required_approving_review_count,
    }
    if reviews.dismissal_restrictions is not None:
        record["dismissal_restrictions"] = _allowlist_record(reviews.dismissal_restrictions)
    if reviews.bypass_pull_request_allowances is not None:
        record["bypass_pull_request_allowances"] = _allowlist_record(
            reviews.bypass_pull_request_allowances
        )
    return record


def _status_checks_record(checks: StatusChecks | None) -> dict[str, Any] | None:
    if checks is None:
        return None
    record: dict[str, Any] = {"strict": checks.strict, "contexts": list(checks.contexts)}
    if checks.checks is not None:
        record["checks"] = [
            {"context": check.context, "app_id": check.app_id} for check in checks.checks
        ]
    return record


def _allowlist_record(allowlist: ActorAllowlist | None) -> dict[str, list[str]] | None:
    if allowlist is None:
        return None
    return {
        "users": list(allowlist.users),
        "teams": list(allowlist.teams),
        "apps": list(allowlist.apps),
    }
