"""Difference between a live and a proposed protection config.

The diff is computed over the top-level keys of the record form of each
config (see ``protection.to_record``): a key is "present" when the config
has a value for it, so a disabled substructure counts as absent.
"""

import json
from dataclasses import dataclass
from typing import Any

from repoprotector.core.protection import ProtectionConfig, to_record, to_submission

# Lists whose order carries no meaning; compared as sets.
SET_LIKE_KEYS = frozenset({"contexts", "checks", "users", "teams", "apps"})

# Keys never reported in a diff.
IGNORED_KEYS = frozenset({"url"})

MAX_PREVIEW_DEPTH = 4
MAX_PREVIEW_LINES = 40


@dataclass(frozen=True)
class ProtectionDiff:
    """Top-level keys that a proposed config adds, removes or changes.

    Each tuple follows the key order of the records being compared, live keys
    first.
    """

    added: tuple[str, ...]
    removed: tuple[str, ...]
    changed: tuple[str, ...]

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed)


NO_CHANGES = ProtectionDiff(added=(), removed=(), changed=())


def compute_diff(
    live: ProtectionConfig | None, proposed: ProtectionConfig | None
) -> ProtectionDiff:
    """Compare a live config against a proposed one.

    Args:
        live: Config currently enforced on GitHub, None when the branch is unprotected
        proposed: Config about to be applied, None when nothing has been edited yet

    Returns:
        ProtectionDiff; empty when proposed is None
    """
    if proposed is None:
        return NO_CHANGES

    live_record = to_record(live) if live is not None else {}
    proposed_record = to_record(proposed)

    keys: list[str] = list(live_record)
    keys.extend(key for key in proposed_record if key not in live_record)

    added: list[str] = []
    removed: list[str] = []
    changed: list[str] = []
    for key in keys:
        if key in IGNORED_KEYS:
            continue
        in_live = key in live_record
        in_proposed = key in proposed_record
        if in_proposed and not in_live:
            added.append(key)
        elif in_live and not in_proposed:
            removed.append(key)
        elif _canonical(live_record[key]) != _canonical(proposed_record[key]):
            changed.append(key)

    return ProtectionDiff(added=tuple(added), removed=tuple(removed), changed=tuple(changed))


def _canonical(value: Any, key: str | None = None) -> Any:
    """Return a comparable form of a record value.

    Set-like lists are sorted so that reordering them is not a change.
    """
    if isinstance(value, dict):
        return {k: _canonical(v, k) for k, v in value.items()}
    if isinstance(value, list):
        items = [_canonical(item) for item in value]
        if key in SET_LIKE_KEYS:
            return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))
        return items
    return value


def format_diff_summary(diff: ProtectionDiff) -> list[str]:
    """Render the added/removed/changed keys as one line each."""
    lines: list[str] = []
    if diff.added:
        lines.append(f"+ Added: {', '.join(diff.added)}")
    if diff.removed:
        lines.append(f"- Removed: {', '.join(diff.removed)}")
    if diff.changed:
        lines.append(f"~ Changed: {', '.join(diff.changed)}")
    if not lines:
        lines.append("No changes detected")
    return lines


def format_value(value: Any, *, depth: int = 0, max_depth: int = MAX_PREVIEW_DEPTH) -> list[str]:
    """Pretty-print a JSON-like value as indented ``key: value`` lines.

    Containers nested deeper than max_depth collapse to ``{...}`` / ``[...]``.

    Args:
        value: Value to render
        depth: Current nesting depth
        max_depth: Depth at which containers are collapsed

    Returns:
        Rendered lines without trailing newlines
    """
    indent = "  " * depth

    if isinstance(value, dict):
        if not value:
            return [f"{indent}{{}}"]
        lines: list[str] = []
        for key, item in value.items():
            if isinstance(item, (dict, list)) and item:
                if depth + 1 > max_depth:
                    collapsed = "{...}" if isinstance(item, dict) else "[...]"
                    lines.append(f"{indent}{key}: {collapsed}")
                    continue
                lines.append(f"{indent}{key}:")
                lines.extend(format_value(item, depth=depth + 1, max_depth=max_depth))
            else:
                lines.append(f"{indent}{key}: {_format_scalar(item)}")
        return lines

    if isinstance(value, list):
        if not value:
            return [f"{indent}[]"]
        lines = []
        for item in value:
            if isinstance(item, (dict, list)) and item:
                if depth + 1 > max_depth:
                    lines.append(f"{indent}- ...")
                    continue
                nested = format_value(item, depth=depth + 1, max_depth=max_depth)
                lines.append(f"{indent}- {nested[0].lstrip()}")
                lines.extend(nested[1:])
            else:
                lines.append(f"{indent}- {_format_scalar(item)}")
        return lines

    return [f"{indent}{_format_scalar(value)}"]


def _format_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (dict, list)):
        return "{}" if isinstance(value, dict) else "[]"
    return str(value)


def render_proposed(config: ProtectionConfig, *, max_lines: int = MAX_PREVIEW_LINES) -> list[str]:
    """Render the full submission record of a proposed config for review.

    Args:
        config: Proposed config
        max_lines: Lines kept before the rest is summarized

    Returns:
        Rendered lines, truncated with a trailing ``... (N more lines)`` marker
    """
    lines = format_value(to_submission(config))
    if len(lines) <= max_lines:
        return lines
    hidden = len(lines) - max_lines
    return [*lines[:max_lines], f"... ({hidden} more lines)"]
