"""Template type and its on-disk record form.

A template record on disk looks like::

    {
      "name": "basic",
      "description": "Basic protection: requires 1 PR approval",
      "created_at": "2024-01-01T00:00:00+00:00",
      "updated_at": "2024-01-01T00:00:00+00:00",
      "protection": { ...submission shape... }
    }

``description`` is omitted when the template has none.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from repoprotector.core.protection import ProtectionConfig, as_proposed, normalize, to_submission

# File-name safe; a leading dot would produce a hidden or parent-relative path.
_TEMPLATE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$")


@dataclass(frozen=True)
class Template:
    """A named, persisted proposed config.

    Attributes:
        name: Unique key of the template
        description: Free-form description, None when not given
        created_at: Time of the first save; never changes afterwards
        updated_at: Time of the latest save
        protection: Proposed config; never carries live-only fields
    """

    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime
    protection: ProtectionConfig


def is_valid_template_name(name: str) -> bool:
    return bool(_TEMPLATE_NAME_PATTERN.match(name))


def build_saved_template(
    *,
    name: str,
    protection: ProtectionConfig,
    description: str | None,
    existing: Template | None,
    now: datetime,
) -> Template:
    """Build the template written by a save.

    The creation time and, when no new description is given, the description
    of an existing template with the same name are preserved.
    """
    return Template(
        name=name,
        description=description or (existing.description if existing is not None else None),
        created_at=existing.created_at if existing is not None else now,
        updated_at=now,
        protection=as_proposed(protection),
    )


def template_to_record(template: Template) -> dict[str, Any]:
    record: dict[str, Any] = {"name": template.name}
    if template.description:
        record["description"] = template.description
    record["created_at"] = template.created_at.isoformat()
    record["updated_at"] = template.updated_at.isoformat()
    record["protection"] = to_submission(template.protection)
    return record


def template_from_record(record: Any) -> Template:
    """Parse a template record.

    Raises:
        ValueError: If the record is not a mapping, or its name or timestamps are missing
            or malformed
    """
    if not isinstance(record, Mapping):
        raise ValueError("Template record must be a JSON object")

    name = record.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError("Template record has no name")

    description = record.get("description")
    return Template(
        name=name,
        description=description if isinstance(description, str) and description else None,
        created_at=_parse_timestamp(record.get("created_at"), "created_at"),
        updated_at=_parse_timestamp(record.get("updated_at"), "updated_at"),
        protection=as_proposed(normalize(record.get("protection"))),
    )


def _parse_timestamp(value: Any, field: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"Template record has no {field}")
    # fromisoformat() accepts the trailing "Z" written by other tools on 3.11+
    return datetime.fromisoformat(value)
