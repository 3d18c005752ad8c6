"""Template store keeping one JSON file per template."""

import json
import logging
from pathlib import Path

from repoprotector.core.protection import ProtectionConfig
from repoprotector.templates.abc import TemplateStore
from repoprotector.templates.types import (
    Template,
    build_saved_template,
    is_valid_template_name,
    template_from_record,
    template_to_record,
)
from repoprotector.time.abc import Time

logger = logging.getLogger(__name__)


class JsonTemplateStore(TemplateStore):
    """Stores each template as ``<templates_dir>/<name>.json``.

    The directory is created on first write. Files that cannot be read or
    parsed are logged and treated as absent.
    """

    def __init__(self, *, templates_dir: Path, time: Time) -> None:
        self._templates_dir = templates_dir
        self._time = time

    @property
    def templates_dir(self) -> Path:
        return self._templates_dir

    def list_templates(self) -> list[Template]:
        if not self._templates_dir.is_dir():
            return []

        templates: list[Template] = []
        for path in sorted(self._templates_dir.glob("*.json")):
            template = self._read(path)
            if template is not None:
                templates.append(template)
        return sorted(templates, key=lambda t: t.name)

    def load(self, name: str) -> Template | None:
        if not is_valid_template_name(name):
            return None
        path = self._path_for(name)
        if not path.exists():
            return None
        return self._read(path)

    def save(
        self, name: str, protection: ProtectionConfig, description: str | None = None
    ) -> Template:
        if not is_valid_template_name(name):
            raise ValueError(f"Invalid template name: {name!r}")

        template = build_saved_template(
            name=name,
            protection=protection,
            description=description,
            existing=self.load(name),
            now=self._time.now(),
        )
        self._templates_dir.mkdir(parents=True, exist_ok=True)
        content = json.dumps(template_to_record(template), indent=2)
        self._path_for(name).write_text(content + "\n", encoding="utf-8")
        logger.debug("Saved template %s to %s", name, self._path_for(name))
        return template

    def delete(self, name: str) -> bool:
        if not is_valid_template_name(name):
            return False
        path = self._path_for(name)
        if not path.exists():
            return False
        path.unlink()
        logger.debug("Deleted template %s", name)
        return True

    def _path_for(self, name: str) -> Path:
        return self._templates_dir / f"{name}.json"

    def _read(self, path: Path) -> Template | None:
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
            return template_from_record(record)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logger.warning("Skipping unreadable template %s: %s", path, e)
            return None
