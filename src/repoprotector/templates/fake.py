"""Fake template store for testing."""

from repoprotector.core.protection import ProtectionConfig
from repoprotector.templates.abc import TemplateStore
from repoprotector.templates.types import Template, build_saved_template, is_valid_template_name
from repoprotector.time.abc import Time


class FakeTemplateStore(TemplateStore):
    """In-memory template store.

    Constructor Injection:
    ---------------------
    - templates: Initially stored templates
    - time: Clock used for created_at/updated_at
    - save_error: Message of an OSError raised by every save() call

    Mutation Tracking:
    -----------------
    - saved_names: Name per successful save() call
    - deleted_names: Name per delete() call that removed a template
    """

    def __init__(
        self,
        *,
        time: Time,
        templates: list[Template] | None = None,
        save_error: str | None = None,
    ) -> None:
        self._time = time
        self._templates = {t.name: t for t in templates} if templates is not None else {}
        self._save_error = save_error
        self._saved_names: list[str] = []
        self._deleted_names: list[str] = []

    def list_templates(self) -> list[Template]:
        return [self._templates[name] for name in sorted(self._templates)]

    def load(self, name: str) -> Template | None:
        return self._templates.get(name)

    def save(
        self, name: str, protection: ProtectionConfig, description: str | None = None
    ) -> Template:
        if not is_valid_template_name(name):
            raise ValueError(f"Invalid template name: {name!r}")
        if self._save_error is not None:
            raise OSError(self._save_error)

        template = build_saved_template(
            name=name,
            protection=protection,
            description=description,
            existing=self._templates.get(name),
            now=self._time.now(),
        )
        self._templates[name] = template
        self._saved_names.append(name)
        return template

    def delete(self, name: str) -> bool:
        if name not in self._templates:
            return False
        del self._templates[name]
        self._deleted_names.append(name)
        return True

    @property
    def saved_names(self) -> list[str]:
        return list(self._saved_names)

    @property
    def deleted_names(self) -> list[str]:
        return list(self._deleted_names)
