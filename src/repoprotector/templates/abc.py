"""Abstract base class for template persistence."""

from abc import ABC, abstractmethod

from repoprotector.core.protection import ProtectionConfig
from repoprotector.templates.types import Template


class TemplateStore(ABC):
    """Abstract interface for named protection templates.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def list_templates(self) -> list[Template]:
        """List stored templates sorted by name.

        Unreadable templates are skipped.
        """
        ...

    @abstractmethod
    def load(self, name: str) -> Template | None:
        """Load a template by name.

        Returns:
            Template, or None when it does not exist or cannot be read
        """
        ...

    @abstractmethod
    def save(
        self, name: str, protection: ProtectionConfig, description: str | None = None
    ) -> Template:
        """Create or update a template.

        An existing template keeps its created_at, and its description when
        description is None. updated_at is set to the current time.

        Raises:
            ValueError: If name is not a valid template name
            OSError: If the template cannot be written
        """
        ...

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Delete a template.

        Returns:
            True if the template existed and was deleted
        """
        ...
