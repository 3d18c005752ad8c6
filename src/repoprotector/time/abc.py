"""Clock abstraction for testing.

Template timestamps and generated template names read the clock through
this ABC so tests can pin and advance time without sleeping.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...
