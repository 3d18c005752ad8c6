"""Fake Time implementation for testing."""

from datetime import UTC, datetime, timedelta

from repoprotector.time.abc import Time


class FakeTime(Time):
    """In-memory clock that only moves when a test advances it.

    The starting instant is provided via constructor; advance() is the only
    way to move the clock forward.
    """

    def __init__(self, *, current: datetime | None = None) -> None:
        """Create FakeTime pinned at a fixed instant.

        Args:
            current: Starting time (default: 2024-01-01T00:00:00Z)
        """
        self._current = current if current is not None else datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: float) -> None:
        """Move the clock forward.

        Args:
            seconds: Number of seconds to advance
        """
        self._current = self._current + timedelta(seconds=seconds)
