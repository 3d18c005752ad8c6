"""Cursor over a list shown on one of the selection screens."""


class ListCursor:
    """Wrapping index into a list whose length can change between renders."""

    def __init__(self) -> None:
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    def move(self, direction: int, count: int) -> None:
        if count == 0:
            self._index = 0
            return
        self._index = (self._index + direction) % count

    def clamp(self, count: int) -> int:
        """Pull the index back inside a list of count items and return it."""
        self._index = max(0, min(self._index, count - 1))
        return self._index

    def reset(self) -> None:
        self._index = 0
