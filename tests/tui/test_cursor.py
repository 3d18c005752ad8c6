"""Tests for ListCursor."""

from repoprotector.tui.cursor import ListCursor


def test_move_wraps() -> None:
    cursor = ListCursor()

    cursor.move(-1, 3)
    assert cursor.index == 2

    cursor.move(1, 3)
    assert cursor.index == 0


def test_empty_list_pins_to_zero() -> None:
    cursor = ListCursor()

    cursor.move(1, 0)

    assert cursor.index == 0
    assert cursor.clamp(0) == 0


def test_clamp_after_list_shrinks() -> None:
    cursor = ListCursor()
    cursor.move(4, 5)

    assert cursor.clamp(2) == 1
    assert cursor.index == 1

    cursor.reset()
    assert cursor.index == 0
