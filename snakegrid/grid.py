"""Cell grid of the snake map: slot flags, coordinate conversion and snapshots."""

from __future__ import annotations

import enum
import math

from snakegrid.components import (
    Position,
    SnakeApple,
    SnakeBoundary2D,
    SnakePart,
    SnakePartHead,
)
from snakegrid.ecs import Registry

__all__ = ["MapSlotState", "index_from_pos", "pos_from_index", "get_map", "format_map"]


class MapSlotState(enum.IntFlag):
    """What occupies a map cell; several flags may be set at once."""

    EMPTY = 0b0000
    SNAKE_HEAD = 0b0001
    SNAKE_BODY = 0b0010
    APPLE = 0b0100


GridMap = list[list[MapSlotState]]


def index_from_pos(pos: Position, size_y: int) -> tuple[int, int]:
    """Return the ``(column, row)`` cell holding a position.

    A coordinate in ``[n, n + 1)`` falls in cell ``n``. Rows are counted from
    the top, while ``pos.y`` grows upwards. A map one row high always maps to
    row 0.
    """
    x = math.floor(pos.x)
    if size_y == 1:
        return x, 0
    return x, size_y - math.floor(pos.y) - 1


def pos_from_index(x: int, y: int, size_y: int) -> Position:
    """Return the centre of the cell at column ``x`` and row ``y``."""
    return Position(float(x) + 0.5, float(size_y - y) - 0.5)


def _boundary(registry: Registry) -> SnakeBoundary2D:
    found = registry.view(SnakeBoundary2D)
    if len(found) != 1:
        raise LookupError(f"expected exactly one SnakeBoundary2D, found {len(found)}")
    return found[0][1]


def get_map(registry: Registry) -> GridMap:
    """Snapshot the registry as rows of cell flags, top row first.

    Body parts, then the head, then the apple are placed; anything outside the
    boundary is left out.
    """
    boundary = _boundary(registry)
    grid: GridMap = [
        [MapSlotState.EMPTY] * max(boundary.x, 0) for _ in range(max(boundary.y, 0))
    ]

    def cell(pos: Position) -> tuple[int, int] | None:
        x, y = index_from_pos(pos, boundary.y)
        if 0 <= y < len(grid) and 0 <= x < len(grid[y]):
            return x, y
        return None

    for _, _part, pos in registry.view(SnakePart, Position):
        if (found := cell(pos)) is not None:
            x, y = found
            grid[y][x] = MapSlotState.SNAKE_BODY

    for flag, kind in ((MapSlotState.SNAKE_HEAD, SnakePartHead), (MapSlotState.APPLE, SnakeApple)):
        for _, _marker, pos in registry.view(kind, Position):
            if (found := cell(pos)) is not None:
                x, y = found
                grid[y][x] |= flag

    return grid


_SYMBOLS = (
    (MapSlotState.SNAKE_HEAD, "$"),
    (MapSlotState.SNAKE_BODY, "x"),
    (MapSlotState.APPLE, "@"),
)


def format_map(grid_map: GridMap) -> str:
    """Draw a map as text: '.' empty, '$' head, 'x' body, '@' apple.

    Every cell is followed by a space, so overlapping flags stay visible.
    """
    rows = []
    for row in grid_map:
        cells = []
        for slot in row:
            if slot == MapSlotState.EMPTY:
                text = "."
            else:
                text = "".join(symbol for flag, symbol in _SYMBOLS if slot & flag)
            cells.append(text + " ")
        rows.append("".join(cells))
    return "\n".join(rows)