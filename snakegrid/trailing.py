"""Body trailing and apple handling between two snapshots of the map."""

from __future__ import annotations

import random
import weakref

from snakegrid.components import (
    Position,
    SnakeApple,
    SnakeBoundary2D,
    SnakePart,
)
from snakegrid.ecs import Entity, Registry
from snakegrid.grid import GridMap, MapSlotState, get_map, index_from_pos, pos_from_index

__all__ = ["is_going_backwards", "do_trailing", "apple_update"]

# Row/column step on the grid (rows grow downwards) for each direction.
_GRID_STEPS = {"w": (-1, 0), "a": (0, -1), "s": (1, 0), "d": (0, 1)}
# Step in position space (y grows upwards) for each direction.
_POS_STEPS = {"w": (0.0, 1.0), "a": (-1.0, 0.0), "s": (0.0, -1.0), "d": (1.0, 0.0)}
_OPPOSITE = {"w": "s", "a": "d", "s": "w", "d": "a"}

_previous_maps: weakref.WeakKeyDictionary[Registry, GridMap] = weakref.WeakKeyDictionary()
_default_rng = random.Random()


def _remember_map(registry: Registry) -> GridMap:
    """Store the current map as the reference for the next trailing step."""
    grid = get_map(registry)
    _previous_maps[registry] = grid
    return grid


def _boundary(registry: Registry) -> SnakeBoundary2D:
    found = registry.view(SnakeBoundary2D)
    if len(found) != 1:
        raise LookupError(f"expected exactly one SnakeBoundary2D, found {len(found)}")
    return found[0][1]


def _head_cell(grid: GridMap) -> tuple[int, int]:
    """Row and column of the first cell flagged as head, or (-1, -1)."""
    for i, row in enumerate(grid):
        for j, slot in enumerate(row):
            if slot & MapSlotState.SNAKE_HEAD:
                return i, j
    return -1, -1


def _tail_entity(registry: Registry) -> Entity | None:
    """The body part that no other part is heading into, if there is one."""
    boundary = _boundary(registry)
    parts = registry.view(SnakePart, Position)
    pool = set()
    for _, part, pos in parts:
        step = _POS_STEPS.get(part.current_direction)
        if step is None:
            continue
        x, y = index_from_pos(Position(pos.x + step[0], pos.y + step[1]), boundary.y)
        if 0 <= x < boundary.x and 0 <= y < boundary.y:
            pool.add((x, y))
    for entity, _, pos in parts:
        if index_from_pos(pos, boundary.y) not in pool:
            return entity
    return None


def is_going_backwards(registry: Registry, direction: str) -> bool:
    """Whether turning the head towards ``direction`` would run into its neck.

    Also True when the head cannot be found alone in a cell or the direction
    is not one of 'w', 'a', 's', 'd'.
    """
    grid = get_map(registry)
    head = None
    for i, row in enumerate(grid):
        for j, slot in enumerate(row):
            if slot == MapSlotState.SNAKE_HEAD:
                head = (i, j)
    if head is None or direction not in _GRID_STEPS:
        return True

    di, dj = _GRID_STEPS[direction]
    ni, nj = head[0] + di, head[1] + dj
    if not (0 <= ni < len(grid) and 0 <= nj < len(grid[ni])):
        return False
    if grid[ni][nj] != MapSlotState.SNAKE_BODY:
        return False

    boundary = _boundary(registry)
    opposite = _OPPOSITE[direction]
    return any(
        index_from_pos(pos, boundary.y) == (nj, ni) and part.current_direction == opposite
        for _, part, pos in registry.view(SnakePart, Position)
    )


def do_trailing(registry: Registry, ate_apple: bool) -> None:
    """Make the body follow the head once it has entered a new cell.

    A neck part is added where the head was; unless an apple was eaten the
    tail is removed, and a headless snake only grows when it eats.
    """
    current = get_map(registry)
    previous = _previous_maps.get(registry, current)
    if current == previous:
        return

    prev_i, prev_j = _head_cell(previous)
    cur_i, cur_j = _head_cell(current)
    if (prev_i, prev_j) == (cur_i, cur_j):
        return

    if cur_i < prev_i:
        direction = "w"
    elif cur_j < prev_j:
        direction = "a"
    elif cur_i > prev_i:
        direction = "s"
    else:
        direction = "d"

    had_parts = registry.count(SnakePart) > 0
    if not had_parts and not ate_apple:
        return

    boundary = _boundary(registry)
    di, dj = _GRID_STEPS[direction]
    neck = registry.create()
    registry.emplace(neck, SnakePart(direction))
    registry.emplace(neck, pos_from_index(cur_j - dj, cur_i - di, boundary.y))

    if had_parts and not ate_apple:
        tail = _tail_entity(registry)
        if tail is not None:
            registry.destroy(tail)


def _respawn_apple(
    registry: Registry, free_cells: list[tuple[int, int]], rng: random.Random
) -> None:
    apples = registry.view(SnakeApple, Position)
    if not apples:
        return
    entity, _, apple_pos = apples[0]
    if not free_cells:
        registry.destroy(entity)
        return
    i, j = free_cells[rng.randrange(len(free_cells))]
    new_pos = pos_from_index(j, i, _boundary(registry).y)
    apple_pos.x, apple_pos.y = new_pos.x, new_pos.y


def apple_update(registry: Registry, rng: random.Random | None = None) -> bool:
    """Trail the body and, if the head is on the apple, move the apple.

    The apple goes to a random cell that was empty; it is removed when none
    is left. Returns whether the apple was eaten.
    """
    rng = rng if rng is not None else _default_rng
    grid = get_map(registry)
    free_cells = []
    eaten = False
    for i, row in enumerate(grid):
        for j, slot in enumerate(row):
            if slot == MapSlotState.EMPTY:
                free_cells.append((i, j))
            elif slot & MapSlotState.SNAKE_HEAD and slot & MapSlotState.APPLE:
                eaten = True

    do_trailing(registry, eaten)

    if eaten:
        _respawn_apple(registry, free_cells, rng)
        grid = get_map(registry)
        remaining = [
            (i, j)
            for i, j in free_cells
            if not (grid[i][j] & MapSlotState.APPLE and grid[i][j] > MapSlotState.APPLE)
        ]
        if len(remaining) != len(free_cells):
            _respawn_apple(registry, remaining, rng)

    return eaten