"""Snake gameplay: steering, eating, collisions and the game's outcome."""

from __future__ import annotations

import dataclasses
import random
import weakref
from typing import Any

from snakegrid.components import (
    KeyControl,
    Position,
    SnakeBoundary2D,
    SnakePart,
    SnakePartHead,
    Velocity,
)
from snakegrid.ecs import Registry, Signal
from snakegrid.grid import MapSlotState, get_map, index_from_pos
from snakegrid.trailing import (
    _remember_map,
    _tail_entity,
    apple_update,
    is_going_backwards,
)

__all__ = [
    "iterate",
    "update",
    "init",
    "connect",
    "is_game_success",
    "is_game_failure",
    "get_score",
    "is_speeding_up",
    "shift_key_up",
    "shift_key_down",
    "up_key_down",
    "left_key_down",
    "down_key_down",
    "right_key_down",
    "snake_head_position",
    "snake_head_velocity",
]

# Unit velocity (y grows upwards) for each movement key.
_DIRECTIONS = {"w": (0.0, 1.0), "a": (-1.0, 0.0), "s": (0.0, -1.0), "d": (1.0, 0.0)}

_connected_signals: weakref.WeakSet[Signal] = weakref.WeakSet()


def _single(registry: Registry, kind: type) -> Any:
    found = registry.view(kind)
    if len(found) != 1:
        raise LookupError(f"expected exactly one {kind.__name__}, found {len(found)}")
    return found[0][1]


def _require_single_head(registry: Registry) -> None:
    heads = registry.count(SnakePartHead)
    if heads != 1:
        raise LookupError(f"expected exactly one SnakePartHead, found {heads}")


def _is_collision(slot: MapSlotState) -> bool:
    return bool(slot & MapSlotState.SNAKE_HEAD and slot & MapSlotState.SNAKE_BODY)


def iterate(registry: Registry, rng: random.Random | None = None) -> None:
    """Run one gameplay step: eat and trail, steer the head, clear overlaps.

    Does nothing once the game is won or lost.
    """
    if is_game_success(registry) or is_game_failure(registry):
        return

    apple_update(registry, rng)

    control = _single(registry, KeyControl)
    key = control.last_movement_key
    speeding = control.is_shift_key_down
    _require_single_head(registry)
    for _, velocity, head in registry.view(Velocity, SnakePartHead):
        step = _DIRECTIONS.get(key)
        if step is None or is_going_backwards(registry, key):
            continue
        speed = head.speed * (head.speed_up_factor if speeding else 1.0)
        velocity.x = step[0] * speed
        velocity.y = step[1] * speed

    grid = _remember_map(registry)
    boundary = _single(registry, SnakeBoundary2D)
    collided = {
        (j, i)
        for i, row in enumerate(grid)
        for j, slot in enumerate(row)
        if _is_collision(slot)
    }
    if collided:
        for entity, _part, pos in registry.view(SnakePart, Position):
            if index_from_pos(pos, boundary.y) in collided:
                registry.destroy(entity)


def update(registry: Registry, rng: random.Random | None = None) -> None:
    """Same as :func:`iterate`."""
    iterate(registry, rng)


def init(registry: Registry) -> bool:
    """Record the current map as the trailing reference.

    Returns False when the registry has no snake head.
    """
    if registry.count(SnakePartHead) == 0:
        return False
    _remember_map(registry)
    return True


def connect(signal: Signal, registry: Registry) -> bool:
    """Connect :func:`iterate` to a signal once and initialise the registry.

    Returns False, and does nothing, if that signal was connected before.
    """
    if signal in _connected_signals:
        return False
    signal.connect(iterate)
    _connected_signals.add(signal)
    init(registry)
    return True


def is_game_success(registry: Registry) -> bool:
    """Whether no cell is left empty or holding only the apple."""
    return all(
        slot not in (MapSlotState.EMPTY, MapSlotState.APPLE)
        for row in get_map(registry)
        for slot in row
    )


def is_game_failure(registry: Registry) -> bool:
    """Whether the head left the map or ran into the body.

    Sharing a cell with the tail is allowed, since the tail moves away first.
    """
    heads = registry.view(SnakePartHead, Position)
    if not heads:
        raise LookupError("no snake head with a Position")
    pos = heads[0][2]
    boundary = _single(registry, SnakeBoundary2D)
    if pos.x < 0.0 or pos.x >= boundary.x or pos.y < 0.0 or pos.y >= boundary.y:
        return True

    for i, row in enumerate(get_map(registry)):
        for j, slot in enumerate(row):
            if _is_collision(slot):
                tail = _tail_entity(registry)
                if tail is None:
                    return True
                tail_cell = index_from_pos(registry.get(tail, Position), boundary.y)
                return tail_cell != (j, i)
    return False


def get_score(registry: Registry) -> int:
    """Number of body parts."""
    return registry.count(SnakePart)


def is_speeding_up(registry: Registry) -> bool:
    """Whether the speed-up key is held."""
    return _single(registry, KeyControl).is_shift_key_down


def shift_key_up(registry: Registry) -> None:
    """Release the speed-up key."""
    _single(registry, KeyControl).is_shift_key_down = False


def shift_key_down(registry: Registry) -> None:
    """Press the speed-up key."""
    _single(registry, KeyControl).is_shift_key_down = True


def up_key_down(registry: Registry) -> None:
    """Ask the snake to turn up."""
    _single(registry, KeyControl).last_movement_key = "w"


def left_key_down(registry: Registry) -> None:
    """Ask the snake to turn left."""
    _single(registry, KeyControl).last_movement_key = "a"


def down_key_down(registry: Registry) -> None:
    """Ask the snake to turn down."""
    _single(registry, KeyControl).last_movement_key = "s"


def right_key_down(registry: Registry) -> None:
    """Ask the snake to turn right."""
    _single(registry, KeyControl).last_movement_key = "d"


def snake_head_position(registry: Registry) -> Position:
    """A copy of the snake head's position."""
    _require_single_head(registry)
    found = registry.view(Position, SnakePartHead)
    if not found:
        raise LookupError("snake head has no Position")
    return dataclasses.replace(found[0][1])


def snake_head_velocity(registry: Registry) -> Velocity:
    """A copy of the snake head's velocity."""
    _require_single_head(registry)
    found = registry.view(Velocity, SnakePartHead)
    if not found:
        raise LookupError("snake head has no Velocity")
    return dataclasses.replace(found[0][1])