"""Plain data components attached to registry entities."""

from __future__ import annotations

from dataclasses import dataclass

_component = dataclass(slots=True)


@_component
class _Vector2:
    """A pair of floats along the map axes."""

    x: float = 0.0
    y: float = 0.0


@_component
class Position(_Vector2):
    """Continuous position on the map, y pointing up."""


@_component
class Velocity(_Vector2):
    """Units per second along each axis."""


@_component
class DeltaTime:
    """Fixed time step, in milliseconds."""

    dt_ms: int = 0


@_component
class KeyControl:
    """Last movement key pressed ('w', 'a', 's' or 'd') and the speed-up key state."""

    last_movement_key: str = ""
    is_shift_key_down: bool = False


@_component
class SnakeApple:
    """Marks the apple entity."""


@_component
class SnakeBoundary2D:
    """Map size in cells: ``x`` columns by ``y`` rows."""

    x: int = 0
    y: int = 0


@_component
class SnakePart:
    """A body segment and the direction ('w', 'a', 's' or 'd') it is heading."""

    current_direction: str = ""


@_component
class SnakePartHead:
    """The snake's head: base speed and the multiplier applied while speeding up."""

    speed: float = 0.0
    speed_up_factor: float = 0.0