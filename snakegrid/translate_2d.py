"""Moves every entity with a velocity by one fixed time step."""

from __future__ import annotations

import weakref

from snakegrid.components import DeltaTime, Position, Velocity
from snakegrid.ecs import Registry, Signal

__all__ = ["iterate", "update", "connect"]

_connected_signals: weakref.WeakSet[Signal] = weakref.WeakSet()


def iterate(registry: Registry) -> None:
    """Advance each ``Position`` by its ``Velocity`` over the registry's ``DeltaTime``.

    Does nothing when the registry holds no ``DeltaTime``.
    """
    steps = registry.view(DeltaTime)
    if not steps:
        return
    if len(steps) != 1:
        raise LookupError(f"expected exactly one DeltaTime, found {len(steps)}")
    seconds = steps[0][1].dt_ms / 1000.0
    for _, pos, vel in registry.view(Position, Velocity):
        pos.x += vel.x * seconds
        pos.y += vel.y * seconds


def update(registry: Registry) -> None:
    """Same as :func:`iterate`."""
    iterate(registry)


def connect(signal: Signal) -> bool:
    """Connect :func:`iterate` to a signal once.

    Returns False, and connects nothing, if that signal was connected before.
    """
    if signal in _connected_signals:
        return False
    signal.connect(iterate)
    _connected_signals.add(signal)
    return True