"""A small entity-component registry and a synchronous signal."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Entity = int


class Registry:
    """Holds components keyed by their type on integer entity handles.

    Entity handles are never reused, so a handle that was destroyed or
    cleared stays invalid for the lifetime of the registry.
    """

    def __init__(self) -> None:
        self._entities: dict[Entity, dict[type, Any]] = {}
        self._next_entity: Entity = 0

    def create(self) -> Entity:
        """Create a new entity with no components and return its handle."""
        entity = self._next_entity
        self._next_entity += 1
        self._entities[entity] = {}
        return entity

    def destroy(self, entity: Entity) -> None:
        """Remove an entity and every component attached to it."""
        try:
            del self._entities[entity]
        except KeyError:
            raise KeyError(f"invalid entity {entity!r}") from None

    def clear(self) -> None:
        """Remove every entity."""
        self._entities.clear()

    def valid(self, entity: Entity) -> bool:
        """Whether the handle refers to a live entity."""
        return entity in self._entities

    def emplace(self, entity: Entity, component: Any) -> Any:
        """Attach a component to an entity and return it.

        Each entity holds at most one component of a given type.
        """
        components = self._components_of(entity)
        kind = type(component)
        if kind in components:
            raise ValueError(f"entity {entity!r} already has a {kind.__name__}")
        components[kind] = component
        return component

    def get(self, entity: Entity, component_type: type) -> Any:
        """Return the component of the given type held by an entity."""
        components = self._components_of(entity)
        try:
            return components[component_type]
        except KeyError:
            raise KeyError(
                f"entity {entity!r} has no {component_type.__name__}"
            ) from None

    def all_of(self, entity: Entity, *args: type) -> bool:
        """Whether the entity holds a component of every given type."""
        components = self._components_of(entity)
        return all(kind in components for kind in args)

    def view(self, *args: type) -> list[tuple[Any, ...]]:
        """Return ``(entity, component, ...)`` for every entity holding all types.

        The result is a snapshot in entity creation order, so entities may be
        destroyed while iterating over it.
        """
        if not args:
            raise TypeError("view() needs at least one component type")
        return [
            (entity, *(components[kind] for kind in args))
            for entity, components in self._entities.items()
            if all(kind in components for kind in args)
        ]

    def count(self, component_type: type) -> int:
        """Number of live entities holding a component of the given type."""
        return sum(
            1 for components in self._entities.values() if component_type in components
        )

    def _components_of(self, entity: Entity) -> dict[type, Any]:
        try:
            return self._entities[entity]
        except KeyError:
            raise KeyError(f"invalid entity {entity!r}") from None


class Signal:
    """Calls every connected slot, in connection order, with the same arguments."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> Callable[..., Any]:
        """Connect a callable and return it."""
        if not callable(slot):
            raise TypeError(f"{slot!r} is not callable")
        self._slots.append(slot)
        return slot

    def __call__(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)