"""In-memory world-state store.

Holds per-object tags/states keyed by instance id, plus the lower-cased
name -> id registry the world builder fills at scene load. Jacobs' effects
name objects the way he sees them ("Coffee Machine"), so they go through
resolve_name() before set_object_states().
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from jacobs_office.models import DEFAULT_OBJECT_STATE, ObjectState

logger = logging.getLogger(__name__)

StateListener = Callable[[str, list[str]], None]


class WorldState:
    def __init__(self) -> None:
        self._objects: dict[str, ObjectState] = {}
        self._names: dict[str, str] = {}
        self._display: dict[str, str] = {}
        self._catalog: dict[str, str] = {}
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register_object(
        self,
        object_id: str,
        name: str,
        tags: list[str] | None = None,
        states: list[str] | None = None,
        catalog_id: str | None = None,
    ) -> None:
        self._objects[object_id] = ObjectState(
            tags=list(tags or []),
            states=list(states or [DEFAULT_OBJECT_STATE]),
        )
        self._names[name.lower()] = object_id
        self._display[object_id] = name
        self._catalog[object_id] = catalog_id or object_id

    def resolve_name(self, name: str) -> str | None:
        """Case-insensitive name -> object id, or None."""
        return self._names.get(name.strip().lower())

    def name_of(self, object_id: str) -> str:
        return self._display.get(object_id, object_id)

    def catalog_id_of(self, object_id: str) -> str:
        """Catalog id shared by every placement of the same kind of object."""
        return self._catalog.get(object_id, object_id)

    def clear(self) -> None:
        self._objects.clear()
        self._names.clear()
        self._display.clear()
        self._catalog.clear()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def get_object_states(self) -> dict[str, ObjectState]:
        """Snapshot of every object's state (deep copies)."""
        return {oid: obj.model_copy(deep=True) for oid, obj in self._objects.items()}

    def get(self, object_id: str) -> ObjectState | None:
        obj = self._objects.get(object_id)
        return obj.model_copy(deep=True) if obj else None

    def current_state(self, object_id: str) -> str | None:
        obj = self._objects.get(object_id)
        if obj is None or not obj.states:
            return None
        return obj.states[0]

    def set_object_states(self, object_id: str, states: list[str]) -> None:
        obj = self._objects.get(object_id)
        if obj is None:
            obj = ObjectState()
            self._objects[object_id] = obj
        obj.states = list(states)
        for listener in list(self._listeners):
            listener(object_id, list(states))

    def on_change(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Prompt helpers
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, dict[str, list[str]]]:
        """Plain-dict snapshot, as sent over the wire."""
        return {oid: obj.model_dump() for oid, obj in self._objects.items()}

