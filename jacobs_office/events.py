"""Gameplay event log with fan-out to independently drained named logs.

One player action is recorded once and lands in every named log:

  "jacobs"  consumed by the reaction loop (drained every time it fires)
  "phase"   consumed by the phase review (cleared when a new phase starts)

Draining one log never touches the other. Events are immutable, so sharing
the same instance between logs is safe.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from jacobs_office.models import EventType, GameplayEvent

logger = logging.getLogger(__name__)

JACOBS_LOG = "jacobs"
PHASE_LOG = "phase"


def make_event(
    type: EventType, details: dict[str, Any] | None = None, actor_id: str = "PLAYER 1"
) -> GameplayEvent:
    """Build a timestamped event."""
    return GameplayEvent(type=type, actor_id=actor_id, details=details or {})


class EventLog:
    def __init__(self, names: Iterable[str] = (JACOBS_LOG, PHASE_LOG)) -> None:
        self._logs: dict[str, list[GameplayEvent]] = {name: [] for name in names}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._logs)

    def record_event(self, event: GameplayEvent) -> None:
        """Append an event to every named log."""
        for events in self._logs.values():
            events.append(event)
        logger.debug("event %s recorded into %d logs", event.type, len(self._logs))

    def drain(self, name: str) -> list[GameplayEvent]:
        """Return all events in a log and replace it with an empty one."""
        events = self._logs[name]
        self._logs[name] = []
        return events

    def peek(self, name: str) -> list[GameplayEvent]:
        return list(self._logs[name])

    def recent(self, name: str, count: int) -> list[GameplayEvent]:
        if count <= 0:
            return []
        return list(self._logs[name][-count:])

    def clear(self, name: str) -> None:
        self._logs[name] = []

    def size(self, name: str) -> int:
        return len(self._logs[name])
