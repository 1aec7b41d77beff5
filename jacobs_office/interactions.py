"""Player actions that feed the event log.

use() resolves an item (or bare hands) against a world object through the
service, applies the resulting state and records what happened. A service
failure gives "That doesn't seem to work." A rate-limit denial is the
exception: RateLimitedError reaches the caller with its retry hint and
nothing is recorded.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from jacobs_office.client import ClientError, InteractRequest, JacobsClient, RateLimitedError
from jacobs_office.events import EventLog, make_event
from jacobs_office.models import InteractionResult
from jacobs_office.world import WorldState

logger = logging.getLogger(__name__)

BARE_HANDS = "(bare hands)"


@dataclass
class Item:
    """An inventory item. item_id is the catalog id, uid tells copies apart."""

    item_id: str | None
    name: str
    tags: list[str] = field(default_factory=list)
    uid: str = field(default_factory=lambda: uuid.uuid4().hex)


class InteractionService:
    def __init__(self, *, client: JacobsClient, world: WorldState, events: EventLog) -> None:
        self._client = client
        self._world = world
        self._events = events

    async def use(self, item: Item | None, object_id: str, object_name: str | None = None) -> InteractionResult:
        obj = self._world.get(object_id)
        if obj is None:
            logger.warning("interaction with unknown object %r", object_id)
            return InteractionResult.fallback()

        name = object_name or self._world.name_of(object_id)
        current = obj.states[0] if obj.states else None
        request = InteractRequest(
            item_id=item.item_id if item else None,
            object_id=self._world.catalog_id_of(object_id),
            item_tags=list(item.tags) if item else [],
            object_tags=list(obj.tags),
            object_state=current,
            item_name=item.name if item else BARE_HANDS,
            object_name=name,
        )

        try:
            result = await self._client.interact(request)
        except RateLimitedError as e:
            logger.info("interact rate limited, retry in %ss", e.retry_after)
            raise
        except (ClientError, TimeoutError) as e:
            logger.warning("interact failed, using fallback: %s", e)
            result = InteractionResult.fallback()

        self._events.record_event(make_event("INTERACTION", {
            "itemName": item.name if item else None,
            "objectName": name,
            "resultState": result.result_state,
            "description": result.description,
            "outputItem": result.output_item,
        }))

        if result.result_state and result.result_state != current:
            self._world.set_object_states(object_id, [result.result_state])
            self._events.record_event(make_event("STATE_CHANGE", {
                "objectName": name,
                "newState": result.result_state,
            }))
        return result

    def record_pickup(self, item: Item) -> None:
        self._events.record_event(make_event("PICKUP", {"itemName": item.name}))

    def record_drop(self, item: Item) -> None:
        self._events.record_event(make_event("DROP", {"itemName": item.name}))

    def record_room_change(self, room_id: str) -> None:
        self._events.record_event(make_event("ROOM_CHANGE", {"roomId": room_id}))
