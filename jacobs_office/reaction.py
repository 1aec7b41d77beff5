"""Reaction loop — Jacobs reacts to batches of gameplay events.

Polled every `poll_interval` seconds. Fires when the "jacobs" log holds at
least `event_threshold` events, or `time_threshold_ms` has passed since the
last fire, provided that:

  - the log is not empty
  - the session is still PLAYING
  - no phase review is in progress
  - no major (titled) speech is on screen

Firing drains the log, sends events + mood + world snapshot + job to the
service, then commits the reaction: gated mood, speech (unless it is the
"..." placeholder), CHANGE_STATE effects resolved by object name, and an
optional session end. One call is in flight at a time; ticks while running
are no-ops. Any client failure commits the fallback reaction instead.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Literal

from jacobs_office.client import ClientError, JacobsClient
from jacobs_office.config import GameConfig
from jacobs_office.events import JACOBS_LOG, EventLog
from jacobs_office.models import Reaction
from jacobs_office.state import MoodStore, PhaseState, Session, SpeechStore, Wallet, session_stats
from jacobs_office.world import WorldState

logger = logging.getLogger(__name__)

PLACEHOLDER_SPEECH = "..."


def fallback_reaction(mood: str) -> Reaction:
    return Reaction(speech=PLACEHOLDER_SPEECH, mood=mood, effects=[])


class ReactionLoop:
    def __init__(
        self,
        *,
        client: JacobsClient,
        events: EventLog,
        mood: MoodStore,
        speech: SpeechStore,
        session: Session,
        phase: PhaseState,
        world: WorldState,
        wallet: Wallet,
        config: GameConfig = GameConfig(),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._events = events
        self._mood = mood
        self._speech = speech
        self._session = session
        self._phase = phase
        self._world = world
        self._wallet = wallet
        self._config = config
        self._clock = clock
        self._state: Literal["idle", "running"] = "idle"
        self._last_fire = clock()

    @property
    def running(self) -> bool:
        return self._state == "running"

    def reset_timer(self) -> None:
        self._last_fire = self._clock()

    def should_fire(self) -> bool:
        if not self._session.is_playing:
            return False
        if self._phase.review_in_progress:
            return False
        if self._speech.major_active:
            return False
        pending = self._events.size(JACOBS_LOG)
        if pending == 0:
            return False
        elapsed_ms = (self._clock() - self._last_fire) * 1000
        return pending >= self._config.event_threshold or elapsed_ms >= self._config.time_threshold_ms

    async def tick(self) -> Reaction | None:
        """Poll handler. Returns the committed reaction when the loop fired."""
        if self.running or not self.should_fire():
            return None
        return await self.process()

    async def process(self) -> Reaction | None:
        if self.running or self._events.size(JACOBS_LOG) == 0:
            return None

        self._state = "running"
        try:
            events = self._events.drain(JACOBS_LOG)
            self._last_fire = self._clock()
            current_mood = self._mood.mood
            logger.info("reacting to %d events, mood=%s", len(events), current_mood)

            try:
                reaction = await self._client.react(
                    events,
                    current_mood,
                    self._world.snapshot(),
                    self._phase.current_job,
                    session_stats(self._phase, self._wallet),
                )
            except (ClientError, TimeoutError) as e:
                logger.warning("jacobs-react failed, using fallback: %s", e)
                reaction = fallback_reaction(current_mood)

            if not self._session.is_playing:
                logger.info("session ended while reacting, discarding reaction")
                return None

            self._commit(reaction)
            return reaction
        finally:
            self._state = "idle"

    def _commit(self, reaction: Reaction) -> None:
        self._mood.propose(reaction.mood)

        if reaction.speech and reaction.speech.strip() != PLACEHOLDER_SPEECH:
            self._speech.say(reaction.speech, duration=self._config.speech_duration)

        for effect in reaction.effects:
            object_id = self._world.resolve_name(effect.targetName)
            if object_id is None:
                logger.warning("Jacobs effect: unknown object %r", effect.targetName)
                continue
            self._world.set_object_states(object_id, [effect.newState])
            logger.info("Jacobs effect: %s -> %s", effect.targetName, effect.newState)

        if reaction.game_end != "NONE":
            self._session.end(reaction.game_end, reaction.speech)
