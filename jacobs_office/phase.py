"""Phase lifecycle — job assignment, countdown, review, repeat.

  IDLE ──assign──▶ WORKING ──timer hits 0──▶ REVIEWING ──review done──▶ WORKING ...

tick() runs once per second. It advances the game clock and, once the
clock reaches the end of the work day, ends the session with TIME_UP no
matter what the phase is doing. Otherwise a WORKING phase whose timer runs
out is frozen and reviewed: the service scores the phase's events against
the assigned job, the score is paid out in bucks, and after the review
speech has been on screen for a while the next job is assigned.

review_in_progress guards against overlapping reviews and also tells the
reaction loop to hold off.
"""

from __future__ import annotations

import asyncio
import logging

from jacobs_office.client import ClientError, JacobsClient
from jacobs_office.config import GameConfig
from jacobs_office.events import PHASE_LOG, EventLog
from jacobs_office.jobs import JobPicker
from jacobs_office.models import Job, Review
from jacobs_office.state import MoodStore, PhaseState, Session, SpeechStore, Wallet, session_stats
from jacobs_office.world import WorldState

logger = logging.getLogger(__name__)

FALLBACK_REVIEW_SPEECH = "REVIEW INCONCLUSIVE. PARTIAL CREDIT."
FALLBACK_REVIEW_SCORE = 2


def fallback_review(mood: str) -> Review:
    return Review(speech=FALLBACK_REVIEW_SPEECH, score=FALLBACK_REVIEW_SCORE, mood=mood)


class PhaseLifecycle:
    def __init__(
        self,
        *,
        client: JacobsClient,
        picker: JobPicker,
        events: EventLog,
        phase: PhaseState,
        mood: MoodStore,
        speech: SpeechStore,
        session: Session,
        wallet: Wallet,
        world: WorldState,
        config: GameConfig = GameConfig(),
    ) -> None:
        self._client = client
        self._picker = picker
        self._events = events
        self._phase = phase
        self._mood = mood
        self._speech = speech
        self._session = session
        self._wallet = wallet
        self._world = world
        self._config = config

    @property
    def phase(self) -> PhaseState:
        return self._phase

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def assign_new_job(self) -> Job | None:
        """Enter WORKING with a fresh job. No-op once the session has ended."""
        if not self._session.is_playing:
            return None
        job = self._picker.pick()
        if job is None:
            logger.warning("no eligible objects in catalog, cannot assign a job")
            return None
        self._events.clear(PHASE_LOG)
        self._phase.start(job)
        self._speech.say(
            job.description,
            title=job.title,
            duration=self._config.assignment_speech_duration,
        )
        logger.info("phase %d: assigned %s", self._phase.number, job.id)
        return job

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    async def tick(self) -> None:
        if not self._session.is_playing:
            return
        if self._phase.status != "WORKING":
            return

        self._phase.tick(self._config.game_minutes_per_tick)

        if self._phase.game_time_minutes >= self._config.session_end_minutes:
            self._session.end("TIME_UP", None)
            return

        if self._phase.time_remaining <= 0:
            await self.trigger_review()

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    async def trigger_review(self) -> Review | None:
        if self._phase.review_in_progress:
            return None

        self._phase.set_status("REVIEWING")
        self._phase.review_in_progress = True

        job = self._phase.current_job
        if job is None:
            self._phase.review_in_progress = False
            self.assign_new_job()
            return None

        events = self._events.peek(PHASE_LOG)
        current_mood = self._mood.mood
        logger.info("reviewing phase %d: %d events, job=%s", self._phase.number, len(events), job.id)

        try:
            review = await self._client.review(
                events,
                job,
                current_mood,
                self._world.snapshot(),
                session_stats(self._phase, self._wallet),
            )
        except (ClientError, TimeoutError) as e:
            logger.warning("jacobs-review failed, using fallback: %s", e)
            review = fallback_review(current_mood)

        if not self._session.is_playing:
            logger.info("session ended during review, discarding result")
            self._phase.review_in_progress = False
            return None

        self._mood.propose(review.mood)
        self._speech.say(
            review.speech,
            title=f"REVIEW: {job.title}",
            duration=self._config.review_speech_duration,
        )
        self._wallet.add(review.score)
        self._phase.review_scores.append(review.score)
        logger.info("phase %d scored %d", self._phase.number, review.score)

        if review.game_end != "NONE":
            self._session.end(review.game_end, review.speech)
            self._phase.review_in_progress = False
            return review

        await asyncio.sleep(self._config.review_speech_duration)
        self._speech.clear()
        self._phase.review_in_progress = False
        self.assign_new_job()
        return review
