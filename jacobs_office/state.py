"""Explicitly owned state stores shared by the game loops.

Each store has a single writer discipline and exposes subscribe() for
readers (HUD, face sprite, end screen). Loops receive the stores they need
through their constructors; nothing here is a module-level singleton.

Mood is written by three loops (reaction, review, chat) without a shared
lock. Each writer runs the transition gate against the mood it sees at
write time, so the last write wins and is still a legal transition.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from jacobs_office.models import Job, PhaseStatus, SessionEndType, SessionStats, SessionStatus
from jacobs_office.mood import validate_transition

logger = logging.getLogger(__name__)

Listener = Callable[[object], None]

WINNING_ENDS = ("PROMOTED", "ESCAPED")


class Observable:
    """Minimal observer list; listeners receive the store itself."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


class MoodStore(Observable):
    def __init__(self, mood: str = "NEUTRAL") -> None:
        super().__init__()
        self._mood = mood

    @property
    def mood(self) -> str:
        return self._mood

    def propose(self, proposed: object) -> str:
        """Apply a proposed mood through the transition gate. Returns the result."""
        new = validate_transition(self._mood, proposed)
        if new != proposed:
            logger.info("mood %r rejected, staying %s", proposed, self._mood)
        if new != self._mood:
            logger.info("mood %s -> %s", self._mood, new)
            self._mood = new
            self._notify()
        return new


@dataclass
class Speech:
    text: str
    title: str | None = None
    duration: float = 6.0
    started_at: float = 0.0

    @property
    def is_major(self) -> bool:
        return self.title is not None


class SpeechStore(Observable):
    """What Jacobs is saying right now. A titled speech is a major one.

    A speech stays on screen for its duration; major_active is how the
    reaction loop knows not to talk over an assignment or a review.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__()
        self._clock = clock
        self.current: Speech | None = None

    def say(self, text: str, title: str | None = None, duration: float = 6.0) -> None:
        self.current = Speech(text=text, title=title, duration=duration, started_at=self._clock())
        self._notify()

    def clear(self) -> None:
        self.current = None
        self._notify()

    @property
    def major_active(self) -> bool:
        speech = self.current
        if speech is None or not speech.is_major:
            return False
        return self._clock() - speech.started_at < speech.duration


class Wallet(Observable):
    """Player bucks."""

    def __init__(self, bucks: int = 0) -> None:
        super().__init__()
        self.bucks = bucks

    def add(self, amount: int) -> None:
        self.bucks += amount
        self._notify()

    def spend(self, amount: int) -> bool:
        """Deduct `amount` if affordable. Returns False (and changes nothing) otherwise."""
        if self.bucks < amount:
            return False
        self.add(-amount)
        return True


class Session(Observable):
    """PLAYING until the first end() call; terminal states are sticky."""

    def __init__(self) -> None:
        super().__init__()
        self.status: SessionStatus = "PLAYING"
        self.end_type: SessionEndType | None = None
        self.end_speech: str | None = None

    @property
    def is_playing(self) -> bool:
        return self.status == "PLAYING"

    def end(self, end_type: SessionEndType, speech: str | None = None) -> bool:
        """End the session once. Later calls are ignored and return False."""
        if not self.is_playing:
            logger.debug("session already ended (%s), ignoring %s", self.end_type, end_type)
            return False
        self.status = "WON" if end_type in WINNING_ENDS else "LOST"
        self.end_type = end_type
        self.end_speech = speech
        logger.info("session ended: %s (%s)", end_type, self.status)
        self._notify()
        return True


class PhaseState(Observable):
    """Phase bookkeeping, written only by the phase lifecycle."""

    def __init__(self, phase_duration: int, game_start_minutes: float) -> None:
        super().__init__()
        self.number = 0
        self.status: PhaseStatus = "IDLE"
        self.phase_duration = phase_duration
        self.time_remaining = phase_duration
        self.game_time_minutes = game_start_minutes
        self.current_job: Job | None = None
        self.review_in_progress = False
        self.review_scores: list[int] = []

    def start(self, job: Job) -> None:
        self.number += 1
        self.status = "WORKING"
        self.time_remaining = self.phase_duration
        self.current_job = job
        self.review_in_progress = False
        self._notify()

    def tick(self, game_minutes: float) -> None:
        self.time_remaining = max(0, self.time_remaining - 1)
        self.game_time_minutes += game_minutes
        self._notify()

    def set_status(self, status: PhaseStatus) -> None:
        self.status = status
        self._notify()


def session_stats(phase: PhaseState, wallet: Wallet) -> SessionStats:
    return SessionStats(
        game_time_minutes=phase.game_time_minutes,
        bucks=wallet.bucks,
        phases_completed=phase.number,
        review_scores=list(phase.review_scores),
    )
