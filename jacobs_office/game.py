"""OfficeGame — composition root for one single-player session.

Owns every store and loop and runs two periodic tickers on the asyncio event
loop: the reaction poll (every `poll_interval` s) and the phase clock (every
`tick_interval` s). Each tick runs as its own task, so a slow LLM call never
delays the next tick; the loops' own in-flight guards make overlapping
ticks harmless. The first job is assigned `first_phase_delay` seconds after
start().

When the session ends and a leaderboard is configured, the final score is
submitted once.
The vending machine spends from the same wallet the reviews pay into.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Coroutine, Sequence
from typing import Any, Protocol

from pydantic import BaseModel

from jacobs_office.chat import TerminalChat
from jacobs_office.client import JacobsClient
from jacobs_office.config import GameConfig
from jacobs_office.events import EventLog
from jacobs_office.interactions import InteractionService
from jacobs_office.inventory import Inventory, VendingMachine
from jacobs_office.jobs import CatalogObject, JobPicker
from jacobs_office.phase import PhaseLifecycle
from jacobs_office.reaction import ReactionLoop
from jacobs_office.state import MoodStore, PhaseState, Session, SpeechStore, Wallet
from jacobs_office.world import WorldState

logger = logging.getLogger(__name__)


class LeaderboardEntry(BaseModel):
    player_name: str
    bucks: int
    phases_survived: int
    time_survived_minutes: int
    end_type: str
    jacobs_mood: str


class Leaderboard(Protocol):
    async def submit_score(self, entry: LeaderboardEntry) -> None: ...

    async def fetch_leaderboard(self, limit: int = 20) -> list[LeaderboardEntry]: ...


class OfficeGame:
    def __init__(
        self,
        client: JacobsClient,
        catalog: Sequence[CatalogObject],
        *,
        item_catalog: Sequence[CatalogObject] = (),
        config: GameConfig = GameConfig(),
        leaderboard: Leaderboard | None = None,
        player_name: str = "PLAYER 1",
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.player_name = player_name
        self._leaderboard = leaderboard

        self.events = EventLog()
        self.world = WorldState()
        self.mood = MoodStore()
        self.speech = SpeechStore(clock)
        self.wallet = Wallet()
        self.inventory = Inventory(config.inventory_slots)
        self.session = Session()
        self.phase = PhaseState(config.phase_duration, config.game_start_minutes)

        self.interactions = InteractionService(client=client, world=self.world, events=self.events)
        self.reactions = ReactionLoop(
            client=client,
            events=self.events,
            mood=self.mood,
            speech=self.speech,
            session=self.session,
            phase=self.phase,
            world=self.world,
            wallet=self.wallet,
            config=config,
            clock=clock,
        )
        self.lifecycle = PhaseLifecycle(
            client=client,
            picker=JobPicker(catalog, rng),
            events=self.events,
            phase=self.phase,
            mood=self.mood,
            speech=self.speech,
            session=self.session,
            wallet=self.wallet,
            world=self.world,
            config=config,
        )
        self.vending = VendingMachine(
            items=item_catalog, wallet=self.wallet, inventory=self.inventory, config=config, rng=rng,
        )
        self.chat = TerminalChat(
            client=client,
            events=self.events,
            mood=self.mood,
            session=self.session,
            phase=self.phase,
            wallet=self.wallet,
            config=config,
        )

        self._runners: list[asyncio.Task] = []
        self._tasks: set[asyncio.Task] = set()
        self.session.subscribe(self._on_session_change)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return bool(self._runners)

    async def start(self) -> None:
        if self.started:
            return
        self.reactions.reset_timer()
        self._runners = [
            asyncio.create_task(self._every(self.config.poll_interval, self.reactions.tick)),
            asyncio.create_task(self._every(self.config.tick_interval, self.lifecycle.tick)),
            asyncio.create_task(self._first_phase()),
        ]
        logger.info("office game started for %s", self.player_name)

    async def stop(self) -> None:
        pending = self._runners + list(self._tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._runners = []
        self._tasks.clear()
        logger.info("office game stopped")

    async def _first_phase(self) -> None:
        await asyncio.sleep(self.config.first_phase_delay)
        if self.phase.status == "IDLE":
            self.lifecycle.assign_new_job()

    async def _every(self, interval: float, handler: Callable[[], Awaitable[Any]]) -> None:
        while self.session.is_playing:
            await asyncio.sleep(interval)
            self._spawn(handler())

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background task failed", exc_info=exc)

    # ------------------------------------------------------------------
    # Session end
    # ------------------------------------------------------------------

    def leaderboard_entry(self) -> LeaderboardEntry:
        return LeaderboardEntry(
            player_name=self.player_name,
            bucks=self.wallet.bucks,
            phases_survived=self.phase.number,
            time_survived_minutes=round(self.phase.game_time_minutes - self.config.game_start_minutes),
            end_type=self.session.end_type or "",
            jacobs_mood=self.mood.mood,
        )

    def _on_session_change(self, session: object) -> None:
        if self.session.is_playing or self._leaderboard is None:
            return
        self._spawn(self._submit_score())

    async def _submit_score(self) -> None:
        entry = self.leaderboard_entry()
        try:
            await self._leaderboard.submit_score(entry)
        except Exception:
            logger.exception("failed to submit leaderboard entry")
