"""Terminal chat — turn-based conversation with Jacobs.

Each message costs `chat_cost` bucks, deducted before the call; without
enough bucks nothing is sent. A rate-limited message is refunded and the
player sees the retry hint. The request carries the last few chat messages
and gameplay events, the current job and session stats. The reply
goes through the same mood gate and session-end handling as the reaction
loop, and the exchange is recorded as a TERMINAL_CHAT event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jacobs_office.client import ClientError, JacobsClient, RateLimitedError
from jacobs_office.config import GameConfig
from jacobs_office.events import JACOBS_LOG, EventLog, make_event
from jacobs_office.models import ChatMessage, ChatReply
from jacobs_office.state import MoodStore, PhaseState, Session, Wallet, session_stats

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "THE TERMINAL APPEARS TO BE EXPERIENCING TECHNICAL DIFFICULTIES."
INSUFFICIENT_BUCKS = "INSUFFICIENT BUCKS"


def rate_limited_message(retry_after: int) -> str:
    return f"RATE LIMITED, RETRY IN {retry_after}S"


@dataclass
class ChatOutcome:
    reply: str | None
    mood: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TerminalChat:
    def __init__(
        self,
        *,
        client: JacobsClient,
        events: EventLog,
        mood: MoodStore,
        session: Session,
        phase: PhaseState,
        wallet: Wallet,
        config: GameConfig = GameConfig(),
    ) -> None:
        self._client = client
        self._events = events
        self._mood = mood
        self._session = session
        self._phase = phase
        self._wallet = wallet
        self._config = config
        self.history: list[ChatMessage] = []
        self._busy = False

    async def send(self, message: str) -> ChatOutcome:
        text = message.strip()
        current_mood = self._mood.mood
        if not text:
            return ChatOutcome(reply=None, mood=current_mood, error="EMPTY MESSAGE")
        if self._busy:
            return ChatOutcome(reply=None, mood=current_mood, error="TERMINAL BUSY")
        if not self._session.is_playing:
            return ChatOutcome(reply=None, mood=current_mood, error="SESSION OVER")
        if not self._wallet.spend(self._config.chat_cost):
            return ChatOutcome(reply=None, mood=current_mood, error=INSUFFICIENT_BUCKS)

        self._busy = True
        try:
            self.history.append(ChatMessage(role="player", text=text))
            try:
                reply = await self._client.chat(
                    text,
                    self.history[-self._config.chat_history_limit:],
                    current_mood,
                    self._events.recent(JACOBS_LOG, self._config.chat_event_limit),
                    self._phase.current_job,
                    session_stats(self._phase, self._wallet),
                )
            except RateLimitedError as e:
                self.history.pop()
                self._wallet.add(self._config.chat_cost)
                logger.info("jacobs-chat rate limited, refunded, retry in %ss", e.retry_after)
                return ChatOutcome(reply=None, mood=current_mood, error=rate_limited_message(e.retry_after))
            except (ClientError, TimeoutError) as e:
                logger.warning("jacobs-chat failed, using fallback: %s", e)
                reply = ChatReply(reply=FALLBACK_REPLY, mood=current_mood)

            self.history.append(ChatMessage(role="jacobs", text=reply.reply))

            if not self._session.is_playing:
                return ChatOutcome(reply=reply.reply, mood=self._mood.mood)

            new_mood = self._mood.propose(reply.mood)
            self._events.record_event(make_event("TERMINAL_CHAT", {
                "playerMessage": text,
                "jacobsReply": reply.reply,
                "resultMood": new_mood,
            }))
            if reply.game_end != "NONE":
                self._session.end(reply.game_end, reply.reply)
            return ChatOutcome(reply=reply.reply, mood=new_mood)
        finally:
            self._busy = False
