"""Tests for jacobs_office.chat — paid terminal conversation."""

import pytest

from jacobs_office.chat import FALLBACK_REPLY, INSUFFICIENT_BUCKS, TerminalChat
from jacobs_office.client import ClientError, RateLimitedError
from jacobs_office.config import GameConfig
from jacobs_office.events import JACOBS_LOG, make_event
from jacobs_office.models import ChatReply
from jacobs_office.state import Wallet


@pytest.fixture
def wallet() -> Wallet:
    return Wallet(3)


def _chat(client, events, mood, session, phase, wallet, config=GameConfig()) -> TerminalChat:
    return TerminalChat(
        client=client,
        events=events,
        mood=mood,
        session=session,
        phase=phase,
        wallet=wallet,
        config=config,
    )


@pytest.fixture
def chat(client, events, mood, session, phase, wallet) -> TerminalChat:
    return _chat(client, events, mood, session, phase, wallet)


class TestSend:
    async def test_reply_costs_one_buck(self, chat, client, wallet, mood) -> None:
        client.chat.return_value = ChatReply(reply="GET BACK TO WORK.", mood="BORED")

        outcome = await chat.send("  can I have a raise?  ")

        assert outcome.ok
        assert outcome.reply == "GET BACK TO WORK."
        assert outcome.mood == "BORED"
        assert mood.mood == "BORED"
        assert wallet.bucks == 2
        assert [m.role for m in chat.history] == ["player", "jacobs"]
        assert chat.history[0].text == "can I have a raise?"

    async def test_records_terminal_chat_event(self, chat, client, events) -> None:
        client.chat.return_value = ChatReply(reply="NO.", mood="SMUG")
        await chat.send("raise?")
        (event,) = events.peek(JACOBS_LOG)
        assert event.type == "TERMINAL_CHAT"
        assert event.details == {"playerMessage": "raise?", "jacobsReply": "NO.", "resultMood": "SMUG"}

    async def test_mood_gate(self, chat, client, mood, events) -> None:
        client.chat.return_value = ChatReply(reply="!!!", mood="GLITCHING")
        outcome = await chat.send("hello")
        assert outcome.mood == "NEUTRAL"
        assert events.peek(JACOBS_LOG)[0].details["resultMood"] == "NEUTRAL"

    async def test_insufficient_bucks(self, client, events, mood, session, phase) -> None:
        chat = _chat(client, events, mood, session, phase, Wallet(0))
        outcome = await chat.send("hello")
        assert outcome.error == INSUFFICIENT_BUCKS
        assert not outcome.ok
        client.chat.assert_not_awaited()
        assert chat.history == []

    async def test_empty_message(self, chat, client, wallet) -> None:
        outcome = await chat.send("   ")
        assert outcome.error == "EMPTY MESSAGE"
        assert wallet.bucks == 3
        client.chat.assert_not_awaited()

    async def test_session_over(self, chat, client, session, wallet) -> None:
        session.end("FIRED")
        outcome = await chat.send("please")
        assert outcome.error == "SESSION OVER"
        assert wallet.bucks == 3
        client.chat.assert_not_awaited()

    async def test_fallback_still_charges(self, chat, client, wallet, mood) -> None:
        client.chat.side_effect = ClientError("down")
        outcome = await chat.send("hello")
        assert outcome.reply == FALLBACK_REPLY
        assert outcome.mood == "NEUTRAL"
        assert wallet.bucks == 2
        assert chat.history[-1].text == FALLBACK_REPLY

    async def test_rate_limited_is_refunded(self, chat, client, wallet, mood, events) -> None:
        client.chat.side_effect = RateLimitedError(12)
        outcome = await chat.send("hello")
        assert outcome.error == "RATE LIMITED, RETRY IN 12S"
        assert outcome.reply is None
        assert outcome.mood == mood.mood
        assert wallet.bucks == 3
        assert chat.history == []
        assert events.size(JACOBS_LOG) == 0

    async def test_game_end(self, chat, client, session) -> None:
        client.chat.return_value = ChatReply(reply="YOU'RE FIRED.", mood="BORED", game_end="FIRED")
        await chat.send("I quit")
        assert session.status == "LOST"
        assert session.end_type == "FIRED"
        assert session.end_speech == "YOU'RE FIRED."


class TestContext:
    async def test_history_is_capped(self, client, events, mood, session, phase) -> None:
        config = GameConfig(chat_history_limit=4)
        chat = _chat(client, events, mood, session, phase, Wallet(10), config)
        client.chat.return_value = ChatReply(reply="NO.", mood="NEUTRAL")

        for text in ("one", "two", "three"):
            await chat.send(text)

        history = client.chat.await_args.args[1]
        assert len(history) == 4
        assert history[-1].text == "three"

    async def test_recent_events_are_capped(self, chat, client, events) -> None:
        for i in range(20):
            events.record_event(make_event("ROOM_CHANGE", {"roomId": str(i)}))
        client.chat.return_value = ChatReply(reply="NO.", mood="NEUTRAL")

        await chat.send("what did I do?")

        recent = client.chat.await_args.args[3]
        assert len(recent) == 15
        assert recent[-1].details["roomId"] == "19"

    async def test_sends_job_and_stats(self, chat, client, phase, job) -> None:
        phase.start(job)
        client.chat.return_value = ChatReply(reply="NO.", mood="NEUTRAL")
        await chat.send("status?")
        args = client.chat.await_args.args
        assert args[4] == job
        assert args[5].bucks == 2
