"""Tests for jacobs_office.reaction — firing rules and committing reactions."""

import asyncio

import pytest

from jacobs_office.client import ClientError, RateLimitedError
from jacobs_office.config import GameConfig
from jacobs_office.events import JACOBS_LOG, PHASE_LOG, make_event
from jacobs_office.models import Reaction, SessionStats
from jacobs_office.reaction import ReactionLoop


@pytest.fixture
def loop(client, events, mood, speech, session, phase, world, wallet, clock) -> ReactionLoop:
    return ReactionLoop(
        client=client,
        events=events,
        mood=mood,
        speech=speech,
        session=session,
        phase=phase,
        world=world,
        wallet=wallet,
        config=GameConfig(),
        clock=clock,
    )


def _record(events, count: int) -> None:
    for i in range(count):
        events.record_event(make_event("PICKUP", {"itemName": f"Thing {i}"}))


# ---------------------------------------------------------------------------
# Firing rules
# ---------------------------------------------------------------------------

class TestShouldFire:
    def test_empty_log_never_fires(self, loop, clock) -> None:
        clock.advance(600)
        assert not loop.should_fire()

    def test_event_threshold(self, loop, events) -> None:
        _record(events, 4)
        assert not loop.should_fire()
        _record(events, 1)
        assert loop.should_fire()

    def test_time_threshold(self, loop, events, clock) -> None:
        _record(events, 1)
        clock.advance(29.9)
        assert not loop.should_fire()
        clock.advance(0.1)
        assert loop.should_fire()

    def test_held_during_review(self, loop, events, phase) -> None:
        _record(events, 5)
        phase.review_in_progress = True
        assert not loop.should_fire()

    def test_held_during_major_speech(self, loop, events, speech, clock) -> None:
        _record(events, 5)
        speech.say("SORT THE FILES.", title="SORT THE FILES", duration=8)
        assert not loop.should_fire()
        clock.advance(8)
        assert loop.should_fire()

    def test_minor_speech_does_not_block(self, loop, events, speech) -> None:
        _record(events, 5)
        speech.say("HMM.")
        assert loop.should_fire()

    def test_not_after_session_end(self, loop, events, session) -> None:
        _record(events, 5)
        session.end("FIRED")
        assert not loop.should_fire()


# ---------------------------------------------------------------------------
# Processing
# ---------------------------------------------------------------------------

class TestProcess:
    async def test_drains_and_sends(self, loop, client, events, job, phase) -> None:
        phase.start(job)
        client.react.return_value = Reaction(speech="I AM WATCHING.", mood="SUSPICIOUS")
        _record(events, 5)

        reaction = await loop.tick()

        assert reaction is not None
        assert events.size(JACOBS_LOG) == 0
        assert events.size(PHASE_LOG) == 5
        sent_events, current_mood, world_state, current_job, stats = client.react.await_args.args
        assert len(sent_events) == 5
        assert current_mood == "NEUTRAL"
        assert "coffee-1" in world_state
        assert current_job == job
        assert isinstance(stats, SessionStats)

    async def test_commits_mood_and_speech(self, loop, client, events, mood, speech) -> None:
        client.react.return_value = Reaction(speech="I AM WATCHING.", mood="SUSPICIOUS")
        _record(events, 5)
        await loop.tick()
        assert mood.mood == "SUSPICIOUS"
        assert speech.current.text == "I AM WATCHING."
        assert not speech.current.is_major

    async def test_mood_gate(self, loop, client, events, mood) -> None:
        client.react.return_value = Reaction(speech="AAAA.", mood="UNHINGED")
        _record(events, 5)
        await loop.tick()
        assert mood.mood == "NEUTRAL"

    async def test_placeholder_speech_not_shown(self, loop, client, events, speech) -> None:
        client.react.return_value = Reaction(speech="...", mood="BORED")
        _record(events, 5)
        await loop.tick()
        assert speech.current is None

    async def test_effects_by_name(self, loop, client, events, world) -> None:
        client.react.return_value = Reaction(
            speech="BURN.",
            mood="FURIOUS",
            effects=[
                {"type": "CHANGE_STATE", "targetName": "coffee machine", "newState": "BURNING"},
                {"type": "CHANGE_STATE", "targetName": "Jacuzzi", "newState": "FLOODED"},
            ],
        )
        _record(events, 5)
        await loop.tick()
        assert world.current_state("coffee-1") == "BURNING"
        assert world.resolve_name("Jacuzzi") is None

    async def test_game_end(self, loop, client, events, session) -> None:
        client.react.return_value = Reaction(speech="YOU'RE FIRED.", mood="BORED", game_end="FIRED")
        _record(events, 5)
        await loop.tick()
        assert session.status == "LOST"
        assert session.end_type == "FIRED"
        assert session.end_speech == "YOU'RE FIRED."

        _record(events, 5)
        assert await loop.tick() is None
        client.react.assert_awaited_once()

    @pytest.mark.parametrize("error", [ClientError("down"), RateLimitedError(30), TimeoutError()])
    async def test_fallback_on_failure(self, loop, client, events, mood, speech, world, error) -> None:
        client.react.side_effect = error
        _record(events, 5)

        reaction = await loop.tick()

        assert reaction.speech == "..."
        assert reaction.effects == []
        assert mood.mood == "NEUTRAL"
        assert speech.current is None
        assert world.current_state("coffee-1") == "UNPOWERED"
        assert not loop.running
        assert events.size(JACOBS_LOG) == 0

    async def test_time_threshold_resets_after_fire(self, loop, client, events, clock) -> None:
        client.react.return_value = Reaction(speech="OK.", mood="NEUTRAL")
        _record(events, 1)
        clock.advance(30)
        await loop.tick()
        _record(events, 1)
        assert not loop.should_fire()
        clock.advance(30)
        assert loop.should_fire()


# ---------------------------------------------------------------------------
# In-flight behaviour
# ---------------------------------------------------------------------------

class TestInFlight:
    async def test_one_call_at_a_time(self, loop, client, events) -> None:
        gate = asyncio.Event()

        async def blocked(*args):
            await gate.wait()
            return Reaction(speech="FINE.", mood="NEUTRAL")

        client.react.side_effect = blocked
        _record(events, 5)
        first = asyncio.create_task(loop.tick())
        await asyncio.sleep(0)
        assert loop.running

        _record(events, 5)
        assert await loop.tick() is None

        gate.set()
        await first
        client.react.assert_awaited_once()
        # events recorded mid-flight wait for the next batch
        assert events.size(JACOBS_LOG) == 5
        assert loop.should_fire()

    async def test_session_end_mid_call_discards(self, loop, client, events, session, mood, world) -> None:
        async def end_first(*args):
            session.end("ESCAPED", "COME BACK.")
            return Reaction(
                speech="HELLO.",
                mood="BORED",
                effects=[{"type": "CHANGE_STATE", "targetName": "Printer", "newState": "BROKEN"}],
            )

        client.react.side_effect = end_first
        _record(events, 5)

        assert await loop.tick() is None
        assert mood.mood == "NEUTRAL"
        assert world.current_state("printer-1") == "UNLOCKED"
        assert session.end_type == "ESCAPED"
