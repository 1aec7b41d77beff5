"""Tests for jacobs_office.game — wiring, tickers and score submission."""

import asyncio
import random
from unittest.mock import AsyncMock

from jacobs_office.config import GameConfig
from jacobs_office.game import OfficeGame
from jacobs_office.interactions import Item
from jacobs_office.models import InteractionResult, Reaction

FAST = GameConfig(first_phase_delay=0, poll_interval=0.01, tick_interval=0.01, phase_duration=100)


class TestLifecycle:
    async def test_start_assigns_first_job(self, client, catalog) -> None:
        game = OfficeGame(client, catalog, config=FAST, rng=random.Random(1))
        await game.start()
        try:
            await asyncio.sleep(0.1)
            assert game.started
            assert game.phase.status == "WORKING"
            assert game.phase.number == 1
            assert game.phase.time_remaining < 100
            assert game.phase.game_time_minutes > 540
        finally:
            await game.stop()
        assert not game.started

    async def test_start_twice_is_noop(self, client, catalog) -> None:
        game = OfficeGame(client, catalog, config=FAST)
        await game.start()
        runners = list(game._runners)
        await game.start()
        assert game._runners == runners
        await game.stop()


class TestWiring:
    async def test_interactions_feed_reactions(self, client, catalog, clock) -> None:
        game = OfficeGame(client, catalog, clock=clock)
        game.world.register_object("printer-1", "Printer", ["ELECTRONIC"], catalog_id="printer")
        client.interact.return_value = InteractionResult(description="Beep.")
        client.react.return_value = Reaction(speech="STOP TOUCHING THE PRINTER.", mood="SUSPICIOUS")

        mug = Item("mug", "Mug", ["GLASS"])
        for _ in range(5):
            await game.interactions.use(mug, "printer-1")
        reaction = await game.reactions.tick()

        assert reaction.speech == "STOP TOUCHING THE PRINTER."
        assert len(client.react.await_args.args[0]) == 5
        assert game.mood.mood == "SUSPICIOUS"
        assert game.speech.current.text == "STOP TOUCHING THE PRINTER."


class TestLeaderboard:
    async def test_submitted_once_on_session_end(self, client, catalog) -> None:
        leaderboard = AsyncMock()
        game = OfficeGame(client, catalog, leaderboard=leaderboard, player_name="DANA")
        game.wallet.add(7)

        game.session.end("FIRED", "BYE.")
        game.session.end("PROMOTED", "JK.")
        await asyncio.sleep(0)

        leaderboard.submit_score.assert_awaited_once()
        entry = leaderboard.submit_score.await_args.args[0]
        assert entry.player_name == "DANA"
        assert entry.bucks == 7
        assert entry.end_type == "FIRED"
        assert entry.phases_survived == 0
        assert entry.time_survived_minutes == 0
        assert entry.jacobs_mood == "NEUTRAL"

    async def test_submit_failure_is_logged(self, client, catalog) -> None:
        leaderboard = AsyncMock()
        leaderboard.submit_score.side_effect = RuntimeError("offline")
        game = OfficeGame(client, catalog, leaderboard=leaderboard)
        game.session.end("TIME_UP")
        await asyncio.sleep(0)
        leaderboard.submit_score.assert_awaited_once()

    async def test_no_leaderboard(self, client, catalog) -> None:
        game = OfficeGame(client, catalog)
        game.session.end("ESCAPED")
        await asyncio.sleep(0)
        assert game.leaderboard_entry().end_type == "ESCAPED"


class TestVending:
    async def test_vending_spends_game_wallet(self, client, catalog) -> None:
        items = [catalog[0]]
        game = OfficeGame(client, catalog, item_catalog=items, rng=random.Random(1))
        game.wallet.add(6)

        result = game.vending.vend()

        assert result.success
        assert game.wallet.bucks == 1
        assert game.inventory.items == [result.item]

    async def test_no_item_catalog(self, client, catalog) -> None:
        game = OfficeGame(client, catalog)
        game.wallet.add(5)
        assert not game.vending.vend().success
        assert game.wallet.bucks == 5
