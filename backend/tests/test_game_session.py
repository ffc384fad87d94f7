"""
Tests for the single-writer session and the periodic market ticker.
"""
import asyncio
import random
import threading

from config import Settings
from schemas.game import AssetSymbol, PositionType
from services.game_engine import GameEngine
from services.game_session import GameSession


def _make_session(seed=3):
    return GameSession(GameEngine(Settings(), rng=random.Random(seed)))


class TestGameSession:
    def test_starts_from_initial_state(self):
        session = _make_session()
        assert session.state.balance == 10000.0
        assert session.state.version == 0

    def test_concurrent_opens_are_all_applied(self):
        session = _make_session()
        barrier = threading.Barrier(20)

        def worker():
            barrier.wait()
            session.open_position(AssetSymbol.ETH, PositionType.LONG, 100.0, 2)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = session.state
        assert len(state.positions) == 20
        assert state.balance == 8000.0
        assert state.version == 20

    def test_concurrent_ticks_and_actions_keep_balance_consistent(self):
        session = _make_session()

        def ticker():
            for _ in range(50):
                session.tick()

        def trader():
            for _ in range(10):
                session.open_position(AssetSymbol.SOL, PositionType.SHORT, 50.0, 1)

        threads = [threading.Thread(target=ticker), threading.Thread(target=trader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = session.state
        assert state.tick == 50
        assert state.balance == 10000.0 - 500.0

    def test_close_goes_through_session(self):
        session = _make_session()
        opened = session.open_position(AssetSymbol.BTC, PositionType.LONG, 1000.0, 1)
        closed = session.close_position(opened.position_id)
        assert closed.accepted
        assert session.state.positions == ()

    def test_reset_restores_initial_balance_and_bumps_version(self):
        session = _make_session()
        session.open_position(AssetSymbol.ETH, PositionType.LONG, 1000.0, 1)
        version = session.state.version
        state = session.reset()
        assert state.balance == 10000.0
        assert state.positions == ()
        assert state.eco_tokens == 0
        assert state.version == version + 1

    def test_ticker_applies_ticks_until_cancelled(self):
        session = _make_session()

        async def run():
            task = asyncio.create_task(session.run_ticker(0.01))
            await asyncio.sleep(0.1)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        asyncio.run(run())
        ticks = session.state.tick
        assert ticks > 0

    def test_ticker_survives_failing_tick(self, monkeypatch):
        session = _make_session()
        calls = []

        def boom():
            calls.append(1)
            raise RuntimeError("bad tick")

        monkeypatch.setattr(session, "tick", boom)

        async def run():
            task = asyncio.create_task(session.run_ticker(0.01))
            await asyncio.sleep(0.1)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        asyncio.run(run())
        assert len(calls) > 1
