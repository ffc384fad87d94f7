"""
Single-writer holder of the live GameState.

Every transition (tick, open, close, reset) reads the current snapshot,
computes the next one and swaps it in under one lock, so near-simultaneous
actions can never overwrite each other's result.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from config import Settings, get_settings
from schemas.game import AssetSymbol, GameState, PositionType
from services.game_engine import ActionOutcome, GameEngine

logger = logging.getLogger(__name__)


class GameSession:
    def __init__(self, engine: GameEngine):
        self.engine = engine
        self._lock = threading.Lock()
        self._state = engine.initial_state()

    @property
    def state(self) -> GameState:
        return self._state

    def tick(self) -> GameState:
        with self._lock:
            self._state = self.engine.tick(self._state)
            return self._state

    def open_position(
        self, symbol: AssetSymbol, direction: PositionType, amount: float, leverage: int
    ) -> ActionOutcome:
        with self._lock:
            outcome = self.engine.open_position(self._state, symbol, direction, amount, leverage)
            self._state = outcome.state
            return outcome

    def close_position(self, position_id: str) -> ActionOutcome:
        with self._lock:
            outcome = self.engine.close_position(self._state, position_id)
            self._state = outcome.state
            return outcome

    def reset(self) -> GameState:
        with self._lock:
            fresh = self.engine.initial_state()
            # Keep versions increasing so stream consumers see the reset
            self._state = fresh.model_copy(update={"version": self._state.version + 1})
            return self._state

    async def run_ticker(self, interval_seconds: float) -> None:
        """Apply one tick every `interval_seconds` until cancelled."""
        logger.info("Market ticker started (every %.2fs)", interval_seconds)
        try:
            while True:
                await asyncio.sleep(interval_seconds)
                try:
                    self.tick()
                except Exception:
                    logger.exception("Tick failed; keeping previous snapshot")
        finally:
            logger.info("Market ticker stopped")


_session: Optional[GameSession] = None
_session_lock = threading.Lock()


def create_game_session(settings: Optional[Settings] = None) -> GameSession:
    settings = settings or get_settings()
    return GameSession(GameEngine(settings))


def get_game_session() -> GameSession:
    """Dependency returning the process-wide game session."""
    global _session
    with _session_lock:
        if _session is None:
            _session = create_game_session()
        return _session
