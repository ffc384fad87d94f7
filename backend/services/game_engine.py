"""
Simulation orchestrator.

Composes the price feed, position ledger, sustainability scorer and quest
board into three transition functions over GameState snapshots:
tick, open_position and close_position. Each takes a snapshot and returns
a new one; the input is never modified. Randomness and wall-clock time are
injected so runs can be replayed from a seed.
"""
from __future__ import annotations

import logging
import math
import random
import time
import uuid
from typing import Callable, NamedTuple, Optional

from config import Settings
from schemas.game import Asset, AssetSymbol, GameState, PositionType, PricePoint, Quest
from services import position_ledger, quest_engine
from services.catalog import ASSETS, INITIAL_QUESTS
from services.price_generator import next_price
from services.quest_engine import QuestUpdate
from services.sustainability import calculate_sustainability

logger = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class ActionOutcome(NamedTuple):
    state: GameState
    accepted: bool
    reason: Optional[str] = None
    position_id: Optional[str] = None


class GameEngine:
    """Pure state transitions for one game."""

    def __init__(
        self,
        settings: Settings,
        assets: Optional[dict[AssetSymbol, Asset]] = None,
        quests: Optional[tuple[Quest, ...]] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = wall_clock_ms,
    ):
        self.settings = settings
        self.assets = assets if assets is not None else ASSETS
        self.initial_quests = quests if quests is not None else INITIAL_QUESTS
        self.rng = rng if rng is not None else random.Random(settings.random_seed)
        self.clock = clock
        self.history_capacity = max(1, settings.history_capacity)
        self.liquidation_threshold = settings.liquidation_threshold_pct
        self.max_leverage = min(settings.max_leverage, position_ledger.MAX_LEVERAGE)

    # ── INITIAL STATE ──────────────────────────────────────────────────

    def initial_state(self) -> GameState:
        now = self.clock()
        return GameState(
            balance=self.settings.initial_balance,
            eco_tokens=0,
            sustainability_score=100,
            positions=(),
            planted_trees=(),
            prices={symbol: asset.price for symbol, asset in self.assets.items()},
            quests=tuple(self.initial_quests),
            market_history={
                symbol: (PricePoint(time=now, price=asset.price),)
                for symbol, asset in self.assets.items()
            },
        )

    # ── TICK ───────────────────────────────────────────────────────────

    def tick(self, state: GameState) -> GameState:
        """Advance the market one step. Balance is never touched here."""
        now = self.clock()

        # 1. Prices + bounded history
        prices = dict(state.prices)
        history = dict(state.market_history)
        for symbol, current in state.prices.items():
            asset = self.assets.get(symbol)
            if asset is None:
                continue
            price = next_price(current, asset.volatility, asset.trend, self.rng)
            prices[symbol] = price
            samples = history.get(symbol, ()) + (PricePoint(time=now, price=price),)
            history[symbol] = samples[-self.history_capacity:]

        # 2. Mark to market, drop liquidations (collateral forfeited)
        positions, liquidated = position_ledger.mark_positions(
            state.positions, prices, self.liquidation_threshold
        )
        for position in liquidated:
            logger.info(
                "Liquidated %s %s %dx at %.2f%% (collateral %.2f lost)",
                position.type.value, position.symbol.value, position.leverage,
                position.pnl_percent, position.collateral,
            )

        # 3. Score from survivors and the unchanged balance
        score = calculate_sustainability(positions, state.balance)

        # 4. Passive quests
        update = quest_engine.on_tick(state.quests, positions)

        return self._with_quests(
            state,
            update,
            prices=prices,
            market_history=history,
            positions=positions,
            sustainability_score=score,
            tick=state.tick + 1,
            recent_liquidations=tuple(p.id for p in liquidated),
        )

    # ── ACTIONS ────────────────────────────────────────────────────────

    def open_position(
        self,
        state: GameState,
        symbol: AssetSymbol,
        direction: PositionType,
        amount: float,
        leverage: int,
    ) -> ActionOutcome:
        """Post `amount` as collateral on a new position. Invalid requests are no-ops."""
        reason = self._validate_open(state, symbol, amount, leverage)
        if reason:
            logger.info("Rejected open %s %s: %s", direction.value, symbol.value, reason)
            return ActionOutcome(state=state, accepted=False, reason=reason)

        position = position_ledger.open_position(
            position_id=self._new_id(),
            symbol=symbol,
            direction=direction,
            collateral=amount,
            leverage=leverage,
            current_price=state.prices[symbol],
            timestamp=self.clock(),
            coordinates=position_ledger.random_coordinates(
                self.rng, self.settings.ground_size, self.settings.placement_margin
            ),
        )
        positions = state.positions + (position,)
        balance = state.balance - amount

        update = quest_engine.on_position_opened(state.quests, direction, len(positions))
        logger.info(
            "Opened %s %s %dx collateral=%.2f entry=%.4f id=%s",
            direction.value, symbol.value, leverage, amount, position.entry_price, position.id,
        )

        new_state = self._with_quests(
            state,
            update,
            balance=balance,
            positions=positions,
            sustainability_score=calculate_sustainability(positions, balance),
        )
        return ActionOutcome(state=new_state, accepted=True, position_id=position.id)

    def close_position(self, state: GameState, position_id: str) -> ActionOutcome:
        """Close an open position and release collateral + pnl. Unknown ids are no-ops."""
        position = next((p for p in state.positions if p.id == position_id), None)
        if position is None:
            return ActionOutcome(state=state, accepted=False, reason="Position not found")

        released = position_ledger.close_position(position)
        balance = state.balance + released
        positions = tuple(p for p in state.positions if p.id != position_id)

        planted_trees = state.planted_trees
        tree = position_ledger.plant_tree(position, self.clock())
        if tree is not None:
            planted_trees = planted_trees + (tree,)

        update = quest_engine.on_position_closed(state.quests, position.pnl_percent)
        logger.info(
            "Closed %s %s id=%s pnl=%.2f (%.2f%%) released=%.2f",
            position.type.value, position.symbol.value, position.id,
            position.pnl, position.pnl_percent, released,
        )

        new_state = self._with_quests(
            state,
            update,
            balance=balance,
            positions=positions,
            planted_trees=planted_trees,
            sustainability_score=calculate_sustainability(positions, balance),
        )
        return ActionOutcome(state=new_state, accepted=True, position_id=position.id)

    # ── HELPERS ────────────────────────────────────────────────────────

    def _validate_open(
        self, state: GameState, symbol: AssetSymbol, amount: float, leverage: int
    ) -> Optional[str]:
        if symbol not in state.prices:
            return "Unknown asset"
        if not math.isfinite(amount) or amount <= 0:
            return "Amount must be positive"
        if amount > state.balance:
            return "Insufficient balance"
        if isinstance(leverage, bool) or not isinstance(leverage, int):
            return "Leverage must be a whole number"
        if not 1 <= leverage <= self.max_leverage:
            return f"Leverage must be between 1 and {self.max_leverage}"
        price = state.prices[symbol]
        if not math.isfinite(price) or price <= 0:
            return "Market price unavailable"
        return None

    def _new_id(self) -> str:
        return uuid.UUID(int=self.rng.getrandbits(128), version=4).hex[:12]

    def _with_quests(self, state: GameState, update: QuestUpdate, **changes) -> GameState:
        """Copy `state` with `changes`, the new quest board and any rewards credited."""
        if update.newly_completed:
            logger.info(
                "Quests completed: %s (+%d ECO)", ", ".join(update.completed_ids), update.reward
            )
        return state.model_copy(update={
            **changes,
            "quests": update.quests,
            "eco_tokens": state.eco_tokens + update.reward,
            "version": state.version + 1,
        })
