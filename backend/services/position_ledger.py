"""
Position ledger: opening, marking to market, liquidating and closing
leveraged positions.

All functions are pure. PnL is always recomputed from entry price and the
current price, never accumulated from the previous tick.
"""
from __future__ import annotations

import math
import random
from typing import NamedTuple, Optional

from schemas.game import AssetSymbol, Coordinates, PlantedTree, Position, PositionType

DEFAULT_LIQUIDATION_THRESHOLD = -80.0
MAX_LEVERAGE = 5
MIN_TREE_SCALE = 0.5
MAX_TREE_SCALE = 2.5


class PnL(NamedTuple):
    pnl: float
    pnl_percent: float


def open_position(
    position_id: str,
    symbol: AssetSymbol,
    direction: PositionType,
    collateral: float,
    leverage: int,
    current_price: float,
    timestamp: int,
    coordinates: Coordinates,
) -> Position:
    """Build a fresh position entered at the current price. Debiting balance is the caller's job."""
    return Position(
        id=position_id,
        symbol=symbol,
        type=direction,
        entry_price=current_price,
        size=collateral * leverage,
        leverage=leverage,
        collateral=collateral,
        pnl=0.0,
        pnl_percent=0.0,
        timestamp=timestamp,
        coordinates=coordinates,
    )


def mark_to_market(position: Position, current_price: float) -> PnL:
    price_diff = current_price - position.entry_price
    direction_sign = 1 if position.type == PositionType.LONG else -1
    raw_percent = (price_diff / position.entry_price) * direction_sign * position.leverage
    return PnL(pnl=position.collateral * raw_percent, pnl_percent=raw_percent * 100)


def is_liquidated(pnl_percent: float, threshold: float = DEFAULT_LIQUIDATION_THRESHOLD) -> bool:
    # A non-finite percentage means the price feed collapsed; treat as a total loss
    if not math.isfinite(pnl_percent):
        return True
    return pnl_percent <= threshold


def close_position(position: Position) -> float:
    """Amount released back to balance when a position is closed by the user."""
    return position.collateral + position.pnl


def mark_positions(
    positions: tuple[Position, ...],
    prices: dict[AssetSymbol, float],
    threshold: float = DEFAULT_LIQUIDATION_THRESHOLD,
) -> tuple[tuple[Position, ...], tuple[Position, ...]]:
    """Re-mark every position and split into (still open, liquidated).

    Liquidated positions are returned with their final marks so callers can
    report them; their collateral is forfeited.
    """
    survivors = []
    liquidated = []
    for position in positions:
        pnl, pnl_percent = mark_to_market(position, prices[position.symbol])
        marked = position.model_copy(update={"pnl": pnl, "pnl_percent": pnl_percent})
        if is_liquidated(pnl_percent, threshold):
            liquidated.append(marked)
        else:
            survivors.append(marked)
    return tuple(survivors), tuple(liquidated)


def plant_tree(position: Position, date: int) -> Optional[PlantedTree]:
    """Profitable LONGs leave a tree behind, sized by how well they did."""
    if position.type != PositionType.LONG or position.pnl <= 0:
        return None
    scale = min(max(1 + position.pnl_percent / 100, MIN_TREE_SCALE), MAX_TREE_SCALE)
    return PlantedTree(
        id=position.id,
        x=position.coordinates.x,
        z=position.coordinates.z,
        scale=scale,
        date=date,
    )


def random_coordinates(rng: random.Random, ground_size: float, margin: float) -> Coordinates:
    """Random spot on the ground, kept `margin` away from the edges."""
    bound = max(ground_size / 2 - margin, 0.0)
    x = (rng.random() - 0.5) * 2 * bound
    z = (rng.random() - 0.5) * 2 * bound
    return Coordinates(x=x, z=z)
