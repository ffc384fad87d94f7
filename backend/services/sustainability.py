"""
Sustainability score: a 0-100 health reading of portfolio risk.
"""
import math
from typing import Iterable

from schemas.game import Position

LEVERAGE_PENALTY_PER_X = 10
EXPOSURE_WARNING_RATIO = 0.5
EXPOSURE_WARNING_PENALTY = 20
EXPOSURE_CRITICAL_RATIO = 0.8
EXPOSURE_CRITICAL_PENALTY = 30


def calculate_sustainability(positions: Iterable[Position], balance: float) -> int:
    """Score open positions against free balance.

    100 for an empty book. Average leverage above 1x costs 10 points per x;
    committing more than half of equity as collateral costs 20 more, and
    more than 80% costs a further 30.
    """
    positions = list(positions)
    if not positions:
        return 100

    score = 100.0

    avg_leverage = sum(p.leverage for p in positions) / len(positions)
    score -= (avg_leverage - 1) * LEVERAGE_PENALTY_PER_X

    total_collateral = sum(p.collateral for p in positions)
    equity = balance + total_collateral
    exposure_ratio = total_collateral / equity if equity > 0 else 1.0
    if exposure_ratio > EXPOSURE_WARNING_RATIO:
        score -= EXPOSURE_WARNING_PENALTY
    if exposure_ratio > EXPOSURE_CRITICAL_RATIO:
        score -= EXPOSURE_CRITICAL_PENALTY

    if not math.isfinite(score):
        return 0
    # Halves round up
    return int(max(0, min(100, math.floor(score + 0.5))))
