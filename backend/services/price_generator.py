"""
Random-walk price feed for the simulated assets.
"""
import random

# How strongly an asset's trend leans each step
TREND_WEIGHT = 0.001


def next_price(current_price: float, volatility: float, trend: float, rng: random.Random) -> float:
    """One uniform step: current * (1 + r*volatility + trend*0.001), r in [-1, 1].

    Unclamped: over long runs a price may drift toward zero or grow without bound.
    """
    random_move = rng.uniform(-1.0, 1.0)
    change = random_move * volatility + trend * TREND_WEIGHT
    return current_price * (1 + change)
