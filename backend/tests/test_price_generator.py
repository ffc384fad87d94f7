"""
Tests for the random-walk price feed.
"""
import random

import pytest

from services.price_generator import next_price


class FixedRandom(random.Random):
    """Random source whose uniform() always returns the same draw."""

    def __init__(self, draw):
        super().__init__(0)
        self.draw = draw

    def uniform(self, a, b):
        return self.draw


class TestNextPrice:
    def test_flat_asset_does_not_move(self):
        assert next_price(100.0, 0.0, 0.0, random.Random(1)) == 100.0

    def test_max_up_move(self):
        # r = 1, vol 2% -> +2%
        assert next_price(100.0, 0.02, 0.0, FixedRandom(1.0)) == pytest.approx(102.0)

    def test_max_down_move(self):
        assert next_price(100.0, 0.02, 0.0, FixedRandom(-1.0)) == pytest.approx(98.0)

    def test_trend_bias_is_scaled(self):
        # trend 0.1 -> +0.01% per step when the random draw is 0
        assert next_price(3000.0, 0.02, 0.1, FixedRandom(0.0)) == pytest.approx(3000.3)

    def test_negative_trend_drifts_down(self):
        assert next_price(150.0, 0.04, -0.05, FixedRandom(0.0)) < 150.0

    def test_move_bounded_by_volatility(self):
        rng = random.Random(42)
        for _ in range(500):
            price = next_price(1000.0, 0.04, 0.0, rng)
            assert 960.0 <= price <= 1040.0

    def test_seeded_sequence_is_reproducible(self):
        a, b = random.Random(99), random.Random(99)
        price_a = price_b = 60000.0
        for _ in range(100):
            price_a = next_price(price_a, 0.015, 0.05, a)
            price_b = next_price(price_b, 0.015, 0.05, b)
        assert price_a == price_b

    def test_long_walk_stays_positive(self):
        """No clamping, but a sub-100% volatility can never cross zero."""
        rng = random.Random(3)
        price = 150.0
        for _ in range(5000):
            price = next_price(price, 0.04, -0.05, rng)
        assert price > 0
