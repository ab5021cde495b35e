"""Tests for arbitrage.py: surebet math helpers."""

import unittest
from arbitrage import (
    distribute_total_stake,
    guaranteed_payout,
    implied_weights,
    profit_percent,
    stakes_for_payout,
    weight_sum,
)


class TestImpliedWeights(unittest.TestCase):
    def test_even_money(self):
        self.assertEqual(implied_weights([2.0, 2.0]), [0.5, 0.5])

    def test_weight_sum_two_way(self):
        # 1/2.5 + 1/1.8 = 0.4 + 0.5556
        self.assertAlmostEqual(weight_sum([2.5, 1.8]), 0.955556, places=5)


class TestGuaranteedPayout(unittest.TestCase):
    def test_genuine_arbitrage_pays_more_than_staked(self):
        self.assertGreater(guaranteed_payout(100.0, [2.1, 2.1]), 100.0)

    def test_no_arbitrage_pays_less(self):
        self.assertLess(guaranteed_payout(100.0, [1.9, 1.9]), 100.0)

    def test_three_way_arbitrage(self):
        self.assertGreater(guaranteed_payout(100.0, [3.5, 3.5, 3.5]), 100.0)

    def test_no_prices(self):
        self.assertEqual(guaranteed_payout(100.0, []), 0.0)


class TestStakeDistribution(unittest.TestCase):
    def test_total_split_pays_equally(self):
        prices = [2.5, 1.8, 7.0]
        stakes = distribute_total_stake(500.0, prices)
        self.assertAlmostEqual(sum(stakes), 500.0, places=9)
        payouts = [s * p for s, p in zip(stakes, prices)]
        for payout in payouts:
            self.assertAlmostEqual(payout, payouts[0], places=9)
        self.assertAlmostEqual(payouts[0], guaranteed_payout(500.0, prices), places=9)

    def test_stakes_for_payout(self):
        self.assertEqual(stakes_for_payout(100.0, [2.0, 4.0]), [50.0, 25.0])

    def test_profit_percent(self):
        self.assertAlmostEqual(profit_percent(104.65, 100.0), 4.65, places=6)
        self.assertAlmostEqual(profit_percent(95.0, 100.0), -5.0, places=6)

    def test_profit_percent_zero_stake(self):
        self.assertEqual(profit_percent(100.0, 0.0), 0.0)


if __name__ == "__main__":
    unittest.main()
