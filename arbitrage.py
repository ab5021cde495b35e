"""Surebet arithmetic over already-parsed decimal odds.

Everything here works in full float precision; rounding belongs to the
presentation layer (``parsing.format_amount``).
"""

from __future__ import annotations

from typing import List, Sequence


def implied_weights(prices: Sequence[float]) -> List[float]:
    """Return ``1 / price`` for each outcome (the implied probability weight)."""
    return [1.0 / p for p in prices]


def weight_sum(prices: Sequence[float]) -> float:
    """Sum of implied weights; below 1.0 means a genuine arbitrage."""
    return sum(implied_weights(prices))


def guaranteed_payout(total_stake: float, prices: Sequence[float]) -> float:
    """Payout every outcome returns when ``total_stake`` is split evenly by weight."""
    inverse_sum = weight_sum(prices)
    if inverse_sum <= 0:
        return 0.0
    return total_stake / inverse_sum


def distribute_total_stake(total_stake: float, prices: Sequence[float]) -> List[float]:
    """Split ``total_stake`` so ``stake_i * price_i`` is the same for every outcome."""
    weights = implied_weights(prices)
    inverse_sum = sum(weights)
    if inverse_sum <= 0:
        return [0.0 for _ in prices]
    return [total_stake * w / inverse_sum for w in weights]


def stakes_for_payout(payout: float, prices: Sequence[float]) -> List[float]:
    """Stakes that each return exactly ``payout`` at their price."""
    return [payout / p for p in prices]


def profit_percent(payout: float, total_stake: float) -> float:
    """Return ``(payout / total_stake - 1) * 100``; 0 for a non-positive stake."""
    if total_stake <= 0:
        return 0.0
    return (payout / total_stake - 1.0) * 100
