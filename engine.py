"""Recalculation engine.

``recalculate`` is a pure function: it reads the Total row, the ordered legs,
the current selection and the visible range, and returns updated copies.
``(None, None)`` means there is nothing to update this pass.

Which values are inputs depends on the selection:

* ``Selection.total()`` - the Total stake is fixed; leg stakes are derived.
* ``Selection.leg(id)`` - that leg's stake is fixed; the other leg stakes
  and the Total stake are derived.
* ``Selection.none()`` - whichever field last held the fixed role drives the
  pass again from its own text.  With no fixed role on record the stakes
  were entered freely: when every usable leg has one, the Total becomes
  their sum and each leg reports its own (unbalanced) income.

Only active legs inside the visible range with odds above 1.0 ("usable" legs)
take part.  An active visible leg with bad odds has its income reset and is
otherwise left alone; inactive or hidden legs are never written.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from arbitrage import (
    distribute_total_stake,
    guaranteed_payout,
    profit_percent,
    stakes_for_payout,
)
from config import DEFAULT_INCOME
from models import Leg, LegID, Selection, Total, VisibleRange
from parsing import format_amount, format_percent, parse_number, parse_odds, parse_stake

DIRECTION_TOTAL = "total"
DIRECTION_LEG = "leg"
DIRECTION_ROWS = "rows"

Result = Tuple[Optional[Total], Optional[List[Leg]]]
_NO_UPDATE: Result = (None, None)


def recalculate(
    total: Total,
    legs: Sequence[Leg],
    selection: Selection,
    visible_range: VisibleRange,
    last_fixed: Optional[Selection] = None,
    separator: Optional[str] = None,
) -> Result:
    """Return ``(total, legs)`` with derived values filled in, or ``(None, None)``.

    ``legs`` is the full ordered list; the returned list has the same length
    and order.  ``last_fixed`` is the most recent non-none selection and is
    only consulted when ``selection`` is none.
    """
    legs = list(legs)
    usable, excluded = _partition(legs, visible_range, separator)
    if not usable:
        return _NO_UPDATE

    direction, anchor = _resolve_direction(
        total, legs, selection, last_fixed, usable, separator
    )
    if direction == DIRECTION_TOTAL:
        return _from_total_stake(total, legs, usable, excluded, separator)
    if direction == DIRECTION_LEG and anchor is not None:
        return _from_leg_stake(total, legs, usable, excluded, anchor, separator)
    if direction == DIRECTION_ROWS:
        return _from_all_stakes(total, legs, usable, excluded, separator)
    return _NO_UPDATE


def resolve_direction(
    total: Total,
    legs: Sequence[Leg],
    selection: Selection,
    visible_range: VisibleRange,
    last_fixed: Optional[Selection] = None,
    separator: Optional[str] = None,
) -> Tuple[Optional[str], Optional[LegID]]:
    """Report what would drive a pass: ``("total", None)``, ``("leg", id)``, ``("rows", None)`` or ``(None, None)``."""
    legs = list(legs)
    usable, _ = _partition(legs, visible_range, separator)
    if not usable:
        return None, None
    direction, anchor = _resolve_direction(
        total, legs, selection, last_fixed, usable, separator
    )
    if anchor is None:
        return direction, None
    return direction, legs[anchor].id


# ---------------------------------------------------------------------------
# Leg classification
# ---------------------------------------------------------------------------

def _partition(
    legs: List[Leg], visible_range: VisibleRange, separator: Optional[str]
) -> Tuple[List[Tuple[int, float]], List[int]]:
    """Split visible active legs into usable ``(index, odds)`` pairs and excluded indexes."""
    usable: List[Tuple[int, float]] = []
    excluded: List[int] = []
    for index in visible_range.indexes(len(legs)):
        leg = legs[index]
        if not leg.active:
            continue
        odds = parse_odds(leg.odds, separator)
        if odds is None:
            excluded.append(index)
        else:
            usable.append((index, odds))
    return usable, excluded


def _usable_index(
    legs: List[Leg], usable: List[Tuple[int, float]], leg_id: Optional[LegID], separator: Optional[str]
) -> Optional[int]:
    """Index of ``leg_id`` if it is usable and holds a stake that can drive a pass."""
    if leg_id is None:
        return None
    for index, _ in usable:
        if legs[index].id == leg_id:
            if parse_stake(legs[index].stake, separator) is None:
                return None
            return index
    return None


def _resolve_direction(
    total: Total,
    legs: List[Leg],
    selection: Selection,
    last_fixed: Optional[Selection],
    usable: List[Tuple[int, float]],
    separator: Optional[str],
) -> Tuple[Optional[str], Optional[int]]:
    has_total_stake = parse_stake(total.stake, separator) is not None

    if selection.is_total:
        return (DIRECTION_TOTAL, None) if has_total_stake else (None, None)

    if selection.is_leg:
        anchor = _usable_index(legs, usable, selection.leg_id, separator)
        return (DIRECTION_LEG, anchor) if anchor is not None else (None, None)

    # No selection: the last fixed role wins; derived values are never inputs.
    if last_fixed is None:
        if all(parse_stake(legs[index].stake, separator) is not None for index, _ in usable):
            return DIRECTION_ROWS, None
        return None, None
    if last_fixed.is_leg:
        anchor = _usable_index(legs, usable, last_fixed.leg_id, separator)
        return (DIRECTION_LEG, anchor) if anchor is not None else (None, None)
    if last_fixed.is_total and has_total_stake:
        return DIRECTION_TOTAL, None
    return None, None


# ---------------------------------------------------------------------------
# Calculation directions
# ---------------------------------------------------------------------------

def _clear_excluded(updated: List[Leg], excluded: List[int]) -> None:
    for index in excluded:
        updated[index] = replace(updated[index], income=DEFAULT_INCOME)


def _from_total_stake(
    total: Total,
    legs: List[Leg],
    usable: List[Tuple[int, float]],
    excluded: List[int],
    separator: Optional[str],
) -> Result:
    total_stake = parse_stake(total.stake, separator)
    if total_stake is None:
        return _NO_UPDATE
    prices = [odds for _, odds in usable]
    stakes = distribute_total_stake(total_stake, prices)
    payout = guaranteed_payout(total_stake, prices)

    updated = list(legs)
    for (index, odds), stake in zip(usable, stakes):
        updated[index] = replace(
            legs[index],
            stake=format_amount(stake, separator),
            income=format_amount(stake * odds - total_stake, separator),
        )
    _clear_excluded(updated, excluded)

    new_total = replace(
        total,
        profit_percentage=format_percent(profit_percent(payout, total_stake), separator),
    )
    return new_total, updated


def _from_leg_stake(
    total: Total,
    legs: List[Leg],
    usable: List[Tuple[int, float]],
    excluded: List[int],
    anchor: int,
    separator: Optional[str],
) -> Result:
    anchor_stake = parse_stake(legs[anchor].stake, separator)
    if anchor_stake is None:
        return _NO_UPDATE
    anchor_odds = next(odds for index, odds in usable if index == anchor)
    payout = anchor_stake * anchor_odds

    derived = stakes_for_payout(payout, [odds for _, odds in usable])
    stakes = {
        index: anchor_stake if index == anchor else stake
        for (index, _), stake in zip(usable, derived)
    }
    # Excluded legs still hold money; count whatever they last had.
    carried = sum(parse_number(legs[index].stake, separator) or 0.0 for index in excluded)
    total_stake = sum(stakes.values()) + carried
    income = format_amount(payout - total_stake, separator)

    updated = list(legs)
    for index, stake in stakes.items():
        if index == anchor:
            updated[index] = replace(legs[index], income=income)
        else:
            updated[index] = replace(
                legs[index], stake=format_amount(stake, separator), income=income
            )
    _clear_excluded(updated, excluded)

    new_total = replace(
        total,
        stake=format_amount(total_stake, separator),
        profit_percentage=format_percent(profit_percent(payout, total_stake), separator),
    )
    return new_total, updated


def _from_all_stakes(
    total: Total,
    legs: List[Leg],
    usable: List[Tuple[int, float]],
    excluded: List[int],
    separator: Optional[str],
) -> Result:
    stakes = [parse_stake(legs[index].stake, separator) for index, _ in usable]
    if any(stake is None for stake in stakes):
        return _NO_UPDATE
    carried = sum(parse_number(legs[index].stake, separator) or 0.0 for index in excluded)
    total_stake = sum(stakes) + carried
    payouts = [stake * odds for stake, (_, odds) in zip(stakes, usable)]

    updated = list(legs)
    for (index, _), payout in zip(usable, payouts):
        updated[index] = replace(
            legs[index], income=format_amount(payout - total_stake, separator)
        )
    _clear_excluded(updated, excluded)

    # Unbalanced stakes: the smallest payout is the guaranteed one.
    new_total = replace(
        total,
        stake=format_amount(total_stake, separator),
        profit_percentage=format_percent(profit_percent(min(payouts), total_stake), separator),
    )
    return new_total, updated
