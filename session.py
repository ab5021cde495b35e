"""Calculator session: the single owner of the legs, the Total row and the selection.

Every user action goes through :class:`CalculatorSession`, which updates the
raw text, records the selection, runs one recalculation pass and then tells
subscribers what changed.

Usage
-----
    from session import CalculatorSession
    calc = CalculatorSession(leg_count=2)
    first, second = calc.store.visible_ids
    calc.set_leg_odds(first, "2.5")
    calc.set_leg_odds(second, "1.8")
    calc.set_total_stake("100")
    calc.total.profit_percentage   # "4.65"
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple, Union

from config import (
    DEFAULT_INCOME,
    DEFAULT_PROFIT_PERCENTAGE,
    MAX_LEG_COUNT,
    MIN_LEG_COUNT,
    decimal_separator,
)
from engine import recalculate
from legs import LegStore
from models import Leg, LegID, Selection, Total
from parsing import format_amount, parse_number
from selector import EditSelector

logger = logging.getLogger(__name__)

FIELD_TOTAL_STAKE = "total_stake"
FIELD_LEG_STAKE = "leg_stake"
FIELD_LEG_ODDS = "leg_odds"
FIELDS = (FIELD_TOTAL_STAKE, FIELD_LEG_STAKE, FIELD_LEG_ODDS)

LegRef = Union[LegID, int]


class SessionError(Exception):
    """Raised for recoverable session issues."""


class UnknownLegError(SessionError, KeyError):
    """The leg id does not belong to this session."""


class LegNotVisibleError(SessionError):
    """The leg exists but is outside the visible range."""


class UnknownFieldError(SessionError, ValueError):
    """The field name is not one of :data:`FIELDS`."""


@dataclass(frozen=True)
class SessionEvent:
    kind: str
    leg_id: Optional[LegID] = None
    recalculated: bool = False


SessionListener = Callable[[SessionEvent], None]


class CalculatorSession:
    """Thread-safe calculator controller; all state changes happen under one lock."""

    def __init__(
        self,
        leg_count: Optional[int] = None,
        separator: Optional[str] = None,
        store: Optional[LegStore] = None,
    ) -> None:
        self._store = store or LegStore(leg_count)
        self._separator = separator or decimal_separator()
        self._total = Total(active=True)
        self._selector = EditSelector(Selection.total())
        self._lock = threading.RLock()
        self._listeners: List[SessionListener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def store(self) -> LegStore:
        return self._store

    @property
    def total(self) -> Total:
        return self._total

    @property
    def selection(self) -> Selection:
        return self._selector.current

    @property
    def selector(self) -> EditSelector:
        return self._selector

    @property
    def separator(self) -> str:
        return self._separator

    def legs(self) -> List[Leg]:
        """Visible legs in display order."""
        with self._lock:
            return self._store.visible_legs()

    def leg(self, leg_id: LegRef) -> Leg:
        with self._lock:
            return self._leg(leg_id)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "total": self._total.to_dict(),
                "legs": [leg.to_dict() for leg in self._store.visible_legs()],
                "selection": self._selector.current.to_dict(),
                "visible_count": self._store.visible_count,
                "stored_leg_count": len(self._store),
                "min_leg_count": MIN_LEG_COUNT,
                "max_leg_count": MAX_LEG_COUNT,
                "decimal_separator": self._separator,
            }

    def is_field_disabled(self, field: str, leg_id: Optional[LegRef] = None) -> bool:
        """Whether the UI should lock ``field`` given the current selection."""
        if field not in FIELDS:
            raise UnknownFieldError(field)
        selection = self._selector.current
        if field == FIELD_LEG_ODDS:
            return False
        if field == FIELD_TOTAL_STAKE:
            return not selection.is_total
        if selection.is_none:
            return False
        if selection.is_leg and leg_id is not None:
            return selection.leg_id != _as_leg_id(leg_id)
        return True

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    # ------------------------------------------------------------------
    # Text edits
    # ------------------------------------------------------------------

    def set_total_stake(self, text: str) -> None:
        text = text or ""
        with self._lock:
            if self._total.stake != text and not self._selector.current.is_total:
                self._apply_selection(Selection.total())
            self._total = replace(self._total, stake=text)
            if not text.strip():
                self._clear_derived(clear_total_stake=False)
            changed = self._recalculate()
        logger.debug("Total stake set to %r", text)
        self._emit(SessionEvent(FIELD_TOTAL_STAKE, recalculated=changed))

    def set_leg_stake(self, leg_id: LegRef, text: str) -> None:
        """Edit a leg stake.

        With a Total or leg selected, the edited leg becomes the fixed stake.
        With nothing selected the stakes are entered freely: no field is
        fixed and the Total becomes the sum of the stakes.
        """
        text = text or ""
        with self._lock:
            leg = self._visible_leg(leg_id)
            free_entry = self._selector.current.is_none
            if free_entry:
                self._selector.release()
            else:
                selection = Selection.leg(leg.id)
                if leg.stake != text and self._selector.current != selection:
                    self._apply_selection(selection)
            self._store.replace(replace(leg, stake=text))
            if free_entry:
                self._total_from_stakes()
            elif not text.strip():
                self._clear_derived(clear_total_stake=True)
            changed = self._recalculate()
        logger.debug("Leg %s stake set to %r", leg.id, text)
        self._emit(SessionEvent(FIELD_LEG_STAKE, leg.id, changed))

    def set_leg_odds(self, leg_id: LegRef, text: str) -> None:
        text = text or ""
        with self._lock:
            leg = self._visible_leg(leg_id)
            self._store.replace(replace(leg, odds=text))
            changed = self._recalculate()
        logger.debug("Leg %s odds set to %r", leg.id, text)
        self._emit(SessionEvent(FIELD_LEG_ODDS, leg.id, changed))

    def clear_field(self, field: str, leg_id: Optional[LegRef] = None) -> None:
        if field == FIELD_TOTAL_STAKE:
            self.set_total_stake("")
        elif field not in FIELDS:
            raise UnknownFieldError(field)
        elif leg_id is None:
            raise UnknownLegError(leg_id)
        elif field == FIELD_LEG_STAKE:
            self.set_leg_stake(leg_id, "")
        else:
            self.set_leg_odds(leg_id, "")

    def clear_all(self) -> None:
        """Empty every stored leg and the Total row; selection and active flags stay."""
        with self._lock:
            self._store.replace_many(
                replace(leg, stake="", odds="", income=DEFAULT_INCOME)
                for leg in self._store.ordered_legs()
            )
            self._total = replace(
                self._total, stake="", profit_percentage=DEFAULT_PROFIT_PERCENTAGE
            )
        logger.debug("Cleared all fields")
        self._emit(SessionEvent("cleared"))

    # ------------------------------------------------------------------
    # Selection and participation
    # ------------------------------------------------------------------

    def select(self, selection: Selection) -> None:
        """Select a field; selecting the current selection again deselects it."""
        with self._lock:
            if selection.is_leg:
                self._visible_leg(selection.leg_id)
            if selection == self._selector.current:
                selection = Selection.none()
            self._apply_selection(selection)
            changed = self._recalculate()
        logger.debug("Selection is now %s", selection.kind)
        self._emit(SessionEvent("selection", selection.leg_id, changed))

    def focus_elsewhere(self) -> None:
        with self._lock:
            self._apply_selection(Selection.none())
            changed = self._recalculate()
        self._emit(SessionEvent("selection", recalculated=changed))

    def toggle_leg(self, leg_id: LegRef) -> bool:
        """Flip whether a leg takes part in the calculation; returns the new state."""
        with self._lock:
            leg = self._visible_leg(leg_id)
            updated = replace(leg, active=not leg.active)
            self._store.replace(updated)
            if not updated.active and self._selector.current == Selection.leg(leg.id):
                self._apply_selection(Selection.none())
            changed = self._recalculate()
        logger.debug("Leg %s active=%s", leg.id, updated.active)
        self._emit(SessionEvent("leg_active", leg.id, changed))
        return updated.active

    # ------------------------------------------------------------------
    # Row count
    # ------------------------------------------------------------------

    def set_visible_count(self, count: int) -> List[LegID]:
        """Show ``count`` legs; raises ``legs.RowCountError`` outside 2..10."""
        with self._lock:
            ordered, changed = self._resize(count)
        logger.debug("Visible leg count set to %d", count)
        self._emit(SessionEvent("visible_count", recalculated=changed))
        return ordered

    def add_leg(self) -> int:
        return self._step_visible_count(1)

    def remove_leg(self) -> int:
        return self._step_visible_count(-1)

    def _step_visible_count(self, step: int) -> int:
        with self._lock:
            count = self._store.visible_count
            target = max(MIN_LEG_COUNT, min(count + step, MAX_LEG_COUNT))
            if target == count:
                return count
            _, changed = self._resize(target)
        logger.debug("Visible leg count set to %d", target)
        self._emit(SessionEvent("visible_count", recalculated=changed))
        return target

    def _resize(self, count: int) -> Tuple[List[LegID], bool]:
        ordered = self._store.set_visible_count(count)
        self._drop_hidden_selection()
        return ordered, self._recalculate()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _leg(self, leg_id: Optional[LegRef]) -> Leg:
        if leg_id is None:
            raise UnknownLegError(leg_id)
        leg = self._store.get(_as_leg_id(leg_id))
        if leg is None:
            raise UnknownLegError(leg_id)
        return leg

    def _visible_leg(self, leg_id: Optional[LegRef]) -> Leg:
        leg = self._leg(leg_id)
        if not self._store.is_visible(leg.id):
            raise LegNotVisibleError(f"Leg {leg.id} is outside the visible range")
        return leg

    def _apply_selection(self, selection: Selection) -> None:
        self._selector.record(selection)
        if self._total.active != selection.is_total:
            self._total = replace(self._total, active=selection.is_total)

    def _drop_hidden_selection(self) -> None:
        current = self._selector.current
        if current.is_leg and not self._store.is_visible(current.leg_id):
            self._apply_selection(Selection.none())
        last_fixed = self._selector.last_fixed
        if last_fixed is not None and last_fixed.is_leg and not self._store.is_visible(last_fixed.leg_id):
            self._selector.forget(last_fixed)

    def _clear_derived(self, clear_total_stake: bool) -> None:
        """Drop derived values after the driving stake was emptied; inactive legs keep theirs."""
        self._store.replace_many(
            replace(leg, stake="", income=DEFAULT_INCOME)
            for leg in self._store.visible_legs()
            if leg.active
        )
        self._total = replace(
            self._total,
            stake="" if clear_total_stake else self._total.stake,
            profit_percentage=DEFAULT_PROFIT_PERCENTAGE,
        )

    def _total_from_stakes(self) -> None:
        stakes = [
            parse_number(leg.stake, self._separator) or 0.0
            for leg in self._store.visible_legs()
            if leg.active
        ]
        amount = sum(stakes)
        self._total = replace(
            self._total,
            stake=format_amount(amount, self._separator) if amount > 0 else "",
            profit_percentage=DEFAULT_PROFIT_PERCENTAGE,
        )

    def _recalculate(self) -> bool:
        new_total, new_legs = recalculate(
            self._total,
            self._store.ordered_legs(),
            self._selector.current,
            self._store.visible_range,
            last_fixed=self._selector.last_fixed,
            separator=self._separator,
        )
        if new_total is None and new_legs is None:
            return False
        if new_total is not None:
            self._total = new_total
        if new_legs is not None:
            visible = self._store.visible_range.indexes(len(new_legs))
            self._store.replace_many(new_legs[index] for index in visible)
        return True


def _as_leg_id(value: LegRef) -> LegID:
    if isinstance(value, LegID):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnknownLegError(value)
    return LegID(value)


# ---------------------------------------------------------------------------
# Module-level singleton (for use in app.py)
# ---------------------------------------------------------------------------

_default_session: Optional[CalculatorSession] = None
_default_lock = threading.Lock()


def get_session() -> CalculatorSession:
    """Return the module-level singleton CalculatorSession."""
    global _default_session
    with _default_lock:
        if _default_session is None:
            _default_session = CalculatorSession()
        return _default_session
