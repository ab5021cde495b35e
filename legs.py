"""Leg identifiers, the leg arena and the row-count policy.

Legs are never deleted while a session lives.  Shrinking the number of
outcomes only moves the visible boundary, so growing it again brings back
whatever the user had typed into the hidden legs.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from config import MAX_LEG_COUNT, MIN_LEG_COUNT, default_leg_count
from models import Leg, LegID, VisibleRange

logger = logging.getLogger(__name__)


class RowCountError(ValueError):
    """Raised when a leg count outside ``[MIN_LEG_COUNT, MAX_LEG_COUNT]`` is requested."""

    def __init__(self, count: object) -> None:
        super().__init__(
            f"Leg count must be between {MIN_LEG_COUNT} and {MAX_LEG_COUNT}, got {count!r}"
        )
        self.count = count


class LegIDGenerator:
    """Issues strictly increasing leg ids, starting at 0."""

    def __init__(self) -> None:
        self._next = 0

    def make(self) -> LegID:
        leg_id = LegID(self._next)
        self._next += 1
        return leg_id

    @property
    def issued(self) -> int:
        return self._next


def validate_leg_count(count: object) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise RowCountError(count)
    if count < MIN_LEG_COUNT or count > MAX_LEG_COUNT:
        raise RowCountError(count)
    return count


def create_legs(
    count: int, generator: LegIDGenerator
) -> Tuple[Dict[LegID, Leg], List[LegID]]:
    """Build the initial legs; the first ``MIN_LEG_COUNT`` start active."""
    validate_leg_count(count)
    legs_by_id: Dict[LegID, Leg] = {}
    ordered_ids: List[LegID] = []
    for index in range(count):
        leg_id = generator.make()
        legs_by_id[leg_id] = Leg(id=leg_id, active=index < MIN_LEG_COUNT)
        ordered_ids.append(leg_id)
    return legs_by_id, ordered_ids


def set_visible_count(
    count: int,
    legs_by_id: Dict[LegID, Leg],
    ordered_ids: List[LegID],
    generator: LegIDGenerator,
) -> Tuple[List[LegID], VisibleRange]:
    """Grow the arena up to ``count`` legs and return the new visible range.

    ``legs_by_id`` is extended in place with any freshly created legs; the
    returned id list is a new list.  Nothing is ever removed.
    """
    validate_leg_count(count)
    ordered = list(ordered_ids)
    while len(ordered) < count:
        leg_id = generator.make()
        legs_by_id[leg_id] = Leg(id=leg_id, active=False)
        ordered.append(leg_id)
    return ordered, VisibleRange(count)


class LegStore:
    """Arena of legs keyed by id plus the visible prefix length.

    Mutations are serialized with a lock; callers that need several steps to
    be atomic hold :attr:`lock` themselves.
    """

    def __init__(self, count: Optional[int] = None, generator: Optional[LegIDGenerator] = None) -> None:
        self._generator = generator or LegIDGenerator()
        initial = default_leg_count() if count is None else count
        self._legs_by_id, self._ordered_ids = create_legs(initial, self._generator)
        self._visible = VisibleRange(initial)
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def visible_range(self) -> VisibleRange:
        return self._visible

    @property
    def visible_count(self) -> int:
        return self._visible.count

    @property
    def ordered_ids(self) -> List[LegID]:
        return list(self._ordered_ids)

    @property
    def visible_ids(self) -> List[LegID]:
        return self._ordered_ids[: self._visible.count]

    def ordered_legs(self) -> List[Leg]:
        return [self._legs_by_id[leg_id] for leg_id in self._ordered_ids]

    def visible_legs(self) -> List[Leg]:
        return [self._legs_by_id[leg_id] for leg_id in self.visible_ids]

    def get(self, leg_id: LegID) -> Optional[Leg]:
        return self._legs_by_id.get(leg_id)

    def __contains__(self, leg_id: object) -> bool:
        return leg_id in self._legs_by_id

    def __len__(self) -> int:
        return len(self._ordered_ids)

    def is_visible(self, leg_id: LegID) -> bool:
        try:
            return self._ordered_ids.index(leg_id) in self._visible
        except ValueError:
            return False

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_visible_count(self, count: int) -> List[LegID]:
        """Apply the row-count policy and return the full ordered id list."""
        with self.lock:
            try:
                ordered, visible = set_visible_count(
                    count, self._legs_by_id, self._ordered_ids, self._generator
                )
            except RowCountError:
                logger.warning("Rejected leg count %r", count)
                raise
            created = len(ordered) - len(self._ordered_ids)
            self._ordered_ids = ordered
            self._visible = visible
            if created:
                logger.debug("Created %d leg(s); %d stored", created, len(ordered))
            return list(self._ordered_ids)

    def replace(self, leg: Leg) -> None:
        with self.lock:
            if leg.id not in self._legs_by_id:
                raise KeyError(leg.id)
            self._legs_by_id[leg.id] = leg

    def replace_many(self, legs: Iterable[Leg]) -> None:
        with self.lock:
            for leg in legs:
                self.replace(leg)
