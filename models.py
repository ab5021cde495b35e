"""Data model for the calculator: legs, the Total row and the edit selection."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional

from config import DEFAULT_INCOME, DEFAULT_PROFIT_PERCENTAGE, MIN_LEG_COUNT


@dataclass(frozen=True, order=True)
class LegID:
    """Opaque leg handle; ordering follows issuance order."""

    value: int

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Leg:
    """One betting outcome.  ``stake``/``odds`` hold raw user text."""

    id: LegID
    active: bool = False
    stake: str = ""
    odds: str = ""
    income: str = DEFAULT_INCOME

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["id"] = self.id.value
        return payload


@dataclass(frozen=True)
class Total:
    """The aggregate row."""

    active: bool = False
    stake: str = ""
    profit_percentage: str = DEFAULT_PROFIT_PERCENTAGE

    def to_dict(self) -> dict:
        return asdict(self)


SELECTION_NONE = "none"
SELECTION_TOTAL = "total"
SELECTION_LEG = "leg"


@dataclass(frozen=True)
class Selection:
    """Which field the user is driving: nothing, the Total stake or one leg."""

    kind: str = SELECTION_NONE
    leg_id: Optional[LegID] = None

    def __post_init__(self) -> None:
        if self.kind not in (SELECTION_NONE, SELECTION_TOTAL, SELECTION_LEG):
            raise ValueError(f"Unknown selection kind {self.kind!r}")
        if (self.kind == SELECTION_LEG) != (self.leg_id is not None):
            raise ValueError("A leg selection needs exactly one leg id")

    @classmethod
    def none(cls) -> "Selection":
        return cls(SELECTION_NONE)

    @classmethod
    def total(cls) -> "Selection":
        return cls(SELECTION_TOTAL)

    @classmethod
    def leg(cls, leg_id: LegID) -> "Selection":
        return cls(SELECTION_LEG, leg_id)

    @property
    def is_none(self) -> bool:
        return self.kind == SELECTION_NONE

    @property
    def is_total(self) -> bool:
        return self.kind == SELECTION_TOTAL

    @property
    def is_leg(self) -> bool:
        return self.kind == SELECTION_LEG

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "leg_id": self.leg_id.value if self.leg_id is not None else None,
        }


@dataclass(frozen=True)
class VisibleRange:
    """The ``[0, count)`` prefix of the ordered legs that is in play."""

    count: int = MIN_LEG_COUNT
    start: int = field(default=0, init=False)

    def indexes(self, length: Optional[int] = None) -> range:
        """Indexes inside the range, clipped to ``length`` when given."""
        stop = self.count if length is None else min(self.count, length)
        return range(self.start, max(self.start, stop))

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.count
