"""Edit selector: remembers which field the user is driving."""

from __future__ import annotations

from typing import Callable, List, Optional

from models import Selection

SelectionListener = Callable[[Selection, Selection], None]


class EditSelector:
    """Holds the current selection and the last non-none one.

    ``record`` does no validation.  Listeners receive ``(previous, current)``
    after every change.
    """

    def __init__(self, initial: Optional[Selection] = None) -> None:
        self._current = initial or Selection.none()
        self._last_fixed: Optional[Selection] = None if self._current.is_none else self._current
        self._listeners: List[SelectionListener] = []

    @property
    def current(self) -> Selection:
        return self._current

    @property
    def last_fixed(self) -> Optional[Selection]:
        """Most recent Total/leg selection, kept after the selection is cleared."""
        return self._last_fixed

    def record(self, selection: Optional[Selection]) -> Selection:
        previous = self._current
        current = selection or Selection.none()
        self._current = current
        if not current.is_none:
            self._last_fixed = current
        if current != previous:
            for listener in list(self._listeners):
                listener(previous, current)
        return previous

    def forget(self, selection: Selection) -> None:
        """Drop ``selection`` from the fixed-role history (e.g. its leg was hidden)."""
        if self._last_fixed == selection:
            self._last_fixed = None

    def release(self) -> None:
        """Drop the fixed-role history entirely (stakes are being entered freely)."""
        self._last_fixed = None

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
