"""Tests for selector.py and the Selection model."""

import unittest

from models import LegID, Selection, VisibleRange
from selector import EditSelector


class TestSelection(unittest.TestCase):
    def test_value_equality(self):
        self.assertEqual(Selection.leg(LegID(3)), Selection.leg(LegID(3)))
        self.assertNotEqual(Selection.leg(LegID(3)), Selection.leg(LegID(4)))
        self.assertNotEqual(Selection.total(), Selection.none())

    def test_leg_requires_id(self):
        with self.assertRaises(ValueError):
            Selection("leg")
        with self.assertRaises(ValueError):
            Selection("total", LegID(1))
        with self.assertRaises(ValueError):
            Selection("bogus")

    def test_to_dict(self):
        self.assertEqual(Selection.leg(LegID(2)).to_dict(), {"kind": "leg", "leg_id": 2})
        self.assertEqual(Selection.none().to_dict(), {"kind": "none", "leg_id": None})


class TestVisibleRange(unittest.TestCase):
    def test_membership(self):
        visible = VisibleRange(3)
        self.assertIn(0, visible)
        self.assertIn(2, visible)
        self.assertNotIn(3, visible)

    def test_indexes_clipped(self):
        self.assertEqual(list(VisibleRange(5).indexes(3)), [0, 1, 2])
        self.assertEqual(list(VisibleRange(2).indexes()), [0, 1])


class TestEditSelector(unittest.TestCase):
    def test_defaults_to_none(self):
        selector = EditSelector()
        self.assertTrue(selector.current.is_none)
        self.assertIsNone(selector.last_fixed)

    def test_record_returns_previous(self):
        selector = EditSelector()
        previous = selector.record(Selection.total())
        self.assertTrue(previous.is_none)
        self.assertTrue(selector.current.is_total)

    def test_last_fixed_survives_none(self):
        selector = EditSelector()
        selector.record(Selection.leg(LegID(1)))
        selector.record(Selection.none())
        self.assertTrue(selector.current.is_none)
        self.assertEqual(selector.last_fixed, Selection.leg(LegID(1)))

    def test_latest_fixed_role_wins(self):
        selector = EditSelector()
        selector.record(Selection.leg(LegID(1)))
        selector.record(Selection.total())
        selector.record(Selection.none())
        self.assertEqual(selector.last_fixed, Selection.total())

    def test_forget(self):
        selector = EditSelector(Selection.leg(LegID(0)))
        selector.forget(Selection.leg(LegID(0)))
        self.assertIsNone(selector.last_fixed)

    def test_forget_other_selection_keeps_history(self):
        selector = EditSelector(Selection.leg(LegID(0)))
        selector.forget(Selection.leg(LegID(1)))
        self.assertEqual(selector.last_fixed, Selection.leg(LegID(0)))

    def test_release_keeps_current(self):
        selector = EditSelector(Selection.total())
        selector.record(Selection.none())
        selector.release()
        self.assertIsNone(selector.last_fixed)
        self.assertTrue(selector.current.is_none)

    def test_listeners_notified_on_change_only(self):
        selector = EditSelector()
        seen = []
        unsubscribe = selector.subscribe(lambda prev, cur: seen.append((prev.kind, cur.kind)))
        selector.record(Selection.total())
        selector.record(Selection.total())
        selector.record(None)
        self.assertEqual(seen, [("none", "total"), ("total", "none")])
        unsubscribe()
        selector.record(Selection.total())
        self.assertEqual(len(seen), 2)


if __name__ == "__main__":
    unittest.main()
