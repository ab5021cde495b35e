"""Tests for parsing.py: text field parse/validate contract and formatting."""

import os
import unittest
from unittest.mock import patch

from parsing import (
    format_amount,
    format_percent,
    is_valid_number,
    is_valid_odds,
    parse_number,
    parse_odds,
    parse_stake,
)


class TestParseNumber(unittest.TestCase):
    def test_plain_integer(self):
        self.assertEqual(parse_number("100", "."), 100.0)

    def test_period_decimal(self):
        self.assertEqual(parse_number("2.5", "."), 2.5)

    def test_half_typed_values(self):
        self.assertEqual(parse_number("12.", "."), 12.0)
        self.assertEqual(parse_number(".5", "."), 0.5)

    def test_comma_only_with_comma_locale(self):
        self.assertIsNone(parse_number("2,5", "."))
        self.assertEqual(parse_number("2,5", ","), 2.5)

    def test_period_always_accepted(self):
        self.assertEqual(parse_number("2.5", ","), 2.5)

    def test_empty_and_none_are_absent(self):
        self.assertIsNone(parse_number("", "."))
        self.assertIsNone(parse_number("   ", "."))
        self.assertIsNone(parse_number(None, "."))

    def test_rejects_garbage(self):
        for text in ["abc", "-5", "+5", "1.2.3", "1e5", "nan", "inf", "1 000"]:
            with self.subTest(text=text):
                self.assertIsNone(parse_number(text, "."))

    def test_uses_env_separator_by_default(self):
        with patch.dict(os.environ, {"SUREBET_DECIMAL_SEPARATOR": ","}):
            self.assertEqual(parse_number("1,25"), 1.25)


class TestOddsAndStakes(unittest.TestCase):
    def test_odds_must_exceed_one(self):
        self.assertIsNone(parse_odds("1", "."))
        self.assertIsNone(parse_odds("0.5", "."))
        self.assertEqual(parse_odds("1.01", "."), 1.01)

    def test_stake_must_be_positive(self):
        self.assertIsNone(parse_stake("0", "."))
        self.assertEqual(parse_stake("0.01", "."), 0.01)


class TestValidationHelpers(unittest.TestCase):
    def test_empty_is_valid_number(self):
        self.assertTrue(is_valid_number("", "."))

    def test_non_negative_is_valid(self):
        self.assertTrue(is_valid_number("0", "."))
        self.assertTrue(is_valid_number("12.34", "."))

    def test_negative_and_text_invalid(self):
        self.assertFalse(is_valid_number("-1", "."))
        self.assertFalse(is_valid_number("abc", "."))

    def test_valid_odds(self):
        self.assertTrue(is_valid_odds("1.5", "."))
        self.assertFalse(is_valid_odds("1.0", "."))
        self.assertFalse(is_valid_odds("", "."))
        self.assertFalse(is_valid_odds("abc", "."))


class TestFormatting(unittest.TestCase):
    def test_two_decimals(self):
        self.assertEqual(format_amount(41.860465, "."), "41.86")
        self.assertEqual(format_amount(50, "."), "50.00")

    def test_negative_zero_folded(self):
        self.assertEqual(format_amount(-0.000001, "."), "0.00")
        self.assertEqual(format_percent(-1e-12, "."), "0.00")

    def test_negative_values_kept(self):
        self.assertEqual(format_percent(-5.2631, "."), "-5.26")

    def test_comma_separator(self):
        self.assertEqual(format_amount(58.1395, ","), "58,14")


if __name__ == "__main__":
    unittest.main()
