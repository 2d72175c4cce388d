import unittest

from utils.common_helpers import clamp, parse_flag, parse_int, parse_symbols, safe_float


class QueryParsingTests(unittest.TestCase):
    def test_parse_int_takes_leading_integer(self) -> None:
        self.assertEqual(parse_int("25", 20), 25)
        self.assertEqual(parse_int(" 25abc", 20), 25)
        self.assertEqual(parse_int("-4", 24), -4)
        self.assertEqual(parse_int("abc", 20), 20)
        self.assertEqual(parse_int("", 20), 20)
        self.assertEqual(parse_int(None, 5), 5)

    def test_parse_flag_only_accepts_true_values(self) -> None:
        for raw in ("true", "TRUE", "1", "yes", " on "):
            self.assertTrue(parse_flag(raw), raw)
        for raw in (None, "", "false", "0", "maybe", "yes please"):
            self.assertFalse(parse_flag(raw), raw)

    def test_parse_symbols(self) -> None:
        self.assertEqual(parse_symbols("aapl, msft,,", ["SPY"]), ["aapl", "msft"])
        self.assertEqual(parse_symbols(" , ", ["SPY"]), ["SPY"])
        self.assertEqual(parse_symbols(None, ["SPY"]), ["SPY"])


class NumericHelperTests(unittest.TestCase):
    def test_safe_float(self) -> None:
        self.assertEqual(safe_float("1.5%"), 1.5)
        self.assertIsNone(safe_float("n/a"))
        self.assertIsNone(safe_float(float("nan")))

    def test_clamp(self) -> None:
        self.assertEqual(clamp(500, 1, 100), 100)
        self.assertEqual(clamp(0, 1, 100), 1)


if __name__ == "__main__":
    unittest.main()
