"""
Unit tests for the token cursor.

Cursor contract:
- consume() returns the current token and advances
- expect() fails on the first mismatch with index, expected and actual
- peek() never advances and returns None past the end
"""

import unittest

from academicsync.cursor import TokenCursor
from academicsync.errors import MalformedContentError


class TestTokenCursor(unittest.TestCase):
    def test_consume_advances(self) -> None:
        cursor = TokenCursor(["a", "b"])
        self.assertEqual(cursor.consume(), "a")
        self.assertEqual(cursor.position, 1)
        self.assertEqual(cursor.consume(), "b")
        self.assertTrue(cursor.at_end())

    def test_consume_out_of_bounds(self) -> None:
        cursor = TokenCursor(["a"])
        cursor.consume()
        with self.assertRaises(MalformedContentError) as ctx:
            cursor.consume()
        self.assertEqual(ctx.exception.index, 1)

    def test_peek_does_not_advance(self) -> None:
        cursor = TokenCursor(["a", "b"])
        self.assertEqual(cursor.peek(), "a")
        self.assertEqual(cursor.peek(), "a")
        self.assertEqual(cursor.position, 0)

    def test_peek_past_end_returns_none(self) -> None:
        cursor = TokenCursor([])
        self.assertIsNone(cursor.peek())

    def test_expect_matching_sequence(self) -> None:
        cursor = TokenCursor(["", "HEADER", "rest"])
        cursor.expect(["", "HEADER"])
        self.assertEqual(cursor.peek(), "rest")

    def test_expect_reports_first_mismatch(self) -> None:
        cursor = TokenCursor(["a", "b", "c", "X", "e"])
        with self.assertRaises(MalformedContentError) as ctx:
            cursor.expect(["a", "b", "c", "d", "e"])
        self.assertEqual(ctx.exception.index, 3)
        self.assertEqual(ctx.exception.expected, "d")
        self.assertEqual(ctx.exception.actual, "X")

    def test_expect_past_end_fails(self) -> None:
        cursor = TokenCursor(["a"])
        with self.assertRaises(MalformedContentError):
            cursor.expect(["a", "b"])


if __name__ == "__main__":
    unittest.main()
