"""
Token reader behavioral tests.

Scope
- Validate that the cursor skips the program name and moves forward one token at a time.
- Validate the end sentinel (identity, falsiness, repr and rich rendering).
- Validate the single-step rewind contract.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from rich.text import Text

from arbor.tokens import TokenReader, end


class TestTokenReader(TestCase):
    """Behavioral tests for TokenReader."""

    def testSkipsProgramName(self):
        reader = TokenReader(["foo", "a", "b"])
        self.assertEqual(reader.next(), "a")
        self.assertEqual(reader.next(), "b")
        self.assertIs(reader.next(), end)

    def testEndIsSticky(self):
        reader = TokenReader(["foo"])
        self.assertIs(reader.next(), end)
        self.assertIs(reader.next(), end)
        self.assertEqual(reader.position, 0)

    def testEmptyVector(self):
        self.assertIs(TokenReader([]).next(), end)

    def testRewindUnconsumesOneToken(self):
        reader = TokenReader(["foo", "a", "b"])
        self.assertEqual(reader.next(), "a")
        reader.rewind()
        self.assertEqual(reader.next(), "a")
        self.assertEqual(reader.remaining, ["b"])

    def testDoubleRewindRejected(self):
        reader = TokenReader(["foo", "a", "b"])
        reader.next()
        reader.next()
        reader.rewind()
        with self.assertRaises(RuntimeError):
            reader.rewind()

    def testRewindBeforeNextRejected(self):
        with self.assertRaises(RuntimeError):
            TokenReader(["foo", "a"]).rewind()

    def testRewindAfterEndRejected(self):
        reader = TokenReader(["foo"])
        reader.next()
        with self.assertRaises(RuntimeError):
            reader.rewind()

    def testPositionTracksConsumedTokens(self):
        reader = TokenReader(["foo", "a", "b"])
        self.assertEqual(reader.position, 0)
        reader.next()
        self.assertEqual(reader.position, 1)
        reader.next()
        self.assertEqual(reader.position, 2)
        reader.rewind()
        self.assertEqual(reader.position, 1)

    def testEmptyStringIsAToken(self):
        reader = TokenReader(["foo", ""])
        token = reader.next()
        self.assertEqual(token, "")
        self.assertIsNot(token, end)

    def testNonStringTokenRejected(self):
        with self.assertRaises(TypeError):
            TokenReader(["foo", 1])


class TestEndSentinel(TestCase):
    """Behavioral tests for the end-of-input sentinel."""

    def testFalsy(self):
        self.assertFalse(end)

    def testSingleton(self):
        self.assertIs(type(end)(), end)

    def testRepr(self):
        self.assertEqual(repr(end), "(end)")

    def testRich(self):
        rendered = end.__rich__()
        self.assertIsInstance(rendered, Text)
        self.assertEqual(rendered.plain, "(end)")


if __name__ == "__main__":
    unittest.main()
