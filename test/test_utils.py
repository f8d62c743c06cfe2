"""
Shared helper tests.

Scope
- Validate the Unset sentinel and coalesce().
- Validate the @rename decorator and the mirror() read-only properties.
- Validate ordinal labels used by fault messages.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from arbor.arguments import Option
from arbor.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal


class TestUnset(TestCase):

    def testFalsyAndSingleton(self):
        self.assertFalse(Unset)
        self.assertIs(UnsetType(), Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce("", "fallback"), "")


class TestRename(TestCase):

    def testDecoratorSetsNames(self):
        @rename("__repr__")
        def function():
            pass
        self.assertEqual(function.__name__, "__repr__")
        self.assertEqual(function.__qualname__, "__repr__")

    def testGeneratedReprIsNamed(self):
        self.assertEqual(Option.__repr__.__name__, "__repr__")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            rename(42)

    def testNonCallableRejected(self):
        with self.assertRaises(TypeError):
            rename("name")("not callable")


class TestMirror(TestCase):

    def testReturnsFreshCopies(self):
        holder = type("Holder", (), {"items": mirror("items")})()
        holder._items = {"a": [1]}
        copy = holder.items
        copy["a"].append(2)
        self.assertEqual(holder._items, {"a": [1]})

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestOrdinal(TestCase):

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(
            [ordinal(number) for number in (11, 12, 13, 21, 22, 23, 111, 101)],
            ["11th", "12th", "13th", "21st", "22nd", "23rd", "111th", "101st"],
        )


if __name__ == "__main__":
    unittest.main()
