# python
"""
Utilities module behavioral tests.

Scope
- Validate the Unset sentinel (singleton, falsy, printable, sealed, copy/pickle stable).
- Validate coalesce/rename/mirror helpers.
- Validate the message helpers pluralize/ordinal used by fault messages.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from unittest import TestCase

from fluentopt.utils import Unset, UnsetType, coalesce, rename, mirror, pluralize, ordinal


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testUnsetIsFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testUnsetRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnsetSurvivesCopies(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnsetInUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(3, str | Unset)


class TestHelpers(TestCase):
    """Behavioral tests for coalesce/rename/mirror."""

    def testCoalesceReplacesUnsetOnly(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRenameDirectForm(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecoratorForm(self):
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(len, 42)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorIsReadOnly(self):
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = 7

        holder = Holder()
        self.assertEqual(holder.value, 7)
        with self.assertRaises(AttributeError):
            holder.value = 8

    def testMirrorRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestMessageHelpers(TestCase):
    """Behavioral tests for pluralize/ordinal."""

    def testPluralizeRegularWord(self):
        self.assertEqual(pluralize("argument"), "arguments")

    def testPluralizeConsonantY(self):
        self.assertEqual(pluralize("missing entry"), "missing entries")

    def testPluralizeKeepsCasing(self):
        self.assertEqual(pluralize("Switch"), "Switches")
        self.assertEqual(pluralize("KEY"), "KEYS")

    def testPluralizeUncountable(self):
        self.assertEqual(pluralize("news"), "news")

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(112), "112th")

    def testOrdinalRejectsBadInput(self):
        with self.assertRaises(ValueError):
            ordinal(0)
        with self.assertRaises(TypeError):
            ordinal(True)
        with self.assertRaises(TypeError):
            ordinal("1")


if __name__ == "__main__":
    unittest.main()
