"""
Tests for the shared helpers.

This module verifies:
- Unset: singleton identity, falsy semantics, finality.
- coalesce: only Unset is replaced.
- rename: both call forms.
- mirror: read-only views over private containers.
- ordinal: words up to ten, suffixed numbers after.
"""
import copy
import unittest
from types import MappingProxyType
from unittest import TestCase

from argtag.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        Every construction returns the one Unset instance.
        """
        self.assertIs(Unset, UnsetType())
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        """
        Unset is falsy yet distinct from None and 0.
        """
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)

    def testRepr(self) -> None:
        """
        Unset renders as its bare name.
        """
        self.assertEqual(repr(Unset), "Unset")

    def testCopyKeepsIdentity(self) -> None:
        """
        Shallow and deep copies return Unset itself.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFinal(self) -> None:
        """
        UnsetType cannot be subclassed.
        """
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-811
                pass


class HelpersTest(TestCase):
    """
    Test suite for coalesce, rename, mirror and ordinal.
    """

    def testCoalesceReplacesOnlyUnset(self) -> None:
        """
        Only Unset is replaced; other falsy values are kept.
        """
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")
        self.assertIsNone(coalesce(Unset))

    def testRenameFunctionForm(self) -> None:
        """
        rename(function, name) renames in place and returns the function.
        """
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecoratorForm(self) -> None:
        """
        rename(name) works as a decorator.
        """
        @rename("uint8")
        def converter(value):
            return value

        self.assertEqual(converter.__name__, "uint8")

    def testRenameRejectsBadArguments(self) -> None:
        """
        rename rejects missing, non-callable and non-string arguments.
        """
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(len, 1)

    def testMirrorReadOnlyViews(self) -> None:
        """
        mirror exposes tuple, mapping proxy and frozenset views.
        """
        class Holder:
            items = mirror("items")
            table = mirror("table")
            names = mirror("names")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._names = {"x"}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.names, frozenset({"x"}))
        with self.assertRaises(TypeError):
            holder.table["b"] = 2  # type: ignore[index]
        with self.assertRaises(AttributeError):
            holder.items = ()  # type: ignore[misc]

    def testOrdinal(self) -> None:
        """
        Ordinals are words up to ten and suffixed numbers after.
        """
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")


if __name__ == "__main__":
    unittest.main()
