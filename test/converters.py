"""
Conversion registry behavioral tests.

Scope
- Validate the built-in converters (bool vocabulary, integer widths, floats).
- Validate annotation resolution (builtins, sized aliases, optional, any, user types).
- Validate registration rules (no override, private copies).

Conventions
- Test method names follow CamelCase per project convention.
- The default registry is never mutated; registrations go to fresh instances.
"""
import math
import unittest
from dataclasses import dataclass
from typing import Any, Optional
from unittest import TestCase

from argtag import (
    Kind,
    Converters,
    default_converters,
    register,
    boolean,
    kindname,
    int8,
    int16,
    int32,
    uint8,
    uint16,
    uint64,
    float32,
)
from argtag.faults import ConverterExistsError


@dataclass
class Point:
    x: int
    y: int


def point(value):
    x, y = value.split(",")
    return Point(int(x), int(y))


class TestBuiltins(TestCase):
    """Behavioral tests for the built-in converters."""

    def setUp(self):
        self.converters = Converters()

    def convert(self, kind, value):
        return self.converters.lookup(kind)(value)

    def testBooleanVocabulary(self):
        for value in ("1", "t", "T", "true", "TRUE", "True"):
            with self.subTest(value=value):
                self.assertIs(boolean(value), True)
        for value in ("0", "f", "F", "false", "FALSE", "False"):
            with self.subTest(value=value):
                self.assertIs(boolean(value), False)
        for value in ("", "yes", "no", "2", "on"):
            with self.subTest(value=value), self.assertRaises(ValueError):
                boolean(value)

    def testStringAndAnyKeepRawText(self):
        self.assertEqual(self.convert(Kind.STRING, " spaced value "), " spaced value ")
        self.assertEqual(self.convert(Kind.ANY, "42"), "42")

    def testSignedWidths(self):
        self.assertEqual(self.convert(Kind.INT8, "127"), 127)
        self.assertEqual(self.convert(Kind.INT8, "-128"), -128)
        self.assertEqual(self.convert(Kind.INT16, "+32767"), 32767)
        self.assertEqual(self.convert(Kind.INT32, "-2147483648"), -2147483648)
        self.assertEqual(self.convert(Kind.INT64, "9223372036854775807"), 9223372036854775807)
        self.assertEqual(self.convert(Kind.INT, "-9223372036854775808"), -9223372036854775808)
        for kind, value in (
            (Kind.INT8, "128"),
            (Kind.INT8, "-129"),
            (Kind.INT16, "32768"),
            (Kind.INT32, "2147483648"),
            (Kind.INT64, "9223372036854775808"),
            (Kind.INT, "-9223372036854775809"),
        ):
            with self.subTest(kind=kind, value=value), self.assertRaises(ValueError):
                self.convert(kind, value)

    def testUnsignedWidths(self):
        self.assertEqual(self.convert(Kind.UINT8, "255"), 255)
        self.assertEqual(self.convert(Kind.UINT16, "65535"), 65535)
        self.assertEqual(self.convert(Kind.UINT64, "18446744073709551615"), 18446744073709551615)
        self.assertEqual(self.convert(Kind.UINT, "0"), 0)
        for kind, value in (
            (Kind.UINT8, "256"),
            (Kind.UINT8, "-1"),
            (Kind.UINT32, "4294967296"),
            (Kind.UINT64, "18446744073709551616"),
            (Kind.UINT8, "+5"),
            (Kind.UINT8, "-0"),
            (Kind.UINT, "+0"),
        ):
            with self.subTest(kind=kind, value=value), self.assertRaises(ValueError):
                self.convert(kind, value)

    def testIntegersAreBaseTen(self):
        for value in ("0x10", "1e3", "1_000", " 5", "5 ", "", "1.0", "five"):
            with self.subTest(value=value), self.assertRaises(ValueError):
                self.convert(Kind.INT, value)

    def testFloats(self):
        self.assertEqual(self.convert(Kind.FLOAT64, "1.5"), 1.5)
        self.assertEqual(self.convert(Kind.FLOAT64, "-2e3"), -2000.0)
        self.assertEqual(self.convert(Kind.FLOAT32, "0.5"), 0.5)
        self.assertAlmostEqual(self.convert(Kind.FLOAT32, "0.1"), 0.1, places=6)
        self.assertTrue(math.isinf(self.convert(Kind.FLOAT64, "inf")))
        for kind, value in (
            (Kind.FLOAT32, "3.5e38"),
            (Kind.FLOAT32, "1e39"),
            (Kind.FLOAT32, "-1e39"),
            (Kind.FLOAT64, "1e400"),
            (Kind.FLOAT64, "1_0.5"),
            (Kind.FLOAT64, " 1.5"),
            (Kind.FLOAT64, "abc"),
        ):
            with self.subTest(kind=kind, value=value), self.assertRaises(ValueError):
                self.convert(kind, value)


class TestResolve(TestCase):
    """Behavioral tests for Converters.resolve."""

    def setUp(self):
        self.converters = Converters()

    def testBuiltinTypes(self):
        self.assertEqual(self.converters.resolve(str), (Kind.STRING, False))
        self.assertEqual(self.converters.resolve(bool), (Kind.BOOL, False))
        self.assertEqual(self.converters.resolve(int), (Kind.INT, False))
        self.assertEqual(self.converters.resolve(float), (Kind.FLOAT64, False))

    def testSizedAliases(self):
        self.assertEqual(self.converters.resolve(int8), (Kind.INT8, False))
        self.assertEqual(self.converters.resolve(int16), (Kind.INT16, False))
        self.assertEqual(self.converters.resolve(int32), (Kind.INT32, False))
        self.assertEqual(self.converters.resolve(uint8), (Kind.UINT8, False))
        self.assertEqual(self.converters.resolve(uint64), (Kind.UINT64, False))
        self.assertEqual(self.converters.resolve(float32), (Kind.FLOAT32, False))

    def testOptional(self):
        self.assertEqual(self.converters.resolve(int | None), (Kind.INT, True))
        self.assertEqual(self.converters.resolve(Optional[str]), (Kind.STRING, True))
        self.assertEqual(self.converters.resolve(uint16 | None), (Kind.UINT16, True))

    def testWideUnionIsNotOptional(self):
        kind, optional = self.converters.resolve(int | str | None)
        self.assertFalse(optional)
        self.assertIsNone(self.converters.lookup(kind))

    def testAny(self):
        self.assertEqual(self.converters.resolve(Any), (Kind.ANY, False))
        self.assertEqual(self.converters.resolve(object), (Kind.ANY, False))

    def testUserType(self):
        self.assertEqual(self.converters.resolve(Point), (Point, False))
        self.assertEqual(self.converters.resolve(Point | None), (Point, True))
        self.assertIsNone(self.converters.lookup(Point))


class TestRegistration(TestCase):
    """Behavioral tests for converter registration."""

    def testRegisterUserType(self):
        converters = Converters()
        self.assertIs(converters.register(Point, point), point)
        self.assertIn(Point, converters)
        self.assertEqual(converters.lookup(Point)("1,2"), Point(1, 2))

    def testRegisterTwiceFails(self):
        converters = Converters()
        converters.register(Point, point)
        with self.assertRaises(ConverterExistsError):
            converters.register(Point, point)
        with self.assertRaises(ConverterExistsError):
            converters.register(Kind.INT, int)

    def testDefaultRegistryRefusesOverride(self):
        with self.assertRaises(ConverterExistsError):
            register(Kind.STRING, str)
        self.assertIs(default_converters.lookup(Kind.STRING)("x"), "x")

    def testRegisterRequiresCallable(self):
        with self.assertRaises(TypeError):
            Converters().register(Point, "not callable")

    def testCopyIsIndependent(self):
        base = Converters()
        clone = base.copy()
        clone.register(Point, point)
        self.assertIn(Point, clone)
        self.assertNotIn(Point, base)
        self.assertEqual(len(clone), len(base) + 1)

    def testEmptyRegistry(self):
        converters = Converters(builtins=False)
        self.assertEqual(len(converters), 0)
        self.assertIsNone(converters.lookup(Kind.STRING))

    def testKindname(self):
        self.assertEqual(kindname(Kind.UINT16), "uint16")
        self.assertEqual(kindname(Point), "Point")


if __name__ == "__main__":
    unittest.main()
