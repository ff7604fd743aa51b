# python
"""
Flag specification tests.

Scope
- Construction-time validation of metadata (names, keys, choices, validators).
- set()/reset()/get() semantics for Scalar, Slice, Map, SliceMap and Counter.
- Validation order: parse failure, then validator, then acceptable values.
- Copy-on-write builder (__replace__) and the introspective repr.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import datetime
import unittest
from unittest import TestCase

from pennant import *


class TestConstruction(TestCase):
    """Metadata sanitizing on construction."""

    def testNamesAreNormalized(self):
        flag = Scalar("  Port ", " p ")
        self.assertEqual(flag.long, "port")
        self.assertEqual(flag.short, "p")
        self.assertEqual(flag.names, ("--port", "-p"))
        self.assertEqual(flag.display, "-p, --port")

    def testShortIsOptional(self):
        flag = Scalar("port")
        self.assertEqual(flag.short, "")
        self.assertEqual(flag.names, ("--port",))
        self.assertEqual(flag.display, "--port")

    def testShortKeepsCase(self):
        self.assertEqual(Scalar("size", "S").short, "S")

    def testInvalidLongNames(self):
        with self.assertRaises(TypeError):
            Scalar(1)  # type: ignore[arg-type]
        for long in ("", "   ", "1abc", "-port", "with space", "a=b"):
            with self.subTest(long=long):
                with self.assertRaises(ValueError):
                    Scalar(long)

    def testInvalidShortNames(self):
        for short in ("pp", "1", "-", "."):
            with self.subTest(short=short):
                with self.assertRaises(ValueError):
                    Scalar("port", short)
        with self.assertRaises(TypeError):
            Scalar("port", 1)  # type: ignore[arg-type]

    def testInvalidKind(self):
        with self.assertRaises(TypeError):
            Scalar("port", kind="int")  # type: ignore[arg-type]

    def testInvalidUsage(self):
        with self.assertRaises(TypeError):
            Scalar("port", "p", None)  # type: ignore[arg-type]

    def testKeyNormalization(self):
        self.assertEqual(str(Scalar("port", key="app port").key), "APP_PORT")
        self.assertEqual(str(Scalar("port").key), "")
        with self.assertRaises(TypeError):
            Scalar("port", key=5)  # type: ignore[arg-type]

    def testKeyInstanceIsCopied(self):
        key = Key("port")
        flag = Scalar("port", key=key)
        flag.key.prefix = "app"
        self.assertEqual(str(key), "PORT")

    def testChoicesAreParsedAndDeduplicated(self):
        self.assertEqual(Scalar("port", kind=INT, choices=("80", 443)).choices, [80, 443])
        with self.assertRaises(ValueError):
            Scalar("port", kind=INT, choices=(80, "80"))
        with self.assertRaises(ValueError):
            Scalar("port", kind=INT, choices=("http",))
        with self.assertRaises(TypeError):
            Scalar("mode", choices="abc")

    def testInvalidValidator(self):
        with self.assertRaises(TypeError):
            Scalar("port", validator=5)  # type: ignore[arg-type]

    def testNoneIsNotADefault(self):
        self.assertFalse(Scalar("port", kind=INT).has_default)
        self.assertTrue(Scalar("port", kind=INT, default=0).has_default)

    def testTextDefaultsParsedByKind(self):
        port = Scalar("port", kind=INT, default="8080")
        port.reset()
        self.assertEqual(port.value, 8080)
        self.assertEqual(port.default, 8080)

    def testInvalidTextDefault(self):
        with self.assertRaises(ValueError):
            Scalar("port", kind=INT, default="x")

    def testBareOccurrenceOfCollectionsIsBlank(self):
        for flag in (Slice("switches", kind=BOOL), Map("features", kind=BOOL), SliceMap("toggles", kind=BOOL)):
            with self.subTest(flag=flag.long):
                self.assertEqual(flag.empty, "")
        self.assertEqual(Scalar("debug", kind=BOOL).empty, "true")

    def testRepr(self):
        self.assertTrue(repr(Scalar("port", "p", kind=INT)).startswith("scalar(long='port', short='p'"))
        self.assertTrue(repr(SliceMap("days")).startswith("slice-map(long='days'"))


class TestScalar(TestCase):
    """Single-valued flags."""

    def testZeroValueBeforeResolution(self):
        self.assertEqual(Scalar("port", kind=INT).value, 0)
        self.assertIs(Scalar("debug", kind=BOOL).value, False)
        self.assertEqual(Scalar("name").value, "")
        self.assertIsNone(Scalar("address", kind=IP_ADDRESS).value)
        self.assertFalse(Scalar("port", kind=INT).is_set)

    def testSetParsesTrimmedText(self):
        flag = Scalar("port", "p", kind=INT)
        flag.set("  9090 ")
        self.assertEqual(flag.get(), 9090)
        self.assertTrue(flag.is_set)

    def testBlankBoolIsFalse(self):
        flag = Scalar("debug", kind=BOOL, default=True)
        flag.set("")
        self.assertIs(flag.value, False)
        self.assertEqual(flag.empty, "true")

    def testInvalidValueLeavesFlagUntouched(self):
        flag = Scalar("port", "p", kind=INT, default=8080)
        flag.reset()
        with self.assertRaises(InvalidValueError) as context:
            flag.set("x")
        self.assertEqual(str(context.exception), "'x' is not a valid int value for -p, --port")
        self.assertEqual(context.exception.options["code"], FaultCode.INVALID_VALUE)
        self.assertEqual(flag.value, 8080)
        self.assertFalse(flag.is_set)

    def testSetRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            Scalar("port", kind=INT).set(80)  # type: ignore[arg-type]

    def testResetAppliesDefault(self):
        flag = Scalar("timeout", kind=DURATION, default=datetime.timedelta(seconds=5))
        flag.set("1m")
        flag.reset()
        self.assertEqual(flag.value, datetime.timedelta(seconds=5))
        self.assertFalse(flag.is_set)

    def testResetWithoutDefaultIsNoop(self):
        flag = Scalar("port", kind=INT)
        flag.set("10")
        flag.reset()
        self.assertEqual(flag.value, 10)
        self.assertTrue(flag.is_set)

    def testChoices(self):
        flag = Scalar("size", "S", kind=STRING, choices=("A", "B"))
        flag.set("A")
        with self.assertRaises(OutOfRangeError) as context:
            flag.set("abc")
        self.assertEqual(
            str(context.exception),
            "abc is not an acceptable value for -S, --size. The expected values are A,B.",
        )
        self.assertEqual(context.exception.options["acceptable"], ("A", "B"))
        self.assertEqual(flag.value, "A")

    def testSingleChoiceMessage(self):
        flag = Scalar("port", kind=INT, choices=(80,))
        with self.assertRaises(OutOfRangeError) as context:
            flag.set("81")
        self.assertEqual(str(context.exception), "81 is not an acceptable value for --port. The expected value is 80.")

    def testIgnoreCaseChoices(self):
        flag = Scalar("level", choices=("Debug", "Info"), ignore_case=True)
        flag.set("debug")
        self.assertEqual(flag.value, "debug")
        strict = flag.__replace__(ignore_case=False)
        with self.assertRaises(OutOfRangeError):
            strict.set("debug")

    def testCallableValidator(self):
        def even(value):
            if value % 2:
                raise ValueError("the value must be even")

        flag = Scalar("workers", kind=INT, validator=even)
        flag.set("4")
        with self.assertRaises(ValidationError) as context:
            flag.set("3")
        self.assertEqual(str(context.exception), "the value must be even")
        self.assertIsInstance(context.exception.__cause__, ValueError)
        self.assertEqual(flag.value, 4)

    def testValidatorObject(self):
        class Seen:
            def __init__(self):
                self.values = []

            def validate(self, *values):
                self.values.append(values)

        validator = Seen()
        flag = Scalar("name", validator=validator)
        flag.set("value")
        self.assertEqual(validator.values, [("value",)])

    def testValidatorTakesPriorityOverChoices(self):
        flag = Scalar("port", kind=INT, choices=(80,), validator=lambda value: None)
        flag.set("8080")
        self.assertEqual(flag.value, 8080)

    def testNetworkValuesSkipValidationWhenBlank(self):
        flag = Scalar("address", kind=IP_ADDRESS, validator=lambda value: 1 / 0)
        flag.set("")
        self.assertIsNone(flag.value)


class TestSlice(TestCase):
    """Delimited list flags."""

    def testSplitTrimAndSkipBlanks(self):
        flag = Slice("ids", kind=INT)
        flag.set(" 1, 2,,3 ,")
        self.assertEqual(flag.value, [1, 2, 3])
        self.assertEqual(flag.typename, "[]int")

    def testBlankIsEmptyList(self):
        flag = Slice("names")
        flag.set("")
        self.assertEqual(flag.value, [])
        self.assertTrue(flag.is_set)

    def testCustomDelimiter(self):
        flag = Slice("paths", delimiter=";")
        flag.set("a,b;c")
        self.assertEqual(flag.value, ["a,b", "c"])
        self.assertEqual(flag.delimiter, ";")

    def testBadItemRejectsWholeValue(self):
        flag = Slice("ids", kind=INT, default=[7])
        flag.reset()
        with self.assertRaises(InvalidValueError):
            flag.set("1,x,3")
        self.assertEqual(flag.value, [7])

    def testChoicesApplyPerItem(self):
        flag = Slice("days", choices=("Sat", "Sun"))
        flag.set("Sat,Sun")
        with self.assertRaises(OutOfRangeError):
            flag.set("Sat,Mon")

    def testDefaultIsNotShared(self):
        default = ["a"]
        flag = Slice("names", default=default)
        flag.reset()
        default.append("b")
        flag.value.append("c")
        self.assertEqual(flag.value, ["a"])

    def testDefaultItemsParsedByKind(self):
        flag = Slice("ids", kind=INT, default=["1", 2])
        flag.reset()
        self.assertEqual(flag.value, [1, 2])

    def testDefaultMustNotBeText(self):
        with self.assertRaises(TypeError):
            Slice("names", default="abc")


class TestMap(TestCase):
    """JSON object flags."""

    def testValuesParsedByKind(self):
        flag = Map("limits", kind=INT)
        flag.set('{"cpu": "2", "memory": "512"}')
        self.assertEqual(flag.value, {"cpu": 2, "memory": 512})
        self.assertEqual(flag.typename, "[string]int")

    def testBlankIsEmptyMapping(self):
        flag = Map("labels")
        flag.set("  ")
        self.assertEqual(flag.value, {})

    def testNonObjectsRejected(self):
        flag = Map("labels")
        for text in ('["a"]', '{"a": 1}', "{broken", '"text"'):
            with self.subTest(text=text):
                with self.assertRaises(InvalidValueError):
                    flag.set(text)

    def testInvalidEntryValue(self):
        with self.assertRaises(InvalidValueError):
            Map("limits", kind=INT).set('{"cpu": "two"}')

    def testValidatorReceivesKeyAndValue(self):
        seen = []
        flag = Map("limits", kind=INT, validator=lambda key, value: seen.append((key, value)))
        flag.set('{"cpu": "2"}')
        self.assertEqual(seen, [("cpu", 2)])

    def testDefaultMustBeMapping(self):
        with self.assertRaises(TypeError):
            Map("labels", default=["a"])

    def testDefaultValuesParsedByKind(self):
        flag = Map("limits", kind=INT, default={"cpu": "2"})
        flag.reset()
        self.assertEqual(flag.value, {"cpu": 2})


class TestSliceMap(TestCase):
    """JSON object flags with delimited list values."""

    def testListsParsedByKind(self):
        flag = SliceMap("ports", kind=INT)
        flag.set('{"web": "80, 443", "db": "5432,,"}')
        self.assertEqual(flag.value, {"web": [80, 443], "db": [5432]})
        self.assertEqual(flag.typename, "[string][]int")

    def testCustomDelimiter(self):
        flag = SliceMap("days", delimiter="|")
        flag.set('{"weekend": "Sat|Sun"}')
        self.assertEqual(flag.value, {"weekend": ["Sat", "Sun"]})

    def testValidatorReceivesKeyAndItems(self):
        seen = []
        flag = SliceMap("days", validator=lambda key, items: seen.append((key, items)))
        flag.set('{"weekend": "Sat,Sun"}')
        self.assertEqual(seen, [("weekend", ["Sat", "Sun"])])

    def testChoicesApplyPerItem(self):
        flag = SliceMap("days", choices=("Sat", "Sun"))
        with self.assertRaises(OutOfRangeError):
            flag.set('{"weekend": "Sat,Mon"}')

    def testDefaultListsAreCopied(self):
        flag = SliceMap("days", default={"weekend": ("Sat", "Sun")})
        flag.reset()
        self.assertEqual(flag.value, {"weekend": ["Sat", "Sun"]})

    def testDefaultEntriesMustBeLists(self):
        with self.assertRaises(TypeError):
            SliceMap("days", default={"weekend": "Sat"})


class TestCounter(TestCase):
    """Occurrence counters."""

    def testExplicitValue(self):
        flag = Counter("verbose", "v")
        flag.set("5")
        self.assertEqual(flag.value, 5)
        self.assertEqual(flag.typename, "counter")

    def testPresenceAndRepeats(self):
        flag = Counter("verbose", "v", once=2)
        self.assertEqual(flag.empty, "2")
        self.assertEqual(flag.count(3), "6")

    def testOverflowRejected(self):
        flag = Counter("verbose", "v")
        with self.assertRaises(InvalidValueError):
            flag.set(flag.count(256))

    def testInvalidOnce(self):
        with self.assertRaises(ValueError):
            Counter("verbose", once=0)
        with self.assertRaises(TypeError):
            Counter("verbose", once=True)

    def testReplaceKeepsOnce(self):
        flag = Counter("verbose", "v", once=3).__replace__(usage="louder")
        self.assertIsInstance(flag, Counter)
        self.assertEqual(flag.once, 3)
        self.assertEqual(flag.usage, "louder")


class TestReplace(TestCase):
    """Copy-on-write builder."""

    def testReplaceBuildsFreshFlag(self):
        port = Scalar("port", "p", "the port", kind=INT, default=8080)
        port.set("1")
        strict = port.__replace__(choices=(80, 443))
        self.assertIsNot(strict, port)
        self.assertEqual(strict.choices, [80, 443])
        self.assertEqual(strict.default, 8080)
        self.assertFalse(strict.is_set)
        self.assertEqual(port.choices, [])

    def testReplaceValidatesOverrides(self):
        with self.assertRaises(ValueError):
            Scalar("port").__replace__(short="pp")


if __name__ == "__main__":
    unittest.main()
