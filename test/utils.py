"""
Tests for the internal helpers.

This module verifies:
- Semantic guarantees of the `Unset` sentinel (singleton, falsy, copy/pickle identity,
  finality, PEP 604 unions).
- coalesce(), rename() and mirror() behavior.
- Name and key sanitizers.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from pennant.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(Unset, UnsetType())

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testNotEqualToNoneOrFalse(self) -> None:
        """
        Falsy does not imply equality with other falsy values (None/False).
        """
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self) -> None:
        """
        str | Unset can be used in isinstance checks.
        """
        self.assertTrue(isinstance("x", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    coalesce(), rename() and mirror().
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("name", "fallback"), "name")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)

    def testRenameFunctionForm(self) -> None:
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testRenameDecoratorForm(self) -> None:
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRenameRejectsWrongArity(self) -> None:
        with self.assertRaises(TypeError):
            rename()

    def testMirrorReturnsCopies(self) -> None:
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ("a", "b")

        holder = Holder()
        items = holder.items
        items.append("c")
        self.assertEqual(holder.items, ["a", "b"])

        with self.assertRaises(AttributeError):
            holder.items = []  # type: ignore[misc]


class SanitizersTest(TestCase):
    """
    Name and key normalization.
    """

    def testIsEmpty(self) -> None:
        self.assertTrue(is_empty(""))
        self.assertTrue(is_empty(" \t\n"))
        self.assertFalse(is_empty(" x "))

    def testSanitizeLong(self) -> None:
        self.assertEqual(sanitize_long("  Port-Number "), "port-number")
        with self.assertRaises(TypeError):
            sanitize_long(1)  # type: ignore[arg-type]

    def testSanitizeShort(self) -> None:
        self.assertEqual(sanitize_short(" P "), "P")
        self.assertEqual(sanitize_short(Unset), "")

    def testSanitizeKeyWhitespace(self) -> None:
        self.assertEqual(sanitize_key(" key with white space "), "KEY_WITH_WHITE_SPACE")
        self.assertEqual(sanitize_key(" key with space "), "KEY_WITH_SPACE")
        self.assertEqual(sanitize_key("key  with\tspaces"), "KEY_WITH_SPACES")

    def testSanitizeKeyHyphens(self) -> None:
        self.assertEqual(sanitize_key("-key-with-hyphen-"), "_KEY_WITH_HYPHEN_")

    def testSanitizeKeyEmpty(self) -> None:
        self.assertEqual(sanitize_key("   "), "")


if __name__ == '__main__':
    unittest.main()
