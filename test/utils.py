# python
"""
Utility helpers tests (Unset, coalesce, rename, mirror, DeclarationType).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from zscripts.utils import DeclarationType, Unset, UnsetType, coalesce, mirror, rename


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testUnionSupport(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(None, str | Unset))


class TestCoalesce(TestCase):

    def testOnlyUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class TestRename(TestCase):

    def testDirectForm(self):
        def f():
            pass

        self.assertIs(rename(f, "g"), f)
        self.assertEqual(f.__name__, "g")
        self.assertEqual(f.__qualname__, "g")

    def testDecoratorForm(self):
        @rename("h")
        def f():
            pass

        self.assertEqual(f.__name__, "h")

    def testArgumentChecks(self):
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):

    def testContainersAreCopied(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = {"a": [1, 2], "b": (3,)}

        holder = Holder()
        holder.items["a"].append(3)
        self.assertEqual(holder.items, {"a": [1, 2], "b": (3,)})

    def testReadOnly(self):
        class Holder:
            value = mirror("value")
            _value = 1

        with self.assertRaises(AttributeError):
            Holder().value = 2


class TestDeclarationType(TestCase):

    def testTypenameReprAndSealing(self):
        class SampleThing(metaclass=DeclarationType):
            __introspectable__ = ("size",)

            def __init__(self, size):
                self._size = size
                self.__sealed__ = True

        thing = SampleThing(3)
        self.assertEqual(SampleThing.__typename__, "sample-thing")
        self.assertEqual(thing.size, 3)
        self.assertEqual(repr(thing), "sample-thing(size=3)")
        self.assertEqual(list(thing.__rich_repr__()), [("size", 3)])
        with self.assertRaises(AttributeError):
            thing.size = 4
        with self.assertRaises(AttributeError):
            thing.other = 1


if __name__ == "__main__":
    unittest.main()
