"""
Internal utilities behavioral tests (Unset sentinel, nullify, rename, qualname).

Scope
- One Unset instance per process, surviving copy, deepcopy and pickle.
- Falsy value, stable repr, union support, no subclassing.
- Helper functions used by the binder and the dispatcher.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import pickle
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import TestCase

from sigcli.utils import UnsetType, Unset, nullify, rename, qualname


class TestUnset(TestCase):
    def testConstructorReturnsModuleInstance(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testReprAndTruthiness(self):
        self.assertEqual(repr(Unset), "Unset")
        self.assertFalse(Unset)

    def testDistinctFromOtherFalsyValues(self):
        for value in (None, False, 0, ""):
            with self.subTest(value=value):
                self.assertNotEqual(Unset, value)
                self.assertIsNot(Unset, value)

    def testCopiesAreTheSameObject(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testConcurrentConstruction(self):
        """
        constructions racing on several threads all see the module instance.
        """
        with ThreadPoolExecutor(max_workers=8) as executor:
            instances = list(executor.map(lambda _: UnsetType(), range(64)))
        self.assertTrue(all(instance is Unset for instance in instances))

    def testSubclassingIsForbidden(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnionWithTypes(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(1, str | Unset))


class TestHelpers(TestCase):
    def testNullifyReplacesUnsetOnly(self):
        self.assertEqual(nullify(Unset, 3), 3)
        self.assertIsNone(nullify(Unset))
        self.assertIsNone(nullify(None, 3))
        self.assertEqual(nullify(0, 3), 0)

    def testRenameInPlace(self):
        def function():
            pass

        self.assertIs(rename(function, "fresh"), function)
        self.assertEqual((function.__name__, function.__qualname__), ("fresh", "fresh"))

    def testRenameAsDecorator(self):
        @rename("curried")
        def function():
            pass

        self.assertEqual(function.__name__, "curried")

    def testRenameRequiresStringName(self):
        with self.assertRaises(TypeError):
            rename(lambda: None, 3)

    def testQualnameFallsBackToRepr(self):
        class Callable:
            def __call__(self):
                pass

        self.assertEqual(qualname(len), "len")
        self.assertIn("Callable", qualname(Callable()))


if __name__ == "__main__":
    unittest.main()
