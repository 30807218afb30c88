"""
Utils module behavioral tests (sentinel, naming helpers and module globbing).

Scope
- Validate the Unset sentinel and coalesce().
- Validate rename() in both of its forms.
- Validate pluralize() and qualname().
- Validate mglob() over the sample namespaces.

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from fractions import Fraction
from unittest import TestCase

from bindery.utils import Unset, UnsetType, coalesce, mglob, pluralize, qualname, rename


class TestUnset(TestCase):
    """Sentinel behavior."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)


class TestRename(TestCase):
    """rename() forms."""

    def testDirect(self):
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecorator(self):
        @rename("named")
        def function():
            pass

        self.assertEqual(function.__qualname__, "named")

    def testErrors(self):
        with self.assertRaises(TypeError):
            rename(len, "length")
        with self.assertRaises(TypeError):
            rename("name", "name")
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename()


class TestNames(TestCase):
    """pluralize() and qualname()."""

    def testPluralize(self):
        self.assertEqual(pluralize("value", 1), "value")
        self.assertEqual(pluralize("value", 0), "values")
        self.assertEqual(pluralize("value", 2), "values")
        self.assertEqual(pluralize("class"), "classes")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("key"), "keys")

    def testQualname(self):
        self.assertEqual(qualname(int), "int")
        self.assertEqual(qualname(Fraction), "fractions.Fraction")
        self.assertEqual(qualname(TestNames), f"{__name__}.TestNames")


class TestModuleGlob(TestCase):
    """mglob() expansion."""

    def testPlainNameIsReturnedAsIs(self):
        self.assertEqual(mglob("sample_programs.align"), ["sample_programs.align"])
        self.assertEqual(mglob("does_not_exist"), ["does_not_exist"])

    def testRecursive(self):
        self.assertEqual(
            mglob("sample_programs.**"),
            [
                "sample_programs",
                "sample_programs.align",
                "sample_programs.base",
                "sample_programs.builtin",
                "sample_programs.nested",
                "sample_programs.nested.sort",
            ],
        )

    def testChildren(self):
        self.assertEqual(
            mglob("sample_programs.*"),
            [
                "sample_programs.align",
                "sample_programs.base",
                "sample_programs.builtin",
                "sample_programs.nested",
            ],
        )

    def testDeepMatch(self):
        self.assertEqual(mglob("sample_programs.**.sort"), ["sample_programs.nested.sort"])
        self.assertEqual(mglob("sample_programs.b*"), ["sample_programs.base", "sample_programs.builtin"])

    def testUnknownPrefix(self):
        self.assertEqual(mglob("does_not_exist.**"), [])

    def testFailingPrefixNamesPackage(self):
        with self.assertRaises(ImportError) as context:
            mglob("sample_broken_root.**")
        self.assertEqual(context.exception.name, "sample_broken_root")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testErrors(self):
        with self.assertRaises(TypeError):
            mglob(1)
        with self.assertRaises(ValueError):
            mglob("  ")
        with self.assertRaises(ValueError):
            mglob("*.tasks")


if __name__ == "__main__":
    unittest.main()
