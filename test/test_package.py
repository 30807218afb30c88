"""
Package-level tests (import surface and metadata).

Scope
- Validate that `import bindery` succeeds and exposes every module's public API.
- Validate that submodules stay reachable as attributes after the re-exports.
- Validate version metadata.

Conventions
- Test method names follow CamelCase per project convention.
"""

import importlib
import types
import unittest
from unittest import TestCase

import bindery

_MODULES = ("coercion", "converters", "discovery", "faults", "shapes")


class TestImportSurface(TestCase):
    """What `import bindery` provides."""

    def testEveryExportResolves(self):
        for name in bindery.__all__:
            with self.subTest(name=name):
                self.assertTrue(hasattr(bindery, name))

    def testModuleExportsAreAggregated(self):
        for module in _MODULES:
            submodule = importlib.import_module(f"bindery.{module}")
            with self.subTest(module=module):
                self.assertTrue(set(submodule.__all__) <= set(bindery.__all__))

    def testSubmodulesAreNotShadowed(self):
        for module in _MODULES:
            with self.subTest(module=module):
                self.assertIsInstance(getattr(bindery, module), types.ModuleType)

    def testExportsAreUnique(self):
        self.assertEqual(len(bindery.__all__), len(set(bindery.__all__)))

    def testStarImport(self):
        namespace = {}
        exec("from bindery import *", namespace)
        for name in ("construct", "discover", "registry", "program", "BindingException", "describe"):
            with self.subTest(name=name):
                self.assertIn(name, namespace)


class TestMetadata(TestCase):
    """Title and version information."""

    def testTitle(self):
        self.assertEqual(bindery.__title__, "bindery")

    def testVersionInfo(self):
        self.assertEqual(len(bindery.version_info), 6)
        self.assertIsInstance(bindery.__version__, str)


if __name__ == "__main__":
    unittest.main()
