"""
Faults module behavioral tests (fault options, rendering and triggering).

Scope
- Validate option defaults, overrides and immutability.
- Validate rich rendering (plain and colorless) and host customization via __main__.
- Validate trigger() in raise mode and shell mode, and copy.replace support.
- Validate getdoc() and FaultCode.normalize().

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is captured through a rich Console writing to an in-memory buffer.
"""

import copy
import io
import unittest
from types import SimpleNamespace
from unittest import TestCase, mock

from rich.console import Console

from bindery import (
    BadValueError,
    BindingException,
    CollisionError,
    ConfigurationError,
    FaultCode,
    UsageError,
    getdoc,
    trigger,
)
from bindery import faults


def render(renderable):
    buffer = io.StringIO()
    Console(file=buffer, width=100, color_system=None).print(renderable)
    return buffer.getvalue()


class TestOptions(TestCase):
    """Defaults, overrides and classification."""

    def testDefaults(self):
        self.assertIs(UsageError("x").options["code"], FaultCode.USAGE)
        self.assertIs(BadValueError("x").options["code"], FaultCode.BAD_VALUE)
        self.assertIs(ConfigurationError("x").options["code"], FaultCode.CONFIGURATION)
        self.assertIs(CollisionError("x").options["code"], FaultCode.COLLISION)

    def testOverrides(self):
        fault = BadValueError("x", code=FaultCode.INVALID_CHOICE, choices=("A", "B"))
        self.assertIs(fault.options["code"], FaultCode.INVALID_CHOICE)
        self.assertEqual(fault.options["choices"], ("A", "B"))
        self.assertEqual(fault.options["title"], "bad value")

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            UsageError("x").options["code"] = FaultCode.BAD_VALUE

    def testUserFacing(self):
        self.assertTrue(UsageError.user_facing)
        self.assertTrue(BadValueError.user_facing)
        self.assertFalse(ConfigurationError.user_facing)
        self.assertFalse(CollisionError.user_facing)

    def testHierarchy(self):
        for cls in (UsageError, BadValueError, ConfigurationError, CollisionError):
            with self.subTest(cls=cls):
                self.assertTrue(issubclass(cls, BindingException))
                self.assertTrue(issubclass(cls, Exception))

    def testMessage(self):
        self.assertEqual(str(UsageError("too many values")), "too many values")
        self.assertEqual(str(UsageError()), "")


class TestRendering(TestCase):
    """rich rendering through __rich__."""

    def testHeaderMessageAndHint(self):
        output = render(BadValueError("'x' is not a number", tool="align"))
        self.assertIn("align", output)
        self.assertIn(str(FaultCode.BAD_VALUE.value), output)
        self.assertIn("Bad Value", output)
        self.assertIn("'x' is not a number", output)
        self.assertIn("check the value's spelling and format", output)

    def testNoHint(self):
        output = render(UsageError("nope", hint=None, colorful=False))
        self.assertIn("nope", output)
        self.assertNotIn("→", output)

    def testFancyPanel(self):
        output = render(ConfigurationError("broken", fancy=True, colorful=False))
        self.assertIn("broken", output)
        self.assertIn("╭", output)

    def testHostOverrides(self):
        main = SimpleNamespace(__prog__="pipeline", __codes__={FaultCode.USAGE: "U-1"}, __styles__={})
        with mock.patch.dict("sys.modules", {"__main__": main}):
            output = render(UsageError("oops"))
        self.assertIn("pipeline", output)
        self.assertIn("U-1", output)


class TestTrigger(TestCase):
    """trigger() and copy.replace()."""

    def testRaisesByDefault(self):
        with self.assertRaises(UsageError) as context:
            trigger(UsageError("oops"))
        self.assertEqual(str(context.exception), "oops")

    def testRaisedFaultCarriesOptions(self):
        with self.assertRaises(BadValueError) as context:
            trigger(BadValueError("oops"), title="custom")
        self.assertEqual(context.exception.options["title"], "custom")

    def testShellDeferredPrints(self):
        buffer = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=buffer, width=100, color_system=None)):
            trigger(UsageError("printed"), shell=True, deferred=True)
        self.assertIn("printed", buffer.getvalue())

    def testShellExits(self):
        buffer = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=buffer, width=100, color_system=None)):
            with self.assertRaises(SystemExit) as context:
                trigger(UsageError("bye"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testReplace(self):
        original = ConfigurationError("x", type=int)
        replaced = copy.replace(original, hint="other")
        self.assertIsNot(replaced, original)
        self.assertIsInstance(replaced, ConfigurationError)
        self.assertEqual(replaced.options["hint"], "other")
        self.assertIs(replaced.options["type"], int)
        self.assertEqual(original.options["hint"], ConfigurationError.__defaults__["hint"])

    def testRejectsNonFault(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestCodes(TestCase):
    """FaultCode.normalize() and getdoc()."""

    def testNormalizeDefault(self):
        self.assertEqual(FaultCode.COLLISION.normalize(), "21131")

    def testGetdoc(self):
        main = SimpleNamespace(__docs__={FaultCode.USAGE: "see the manual"})
        with mock.patch.dict("sys.modules", {"__main__": main}):
            self.assertEqual(getdoc(FaultCode.USAGE), "see the manual")
            self.assertIsNone(getdoc(FaultCode.COLLISION))

    def testGetdocRejectsInteger(self):
        with self.assertRaises(TypeError):
            getdoc(21101)

    def testCodesAreUnique(self):
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))


if __name__ == "__main__":
    unittest.main()
