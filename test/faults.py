# python
"""
Faults module behavioral tests.

Scope
- Validate fault codes, host remapping through __main__.__codes__, and the
  grammar-error builtin mixins.
- Validate trigger(): raising in library mode, printing and exiting in shell mode.
- Validate rich rendering (plain and fancy) of parse failures.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked on a private, colorless rich Console.
"""

from __future__ import annotations

import contextlib
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console
from rich.panel import Panel

from fluentopt import (
    FaultCode,
    ArgumentParseException,
    UnknownArgumentError,
    MissingValueError,
    MissingArgumentError,
    GrammarError,
    InvalidArgumentError,
    IllegalStateError,
    UnsupportedOperationError,
    PlainArgument,
    Option,
    trigger,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCodes(TestCase):
    """Behavioral tests for FaultCode and the exception hierarchy."""

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.UNKNOWN_ARGUMENT, 11101)
        self.assertEqual(FaultCode.MISSING_VALUE, 11111)
        self.assertEqual(FaultCode.MISSING_ARGUMENT, 11121)
        self.assertEqual(FaultCode.INVALID_ARGUMENT, 12101)
        self.assertEqual(FaultCode.ILLEGAL_STATE, 12111)
        self.assertEqual(FaultCode.UNSUPPORTED_OPERATION, 12121)

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "11111")

    def testNormalizeReadsHostCodes(self):
        codes = {FaultCode.MISSING_VALUE: "E-VALUE"}
        with mock.patch.object(sys.modules["__main__"], "__codes__", codes, create=True):
            self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "E-VALUE")

    def testParseFailuresShareABase(self):
        for cls in (UnknownArgumentError, MissingValueError, MissingArgumentError):
            self.assertTrue(issubclass(cls, ArgumentParseException))

    def testGrammarErrorsMixBuiltins(self):
        self.assertTrue(issubclass(InvalidArgumentError, ValueError))
        self.assertTrue(issubclass(IllegalStateError, RuntimeError))
        self.assertTrue(issubclass(UnsupportedOperationError, TypeError))
        for cls in (InvalidArgumentError, IllegalStateError, UnsupportedOperationError):
            self.assertTrue(issubclass(cls, GrammarError))
            self.assertIsInstance(cls.code, FaultCode)


class TestFaultContext(TestCase):
    """Behavioral tests for the structured context carried by faults."""

    def testOptionsAreReadOnly(self):
        fault = UnknownArgumentError("unknown option '-z'", token="-z", index=3)
        self.assertEqual(fault.token, "-z")
        self.assertEqual(fault.index, 3)
        self.assertIsNone(fault.hint)
        with self.assertRaises(TypeError):
            fault.options["token"] = "-y"

    def testMissingValueCarriesOption(self):
        option = Option(0, "extra", key="x", expects_value=True)
        fault = MissingValueError("option '-x' expects a value", option=option)
        self.assertIs(fault.option, option)

    def testMissingArgumentNames(self):
        arguments = (PlainArgument(0, "src"), PlainArgument(1, "dst"))
        fault = MissingArgumentError("missing mandatory arguments", arguments=arguments)
        self.assertEqual(fault.arguments, arguments)
        self.assertEqual(fault.names, ("src", "dst"))

    def testMissingArgumentDefaultsToEmpty(self):
        self.assertEqual(MissingArgumentError("nothing").arguments, ())


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testTriggerRaisesMergedFault(self):
        fault = UnknownArgumentError("unknown option '-z'", token="-z")
        with self.assertRaises(UnknownArgumentError) as context:
            trigger(fault, colorful=False)
        self.assertIsNot(context.exception, fault)
        self.assertEqual(context.exception.message, fault.message)
        self.assertEqual(context.exception.token, "-z")
        self.assertFalse(context.exception.options["colorful"])

    def testTriggerShellModeExits(self):
        fault = MissingValueError("option '-x' at first position expects a value", hint="pass a value")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(fault, shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("expects a value", stderr.getvalue())
        self.assertIn("pass a value", stderr.getvalue())

    def testTriggerRejectsForeignObjects(self):
        with self.assertRaises(TypeError):
            trigger(object())


class TestRendering(TestCase):
    """Behavioral tests for the rich rendering of parse failures."""

    def testPlainRendering(self):
        fault = UnknownArgumentError("unexpected argument 'x' at third position", hint="expected usage: <foo>")
        output = render(fault)
        self.assertIn("11101", output)
        self.assertIn("Unknown Argument", output)
        self.assertIn("unexpected argument 'x' at third position", output)
        self.assertIn("expected usage: <foo>", output)

    def testRenderingUsesHostProgramName(self):
        fault = UnknownArgumentError("unexpected argument 'x'")
        with mock.patch.object(sys.modules["__main__"], "__prog__", "tool", create=True):
            self.assertIn("tool", render(fault))

    def testFancyRenderingIsAPanel(self):
        fault = MissingArgumentError("missing mandatory argument 'foo'", fancy=True)
        self.assertIsInstance(fault.__rich__(), Panel)
        self.assertIn("missing mandatory argument 'foo'", render(fault))

    def testColorlessRendering(self):
        fault = MissingArgumentError("missing mandatory argument 'foo'", colorful=False)
        self.assertIn("Missing Arguments", render(fault))


if __name__ == "__main__":
    unittest.main()
