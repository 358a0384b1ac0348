"""
Faults behavioral tests.

Scope
- Fault codes and the exception hierarchy.
- Inner exception selection (cause, context, suppressed context).
- Rendering (plain and styled, __main__.__styles__ overrides) and reporting.

Conventions
- Test method names follow CamelCase per project convention.
"""
import sys
import unittest
from io import StringIO
from unittest import TestCase, mock

from rich.console import Console

from sigcli import faults
from sigcli.faults import (
    FaultCode, BindingError, NameCollisionError, MissingDefaultError,
    UnsupportedTypeError, UnsupportedParameterError, CoercionError,
    inner, render, report,
)


def chained(outer, cause, *, explicit=True):
    try:
        raise cause
    except Exception as error:
        try:
            if explicit:
                raise outer from error
            raise outer
        except Exception as result:
            return result


class TestHierarchy(TestCase):
    def testBindingErrorsAreTypeErrors(self):
        for cls, code in (
                (NameCollisionError, FaultCode.NAME_COLLISION),
                (MissingDefaultError, FaultCode.MISSING_DEFAULT),
                (UnsupportedTypeError, FaultCode.UNSUPPORTED_TYPE),
                (UnsupportedParameterError, FaultCode.UNSUPPORTED_PARAMETER),
        ):
            with self.subTest(cls=cls.__name__):
                error = cls("message", parameter="name")
                self.assertIsInstance(error, BindingError)
                self.assertIsInstance(error, TypeError)
                self.assertEqual(error.code, code)
                self.assertEqual(error.parameter, "name")
                self.assertEqual(str(error), "message")

    def testCoercionErrorIsValueError(self):
        error = CoercionError("bad", parameter="count", value="x")
        self.assertIsInstance(error, ValueError)
        self.assertEqual(error.code, FaultCode.COERCION_FAILED)
        self.assertEqual((error.parameter, error.value), ("count", "x"))

    def testCodesAreGrouped(self):
        self.assertTrue(all(21100 < code < 21200 for code in (
            FaultCode.NAME_COLLISION, FaultCode.MISSING_DEFAULT,
            FaultCode.UNSUPPORTED_TYPE, FaultCode.UNSUPPORTED_PARAMETER,
        )))
        self.assertTrue(all(21200 < code < 21300 for code in (
            FaultCode.COERCION_FAILED, FaultCode.INVOCATION_FAILED,
        )))


class TestInner(TestCase):
    def testExplicitCause(self):
        cause = ValueError("cause")
        self.assertIs(inner(chained(RuntimeError("outer"), cause)), cause)

    def testImplicitContext(self):
        cause = ValueError("context")
        self.assertIs(inner(chained(RuntimeError("outer"), cause, explicit=False)), cause)

    def testSuppressedContext(self):
        error = chained(RuntimeError("outer"), ValueError("context"))
        error.__cause__ = None
        error.__suppress_context__ = True
        self.assertIsNone(inner(error))

    def testStandalone(self):
        self.assertIsNone(inner(RuntimeError("alone")))


class TestRender(TestCase):
    def testPlainLines(self):
        lines = render(chained(RuntimeError("outer"), ValueError("inner")), colorful=False)
        self.assertEqual([line.plain for line in lines], ["Error: outer", "Details: inner"])
        self.assertEqual([line.spans for line in lines], [[], []])

    def testEmptyMessageFallsBackToTypeName(self):
        lines = render(KeyError(), colorful=False)
        self.assertEqual([line.plain for line in lines], ["Error: KeyError"])

    def testStyledLines(self):
        line, = render(RuntimeError("boom"))
        self.assertEqual(line.plain, "Error: boom")
        self.assertEqual(line.spans[0].style, "bold #FF4DA6")

    def testMainStylesOverride(self):
        with mock.patch.object(sys.modules["__main__"], "__styles__", {"error-label": "bold red"}, create=True):
            line, = render(RuntimeError("boom"))
        self.assertEqual(line.spans[0].style, "bold red")
        self.assertEqual(line.spans[-1].style, "#C8C8D0")


class TestReport(TestCase):
    def testReportWritesToConsole(self):
        buffer = StringIO()
        with mock.patch.object(faults, "console", Console(file=buffer, width=200, color_system=None)):
            report(chained(RuntimeError("outer"), ValueError("inner")), colorful=False)
        self.assertEqual(buffer.getvalue(), "Error: outer\nDetails: inner\n")

    def testDefaultConsoleTargetsStderr(self):
        self.assertTrue(faults.console.stderr)


if __name__ == "__main__":
    unittest.main()
