"""
sigcli faults (errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault the library raises or reports.
- BindingError and subclasses: configuration errors, raised while a callable is being
  bound to a parser. They are programming mistakes and are never caught by sigcli.
- CoercionError: a parsed value could not be converted to the parameter's type.
- report(): renders an invocation failure as "Error: ..." / "Details: ..." on stderr.

Rendering
- Output goes through a module-level rich console bound to stderr.
- Styles can be overridden by the host application with a __styles__ mapping in
  __main__ (keys: "error-label", "error-message", "details-label", "details-message").
- colorful=False prints plain text.
"""
from collections import defaultdict
from enum import IntEnum

from rich.console import Console
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - binding errors (2110x): raised at registration time.
    - invocation errors (2120x): caught and reported by the dispatcher.
    """
    # --- binding errors (2110x) ---
    NAME_COLLISION        = 21101
    MISSING_DEFAULT       = 21102
    UNSUPPORTED_TYPE      = 21103
    UNSUPPORTED_PARAMETER = 21104

    # --- invocation errors (2120x) ---
    COERCION_FAILED       = 21201
    INVOCATION_FAILED     = 21202


class BindingError(TypeError):
    """
    base class of configuration errors detected while binding a callable.
    """
    code = None

    def __init__(self, message, /, *, parameter=None):
        super().__init__(message)
        self.message = message
        self.parameter = parameter


class NameCollisionError(BindingError):
    code = FaultCode.NAME_COLLISION


class MissingDefaultError(BindingError):
    code = FaultCode.MISSING_DEFAULT


class UnsupportedTypeError(BindingError):
    code = FaultCode.UNSUPPORTED_TYPE


class UnsupportedParameterError(BindingError):
    code = FaultCode.UNSUPPORTED_PARAMETER


class CoercionError(ValueError):
    """
    a parsed value could not be converted to its parameter's declared type.
    """
    code = FaultCode.COERCION_FAILED

    def __init__(self, message, /, *, parameter=None, value=None):
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.value = value


def _message(exception):
    """
    user-facing message of an exception; falls back to the type name when empty.
    """
    return str(exception) or type(exception).__name__


def inner(exception, /):
    """
    the immediate inner exception: explicit cause first, then implicit context.
    """
    if exception.__cause__ is not None:
        return exception.__cause__
    if exception.__context__ is not None and not exception.__suppress_context__:
        return exception.__context__
    return None


def render(exception, /, *, colorful=True):
    """
    build the rich renderable lines for a failure (one or two Text lines).
    """
    styles = defaultdict(str, {
        "error-label": "bold #FF4DA6",  # pinky label, same family as the help panels
        "error-message": "#C8C8D0",  # soft light gray message
        "details-label": "bold #00E5FF dim",  # dim cyan label
        "details-message": "italic #9CE19C",  # gentle green inner message
    } | getattr(__import__("__main__"), "__styles__", {}))

    def line(label, message, kind):
        if not colorful:
            return Text(f"{label}: {message}")
        return Text.assemble((f"{label}:", styles[kind + "-label"]), " ", (message, styles[kind + "-message"]))

    lines = [line("Error", _message(exception), "error")]
    if (cause := inner(exception)) is not None:
        lines.append(line("Details", _message(cause), "details"))
    return lines


def report(exception, /, *, colorful=True):
    """
    print a failure to stderr as "Error: <message>" and, when chained, "Details: <inner message>".
    """
    for line in render(exception, colorful=colorful):
        console.print(line, highlight=False, soft_wrap=True)


__all__ = (
    "FaultCode",
    "BindingError",
    "NameCollisionError",
    "MissingDefaultError",
    "UnsupportedTypeError",
    "UnsupportedParameterError",
    "CoercionError",
    "inner",
    "render",
    "report",
)
