"""
sigcli dispatch: parsed values → call → exit code.

What this module provides
- Dispatcher: installed by the binder as a parser's handler. Given the parsed values
  (an argparse.Namespace or any mapping keyed by canonical name) it:
  1. allocates one slot per bound parameter;
  2. fills slots for every positional argument, then every option, in declaration
     order: absent values (missing or None) fall back to the parameter default, values
     whose runtime type differs from the declared type are coerced;
  3. invokes the callable (keyword-only parameters by keyword, the rest positionally);
  4. normalizes the result: awaitables are awaited, an int (not a bool) is the exit
     code, anything else means success (0).
  Any Exception raised on the way is caught, reported as "Error: ..." (plus
  "Details: ..." for chained errors) and turned into exit code 1. Cancellation and
  interrupts (BaseException) are not intercepted.

- Outcome: tagged result (status, fault) for callers that want the classification
  instead of the printed report (see Dispatcher.resolve / Dispatcher.aresolve).

Concurrency
- A Dispatcher holds only read-only state (the binding and the callable); each call
  builds its own slots. Thread-safety is that of the bound callable.
"""
import argparse
import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import NamedTuple

from .faults import report
from .utils import Unset, qualname

logger = logging.getLogger(__name__)


class Outcome(NamedTuple):
    """
    result of one dispatch: exit status and the fault that caused a failure (if any).
    """
    status: int
    fault: Exception | None = None

    @property
    def ok(self):
        return self.fault is None


def _lookup(values, name):
    """
    read one parsed value; None means absent.
    """
    if isinstance(values, argparse.Namespace):
        return getattr(values, name, None)
    if isinstance(values, Mapping):
        return values.get(name)
    raise TypeError(f"parsed values must be a namespace or a mapping, not {type(values).__name__}")


def _status(result):
    """
    exit code of a (synchronous or awaited) return value.
    """
    if isinstance(result, int) and not isinstance(result, bool):
        return result
    return 0


async def _wait(awaitable):
    return await awaitable


def _drive(awaitable):
    """
    run an awaitable to completion from synchronous code.

    Inside a running event loop the awaitable is discarded (coroutines are closed)
    and RuntimeError is raised; Dispatcher.dispatch is the entry point there.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_wait(awaitable))
    if inspect.iscoroutine(awaitable):
        awaitable.close()
    raise RuntimeError("cannot resolve an awaitable result inside a running event loop, use dispatch()")


class Dispatcher:
    """
    execution handler bound to one callable.

    Parameters
    - binding: the Binding produced by the binder (canonical name → position, plus
      the ordered argument/option declarations).
    - callback: the callable to invoke (already bound to its instance, if any).
    - colorful: render failures with colors (see faults.report).
    """
    __slots__ = ("_binding", "_callback", "_colorful")

    def __init__(self, binding, callback, /, *, colorful=True):
        if not callable(callback):
            raise TypeError("dispatcher callback must be callable")
        self._binding = binding
        self._callback = callback
        self._colorful = colorful

    @property
    def binding(self):
        return self._binding

    @property
    def callback(self):
        return self._callback

    def __repr__(self):
        return f"dispatcher(callback={qualname(self._callback)}, names={list(self._binding)!r})"

    def collect(self, values, /):
        """
        assemble (args, kwargs) for the callable from parsed values.

        Raises CoercionError when a value cannot be converted to its declared type.
        """
        slots = [Unset] * self._binding.size
        keywords = {}

        for declaration in (*self._binding.arguments, *self._binding.options):
            value = _lookup(values, declaration.canonical)
            if value is None and not declaration.required:
                value = declaration.default
            value = declaration.coerce(value)
            if declaration.keyword:
                keywords[declaration.name] = value
            else:
                slots[self._binding[declaration.canonical]] = value

        # Keyword-only parameters leave their positional slot unused.
        arguments = [value for value in slots if value is not Unset]
        return arguments, keywords

    def _invoke(self, values):
        arguments, keywords = self.collect(values)
        logger.debug("invoking %s with args=%r kwargs=%r", qualname(self._callback), arguments, keywords)
        return self._callback(*arguments, **keywords)

    def resolve(self, values, /):
        """
        run the callable synchronously and classify the result; never raises Exception.

        Awaitable results are driven to completion with asyncio.run. Inside a running event
        loop the coroutine is closed unrun and the outcome is a RuntimeError fault (use aresolve).
        """
        try:
            result = self._invoke(values)
            if inspect.isawaitable(result):
                result = _drive(result)
        except Exception as exception:
            logger.debug("%s failed", qualname(self._callback), exc_info=True)
            return Outcome(1, exception)
        return Outcome(_status(result))

    async def aresolve(self, values, /):
        """
        asynchronous counterpart of resolve(): awaitable results are awaited in the running loop.
        """
        try:
            result = self._invoke(values)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exception:
            logger.debug("%s failed", qualname(self._callback), exc_info=True)
            return Outcome(1, exception)
        return Outcome(_status(result))

    def _finish(self, outcome):
        if outcome.fault is not None:
            report(outcome.fault, colorful=self._colorful)
        return outcome.status

    def __call__(self, values, /):
        """
        dispatch synchronously and return the exit code (failures are reported on stderr).
        """
        return self._finish(self.resolve(values))

    async def dispatch(self, values, /):
        """
        dispatch inside a running event loop and return the exit code.
        """
        return self._finish(await self.aresolve(values))


__all__ = (
    "Outcome",
    "Dispatcher",
)
