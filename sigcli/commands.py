"""
sigcli command layer: bind callables to argparse parsers and run them.

What this module provides
- bind(callback, target=Unset, *, schema=Unset): inspect a callable once and produce a
  Binding (ordered declarations, command description, canonical name → position).
- configure(parser, callback, target=Unset, *, schema=Unset): bind, declare every
  argument/option on an argparse parser and install a Dispatcher as its handler.
- Binding: read-only mapping from canonical name to parameter position.
- Application: a root parser with one subcommand per bound callable, plus invoke/run.

Quick start
    from typing import Annotated
    from sigcli import Application, Alias, Description, Option

    app = Application("tool", "a small tool", version="1.0.0")

    @app.command
    @Description("greet somebody")
    def sayHello(
        name: Annotated[str, Description("who to greet")],
        times: Annotated[int, Option(), Alias("-n")] = 1,
        shout: Annotated[bool, Option(), Alias("-s")] = False,
    ):
        for _ in range(times):
            print(("hello %s" % name).upper() if shout else "hello %s" % name)

    if __name__ == "__main__":
        app.run()        # tool say-hello World -n 2 --shout

Binding rules
- Options: "--" + dashed(name) plus every Alias; booleans without a default are
  presence flags (store_true), every other option takes zero or one value.
- A boolean option with a default only takes the next token when it is a boolean
  literal ("-y no"); Binding.normalize pins it inline ("-y=no", "-y=true") so
  "-y first" leaves "first" to the positionals.
- Positionals: spaced(name) is both the canonical name and the help label; a
  defaulted positional becomes optional (nargs="?").
- Absent values reach the dispatcher as None and are replaced by the parameter
  default there, so argparse never sees the real defaults.
- Two parameters resolving to the same canonical name or option token are rejected
  with NameCollisionError while binding, never at invocation time.
"""
import argparse
import dataclasses
import inspect
import logging
import shlex
import sys
from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType, MethodType

from rich_argparse import RichHelpFormatter

from .arguments import Declaration, Kind, declare, is_boolean
from .dispatch import Dispatcher
from .faults import BindingError, NameCollisionError
from .markers import description_of
from .naming import dashed
from .utils import Unset, nullify, qualname

logger = logging.getLogger(__name__)

# Namespace attributes reserved by the application; canonical names always start with
# "--" or a capital letter, so they cannot clash with these.
_HANDLER = "__handler__"
_COMMAND = "__command__"


class Binding(Mapping):
    """
    read-only result of binding a callable.

    Mapping interface
    - binding[canonical] → parameter position; iteration follows declaration order.

    Attributes
    - declarations: all declarations, ordered by position.
    - arguments / options: positional and named declarations, in declaration order.
    - descr: the command description (explicit @Description, else the docstring).
    - size: number of bound parameters.

    Invariants
    - every declared name has exactly one entry;
    - positions are exactly 0..size-1;
    - no two options share an option token.
    """
    __slots__ = ("_declarations", "_positions", "_descr", "_switches")

    def __init__(self, declarations, /, descr=None):
        declarations = tuple(declarations)
        for declaration in declarations:
            if not isinstance(declaration, Declaration):
                raise TypeError(f"binding entries must be declarations, not {type(declaration).__name__}")
            if declaration.position is Unset:
                raise BindingError(f"parameter {declaration.name!r} has no position", parameter=declaration.name)

        declarations = tuple(sorted(declarations, key=lambda declaration: declaration.position))
        positions = {}
        tokens = {}

        for index, declaration in enumerate(declarations):
            if declaration.position != index:
                raise BindingError(
                    f"parameter {declaration.name!r} is bound at position {declaration.position!r}, "
                    f"expected {index}",
                    parameter=declaration.name,
                )
            if (canonical := declaration.canonical) in positions:
                other = declarations[positions[canonical]].name
                raise NameCollisionError(
                    f"parameters {other!r} and {declaration.name!r} share the name {canonical!r}",
                    parameter=declaration.name,
                )
            positions[canonical] = index
            for token in declaration.names:
                if (owner := tokens.setdefault(token, declaration.name)) != declaration.name:
                    raise NameCollisionError(
                        f"option {token!r} of parameter {declaration.name!r} is already used by {owner!r}",
                        parameter=declaration.name,
                    )

        self._declarations = declarations
        self._positions = MappingProxyType(positions)
        self._descr = descr
        self._switches = frozenset(
            token
            for declaration in declarations
            if declaration.option and declaration.kind is Kind.BOOLEAN and not declaration.flag
            for token in declaration.names
        )

    def __getitem__(self, name):
        return self._positions[name]

    def __iter__(self):
        return iter(self._positions)

    def __len__(self):
        return len(self._positions)

    def __repr__(self):
        return f"binding({dict(self._positions)!r})"

    @property
    def declarations(self):
        return self._declarations

    @property
    def arguments(self):
        return tuple(declaration for declaration in self._declarations if not declaration.option)

    @property
    def options(self):
        return tuple(declaration for declaration in self._declarations if declaration.option)

    @property
    def descr(self):
        return self._descr

    @property
    def size(self):
        return len(self._declarations)

    def declaration(self, name, /):
        """
        the declaration bound under a canonical name.
        """
        return self._declarations[self._positions[name]]

    def normalize(self, tokens, /):
        """
        pin the value of boolean options that carry a default before argparse sees them.

        A bare switch becomes "--switch=true"; a switch followed by a boolean literal
        absorbs it ("-y no" → "-y=no"). Any other following token is left alone, so
        "-y first" keeps "first" for the positionals. Tokens after "--" are untouched.

            namespace = parser.parse_args(binding.normalize(argv))
        """
        tokens = list(tokens)
        result = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1
            if token == "--":
                result.extend(tokens[index - 1:])
                break
            if token in self._switches:
                value = "true"
                if index < len(tokens) and is_boolean(tokens[index]):
                    value = tokens[index]
                    index += 1
                token = f"{token}={value}"
            result.append(token)
        return result


def _target(callback, target):
    """
    bind an unbound function to its instance; the instance parameter disappears from the signature.
    """
    if target is Unset or target is None:
        return callback
    if inspect.ismethod(callback):
        if callback.__self__ is not target:
            raise TypeError(f"{qualname(callback)} is already bound to another object")
        return callback
    return MethodType(callback, target)


def bind(callback, target=Unset, /, *, schema=Unset):
    """
    inspect a callable (or use an explicit schema) and produce its Binding.

    Parameters
    - callback: the function or method to expose.
    - target: instance to bind an unbound method to (Unset/None for plain functions).
    - schema: iterable of Declaration used instead of signature inspection; entries
      without a position are numbered in order.

    Returns
    - (callable, Binding): the (possibly bound) callable and its binding.

    Raises
    - TypeError when callback is not callable or cannot be inspected.
    - BindingError subclasses for unsupported parameters, missing option defaults and
      name collisions.
    """
    if callback is None or not callable(callback):
        raise TypeError(f"bind() argument must be callable, not {type(callback).__name__}")

    callback = _target(callback, target)
    descr = description_of(callback)

    if schema is not Unset:
        declarations = []
        for index, declaration in enumerate(schema):
            if not isinstance(declaration, Declaration):
                raise TypeError(f"schema entries must be declarations, not {type(declaration).__name__}")
            if declaration.position is Unset:
                declaration = _renumber(declaration, index)
            declarations.append(declaration)
        return callback, Binding(declarations, descr)

    try:
        signature = inspect.signature(callback, eval_str=True)
    except (TypeError, ValueError, NameError) as error:
        raise TypeError(f"cannot inspect the signature of {qualname(callback)}: {error}") from error

    declarations = [declare(parameter, index) for index, parameter in enumerate(signature.parameters.values())]
    return callback, Binding(declarations, descr)


def _renumber(declaration, position):
    # Presence flags re-derive their False default in __post_init__.
    return dataclasses.replace(
        declaration,
        position=position,
        default=Unset if declaration.flag else declaration.default,
    )


def _help(declaration):
    """
    argparse help string: description, then choices and default.
    """
    parts = [declaration.descr] if declaration.descr else []
    if declaration.kind is Kind.ENUM:
        parts.append("(choices: %s)" % ", ".join(member.name.lower() for member in declaration.type))
    if not declaration.required and not declaration.flag:
        default = declaration.default
        parts.append("(default: %s)" % (default.name.lower() if isinstance(default, Enum) else default))
    # argparse expands %-placeholders in help strings.
    return " ".join(parts).replace("%", "%%") or None


def _declare(parser, declaration):
    """
    add one declaration to an argparse parser.
    """
    options = {"default": None, "help": _help(declaration)}

    if declaration.option:
        options["dest"] = declaration.canonical
        if declaration.flag:
            options["action"] = "store_true"
        else:
            options |= {
                "nargs": "?",
                "const": True if declaration.kind is Kind.BOOLEAN else None,
                "type": declaration.converter,
                "metavar": declaration.metavar,
            }
        arguments = declaration.names
    else:
        options["type"] = declaration.converter
        if not declaration.required:
            options["nargs"] = "?"
        if declaration.pretty:
            options["metavar"] = declaration.pretty
        arguments = (declaration.canonical,)

    try:
        parser.add_argument(*arguments, **options)
    except argparse.ArgumentError as error:
        raise NameCollisionError(
            f"parameter {declaration.name!r} cannot be declared: {error.message}",
            parameter=declaration.name,
        ) from error


def _rehearse(binding, parser=None):
    """
    declare a binding on a throwaway parser first, so a clash leaves the real parser untouched.

    With a parser, the scratch copy inherits its existing arguments and conflict handling.
    """
    if parser is None:
        scratch = argparse.ArgumentParser()
    else:
        scratch = argparse.ArgumentParser(
            prog=parser.prog,
            add_help=False,
            parents=[parser],
            conflict_handler=parser.conflict_handler,
        )
    for declaration in binding.declarations:
        _declare(scratch, declaration)


def _install(parser, callback, binding, colorful):
    if binding.descr is not None:
        parser.description = binding.descr

    for declaration in binding.declarations:
        _declare(parser, declaration)

    parser.set_defaults(**{_HANDLER: Dispatcher(binding, callback, colorful=colorful)})
    logger.debug("bound %s: %r", qualname(callback), binding)
    return binding


def configure(parser, callback, target=Unset, /, *, schema=Unset, colorful=True):
    """
    configure an argparse parser from a callable.

    Steps
    - bind() the callable (see there for parameters and errors);
    - copy the command description onto the parser;
    - declare every positional argument and option on the parser;
    - install a Dispatcher as the parser's handler (namespace attribute "__handler__").

    Returns
    - the Binding.

    Raises
    - everything bind() raises, and NameCollisionError when a token is already taken
      on the parser; the parser is left as it was in both cases.

    Running a configured parser by hand:
        namespace = parser.parse_args(binding.normalize(argv))
        code = namespace.__handler__(namespace)
    """
    if not isinstance(parser, argparse.ArgumentParser):
        raise TypeError("configure() parser must be an argparse.ArgumentParser")
    callback, binding = bind(callback, target, schema=schema)
    _rehearse(binding, parser)
    return _install(parser, callback, binding, colorful)


def _tokens(argv):
    """
    normalize an argv-like input into a list of tokens.
    """
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("invoke() argument must be a string or an iterable of strings")


def _code(exit):
    """
    exit code carried by a SystemExit raised by argparse.
    """
    if exit.code is None:
        return 0
    if isinstance(exit.code, int):
        return exit.code
    return 1


class Application:
    """
    root command: a parser with one subcommand per bound callable.

    Parameters
    - prog: program name (defaults to __main__.__prog__, then argparse's own guess).
    - descr: root description shown in help.
    - version: when set, adds --version printing "<prog> <version>".
    - colorful: colored failure reports (help colors follow rich's own detection).

    Notes
    - --help/-h comes from argparse; help is rendered with rich-argparse.
    - Subcommand names are dashed(callback.__name__) unless given explicitly.
    """
    __slots__ = ("_parser", "_subparsers", "_commands", "_colorful")

    def __init__(self, prog=Unset, descr=Unset, /, *, version=Unset, colorful=True):
        prog = nullify(prog, getattr(sys.modules.get("__main__"), "__prog__", None))
        self._parser = argparse.ArgumentParser(
            prog=prog,
            description=nullify(descr),
            formatter_class=RichHelpFormatter,
        )
        if version is not Unset:
            self._parser.add_argument(
                "--version", action="version", version=f"%(prog)s {version}",
                help="show version information and exit",
            )
        self._subparsers = self._parser.add_subparsers(title="commands", dest=_COMMAND, metavar="COMMAND")
        self._commands = {}
        self._colorful = bool(colorful)

    def __repr__(self):
        return f"application(prog={self._parser.prog!r}, commands={list(self._commands)!r})"

    @property
    def parser(self):
        return self._parser

    @property
    def commands(self):
        """
        read-only view: subcommand name → Binding.
        """
        return MappingProxyType({name: binding for name, (binding, _) in self._commands.items()})

    def add_command(self, callback, target=Unset, /, *, name=Unset, strict=True, schema=Unset):
        """
        create a subcommand from a callable and return its Binding.

        Parameters
        - callback / target / schema: see bind().
        - name: subcommand name; defaults to dashed(callback.__name__).
        - strict: reject unmatched tokens (False silently ignores them).

        Raises
        - NameCollisionError when the subcommand name is taken.
        - everything bind() raises.
        """
        if callback is None or not callable(callback):
            raise TypeError(f"add_command() argument must be callable, not {type(callback).__name__}")
        name = nullify(name, dashed(getattr(callback, "__name__", "")))
        if not name:
            raise TypeError(f"cannot derive a command name from {qualname(callback)}, pass name=")
        if name in self._commands:
            raise NameCollisionError(f"command name {name!r} is already in use")

        callback, binding = bind(callback, target, schema=schema)
        # A subcommand parser starts out like a fresh parser, with only -h/--help.
        _rehearse(binding)

        summary = binding.descr.strip().splitlines()[0].replace("%", "%%") if binding.descr else None
        parser = self._subparsers.add_parser(name, help=summary, formatter_class=RichHelpFormatter)
        self._commands[name] = (_install(parser, callback, binding, self._colorful), bool(strict))
        return binding

    def command(self, source=Unset, /, **options):
        """
        decorator form of add_command(); the decorated callable is returned unchanged.

            @app.command
            def build(): ...

            @app.command(name="ls", strict=False)
            def listFiles(): ...
        """
        target = options.pop("target", Unset)

        def wrapper(callback, /):
            self.add_command(callback, target, **options)
            return callback

        return wrapper(source) if source is not Unset else wrapper

    def _normalize(self, tokens):
        """
        apply the selected subcommand's Binding.normalize to the tokens after its name.

        Root options take no values, so the first non-option token names the subcommand.
        """
        for index, token in enumerate(tokens):
            if token == "--":
                break
            if not token.startswith("-"):
                if token in self._commands:
                    binding, _ = self._commands[token]
                    return [*tokens[:index + 1], *binding.normalize(tokens[index + 1:])]
                break
        return tokens

    def invoke(self, argv=Unset, /):
        """
        parse argv, dispatch to the selected subcommand and return its exit code.

        Parameters
        - argv: Unset (sys.argv[1:]), a shell-like string (split with shlex) or an
          iterable of tokens.

        Exit codes
        - whatever the dispatcher returns (callable's code, 0, or 1 on failure);
        - argparse's own codes for --help/--version (0) and usage errors (2);
        - 1 when no subcommand was given (the root help is printed on stderr).
        """
        tokens = self._normalize(_tokens(argv))
        try:
            namespace, extras = self._parser.parse_known_args(tokens)
            name = getattr(namespace, _COMMAND, None)
            if name is None:
                self._parser.print_help(sys.stderr)
                return 1
            _, strict = self._commands[name]
            if extras:
                if strict:
                    self._subparsers.choices[name].error("unrecognized arguments: %s" % " ".join(extras))
                logger.debug("ignoring unmatched tokens for %s: %r", name, extras)
        except SystemExit as exit:
            return _code(exit)
        return getattr(namespace, _HANDLER)(namespace)

    def run(self, argv=Unset, /):
        """
        invoke() and exit the process with its code.
        """
        sys.exit(self.invoke(argv))


__all__ = (
    "Binding",
    "bind",
    "configure",
    "Application",
)
