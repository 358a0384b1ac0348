"""
sigcli argument declarations.

Overview
- Kind: closed set of value kinds a parameter may carry (string, boolean, integer,
  float, enum). Each kind knows how to turn a command-line token into a value
  (convert) and how to coerce an already-typed value of another runtime type (coerce).
- Declaration: immutable description of one parameter as seen by the command line:
  name, kind, position, default, option-vs-positional, help text, pretty label, aliases.
- declare(parameter, position): build a Declaration from an inspect.Parameter and the
  markers found in its Annotated annotation.

Declarations can also be written by hand and handed to the binder as an explicit
schema, in which case no signature inspection takes place:

    >>> from sigcli import Declaration, Kind
    >>> schema = [
    ...     Declaration("path", Kind.STRING),
    ...     Declaration("count", Kind.INTEGER, default=1, option=True, aliases=("-n",)),
    ... ]

Derived names
- canonical: "--" + dashed(name) for options, spaced(name) for positionals; this is
  the key the binder and the dispatcher agree on.
- names: canonical token followed by aliases (options only).
- metavar: PrettyName when given, else spaced(name).
- arity: 0 for presence flags, "?" for other options and defaulted positionals, 1 otherwise.

Invariants (checked on construction)
- An option must carry a default, except booleans which default to False and become
  presence flags (zero arity).
- ENUM declarations must name their enum type.
- Aliases only make sense on options; on a positional they are ignored with a warning.
"""
import dataclasses
import inspect
import types
import typing
import warnings
from enum import Enum

from .faults import CoercionError, MissingDefaultError, UnsupportedTypeError, UnsupportedParameterError
from .markers import Alias, Description, PrettyName, Option, markers_of
from .naming import spaced, dashed
from .utils import Unset, rename

_TRUE = frozenset({"true", "yes", "on", "1", "y", "t"})
_FALSE = frozenset({"false", "no", "off", "0", "n", "f"})


def is_boolean(token, /):
    """
    tell whether a command-line token spells a boolean ("yes", "off", "0", ...).
    """
    return isinstance(token, str) and token.strip().lower() in _TRUE | _FALSE


def _to_boolean(value):
    if isinstance(value, str):
        if (token := value.strip().lower()) in _TRUE:
            return True
        if token in _FALSE:
            return False
        raise ValueError(f"{value!r} is not a boolean")
    if isinstance(value, int | float):
        return bool(value)
    raise TypeError(f"cannot interpret {type(value).__name__} as a boolean")


def _to_integer(value):
    if isinstance(value, str):
        return int(value.strip())
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value!r} is not an integral number")
    if isinstance(value, Enum):
        return int(value.value)
    return int(value)


def _to_float(value):
    if isinstance(value, Enum):
        return float(value.value)
    return float(value.strip() if isinstance(value, str) else value)


def _to_string(value):
    if isinstance(value, Enum):
        return value.name
    return str(value)


def _to_enum(value, enumeration):
    if isinstance(value, enumeration):
        return value
    if isinstance(value, str):
        token = value.strip()
        for member in enumeration:
            if member.name.lower() == token.lower():
                return member
        for member in enumeration:
            if str(member.value) == token:
                return member
        choices = ", ".join(member.name.lower() for member in enumeration)
        raise ValueError(f"{value!r} is not one of: {choices}")
    return enumeration(value)


class Kind(Enum):
    """
    value kinds supported on the command line (closed set).

    Selection
    - str → STRING, bool → BOOLEAN, int → INTEGER, float → FLOAT, Enum subclass → ENUM.
    - X | None and Optional[X] resolve like X.
    - anything else is rejected at binding time (UnsupportedTypeError).
    """
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    ENUM = "enum"

    @classmethod
    def of(cls, annotation, default=Unset, /):
        """
        resolve (kind, type) from an annotation, falling back to the default's type.
        """
        if annotation is inspect.Parameter.empty or annotation is typing.Any:
            if default is Unset or default is None:
                return cls.STRING, str
            annotation = type(default)

        if typing.get_origin(annotation) in (typing.Union, types.UnionType):
            members = [member for member in typing.get_args(annotation) if member is not types.NoneType]
            if len(members) != 1:
                raise UnsupportedTypeError(f"union type {annotation!r} is not supported, only X | None is")
            annotation, = members

        try:
            return {
                str: cls.STRING,
                bool: cls.BOOLEAN,
                int: cls.INTEGER,
                float: cls.FLOAT,
            }[annotation], annotation
        except (KeyError, TypeError):
            pass

        if isinstance(annotation, type) and issubclass(annotation, Enum):
            return cls.ENUM, annotation

        raise UnsupportedTypeError(
            f"type {annotation!r} is not supported, use str, bool, int, float or an enum"
        )

    @property
    def type(self):
        """
        the default Python type of the kind (None for ENUM, which needs an explicit type).
        """
        return {
            Kind.STRING: str,
            Kind.BOOLEAN: bool,
            Kind.INTEGER: int,
            Kind.FLOAT: float,
        }.get(self)

    def coerce(self, value, type=None, /):
        """
        convert a value of any runtime type into this kind's type.

        Raises ValueError/TypeError when no sensible conversion exists.
        """
        match self:
            case Kind.STRING:
                return _to_string(value)
            case Kind.BOOLEAN:
                return _to_boolean(value)
            case Kind.INTEGER:
                return _to_integer(value)
            case Kind.FLOAT:
                return _to_float(value)
            case Kind.ENUM:
                if type is None:
                    raise TypeError("enum coercion requires the enum type")
                return _to_enum(value, type)
        raise RuntimeError("unreachable")

    def converter(self, type=None, /):
        """
        build a token → value converter suitable for argparse's type= hook.

        The converter is named after the kind so argparse reports
        "invalid integer value: 'x'".
        """
        @rename(self.value if type is None or self is not Kind.ENUM else type.__name__.lower())
        def convert(token):
            return self.coerce(token, type)
        return convert


@dataclasses.dataclass(frozen=True)
class Declaration:
    """
    immutable command-line view of one parameter.

    Fields
    - name: the parameter identifier.
    - kind: value Kind; type defaults to kind.type (required for ENUM).
    - position: ordinal in the callable's signature (Unset lets the binder assign it).
    - default: the parameter default, Unset when required.
    - option: named option (True) or positional argument (False).
    - descr / pretty: help text and help label override.
    - aliases: extra option tokens (normalized with a leading '-').
    - keyword: pass the value by keyword when invoking (keyword-only parameters).
    """
    name: str
    kind: Kind = Kind.STRING
    type: type = None
    position: int = Unset
    default: object = Unset
    option: bool = False
    descr: str = None
    pretty: str = None
    aliases: tuple = ()
    keyword: bool = False
    flag: bool = dataclasses.field(init=False, default=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip("_"):
            raise TypeError(f"declaration name must be a non-empty string, not {self.name!r}")
        if not isinstance(self.kind, Kind):
            raise TypeError(f"declaration {self.name!r} kind must be a Kind")
        if self.position is not Unset and (not isinstance(self.position, int) or self.position < 0):
            raise TypeError(f"declaration {self.name!r} position must be a non-negative integer")

        if self.type is None:
            if self.kind is Kind.ENUM:
                raise UnsupportedTypeError(f"declaration {self.name!r} of kind enum must name its enum type")
            object.__setattr__(self, "type", self.kind.type)
        elif self.kind is Kind.ENUM and not (isinstance(self.type, type) and issubclass(self.type, Enum)):
            raise UnsupportedTypeError(f"declaration {self.name!r} type {self.type!r} is not an enum")

        aliases = []
        for alias in self.aliases:
            alias = alias.alias if isinstance(alias, Alias) else Alias(alias).alias
            if alias not in aliases:
                aliases.append(alias)
        object.__setattr__(self, "aliases", tuple(aliases))

        if self.aliases and not self.option:
            warnings.warn(
                f"aliases of positional parameter {self.name!r} are ignored: {', '.join(self.aliases)}",
                stacklevel=3,
            )

        if self.option and self.default is Unset:
            if self.kind is not Kind.BOOLEAN:
                raise MissingDefaultError(
                    f"option parameter {self.name!r} must have a default value", parameter=self.name
                )
            object.__setattr__(self, "default", False)
            object.__setattr__(self, "flag", True)

    @property
    def required(self):
        return self.default is Unset

    @property
    def canonical(self):
        """
        binding key: "--" + dashed(name) for options, spaced(name) for positionals.
        """
        if self.option:
            return "--" + dashed(self.name)
        return spaced(self.name)

    @property
    def names(self):
        """
        option tokens (canonical first, then aliases); empty for positionals.
        """
        if not self.option:
            return ()
        return tuple(dict.fromkeys((self.canonical, *self.aliases)))

    @property
    def metavar(self):
        return self.pretty or spaced(self.name)

    @property
    def arity(self):
        if self.flag:
            return 0
        if self.option or not self.required:
            return "?"
        return 1

    @property
    def converter(self):
        """
        token → value converter for the declared type (argparse type= hook).
        """
        return self.kind.converter(self.type)

    def coerce(self, value, /):
        """
        return value unchanged when it already has the declared type, else convert it.

        Raises CoercionError (chained to the underlying error) when conversion fails.
        """
        if value is None or type(value) is self.type:
            return value
        try:
            return self.kind.coerce(value, self.type)
        except (TypeError, ValueError) as error:
            raise CoercionError(
                f"cannot convert {value!r} to {self.kind.value} for parameter {self.name!r}",
                parameter=self.name,
                value=value,
            ) from error


def declare(parameter, position, /):
    """
    build a Declaration from an inspect.Parameter.

    Markers are read from typing.Annotated metadata:
    Option, Alias (repeatable), Description, PrettyName.

    Raises
    - UnsupportedParameterError for *args/**kwargs.
    - UnsupportedTypeError for annotations outside the supported kinds.
    - MissingDefaultError for non-boolean options without a default.
    """
    if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
        raise UnsupportedParameterError(
            f"variadic parameter {parameter.name!r} cannot be bound to the command line",
            parameter=parameter.name,
        )

    default = Unset if parameter.default is inspect.Parameter.empty else parameter.default
    annotation, markers = markers_of(parameter.annotation)

    try:
        kind, type = Kind.of(annotation, default)
    except UnsupportedTypeError as error:
        raise UnsupportedTypeError(f"parameter {parameter.name!r}: {error}", parameter=parameter.name) from None

    descr = pretty = None
    aliases = []
    option = False
    for marker in markers:
        match marker:
            case Option():
                option = True
            case Alias(alias=alias):
                aliases.append(alias)
            case Description(text=text):
                descr = text or None
            case PrettyName(name=name):
                pretty = name

    return Declaration(
        parameter.name,
        kind,
        type,
        position=position,
        default=default,
        option=option,
        descr=descr,
        pretty=pretty,
        aliases=tuple(aliases),
        keyword=parameter.kind is inspect.Parameter.KEYWORD_ONLY,
    )


__all__ = (
    "Kind",
    "Declaration",
    "declare",
    "is_boolean",
)
