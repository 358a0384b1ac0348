import functools
from typing import final


@final
class UnsetType:
    """
    marker for "no value was given", distinct from None.

    where it shows up
    - optional parameters of the public API (prog, descr, version, target, schema, name).
    - Declaration.position and Declaration.default before they are known.

    guarantees
    - one instance per process; copies and unpickled copies are that instance.
    - falsy, repr "Unset", usable in unions (str | Unset).
    - cannot be subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls):
        raise TypeError("UnsetType cannot be subclassed")

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        # Resolved as the module-level name on unpickling.
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self


Unset = UnsetType()


def nullify(object, default=None, /):
    """
    `default` in place of Unset; any other object (None included) is returned as is.
    """
    return default if object is Unset else object


def rename(x, /, name=None):
    """
    give a callable a fixed __name__ and __qualname__.

    usage
    - rename(function, "name") renames in place and returns the function.
    - rename("name") returns a decorator doing the same.

    argparse reports conversion failures with the converter's __name__, which is
    why converters built at runtime are renamed after their kind.
    """
    if isinstance(x, str):
        return functools.partial(rename, name=x)
    if not isinstance(name, str):
        raise TypeError(f"name must be a string, not {type(name).__name__}")
    x.__name__ = x.__qualname__ = name
    return x


def qualname(object, /):
    """
    best-effort readable name for a callable, used in diagnostics.
    """
    return getattr(object, "__qualname__", None) or getattr(object, "__name__", None) or repr(object)


__all__ = (
    "UnsetType",
    "Unset",
    "nullify",
    "rename",
    "qualname",
)
