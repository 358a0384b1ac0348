"""
sigcli declaration markers.

Markers are inert metadata carriers. They are attached to parameters through
typing.Annotated, and (for Description) to callables as a decorator:

    from typing import Annotated
    from sigcli import Alias, Description, Option, PrettyName

    @Description("copy a file somewhere else")
    def copy(
        source: Annotated[str, Description("the file to copy")],
        target: Annotated[str, Description("where to put it")] = ".",
        mode: Annotated[str, Option(), Alias("m"), PrettyName("MODE")] = "fast",
        force: Annotated[bool, Option(), Alias("-f")] = False,
    ): ...

Markers
- Alias: an extra option token; a leading '-' is added when missing. Repeatable.
- Description: help text for a parameter or for the callable itself.
- PrettyName: help label override for an option value; the canonical name is untouched.
- Option: turns the parameter into a named option (must have a default unless boolean).
"""
import dataclasses
import inspect
import typing
from typing import Annotated


@dataclasses.dataclass(frozen=True)
class Alias:
    """
    alternative option token for a parameter.
    """
    alias: str

    def __post_init__(self):
        if not isinstance(alias := self.alias, str):
            raise TypeError("alias must be a string")
        if not (alias := alias.strip()) or alias.strip("-") == "":
            raise ValueError("alias cannot be empty")
        if not alias.startswith("-"):
            alias = "-" + alias
        object.__setattr__(self, "alias", alias)


@dataclasses.dataclass(frozen=True)
class Description:
    """
    help text for a parameter (inside Annotated) or a callable (as a decorator).
    """
    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise TypeError("description must be a string")
        object.__setattr__(self, "text", self.text.strip())

    def __call__(self, callback, /):
        if not callable(callback):
            raise TypeError("@Description() must be applied to a callable")
        callback.__description__ = self.text
        return callback


@dataclasses.dataclass(frozen=True)
class PrettyName:
    """
    display name of an option value in help output.
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise TypeError("pretty name must be a string")
        if not (name := self.name.strip()):
            raise ValueError("pretty name cannot be empty")
        object.__setattr__(self, "name", name)


@dataclasses.dataclass(frozen=True)
class Option:
    """
    presence marker: the parameter is a named option rather than a positional.
    """


def markers_of(annotation, /):
    """
    split an annotation into (base type, markers).

    Non-marker Annotated metadata is ignored; nested Annotated forms are already
    flattened by typing.
    """
    if typing.get_origin(annotation) is not Annotated:
        return annotation, ()
    base, *metadata = typing.get_args(annotation)
    return base, tuple(item for item in metadata if isinstance(item, Alias | Description | PrettyName | Option))


def description_of(callback, /):
    """
    the help text of a callable: an explicit @Description, else its docstring.
    """
    text = getattr(callback, "__description__", None)
    if text is None:
        text = inspect.getdoc(callback)
    return text or None


__all__ = (
    "Alias",
    "Description",
    "PrettyName",
    "Option",
    "markers_of",
    "description_of",
)
