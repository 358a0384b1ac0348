"""
sigcli naming: identifier → label/flag conversions.

What this module provides
- spaced(name): human-readable label, e.g. "someCamelCaseName" → "Some Camel Case Name".
- dashed(name): flag token, e.g. "someCamelCaseName" → "some-camel-case-name".

Word boundaries
- Both functions split on the same boundaries so a label and its flag never disagree:
  • an upper-case letter following a non upper-case character starts a word
    ("someName" → some | Name);
  • inside an upper-case run, the last capital starts a word when a lower-case
    letter follows it ("HTTPServer" → HTTP | Server), otherwise the run stays
    whole ("someAPI" → some | API).
  • underscores separate words; repeated, leading and trailing underscores are
    dropped ("first_argument" → first | argument, "type_" → type).
- Case folding is ASCII-only and character-wise; digits never start a word.

Empty input (or None) is returned unchanged.
"""
import functools
import re

_UNDERSCORES = re.compile(r"_+")


def _boundary(word, index):
    """
    tell whether word[index] starts a new camel-case hump.
    """
    if index == 0 or not word[index].isupper():
        return False
    if not word[index - 1].isupper():
        return True
    # Last capital of an acronym followed by a regular word: "HTTPServer" → "HTTP Server".
    return index + 1 < len(word) and word[index + 1].islower()


def _words(name):
    """
    split an identifier into its words (case preserved).
    """
    for chunk in _UNDERSCORES.split(name):
        if not chunk:
            continue
        start = 0
        for index in range(1, len(chunk)):
            if _boundary(chunk, index):
                yield chunk[start:index]
                start = index
        yield chunk[start:]


@functools.cache
def spaced(name):
    """
    convert an identifier into space-separated words with a capitalized head.

    examples
    - "someCamelCaseName" → "Some Camel Case Name"
    - "someAPI"           → "Some API"
    - "first_argument"    → "First Argument"
    """
    if not name:
        return name
    return " ".join(word[0].upper() + word[1:] for word in _words(name)) or name


@functools.cache
def dashed(name):
    """
    convert an identifier into a lower-case, dash-separated flag token.

    examples
    - "someCamelCaseName" → "some-camel-case-name"
    - "someAPI"           → "some-api"
    - "skip_confirmations" → "skip-confirmations"
    """
    if not name:
        return name
    return "-".join(word.lower() for word in _words(name)) or name


__all__ = (
    "spaced",
    "dashed",
)
