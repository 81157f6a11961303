"""Override mini-language parser.

Purpose
-------
Decode the text carried by ``SMCONFIG``-style environment variables (and the
files referenced through ``<NAME>_FILE``) into a nested mapping.

Grammar
-------
* Whitespace-separated ``key=value`` pairs.
* Keys and values may be wrapped, wholly or partly, in single or double
  quotes to carry whitespace or ``=`` literally. Inside a quoted span the other
  quote character is an ordinary character.
* A backslash escapes ``\\`` everywhere, ``'`` unless inside a double-quoted
  span, and ``"`` unless inside a single-quoted span. Before anything else the
  backslash is kept verbatim.
* Dotted keys (``db.host=x``) create nested mappings.
* Values that read as signed integers or decimals become ``int``/``float``.

Contents
--------
* :func:`parse_env_var` – single-pass tokenizer.
* :func:`assign_path` – dotted-path assignment into nested dictionaries.
* :func:`coerce_scalar` – numeric coercion for committed values.
"""

from __future__ import annotations

import math
import re
from typing import Final

from ...domain.errors import MalformedInput

_SINGLE: Final[str] = "'"
_DOUBLE: Final[str] = '"'
_ESCAPE: Final[str] = "\\"

#: Characters treated as pair separators; the JavaScript ``\s`` class.
WHITESPACE: Final[frozenset[str]] = frozenset(
    " \t\n\r\f\v\u00a0\u1680\u2028\u2029\u202f\u205f\u3000\ufeff"
    + "".join(chr(code) for code in range(0x2000, 0x200B))
)

_NUMERIC = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER = re.compile(r"[+-]?\d+")


def parse_env_var(text: str) -> dict[str, object]:
    """Parse override *text* into a nested mapping.

    Raises
    ------
    MalformedInput
        When the text is empty, ends while a key is still being read (no
        ``=``), or ends inside an open quote.

    Examples
    --------
    >>> parse_env_var("key.a=value hello=world n=8")
    {'key': {'a': 'value'}, 'hello': 'world', 'n': 8}
    >>> parse_env_var('"k=ey"=\\'hello world\\'')
    {'k=ey': 'hello world'}
    >>> parse_env_var("key")
    Traceback (most recent call last):
    ...
    smconfig.domain.errors.MalformedInput: Malformed string: key 'key' has no value
    """

    result: dict[str, object] = {}
    reading_value = False
    in_single = False
    in_double = False
    pending = False
    token: list[str] = []
    key = ""
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if char == _ESCAPE and index + 1 < length and text[index + 1] in _escapable(in_single, in_double):
            token.append(text[index + 1])
            pending = True
            index += 2
            continue
        if in_single or in_double:
            if (in_single and char == _SINGLE) or (in_double and char == _DOUBLE):
                in_single = in_double = False
            else:
                token.append(char)
        elif char == _SINGLE:
            in_single = True
            pending = True
        elif char == _DOUBLE:
            in_double = True
            pending = True
        elif not reading_value and char == "=":
            key = "".join(token)
            token = []
            reading_value = True
        elif char in WHITESPACE and (reading_value or not pending):
            if reading_value:
                assign_path(result, key, coerce_scalar("".join(token)))
                token = []
                key = ""
                reading_value = False
                pending = False
            while index + 1 < length and text[index + 1] in WHITESPACE:
                index += 1
        else:
            token.append(char)
            pending = True
        index += 1

    if in_single or in_double:
        raise MalformedInput("Malformed string: unterminated quote")
    if reading_value:
        assign_path(result, key, coerce_scalar("".join(token)))
    elif pending:
        raise MalformedInput(f"Malformed string: key {''.join(token)!r} has no value")
    elif not result:
        raise MalformedInput("Malformed string: no key=value pair found")
    return result


def _escapable(in_single: bool, in_double: bool) -> tuple[str, ...]:
    """Return the characters a backslash may escape in the current quote state."""

    allowed = [_ESCAPE]
    if not in_double:
        allowed.append(_SINGLE)
    if not in_single:
        allowed.append(_DOUBLE)
    return tuple(allowed)


def assign_path(target: dict[str, object], key: str, value: object) -> None:
    """Assign ``value`` inside ``target`` using ``.`` as the nesting delimiter.

    Intermediate mappings are created as needed; an intermediate scalar is
    replaced by a mapping.

    Examples
    --------
    >>> data: dict[str, object] = {"service": "off"}
    >>> assign_path(data, "service.timeout", 5)
    >>> data
    {'service': {'timeout': 5}}
    """

    parts = key.split(".")
    cursor = target
    for part in parts[:-1]:
        child = cursor.get(part)
        if not isinstance(child, dict):
            child = {}
            cursor[part] = child
        cursor = child
    cursor[parts[-1]] = value


def coerce_scalar(value: str) -> object:
    """Convert numeric-looking *value* to ``int``/``float``; keep everything else.

    Decimals that overflow to infinity stay strings.

    Examples
    --------
    >>> coerce_scalar("8"), coerce_scalar("-12.3"), coerce_scalar(".5"), coerce_scalar("8a")
    (8, -12.3, 0.5, '8a')
    """

    if not _NUMERIC.fullmatch(value):
        return value
    if _INTEGER.fullmatch(value):
        return int(value)
    number = float(value)
    return number if math.isfinite(number) else value
