"""Line lexer for the optfile directive format.

Each line of a directive file is either blank, a comment, a profile header
or a single option assignment:

    # comment
    [profile-name]
    option-name
    option-name=value
    option-name="quoted value with spaces"
    option-name=%5%abcde

Lexing works on raw bytes. Bytes of 0x80 and above are treated as printable,
so UTF-8 names and bare values form a single token. Names and values are
decoded with `surrogateescape`, which keeps arbitrary bytes of a
length-prefixed literal intact.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .api import (
    ASSIGN,
    COMMENT,
    LENGTH_MARKER,
    MAX_OPT_LEN,
    MAX_PARAM_LEN,
    QUOTES,
    UTF8_BOM,
    WHITESPACE,
)
from .errors import ConfigParseError

__all__ = ["Directive", "SectionHeader", "lex_line", "decode"]

# Header of a length-prefixed literal, e.g. `%5%`
LENGTH_PREFIX = re.compile(rb"%(\d+)%")


@dataclass
class Directive:
    """Option assignment parsed from a single line.

    Attributes
    ----------
    name : str
        Option name, as written in the file (not normalized)
    value : str, optional
        Option value, `None` unless an `=` was consumed
    value_set : bool
        Whether an `=` was consumed on the line
    extra : str, optional
        Trailing characters which were left unconsumed after the value
    """

    name: str
    value: Optional[str] = None
    value_set: bool = False
    extra: Optional[str] = None


@dataclass
class SectionHeader:
    """Profile header line, with the brackets stripped from the name."""

    name: str


def decode(data: bytes) -> str:
    """Decodes raw line bytes, preserving undecodable bytes."""
    return data.decode("utf-8", errors="surrogateescape")


def _isprint(c: int) -> bool:
    return c >= 0x20 and c != 0x7F


def _skip_space(line: bytes, pos: int) -> int:
    while pos < len(line) and line[pos] in WHITESPACE:
        pos += 1

    return pos


def _at_end(line: bytes, pos: int) -> bool:
    return pos >= len(line) or line[pos] == COMMENT


def lex_line(line: bytes) -> Union[None, SectionHeader, Directive]:
    """Turns one raw line into a directive, a profile header or nothing.

    Parameters
    ----------
    line : bytes
        Raw line, with or without its terminator

    Returns
    -------
    Union[None, SectionHeader, Directive]
        `None` for blank and comment lines, a `SectionHeader` for `[name]`
        lines and a `Directive` otherwise

    Raises
    ------
    ConfigParseError
        If the line cannot be lexed. The error only concerns this line.
    """
    # Skip a UTF-8 byte-order mark and leading whitespace
    pos = len(UTF8_BOM) if line.startswith(UTF8_BOM) else 0
    pos = _skip_space(line, pos)

    # Blank line or comment
    if _at_end(line, pos):
        return None

    # Read the option name
    name, pos = _read_name(line, pos)

    # A bracketed token is a profile header, never an option
    if len(name) > 2 and name[:1] == b"[" and name[-1:] == b"]":
        return SectionHeader(decode(name[1:-1]))

    # Read the parameter, if any
    value = None
    pos = _skip_space(line, pos)
    if pos < len(line) and line[pos] == ASSIGN:
        pos = _skip_space(line, pos + 1)
        value, pos = _read_value(line, pos, decode(name))
        pos = _skip_space(line, pos)

    # Anything left which is not a comment is reported by the caller
    extra = None
    if not _at_end(line, pos):
        extra = decode(line[pos:])

    return Directive(
        name=decode(name),
        value=decode(value) if value is not None else None,
        value_set=value is not None,
        extra=extra,
    )


def _read_name(line: bytes, pos: int) -> Tuple[bytes, int]:
    """Reads printable bytes up to a space, a comment or an `=`."""
    start = pos
    while pos < len(line):
        c = line[pos]
        if not _isprint(c) or c == 0x20 or c == COMMENT or c == ASSIGN:
            break

        pos += 1
        if pos - start >= MAX_OPT_LEN:
            raise ConfigParseError("option name too long")

    if pos == start:
        raise ConfigParseError("parse error")

    return line[start:pos], pos


def _read_value(line: bytes, pos: int, name: str) -> Tuple[bytes, int]:
    """Reads a parameter using the first matching value syntax."""
    if pos < len(line) and line[pos] in QUOTES:
        return _read_quoted(line, pos, name)

    if pos < len(line) and line[pos] == LENGTH_MARKER:
        match = LENGTH_PREFIX.match(line, pos)
        if match is not None:
            return _read_counted(line, match)

    return _read_bare(line, pos)


def _read_quoted(line: bytes, pos: int, name: str) -> Tuple[bytes, int]:
    """Reads a quoted literal verbatim, without escape processing."""
    start = pos + 1
    end = line.find(line[pos : pos + 1], start)
    stop = end if end >= 0 else len(line)
    if stop - start >= MAX_PARAM_LEN:
        raise ConfigParseError(f"option {name} has a too long parameter")

    if end < 0:
        raise ConfigParseError(f"option {name} has an unterminated quoted parameter")

    return line[start:end], end + 1


def _read_counted(line: bytes, match: "re.Match") -> Tuple[bytes, int]:
    """Reads exactly as many raw bytes as the `%N%` header declares."""
    length = int(match.group(1))
    start = match.end()
    if length >= MAX_PARAM_LEN - 1 or len(line) - start < length:
        raise ConfigParseError("bogus % length")

    return line[start : start + length], start + length


def _read_bare(line: bytes, pos: int) -> Tuple[bytes, int]:
    """Reads printable, non-whitespace bytes up to a comment."""
    start = pos
    while pos < len(line):
        c = line[pos]
        if not _isprint(c) or c in WHITESPACE or c == COMMENT:
            break

        pos += 1
        if pos - start >= MAX_PARAM_LEN:
            raise ConfigParseError("too long parameter")

    return line[start:pos], pos
