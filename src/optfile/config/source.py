"""Bounded line reader feeding the directive-file loader."""

from dataclasses import dataclass
from typing import BinaryIO, Iterator, Union

from .api import MAX_LINE_LEN
from .errors import ConfigReadError

__all__ = ["SourceLine", "LineSource"]


@dataclass
class SourceLine:
    """One line read from a configuration stream.

    Attributes
    ----------
    number : int
        1-based line number
    data : bytes
        Line content, without its terminator
    overflow : bool
        Whether the physical line exceeded the length bound. In that case
        `data` only holds the first part of the line and the rest of it has
        been discarded.
    """

    number: int
    data: bytes
    overflow: bool = False


class LineSource:
    """Iterates over the lines of a stream, up to a per-line length bound.

    End of input ends the iteration; a failing stream raises
    `ConfigReadError` so that callers can tell the two apart.
    """

    def __init__(self, stream: BinaryIO, max_length: int = MAX_LINE_LEN):
        """Initialize the source.

        Parameters
        ----------
        stream : BinaryIO
            Opened stream. Text streams are accepted and re-encoded as UTF-8;
            their lines are bounded in characters rather than bytes, since the
            stream decodes before the bound applies.
        max_length : int, default 10000
            Maximum number of bytes in a line, excluding its terminator
        """
        self.stream = stream
        self.max_length = max_length

    def __iter__(self) -> Iterator[SourceLine]:
        number = 0
        # Room for the longest allowed line and a `\r\n` terminator
        limit = self.max_length + 2
        while True:
            data = self._readline(limit)
            if not data:
                return

            number += 1
            content = self._strip(data)
            overflow = len(content) > self.max_length
            if overflow:
                content = content[: self.max_length]
                if not self._is_terminated(data):
                    self._discard_rest()

            if isinstance(content, str):
                content = content.encode("utf-8", errors="surrogateescape")

            yield SourceLine(number, content, overflow)

    def _readline(self, size: int = -1) -> Union[bytes, str]:
        try:
            return self.stream.readline(size)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigReadError(f"Error reading configuration: {exc}") from exc

    def _discard_rest(self):
        """Consumes the remainder of an overlong physical line."""
        while True:
            data = self._readline(self.max_length)
            if not data or self._is_terminated(data):
                return

    @staticmethod
    def _is_terminated(data: Union[bytes, str]) -> bool:
        return data[-1:] in (b"\n", "\n")

    @staticmethod
    def _strip(data: Union[bytes, str]) -> Union[bytes, str]:
        """Removes a trailing line terminator, in the stream's own units."""
        if data[-2:] in (b"\r\n", "\r\n"):
            return data[:-2]
        if data[-1:] in (b"\n", "\n"):
            return data[:-1]

        return data
