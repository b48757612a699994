"""Frames of the Redis serialization protocol and a cursor for reading commands."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

_UNSIGNED = re.compile(rb"\+?(\d+)")
_U64_LIMIT = 1 << 64


class ProtocolError(Exception):
    """Raised when a peer sends something the protocol does not allow."""


class ParseError(ProtocolError):
    """Raised when a command frame cannot be parsed."""


class EndOfStream(ParseError):
    """Raised when a command frame has no more entries to read."""

    def __init__(self, message: str = "protocol error; unexpected end of stream") -> None:
        super().__init__(message)


class Frame:
    """Base class of all protocol frames."""

    def to_error(self) -> ProtocolError:
        """Return the error that reports this frame as unexpected."""
        return ProtocolError(f"unexpected frame: {self}")


@dataclass
class Simple(Frame):
    """A simple string."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class Error(Frame):
    """An error reply."""

    message: str

    def __str__(self) -> str:
        return f"error: {self.message}"


@dataclass
class Integer(Frame):
    """An unsigned integer."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class Bulk(Frame):
    """A binary-safe bulk string."""

    data: bytes

    def __str__(self) -> str:
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return repr(self.data)


@dataclass
class Null(Frame):
    """The absence of a value."""

    def __str__(self) -> str:
        return "(nil)"


@dataclass
class Array(Frame):
    """An ordered list of frames."""

    items: List[Frame] = field(default_factory=list)

    def push_bulk(self, data: bytes) -> None:
        """Append a bulk frame holding ``data``."""
        self.items.append(Bulk(bytes(data)))

    def push_int(self, value: int) -> None:
        """Append an integer frame holding ``value``."""
        self.items.append(Integer(value))

    def __str__(self) -> str:
        return " ".join(str(item) for item in self.items)


def _parse_unsigned(data: bytes) -> int:
    match = _UNSIGNED.match(data)
    if match is None:
        raise ParseError("protocol error; invalid number")
    value = int(match.group(1))
    if value >= _U64_LIMIT:
        raise ParseError("protocol error; invalid number")
    return value


class Parse:
    """Cursor over the entries of an array frame holding a command."""

    def __init__(self, frame: Frame) -> None:
        if not isinstance(frame, Array):
            raise ParseError(f"protocol error; expected array, got {frame!r}")
        self._parts: Iterator[Frame] = iter(list(frame.items))

    def _next(self) -> Frame:
        try:
            return next(self._parts)
        except StopIteration:
            raise EndOfStream() from None

    def next_string(self) -> str:
        """Return the next entry as a string."""
        frame = self._next()
        if isinstance(frame, Simple):
            return frame.value
        if isinstance(frame, Bulk):
            try:
                return frame.data.decode("utf-8")
            except UnicodeDecodeError:
                raise ParseError("protocol error; invalid string") from None
        raise ParseError(
            f"protocol error; expected simple frame or bulk frame, got {frame!r}"
        )

    def next_bytes(self) -> bytes:
        """Return the next entry as raw bytes."""
        frame = self._next()
        if isinstance(frame, Simple):
            return frame.value.encode("utf-8")
        if isinstance(frame, Bulk):
            return frame.data
        raise ParseError(
            f"protocol error; expected simple frame or bulk frame, got {frame!r}"
        )

    def next_int(self) -> int:
        """Return the next entry as an unsigned integer."""
        frame = self._next()
        if isinstance(frame, Integer):
            return frame.value
        if isinstance(frame, Simple):
            return _parse_unsigned(frame.value.encode("utf-8"))
        if isinstance(frame, Bulk):
            return _parse_unsigned(frame.data)
        raise ParseError(f"protocol error; expected int frame but got {frame!r}")

    def finish(self) -> None:
        """Check that every entry has been consumed."""
        leftover: Optional[Frame] = next(self._parts, None)
        if leftover is not None:
            raise ParseError("protocol error; expected end of frame, but there was more")