"""The SET command."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from miniredis.protocol import Array, EndOfStream, Parse, ProtocolError, Simple

log = logging.getLogger(__name__)

_EXPIRY_OPTIONS = ("EX", "PX")


@dataclass
class Set:
    """Set a key to hold a value, optionally expiring after ``expire``."""

    key: str
    value: bytes
    handler: str = ""
    expire: Optional[timedelta] = None

    def __post_init__(self) -> None:
        self.key = str(self.key)

    @classmethod
    def parse_frames(cls, parse: Parse) -> "Set":
        """Read ``SET key value [handler] [EX seconds|PX milliseconds]``."""
        key = parse.next_string()
        value = parse.next_bytes()
        handler = ""

        try:
            option = parse.next_string()
        except EndOfStream:
            return cls(key, value, handler, None)

        if option.upper() not in _EXPIRY_OPTIONS:
            handler = option
            try:
                option = parse.next_string()
            except EndOfStream:
                return cls(key, value, handler, None)

        unit = option.upper()
        if unit not in _EXPIRY_OPTIONS:
            raise ProtocolError("currently `SET` only supports the expiration option")
        amount = parse.next_int()
        try:
            if unit == "EX":
                expire = timedelta(seconds=amount)
            else:
                expire = timedelta(milliseconds=amount)
        except OverflowError:
            raise ProtocolError("protocol error; invalid number") from None
        return cls(key, value, handler, expire)

    async def apply(self, db, dst) -> None:
        """Store the value in ``db`` and reply OK."""
        db.set(self.key, self.value, self.expire)
        response = Simple("OK")
        log.debug("response=%r", response)
        await dst.write_frame(response)

    def into_frame(self) -> Array:
        """Encode the command as a frame; any expiry is sent in milliseconds."""
        frame = Array()
        frame.push_bulk(b"set")
        frame.push_bulk(self.key.encode("utf-8"))
        frame.push_bulk(self.value)
        if self.expire is not None:
            frame.push_bulk(b"px")
            frame.push_int(self.expire // timedelta(milliseconds=1))
        return frame