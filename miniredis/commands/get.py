"""The GET command."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from miniredis.protocol import Array, Bulk, Null, Parse

log = logging.getLogger(__name__)


@dataclass
class Get:
    """Get the value of a key; nil is returned when the key is absent."""

    key: str

    def __post_init__(self) -> None:
        self.key = str(self.key)

    @classmethod
    def parse_frames(cls, parse: Parse) -> "Get":
        """Read ``GET key`` after the command name has been consumed."""
        return cls(parse.next_string())

    async def apply(self, db, dst) -> None:
        """Look the key up in ``db`` and write the reply to ``dst``."""
        value = db.get(self.key)
        response = Null() if value is None else Bulk(value)
        log.debug("response=%r", response)
        await dst.write_frame(response)

    def into_frame(self) -> Array:
        """Encode the command as a frame to send to a server."""
        frame = Array()
        frame.push_bulk(b"get")
        frame.push_bulk(self.key.encode("utf-8"))
        return frame