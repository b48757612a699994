"""The PING command."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from miniredis.protocol import Array, Bulk, EndOfStream, Parse, Simple

log = logging.getLogger(__name__)


@dataclass
class Ping:
    """Reply PONG, or echo the message when one is given."""

    msg: Optional[bytes] = None

    @classmethod
    def parse_frames(cls, parse: Parse) -> "Ping":
        """Read ``PING [message]`` after the command name has been consumed."""
        try:
            return cls(parse.next_bytes())
        except EndOfStream:
            return cls()

    async def apply(self, dst) -> None:
        """Write the reply to ``dst``."""
        response = Simple("PONG") if self.msg is None else Bulk(self.msg)
        log.debug("response=%r", response)
        await dst.write_frame(response)

    def into_frame(self) -> Array:
        """Encode the command as a frame to send to a server."""
        frame = Array()
        frame.push_bulk(b"ping")
        if self.msg is not None:
            frame.push_bulk(self.msg)
        return frame