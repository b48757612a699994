"""The PUBLISH command."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from miniredis.protocol import Array, Integer, Parse

log = logging.getLogger(__name__)


@dataclass
class Publish:
    """Post a message to a channel."""

    channel: str
    message: bytes

    def __post_init__(self) -> None:
        self.channel = str(self.channel)

    @classmethod
    def parse_frames(cls, parse: Parse) -> "Publish":
        """Read ``PUBLISH channel message`` after the command name."""
        channel = parse.next_string()
        message = parse.next_bytes()
        return cls(channel, message)

    async def apply(self, db, dst) -> None:
        """Publish through ``db`` and reply with the number of subscribers."""
        num_subscribers = db.publish(self.channel, self.message)
        response = Integer(num_subscribers)
        log.debug("response=%r", response)
        await dst.write_frame(response)

    def into_frame(self) -> Array:
        """Encode the command as a frame to send to a server."""
        frame = Array()
        frame.push_bulk(b"publish")
        frame.push_bulk(self.channel.encode("utf-8"))
        frame.push_bulk(self.message)
        return frame