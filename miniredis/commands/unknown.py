"""Reply for commands the server does not recognise."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from miniredis.protocol import Error

log = logging.getLogger(__name__)


@dataclass
class Unknown:
    """A command that is not supported."""

    command_name: str

    def __post_init__(self) -> None:
        self.command_name = str(self.command_name)

    async def apply(self, dst) -> None:
        """Tell the client the command is not recognised."""
        response = Error(f"ERR unknown command '{self.command_name}'")
        log.debug("response=%r", response)
        await dst.write_frame(response)