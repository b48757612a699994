"""Command dispatch and the SUBSCRIBE / UNSUBSCRIBE commands."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from miniredis.commands.get import Get
from miniredis.commands.ping import Ping
from miniredis.commands.publish import Publish
from miniredis.commands.set import Set
from miniredis.commands.unknown import Unknown
from miniredis.protocol import Array, EndOfStream, Frame, Parse, ProtocolError

log = logging.getLogger(__name__)


def _remaining_strings(parse: Parse) -> Iterator[str]:
    """Yield string entries until the frame is exhausted."""
    while True:
        try:
            value = parse.next_string()
        except EndOfStream:
            return
        yield value


def make_subscribe_frame(channel_name: str, num_subs: int) -> Array:
    """Build the reply confirming a subscription."""
    response = Array()
    response.push_bulk(b"subscribe")
    response.push_bulk(channel_name.encode("utf-8"))
    response.push_int(num_subs)
    return response


def make_unsubscribe_frame(channel_name: str, num_subs: int) -> Array:
    """Build the reply confirming an unsubscription."""
    response = Array()
    response.push_bulk(b"unsubscribe")
    response.push_bulk(channel_name.encode("utf-8"))
    response.push_int(num_subs)
    return response


def make_message_frame(channel_name: str, msg: bytes) -> Array:
    """Build the frame delivering a published message to a subscriber."""
    response = Array()
    response.push_bulk(b"message")
    response.push_bulk(channel_name.encode("utf-8"))
    response.push_bulk(msg)
    return response


@dataclass(eq=False)
class _Feed:
    """One channel subscription: the message source and the task draining it."""

    messages: Any
    task: Optional["asyncio.Task[None]"] = None

    async def close(self) -> None:
        if self.task is not None:
            if not self.task.done():
                self.task.cancel()
            await asyncio.wait([self.task])
        aclose = getattr(self.messages, "aclose", None)
        if aclose is not None:
            await aclose()


async def _forward(channel: str, feed: _Feed, inbox: asyncio.Queue) -> None:
    async for msg in feed.messages:
        await inbox.put((channel, feed, msg))
    await inbox.put((channel, feed, None))


class _Subscriptions:
    """The channels one client is subscribed to, with their messages merged."""

    def __init__(self) -> None:
        self._feeds: Dict[str, _Feed] = {}
        self._inbox: asyncio.Queue = asyncio.Queue()

    def __len__(self) -> int:
        return len(self._feeds)

    def channels(self) -> List[str]:
        return list(self._feeds)

    async def add(self, channel: str, messages: Any) -> None:
        feed = _Feed(messages)
        feed.task = asyncio.ensure_future(_forward(channel, feed, self._inbox))
        previous = self._feeds.get(channel)
        self._feeds[channel] = feed
        if previous is not None:
            await previous.close()

    async def remove(self, channel: str) -> None:
        feed = self._feeds.pop(channel, None)
        if feed is not None:
            await feed.close()

    async def next_message(self) -> Tuple[str, bytes]:
        while True:
            channel, feed, msg = await self._inbox.get()
            if self._feeds.get(channel) is not feed:
                continue
            if msg is None:
                del self._feeds[channel]
                await feed.close()
                continue
            return channel, msg

    async def close(self) -> None:
        feeds = list(self._feeds.values())
        self._feeds.clear()
        for feed in feeds:
            await feed.close()


@dataclass
class Subscribe:
    """Subscribe the client to one or more channels."""

    channels: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.channels = [str(channel) for channel in self.channels]

    @classmethod
    def parse_frames(cls, parse: Parse) -> "Subscribe":
        """Read ``SUBSCRIBE channel [channel ...]`` after the command name."""
        channels = [parse.next_string()]
        channels.extend(_remaining_strings(parse))
        return cls(channels)

    async def apply(self, db, dst, shutdown) -> None:
        """Serve the subscription until the client leaves or the server stops.

        ``db.subscribe(channel)`` must return an async iterator of messages;
        ``dst`` provides ``read_frame`` and ``write_frame``; ``shutdown``
        provides an awaitable ``recv``.
        """
        pending = list(self.channels)
        subscriptions = _Subscriptions()
        waiters: Dict[str, "asyncio.Future[Any]"] = {}
        try:
            while True:
                while pending:
                    channel = pending.pop(0)
                    await subscriptions.add(channel, db.subscribe(channel))
                    await dst.write_frame(
                        make_subscribe_frame(channel, len(subscriptions))
                    )

                if "message" not in waiters:
                    waiters["message"] = asyncio.ensure_future(
                        subscriptions.next_message()
                    )
                if "frame" not in waiters:
                    waiters["frame"] = asyncio.ensure_future(dst.read_frame())
                if "shutdown" not in waiters:
                    waiters["shutdown"] = asyncio.ensure_future(shutdown.recv())

                await asyncio.wait(
                    list(waiters.values()), return_when=asyncio.FIRST_COMPLETED
                )

                if waiters["message"].done():
                    channel, msg = waiters.pop("message").result()
                    await dst.write_frame(make_message_frame(channel, msg))
                elif waiters["frame"].done():
                    frame = waiters.pop("frame").result()
                    if frame is None:
                        return
                    await _handle_command(frame, pending, subscriptions, dst)
                elif waiters["shutdown"].done():
                    return
        finally:
            for waiter in waiters.values():
                waiter.cancel()
            if waiters:
                await asyncio.wait(list(waiters.values()))
            await subscriptions.close()

    def into_frame(self) -> Array:
        """Encode the command as a frame to send to a server."""
        frame = Array()
        frame.push_bulk(b"subscribe")
        for channel in self.channels:
            frame.push_bulk(channel.encode("utf-8"))
        return frame


@dataclass
class Unsubscribe:
    """Unsubscribe from channels; with none given, from every channel."""

    channels: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.channels = [str(channel) for channel in self.channels]

    @classmethod
    def parse_frames(cls, parse: Parse) -> "Unsubscribe":
        """Read ``UNSUBSCRIBE [channel [channel ...]]`` after the command name."""
        return cls(list(_remaining_strings(parse)))

    def into_frame(self) -> Array:
        """Encode the command as a frame to send to a server."""
        frame = Array()
        frame.push_bulk(b"unsubscribe")
        for channel in self.channels:
            frame.push_bulk(channel.encode("utf-8"))
        return frame


Command = Union[Get, Publish, Set, Subscribe, Unsubscribe, Ping, Unknown]

_PARSERS = {
    "get": Get.parse_frames,
    "publish": Publish.parse_frames,
    "set": Set.parse_frames,
    "subscribe": Subscribe.parse_frames,
    "unsubscribe": Unsubscribe.parse_frames,
    "ping": Ping.parse_frames,
}

_NAMES = {
    Get: "get",
    Publish: "pub",
    Set: "set",
    Subscribe: "subscribe",
    Unsubscribe: "unsubscribe",
    Ping: "ping",
}


def from_frame(frame: Frame) -> Command:
    """Parse a command from an array frame."""
    parse = Parse(frame)
    name = parse.next_string().lower()
    parser = _PARSERS.get(name)
    if parser is None:
        # Unrecognised commands may carry arguments; they are not checked.
        return Unknown(name)
    command = parser(parse)
    parse.finish()
    return command


def command_name(command: Command) -> str:
    """Return the name a command is reported under."""
    if isinstance(command, Unknown):
        return command.command_name
    try:
        return _NAMES[type(command)]
    except KeyError:
        raise TypeError(f"not a command: {command!r}") from None


async def apply(command: Command, db, dst, shutdown) -> None:
    """Execute ``command`` against ``db`` and write the reply to ``dst``."""
    if isinstance(command, Unsubscribe):
        raise ProtocolError("`Unsubscribe` is unsupported in this context")
    if isinstance(command, (Get, Publish, Set)):
        await command.apply(db, dst)
    elif isinstance(command, Subscribe):
        await command.apply(db, dst, shutdown)
    elif isinstance(command, (Ping, Unknown)):
        await command.apply(dst)
    else:
        raise TypeError(f"not a command: {command!r}")


async def _handle_command(
    frame: Frame,
    pending: List[str],
    subscriptions: _Subscriptions,
    dst,
) -> None:
    """Handle a frame received while in subscriber mode."""
    command = from_frame(frame)
    if isinstance(command, Subscribe):
        pending.extend(command.channels)
    elif isinstance(command, Unsubscribe):
        channels = command.channels or subscriptions.channels()
        for channel in channels:
            await subscriptions.remove(channel)
            await dst.write_frame(make_unsubscribe_frame(channel, len(subscriptions)))
    else:
        await Unknown(command_name(command)).apply(dst)