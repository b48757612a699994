import pytest

from miniredis.commands.ping import Ping
from miniredis.protocol import Array, Bulk, EndOfStream, Integer, Parse, ParseError, Simple


class RecordingConnection:
    def __init__(self):
        self.frames = []

    async def write_frame(self, frame):
        self.frames.append(frame)


def _after_name(*items):
    parse = Parse(Array([Bulk(b"PING"), *items]))
    parse.next_string()
    return parse


def test_parse_without_message():
    assert Ping.parse_frames(_after_name()).msg is None


def test_parse_with_message():
    message = "你好世界".encode("utf-8")
    assert Ping.parse_frames(_after_name(Bulk(message))).msg == message


def test_parse_rejects_integer():
    with pytest.raises(ParseError) as info:
        Ping.parse_frames(_after_name(Integer(3)))
    assert not isinstance(info.value, EndOfStream)


def test_into_frame_without_message():
    assert Ping().into_frame() == Array([Bulk(b"ping")])


def test_round_trip_with_message():
    parse = Parse(Ping(b"hello").into_frame())
    assert parse.next_string() == "ping"
    assert Ping.parse_frames(parse) == Ping(b"hello")


@pytest.mark.asyncio
async def test_apply_pong():
    dst = RecordingConnection()
    await Ping().apply(dst)
    assert dst.frames == [Simple("PONG")]


@pytest.mark.asyncio
async def test_apply_echo():
    dst = RecordingConnection()
    await Ping(b"hello").apply(dst)
    assert dst.frames == [Bulk(b"hello")]