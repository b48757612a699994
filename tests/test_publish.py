import pytest

from miniredis.commands.publish import Publish
from miniredis.protocol import Array, Bulk, EndOfStream, Integer, Parse


class RecordingConnection:
    def __init__(self):
        self.frames = []

    async def write_frame(self, frame):
        self.frames.append(frame)


class CountingDb:
    def __init__(self, subscribers):
        self.subscribers = subscribers
        self.published = []

    def publish(self, channel, message):
        self.published.append((channel, message))
        return self.subscribers.get(channel, 0)


def test_parse_frames():
    parse = Parse(Array([Bulk(b"PUBLISH"), Bulk(b"hello"), Bulk(b"world")]))
    parse.next_string()
    assert Publish.parse_frames(parse) == Publish("hello", b"world")


def test_parse_missing_message():
    parse = Parse(Array([Bulk(b"PUBLISH"), Bulk(b"hello")]))
    parse.next_string()
    with pytest.raises(EndOfStream):
        Publish.parse_frames(parse)


def test_into_frame():
    assert Publish("foo", b"bar").into_frame() == Array(
        [Bulk(b"publish"), Bulk(b"foo"), Bulk(b"bar")]
    )


@pytest.mark.asyncio
async def test_apply_without_subscribers():
    db = CountingDb({})
    dst = RecordingConnection()
    await Publish("hello", b"world").apply(db, dst)
    assert dst.frames == [Integer(0)]
    assert db.published == [("hello", b"world")]


@pytest.mark.asyncio
async def test_apply_with_subscribers():
    dst = RecordingConnection()
    await Publish("hello", b"jazzy").apply(CountingDb({"hello": 2}), dst)
    assert dst.frames == [Integer(2)]