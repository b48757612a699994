import pytest

from miniredis.commands.unknown import Unknown
from miniredis.protocol import Error


class RecordingConnection:
    def __init__(self):
        self.frames = []

    async def write_frame(self, frame):
        self.frames.append(frame)


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["foo", "set", "get"])
async def test_apply_reports_unknown(name):
    dst = RecordingConnection()
    await Unknown(name).apply(dst)
    assert dst.frames == [Error(f"ERR unknown command '{name}'")]


def test_name_kept():
    assert Unknown("foo").command_name == "foo"


@pytest.mark.asyncio
async def test_error_frame_text():
    dst = RecordingConnection()
    await Unknown("foo").apply(dst)
    assert dst.frames[0].message == "ERR unknown command 'foo'"