# miniredis

The command layer of a small Redis-compatible server. It does three things:

- it reads commands out of RESP frames;
- it applies commands to a database and a connection that you supply;
- it encodes commands back into frames for a client to send.

## Installation

```
pip install miniredis
```

To run the test suite:

```
pip install "miniredis[test]"
pytest
```

## Modules

- `miniredis.protocol` holds the frame types. The base class is `Frame`, and
  the frame types are `Simple`, `Error`, `Integer`, `Bulk`, `Null` and
  `Array`. `Array` has `push_bulk` and `push_int`. The module also holds
  `Parse`, a cursor over the entries of an array frame, with the methods
  `next_string`, `next_bytes`, `next_int` and `finish`. Its exceptions are
  `ProtocolError`, `ParseError`, which is a subclass of `ProtocolError`, and
  `EndOfStream`, which is a subclass of `ParseError`.
  `Frame.to_error()` returns a `ProtocolError` that reports a frame as
  unexpected.
- `miniredis.commands.get`, `.set`, `.ping`, `.publish` and `.unknown` each
  hold one command class: `Get`, `Set`, `Ping`, `Publish` and `Unknown`.
- `miniredis.commands.command` holds the following:
  - the `Subscribe` and `Unsubscribe` commands;
  - the reply builders `make_subscribe_frame`, `make_unsubscribe_frame` and
    `make_message_frame`;
  - `from_frame`, which reads a command from a frame;
  - `apply`, which runs a command;
  - `command_name`, which gives the name a command is reported under.

## Parsing a command

```python
from miniredis.protocol import Array
from miniredis.commands.command import from_frame

frame = Array()
frame.push_bulk(b"SET")
frame.push_bulk(b"hello")
frame.push_bulk(b"world")
frame.push_bulk(b"EX")
frame.push_int(10)

command = from_frame(frame)
# Set(key='hello', value=b'world', handler='', expire=timedelta(seconds=10))
```

Command names are matched without regard to case.

- A name that is not recognised gives `Unknown(name)`, with the name in
  lower case. Any arguments that follow it are not checked.
- For a recognised command, entries left over after parsing raise
  `ParseError`.
- A frame that is not an `Array` raises `ParseError`.

The accepted forms are:

```
GET key
SET key value [handler] [EX seconds | PX milliseconds]
PING [message]
PUBLISH channel message
SUBSCRIBE channel [channel ...]
UNSUBSCRIBE [channel ...]
```

Any other option to `SET` raises `ProtocolError`.

Integers may be sent as integer frames. They may also be sent as strings of
digits, optionally led by `+`. They must be below 2**64.

## Encoding a command

Every command except `Unknown` has `into_frame()`. It returns the `Array`
frame to write on the wire:

```python
from miniredis.commands.ping import Ping

Ping(b"hello").into_frame()
# Array(items=[Bulk(data=b'ping'), Bulk(data=b'hello')])
```

`Set` with an expiry is always encoded as `px` followed by a whole number of
milliseconds. The `handler` field of `Set` is not encoded.

## Applying a command

`apply(command, db, dst, shutdown)` is a coroutine. It works with objects
that you supply:

- `db` needs `get(key)`, which returns the bytes stored or `None`.
- `db` needs `set(key, value, expire)`.
- `db` needs `publish(channel, message)`, which returns the number of
  subscribers.
- `db` needs `subscribe(channel)`, which returns an async iterator of
  messages.
- `dst` needs the coroutines `write_frame(frame)` and `read_frame()`.
  `read_frame()` returns `None` once the peer has gone.
- `shutdown` needs a coroutine `recv()` that completes when the server is
  stopping.

The replies are as follows:

| Command | Reply |
| --- | --- |
| `GET` | `Bulk` with the value, or `Null` |
| `SET` | `Simple("OK")` |
| `PING` | `Simple("PONG")`, or `Bulk` with the message |
| `PUBLISH` | `Integer` with the subscriber count |
| unknown | `Error("ERR unknown command '<name>'")` |

Applying `Unsubscribe` on its own raises `ProtocolError`.

```python
import asyncio
from miniredis.protocol import Array
from miniredis.commands.command import apply, from_frame


class Store:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, expire):
        self.data[key] = value


class Sink:
    def __init__(self):
        self.frames = []

    async def write_frame(self, frame):
        self.frames.append(frame)


async def main():
    frame = Array()
    frame.push_bulk(b"GET")
    frame.push_bulk(b"missing")
    sink = Sink()
    await apply(from_frame(frame), Store(), sink, None)
    print(sink.frames)  # [Null()]

asyncio.run(main())
```

## Pub/sub

`Subscribe.apply(db, dst, shutdown)` keeps a connection in subscriber mode.

- For each channel it subscribes to, it sends a `subscribe` reply carrying
  the count of channels the connection holds.
- It forwards published messages as `message` frames.
- It accepts further `SUBSCRIBE` and `UNSUBSCRIBE` commands.
- An `UNSUBSCRIBE` with no channels leaves every channel the connection
  holds.
- Any other command gets the unknown-command error, under the name that
  `command_name` gives. `Publish` is reported as `pub`.

The connection leaves subscriber mode when `read_frame()` returns `None` or
when `shutdown.recv()` completes.

## What this package does not do

The package holds no database, no connection or RESP byte encoder and
decoder, no network server, and no client. `apply` and the commands' `apply`
methods need those objects to be supplied by the caller, as described above.
There is no command-line program.