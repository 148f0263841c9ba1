# sockwave

A small WebSocket toolkit for Python with no dependencies beyond the
standard library. It covers the pieces of RFC 6455 on either side of the
HTTP upgrade:

- reading and writing data frame headers (`sockwave.frameheader`)
- masking payloads (`sockwave.mask`)
- data frames and opcodes (`sockwave.dataframe`, `sockwave.framing`)
- whole messages, as `Message` or as the owned variants `TextMessage`,
  `BinaryMessage`, `CloseMessage`, `PingMessage` and `PongMessage`
  (`sockwave.message`)
- `Sec-WebSocket-Key` / `Sec-WebSocket-Accept` values (`sockwave.handshake`)
- incremental frame and message codecs over `bytearray` buffers (`sockwave.codec`)
- abstract `Receiver` and `Sender` base classes for blocking streams (`sockwave.transport`)
- combining a reader and a writer into one stream (`sockwave.stream`)
- validating an HTTP upgrade request and answering it (`sockwave.upgrade`,
  `sockwave.sync_upgrade`)
- a blocking TCP server that yields upgrade requests (`sockwave.server`)

Errors raised while reading or writing frames derive from
`sockwave.errors.WebSocketError` (`ProtocolError`, `DataFrameError`,
`NoDataAvailable`, `WebSocketIOError`, `Utf8Error`).

## Installation

From a checkout of the project:

```
pip install .
```

Python 3.10 or newer is required.

## Frames and messages

```python
import io
from sockwave.dataframe import DataFrame
from sockwave.message import Message, OwnedMessage

buf = io.BytesIO()
Message.text("hello").serialize(buf, False)

buf.seek(0)
frame = DataFrame.read_dataframe(buf, False)
message = OwnedMessage.from_dataframes([frame])   # TextMessage(text='hello')
```

Clients mask what they send; servers do not. Pass `True` for `masked`
when writing from the client side and `True` for `should_be_masked` when
reading on the server side. `DataFrame.read_dataframe_with_limit` refuses
a frame whose declared length exceeds a given limit.

## Codecs

`MessageCodec` consumes bytes from the front of a `bytearray` as they
arrive and returns complete messages. It reassembles fragmented messages,
returns control frames as soon as they arrive, and enforces limits on
frame size, message size and the number of fragments:

```python
from sockwave.codec import Context, MessageCodec

codec = MessageCodec(Context.SERVER)
incoming = bytearray()
# ... append bytes read from the socket ...
message = codec.decode(incoming)   # None until a full message is buffered

outgoing = bytearray()
codec.encode(message, outgoing)    # appends the encoded frame
```

`DataFrameCodec` does the same one frame at a time.

## The handshake values

```python
from sockwave.handshake import WebSocketKey, WebSocketAccept

key = WebSocketKey.generate()
accept = WebSocketAccept.from_key(key)
print(key.serialize(), accept.serialize())
```

## A blocking server

```python
from http import HTTPStatus
from sockwave.server import Server
from sockwave.upgrade import InvalidConnection

with Server.bind("127.0.0.1:0") as server:
    for result in server:
        if isinstance(result, InvalidConnection):
            continue  # result.error says why; result.parsed holds the request if one was read
        if "chat" in result.protocols():
            result.use_protocol("chat")
            status = result.prepare_headers()   # 101 Switching Protocols
            result.send(status)
            leftover = result.buffer.unread      # bytes read past the request head
            # result.stream is now a WebSocket connection
        else:
            result.reject().close()
```

`Server.bind_secure(addr, context)` wraps each accepted connection in TLS
with a server-side `ssl.SSLContext`. `set_nonblocking(True)` makes
`accept` raise `InvalidConnection` instead of waiting.

Each accepted connection is read as an HTTP request head and checked
with `sockwave.upgrade.validate`. A `WsUpgrade` lets you inspect the
requested protocols, extensions, key, version, URI and origin, choose
protocols and extensions for the response, and then either send an
accepting response (`prepare_headers` followed by `send`) or `reject` it
with 400 Bad Request. To upgrade a stream you read yourself, use
`sockwave.sync_upgrade.into_ws(stream)`, or `RequestStreamPair` when the
request has already been parsed.

## What it does not do

The package stops at the handshake. It has no WebSocket client or
connection object that sends and receives messages over the upgraded
stream for you, no code that opens a connection to a server, and no
asynchronous server. After accepting, read and write frames on
`WsUpgrade.stream` yourself, for example with `DataFrame.read_dataframe`
and `Message.serialize`, or with your own subclasses of
`sockwave.transport.Receiver` and `Sender`.

## Running the tests

```
pip install -e .[test]
pytest
```