import io
import socket

import pytest

from sockwave.stream import ReadWritePair, split_stream


def test_read_comes_from_reader():
    pair = ReadWritePair(io.BytesIO(b"incoming data"), io.BytesIO())
    assert pair.read(8) == b"incoming"
    assert pair.read() == b" data"


def test_write_goes_to_writer():
    reader = io.BytesIO(b"unchanged")
    writer = io.BytesIO()
    pair = ReadWritePair(reader, writer)
    pair.write(b"outgoing")
    assert writer.getvalue() == b"outgoing"
    assert reader.getvalue() == b"unchanged"


def test_flush_reaches_the_writer():
    raw = io.BytesIO()
    buffered = io.BufferedWriter(raw)
    pair = ReadWritePair(io.BytesIO(), buffered)
    pair.write(b"payload")
    pair.flush()
    assert raw.getvalue() == b"payload"


def test_split_returns_the_halves():
    reader, writer = io.BytesIO(), io.BytesIO()
    pair = ReadWritePair(reader, writer)
    got_reader, got_writer = pair.split()
    assert got_reader is reader
    assert got_writer is writer


def test_split_stream_of_pair():
    reader, writer = io.BytesIO(), io.BytesIO()
    got = split_stream(ReadWritePair(reader, writer))
    assert got[0] is reader and got[1] is writer


def test_split_stream_of_socket():
    left, right = socket.socketpair()
    reading, writing = split_stream(left)
    try:
        assert writing is left
        assert reading.fileno() != writing.fileno()
        writing.sendall(b"to right")
        assert right.recv(16) == b"to right"
        right.sendall(b"to left")
        assert reading.recv(16) == b"to left"
    finally:
        reading.close()
        left.close()
        right.close()


def test_split_stream_rejects_other_objects():
    with pytest.raises(TypeError):
        split_stream(object())