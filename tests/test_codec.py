import io

import pytest

from sockwave.codec import Context, DataFrameCodec, MessageCodec
from sockwave.dataframe import DataFrame, Opcode
from sockwave.errors import DataFrameError, ProtocolError
from sockwave.message import (
    BinaryMessage,
    CloseData,
    CloseMessage,
    Message,
    PingMessage,
    PongMessage,
    TextMessage,
)

QUICK = b"The quick brown fox jumps over the lazy dog"


def _frame_bytes(frame, masked):
    out = io.BytesIO()
    frame.write_to(out, masked)
    return out.getvalue()


def _serialized(message, masked):
    out = io.BytesIO()
    message.serialize(out, masked)
    return out.getvalue()


def _encoded(message, masked):
    dst = bytearray()
    context = Context.CLIENT if masked else Context.SERVER
    MessageCodec(context).encode(message, dst)
    return bytes(dst)


OWNED = [
    TextMessage("nilbog"),
    BinaryMessage(bytes([1, 2, 3, 4])),
    BinaryMessage(bytes([42]) * 256),
    BinaryMessage(bytes([42]) * 65535),
    BinaryMessage(bytes([42]) * 65555),
    PingMessage(b"beep"),
    PongMessage(b"boop"),
    CloseMessage(None),
    CloseMessage(CloseData(64, "because")),
]

COW = [
    Message.binary(bytes([1, 2, 3, 4])),
    Message.binary(bytes([42]) * 256),
    Message.binary(bytes([42]) * 65535),
    Message.binary(bytes([42]) * 65555),
    Message.text("nilbog"),
    Message.ping(b"beep"),
    Message.pong(b"boop"),
    Message.close(),
    Message.close_because(64, "because"),
]


@pytest.mark.parametrize("message", OWNED)
@pytest.mark.parametrize("masked", [True, False])
def test_owned_message_predicts_size(message, masked):
    predicted = message.message_size(masked)
    assert len(_serialized(message, masked)) == predicted
    assert len(_encoded(message, masked)) == predicted


@pytest.mark.parametrize("message", COW)
@pytest.mark.parametrize("masked", [True, False])
def test_cow_message_predicts_size(message, masked):
    predicted = message.message_size(masked)
    assert len(_serialized(message, masked)) == predicted
    assert len(_encoded(message, masked)) == predicted


def test_message_codec_client_send_receive():
    src = bytearray(_serialized(Message.text("50 schmeckels"), False))
    client = MessageCodec(Context.CLIENT)
    assert client.decode(src) == TextMessage("50 schmeckels")
    assert src == bytearray()

    sent = bytearray()
    client.encode(Message.text("ethan bradberry"), sent)

    server = MessageCodec(Context.SERVER)
    assert server.decode(sent) == Message.text("ethan bradberry").to_owned()


def test_message_codec_server_send_receive():
    src = bytearray(_serialized(Message.text("50 schmeckels"), True))
    server = MessageCodec(Context.SERVER)
    assert server.decode(src) == TextMessage("50 schmeckels")

    sent = bytearray()
    server.encode(Message.text("ethan bradberry"), sent)
    assert bytes(sent) == _serialized(Message.text("ethan bradberry"), False)


def test_dataframe_codec_decodes_known_bytes():
    src = bytearray(b"\x81\x2b" + QUICK)
    frame = DataFrameCodec(Context.CLIENT).decode(src)
    assert frame == DataFrame(finished=True, kind=Opcode.TEXT, data=QUICK)
    assert src == bytearray()


def test_dataframe_codec_server_encodes_unmasked():
    dst = bytearray()
    DataFrameCodec(Context.SERVER).encode(
        DataFrame(finished=True, kind=Opcode.TEXT, data=QUICK), dst
    )
    assert bytes(dst) == b"\x81\x2b" + QUICK


def test_dataframe_codec_round_trip_masked():
    original = DataFrame(finished=False, kind=Opcode.BINARY, data=b"\x00\x01\x02")
    wire = bytearray()
    DataFrameCodec(Context.CLIENT).encode(original, wire)
    assert DataFrameCodec(Context.SERVER).decode(wire) == original


def test_dataframe_codec_waits_for_complete_frame():
    wire = b"\x81\x2b" + QUICK
    codec = DataFrameCodec(Context.CLIENT)
    src = bytearray()
    for byte in wire[:-1]:
        src.append(byte)
        assert codec.decode(src) is None
    assert len(src) == len(wire) - 1
    src.append(wire[-1])
    assert codec.decode(src).data == QUICK


def test_dataframe_codec_leaves_following_data():
    first = _frame_bytes(DataFrame(True, Opcode.TEXT, b"one"), False)
    second = _frame_bytes(DataFrame(True, Opcode.TEXT, b"two"), False)
    src = bytearray(first + second)
    codec = DataFrameCodec(Context.CLIENT)
    assert codec.decode(src).data == b"one"
    assert bytes(src) == second
    assert codec.decode(src).data == b"two"
    assert codec.decode(src) is None


def test_dataframe_codec_limit():
    src = bytearray(_frame_bytes(DataFrame(True, Opcode.BINARY, b"12345"), False))
    with pytest.raises(ProtocolError):
        DataFrameCodec(Context.CLIENT, 4).decode(src)


def test_dataframe_codec_limit_allows_exact_size():
    src = bytearray(_frame_bytes(DataFrame(True, Opcode.BINARY, b"1234"), False))
    assert DataFrameCodec(Context.CLIENT, 4).decode(src).data == b"1234"


def test_server_rejects_unmasked_frame():
    src = bytearray(_frame_bytes(DataFrame(True, Opcode.TEXT, b"hi"), False))
    with pytest.raises(DataFrameError):
        DataFrameCodec(Context.SERVER).decode(src)


def test_client_rejects_masked_frame():
    src = bytearray(_frame_bytes(DataFrame(True, Opcode.TEXT, b"hi"), True))
    with pytest.raises(DataFrameError):
        DataFrameCodec(Context.CLIENT).decode(src)


def test_message_codec_empty_input():
    assert MessageCodec(Context.SERVER).decode(bytearray()) is None


def test_message_codec_reassembles_fragments():
    src = bytearray(
        _frame_bytes(DataFrame(False, Opcode.TEXT, b"Hel"), True)
        + _frame_bytes(DataFrame(True, Opcode.CONTINUATION, b"lo"), True)
    )
    assert MessageCodec(Context.SERVER).decode(src) == TextMessage("Hello")


def test_message_codec_fragments_across_calls():
    codec = MessageCodec(Context.SERVER)
    src = bytearray(_frame_bytes(DataFrame(False, Opcode.BINARY, b"ab"), True))
    assert codec.decode(src) is None
    src += _frame_bytes(DataFrame(True, Opcode.CONTINUATION, b"cd"), True)
    assert codec.decode(src) == BinaryMessage(b"abcd")


def test_message_codec_control_between_fragments():
    src = bytearray(
        _frame_bytes(DataFrame(False, Opcode.TEXT, b"Hel"), True)
        + _frame_bytes(DataFrame(True, Opcode.PING, b"beep"), True)
        + _frame_bytes(DataFrame(True, Opcode.CONTINUATION, b"lo"), True)
    )
    codec = MessageCodec(Context.SERVER)
    assert codec.decode(src) == PingMessage(b"beep")
    assert codec.decode(src) == TextMessage("Hello")


def test_message_codec_rejects_leading_continuation():
    src = bytearray(_frame_bytes(DataFrame(True, Opcode.CONTINUATION, b"x"), True))
    with pytest.raises(ProtocolError):
        MessageCodec(Context.SERVER).decode(src)


def test_message_codec_rejects_data_frame_inside_message():
    src = bytearray(
        _frame_bytes(DataFrame(False, Opcode.TEXT, b"a"), True)
        + _frame_bytes(DataFrame(True, Opcode.TEXT, b"b"), True)
    )
    with pytest.raises(ProtocolError):
        MessageCodec(Context.SERVER).decode(src)


def test_message_codec_message_size_limit():
    src = bytearray(_frame_bytes(DataFrame(False, Opcode.BINARY, b"x" * 20), True))
    with pytest.raises(ProtocolError):
        MessageCodec(Context.SERVER, max_message_size=10).decode(src)


def test_message_codec_close_message():
    src = bytearray(_serialized(Message.close_because(1000, "bye"), True))
    assert MessageCodec(Context.SERVER).decode(src) == CloseMessage(
        CloseData(1000, "bye")
    )


def test_message_codec_encodes_owned_message():
    dst = bytearray()
    MessageCodec(Context.SERVER).encode(BinaryMessage(b"\x01\x02"), dst)
    assert bytes(dst) == _serialized(BinaryMessage(b"\x01\x02"), False)