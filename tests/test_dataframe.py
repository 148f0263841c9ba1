import io

import pytest

from sockwave.dataframe import DataFrame, Opcode
from sockwave.errors import DataFrameError, NoDataAvailable, WebSocketIOError
from sockwave.frameheader import DataFrameFlags, DataFrameHeader

FOX = b"The quick brown fox jumps over the lazy dog"


def test_read_dataframe():
    raw = bytes([0x81, 0x2B]) + FOX
    obtained = DataFrame.read_dataframe(io.BytesIO(raw), False)
    expected = DataFrame(
        finished=True, kind=Opcode.TEXT, data=FOX, reserved_bits=(False, False, False)
    )
    assert obtained == expected


def test_read_incomplete_payloads():
    data = bytes([0x8A, 0x08, 0x19, 0xAC, 0xAB, 0x8A, 0x52, 0x4E, 0x05, 0x00])
    payload = bytes([25, 172, 171, 138, 82, 78, 5, 0])

    with pytest.raises(NoDataAvailable):
        DataFrame.read_dataframe(io.BytesIO(data[:1]), False)
    with pytest.raises(NoDataAvailable):
        DataFrame.read_dataframe(io.BytesIO(data[:6]), False)

    assert DataFrame.read_dataframe(io.BytesIO(data), False).data == payload
    more = data + bytes([0xFF])
    assert DataFrame.read_dataframe(io.BytesIO(more), False).data == payload


def test_write_dataframe():
    frame = DataFrame(finished=True, kind=Opcode.TEXT, data=FOX)
    out = io.BytesIO()
    frame.write_to(out, False)
    assert out.getvalue() == bytes([0x81, 0x2B]) + FOX


def test_masked_round_trip():
    frame = DataFrame(finished=False, kind=Opcode.BINARY, data=FOX)
    out = io.BytesIO()
    frame.write_to(out, True)
    assert DataFrame.read_dataframe(io.BytesIO(out.getvalue()), True) == frame


def test_masked_frame_rejected_when_unmasked_expected():
    out = io.BytesIO()
    DataFrame(finished=True, kind=Opcode.TEXT, data=FOX).write_to(out, True)
    with pytest.raises(DataFrameError):
        DataFrame.read_dataframe(io.BytesIO(out.getvalue()), False)


def test_unmasked_frame_rejected_when_masked_expected():
    raw = bytes([0x81, 0x2B]) + FOX
    with pytest.raises(DataFrameError):
        DataFrame.read_dataframe(io.BytesIO(raw), True)


def test_read_with_limit_rejects_large_frame():
    raw = bytes([0x81, 0x2B]) + FOX
    with pytest.raises(WebSocketIOError):
        DataFrame.read_dataframe_with_limit(io.BytesIO(raw), False, 42)


def test_read_with_limit_accepts_frame_at_limit():
    raw = bytes([0x81, 0x2B]) + FOX
    frame = DataFrame.read_dataframe_with_limit(io.BytesIO(raw), False, 43)
    assert frame.data == FOX


def test_read_body_keeps_reserved_bits():
    header = DataFrameHeader(
        flags=DataFrameFlags.RSV2, opcode=2, mask=None, length=3
    )
    frame = DataFrame.read_dataframe_body(header, b"abc", False)
    assert frame.finished is False
    assert frame.reserved() == (False, True, False)
    assert frame.kind is Opcode.BINARY


def test_trait_methods():
    frame = DataFrame(finished=True, kind=Opcode.PING, data=b"beep")
    assert frame.is_last() is True
    assert frame.opcode() == 9
    assert frame.size() == 4
    assert frame.take_payload() == b"beep"
    sink = io.BytesIO()
    frame.write_payload(sink)
    assert sink.getvalue() == b"beep"


@pytest.mark.parametrize("value", range(16))
def test_opcode_from_nibble(value):
    assert int(Opcode(value)) == value


def test_opcode_out_of_range():
    with pytest.raises(ValueError):
        Opcode(16)