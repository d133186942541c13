import io

import pytest

from bfvm.io import BufferSink, BufferSource, StreamSink, StreamSource


def test_buffer_source_reports_end_of_stream():
    src = BufferSource(b"\x00\xff")
    assert src.remaining == 2
    assert src.read_byte() == 0
    assert src.read_byte() == 255
    assert src.read_byte() is None
    assert src.read_byte() is None


def test_buffer_source_accepts_text():
    src = BufferSource("A\xe9")
    assert [src.read_byte(), src.read_byte()] == [0x41, 0xE9]


def test_buffer_sink_keeps_low_byte():
    sink = BufferSink()
    sink.write_byte(0x141)
    sink.write_byte(7)
    assert sink.getvalue() == b"A\x07"


def test_stream_adapters():
    src = StreamSource(io.BytesIO(b"hi"))
    assert src.read_byte() == ord("h")
    assert src.read_byte() == ord("i")
    assert src.read_byte() is None

    stream = io.BytesIO()
    sink = StreamSink(stream)
    sink.write_byte(ord("o"))
    sink.write_byte(ord("k"))
    sink.flush()
    assert stream.getvalue() == b"ok"


def test_buffer_source_rejects_wide_text():
    with pytest.raises(ValueError, match="U\\+00FF at index 1"):
        BufferSource("a\u20ac")
