from __future__ import annotations

import io

import pytest

from cmdexec.execution.writers import (
    CaptureBuffer,
    MultiWriter,
    StreamPump,
    TextWriterAdapter,
    as_byte_writer,
)


class RecordingWriter:
    def __init__(self, log: list[tuple[str, bytes]], name: str) -> None:
        self._log = log
        self._name = name

    def write(self, data: bytes) -> int:
        self._log.append((self._name, data))
        return len(data)


class FailingWriter:
    def write(self, data: bytes) -> int:
        raise OSError("broken pipe")


def test_multi_writer_writes_each_destination_in_order() -> None:
    log: list[tuple[str, bytes]] = []
    writer = MultiWriter(RecordingWriter(log, "a"), RecordingWriter(log, "b"))

    writer.write(b"one")
    writer.write(b"two")

    assert log == [("a", b"one"), ("b", b"one"), ("a", b"two"), ("b", b"two")]


def test_multi_writer_propagates_first_error() -> None:
    log: list[tuple[str, bytes]] = []
    writer = MultiWriter(FailingWriter(), RecordingWriter(log, "later"))

    with pytest.raises(OSError, match="broken pipe"):
        writer.write(b"data")
    assert log == []


def test_capture_buffer_decodes_text() -> None:
    buffer = CaptureBuffer()

    buffer.write("héllo".encode())
    buffer.write(b"\xff")

    assert buffer.getvalue() == "héllo�"


def test_as_byte_writer_unwraps_text_stream_buffer() -> None:
    raw = io.BytesIO()
    text = io.TextIOWrapper(raw, encoding="utf-8")

    assert as_byte_writer(text) is raw


def test_as_byte_writer_adapts_text_only_stream() -> None:
    writer = as_byte_writer(io.StringIO())

    assert isinstance(writer, TextWriterAdapter)


def test_as_byte_writer_rejects_non_writers() -> None:
    with pytest.raises(TypeError):
        as_byte_writer(object())


def test_text_writer_adapter_handles_split_characters() -> None:
    stream = io.StringIO()
    adapter = TextWriterAdapter(stream)
    encoded = "é".encode()

    adapter.write(encoded[:1])
    adapter.write(encoded[1:])

    assert stream.getvalue() == "é"


def test_stream_pump_copies_until_eof() -> None:
    sink = io.BytesIO()
    source = io.BytesIO(b"x" * 100_000)
    pump = StreamPump(source, sink, "test-pump")

    pump.start()
    pump.join()

    assert sink.getvalue() == b"x" * 100_000
    assert pump.error is None
    assert source.closed


def test_stream_pump_drains_after_writer_error() -> None:
    source = io.BytesIO(b"y" * 100_000)
    pump = StreamPump(source, FailingWriter(), "test-pump")

    pump.start()
    pump.join()

    assert isinstance(pump.error, OSError)
    assert source.closed
