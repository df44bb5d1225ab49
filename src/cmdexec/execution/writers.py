"""Byte writers used to route process output."""

from __future__ import annotations

import codecs
import io
import threading
from typing import IO, Protocol

_CHUNK_SIZE = 32 * 1024


class ByteWriter(Protocol):
    """Anything that accepts raw bytes."""

    def write(self, data: bytes, /) -> object: ...


class MultiWriter:
    """Write every chunk to each destination in order.

    The first destination that raises stops the write and the error propagates
    to the caller; later destinations do not see that chunk.
    """

    def __init__(self, *writers: ByteWriter) -> None:
        self._writers = writers

    def write(self, data: bytes) -> int:
        for writer in self._writers:
            writer.write(data)
        return len(data)

    def flush(self) -> None:
        for writer in self._writers:
            _flush(writer)


class CaptureBuffer:
    """In-memory sink that accumulates bytes and renders them as text."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()

    def write(self, data: bytes) -> int:
        return self._buffer.write(data)

    def getvalue(self) -> str:
        return self._buffer.getvalue().decode("utf-8", errors="replace")


class TextWriterAdapter:
    """Expose a text stream without a binary buffer as a byte writer."""

    def __init__(self, stream: IO[str], encoding: str = "utf-8") -> None:
        self._stream = stream
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def write(self, data: bytes) -> int:
        self._stream.write(self._decoder.decode(data))
        return len(data)

    def flush(self) -> None:
        self._stream.flush()


def as_byte_writer(target: object) -> ByteWriter:
    """Coerce ``target`` into something that accepts bytes.

    Text streams are unwrapped to their ``buffer`` when they have one and
    decoded incrementally otherwise. Binary writers are returned unchanged.
    """

    if isinstance(target, io.TextIOBase):
        buffer = getattr(target, "buffer", None)
        if buffer is not None:
            return buffer
        return TextWriterAdapter(target)  # type: ignore[arg-type]
    if not callable(getattr(target, "write", None)):
        raise TypeError(f"{target!r} is not a writable stream")
    return target  # type: ignore[return-value]


class StreamPump:
    """Copy a child process pipe into a writer on a dedicated thread.

    After the writer fails the remaining output is drained and dropped so the
    child never blocks on a full pipe. ``error`` holds the first failure.
    """

    def __init__(self, source: IO[bytes], writer: ByteWriter, name: str) -> None:
        self._source = source
        self._writer = writer
        self._thread = threading.Thread(target=self._copy, name=name, daemon=True)
        self.error: BaseException | None = None

    def start(self) -> None:
        self._thread.start()

    def join(self) -> None:
        self._thread.join()

    def _copy(self) -> None:
        try:
            while True:
                chunk = self._source.read(_CHUNK_SIZE)
                if not chunk:
                    break
                if self.error is not None:
                    continue
                try:
                    self._writer.write(chunk)
                    _flush(self._writer)
                except Exception as exc:
                    self.error = exc
        finally:
            self._source.close()


def _flush(writer: object) -> None:
    flush = getattr(writer, "flush", None)
    if callable(flush):
        flush()
