from __future__ import annotations

from typing import BinaryIO, Iterable, Iterator, Optional, Union

ByteSource = Union[bytes, bytearray, Iterable[int], BinaryIO]


class ByteInput:
    """Lazily consumed byte source.

    Wraps either an in-memory byte sequence / iterable of ints or a binary
    file-like object. End of input is discovered on demand through a
    one-byte lookahead, so a stream is never read ahead of the program.
    """

    def __init__(self, source: Optional[ByteSource] = None) -> None:
        self._reader = self._make_reader(source)
        self._pending: Optional[int] = None
        self._exhausted = False

    @staticmethod
    def _make_reader(source: Optional[ByteSource]) -> Iterator[int]:
        if source is None:
            return iter(())
        if hasattr(source, "read"):
            return _iter_file(source)  # type: ignore[arg-type]
        return iter(source)  # type: ignore[arg-type]

    def has_next(self) -> bool:
        if self._pending is not None:
            return True
        if self._exhausted:
            return False
        try:
            value = next(self._reader)
        except StopIteration:
            self._exhausted = True
            return False
        if not 0 <= value <= 255:
            raise ValueError(f"Input value out of byte range: {value}")
        self._pending = value
        return True

    def read_next(self) -> int:
        if not self.has_next():
            raise EOFError("Input exhausted")
        value = self._pending
        self._pending = None
        return value  # type: ignore[return-value]


def _iter_file(stream: BinaryIO) -> Iterator[int]:
    while True:
        chunk = stream.read(1)
        if not chunk:
            return
        if isinstance(chunk, str):
            chunk = chunk.encode("latin-1")
        yield chunk[0]


class ByteOutput:
    """One-byte-at-a-time sink.

    With no ``sink`` the bytes are collected in memory and available through
    ``getvalue``; otherwise each byte is written (and flushed when
    ``autoflush`` is set) to the wrapped binary stream.
    """

    def __init__(self, sink: Optional[BinaryIO] = None, *, autoflush: bool = True) -> None:
        self._sink = sink
        self._buffer = bytearray() if sink is None else None
        self.autoflush = autoflush
        self.written = 0

    def write_byte(self, value: int) -> None:
        if self._buffer is not None:
            self._buffer.append(value)
        else:
            self._sink.write(bytes((value,)))  # type: ignore[union-attr]
            if self.autoflush:
                self._sink.flush()  # type: ignore[union-attr]
        self.written += 1

    def getvalue(self) -> bytes:
        if self._buffer is None:
            raise ValueError("Output is streamed to an external sink")
        return bytes(self._buffer)


def to_input_bytes(data: str) -> bytes:
    try:
        return data.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise ValueError(f"Input character {data[exc.start]!r} is outside the byte range") from exc


__all__ = ["ByteInput", "ByteOutput", "ByteSource", "to_input_bytes"]
