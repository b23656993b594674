"""A bounded in-memory byte stream with separate reading and writing views."""

from __future__ import annotations

from collections import deque


class ByteStream:
    """A flow-controlled byte stream of fixed capacity."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._chunks: deque[bytes] = deque()
        self._front_offset = 0
        self._buffered = 0
        self._pushed = 0
        self._popped = 0
        self._closed = False
        self._error = False
        self._reader = Reader(self)
        self._writer = Writer(self)

    @property
    def capacity(self) -> int:
        return self._capacity

    def reader(self) -> Reader:
        """Return the reading side of this stream."""
        return self._reader

    def writer(self) -> Writer:
        """Return the writing side of this stream."""
        return self._writer

    def set_error(self) -> None:
        """Signal that the stream suffered an error."""
        self._error = True

    def has_error(self) -> bool:
        return self._error


class Writer:
    """The writing side of a :class:`ByteStream`."""

    __slots__ = ("_stream",)

    def __init__(self, stream: ByteStream) -> None:
        self._stream = stream

    def push(self, data: bytes) -> None:
        """Push as much of ``data`` as the available capacity allows."""
        stream = self._stream
        size = min(self.available_capacity(), len(data))
        if size == 0:
            return
        chunk = bytes(data[:size])
        if not stream._chunks:
            stream._front_offset = 0
        stream._chunks.append(chunk)
        stream._pushed += size
        stream._buffered += size

    def close(self) -> None:
        """Signal that nothing more will be written."""
        self._stream._closed = True

    def is_closed(self) -> bool:
        return self._stream._closed

    def available_capacity(self) -> int:
        return self._stream._capacity - self._stream._buffered

    def bytes_pushed(self) -> int:
        return self._stream._pushed

    def set_error(self) -> None:
        self._stream.set_error()

    def has_error(self) -> bool:
        return self._stream.has_error()


class Reader:
    """The reading side of a :class:`ByteStream`."""

    __slots__ = ("_stream",)

    def __init__(self, stream: ByteStream) -> None:
        self._stream = stream

    def peek(self) -> bytes:
        """Return the next buffered bytes (possibly not all of them)."""
        stream = self._stream
        if stream._buffered == 0 or not stream._chunks:
            return b""
        return stream._chunks[0][stream._front_offset:]

    def pop(self, length: int) -> None:
        """Remove ``length`` bytes from the front of the buffer."""
        stream = self._stream
        if length < 0:
            raise ValueError("cannot pop a negative number of bytes")
        if length > stream._buffered:
            raise ValueError(
                f"cannot pop {length} bytes; only {stream._buffered} buffered"
            )
        stream._popped += length
        stream._buffered -= length
        while length:
            left_in_front = len(stream._chunks[0]) - stream._front_offset
            if length >= left_in_front:
                length -= left_in_front
                stream._chunks.popleft()
                stream._front_offset = 0
            else:
                stream._front_offset += length
                length = 0

    def is_finished(self) -> bool:
        """True once the stream is closed and fully popped."""
        return self._stream._buffered == 0 and self._stream._closed

    def bytes_buffered(self) -> int:
        return self._stream._buffered

    def bytes_popped(self) -> int:
        return self._stream._popped

    def set_error(self) -> None:
        self._stream.set_error()

    def has_error(self) -> bool:
        return self._stream.has_error()


def read(reader: Reader, max_len: int) -> bytes:
    """Peek and pop up to ``max_len`` bytes from ``reader``."""
    out = bytearray()
    while reader.bytes_buffered() and len(out) < max_len:
        view = reader.peek()
        if not view:
            raise RuntimeError("Reader.peek() returned an empty buffer")
        view = view[: max_len - len(out)]
        out += view
        reader.pop(len(view))
    return bytes(out)