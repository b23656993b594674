"""Reassembly of indexed, possibly overlapping substrings into a byte stream."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from operator import attrgetter

from .byte_stream import ByteStream, Reader, Writer


@dataclass
class _Segment:
    data: bytes
    first: int
    last: int  # exclusive
    is_last: bool


class Reassembler:
    """Reassembles out-of-order substrings and writes them to a ByteStream."""

    def __init__(self, output: ByteStream) -> None:
        self._output = output
        self._segments: list[_Segment] = []
        self._pending = 0
        self._next_index = 0

    def insert(self, first_index: int, data: bytes, is_last_substring: bool) -> None:
        """Insert a substring whose first byte is at ``first_index``."""
        data = bytes(data)
        writer = self._output.writer()
        capacity = writer.available_capacity()
        left = max(first_index, self._next_index)
        right = min(self._next_index + capacity, first_index + len(data))
        if right < left:
            return

        item = _Segment(
            data[left - first_index : right - first_index],
            left,
            right,
            is_last_substring and right == first_index + len(data),
        )
        self._pending += len(item.data)

        segments = self._segments
        pos = bisect_left(segments, item.first, key=attrgetter("first"))

        # Absorb any following segments that this one reaches.
        while pos < len(segments) and item.last >= segments[pos].first:
            following = segments[pos]
            if item.last < following.last:
                item.data += following.data[item.last - following.first :]
                self._pending -= item.last - following.first
                item.last = following.last
                item.is_last |= following.is_last
            else:
                self._pending -= len(following.data)
            del segments[pos]

        # Extend the preceding segment instead of inserting, if it reaches this one.
        if pos > 0:
            previous = segments[pos - 1]
            if previous.last >= item.first:
                if previous.last < item.last:
                    previous.data += item.data[previous.last - item.first :]
                    self._pending -= previous.last - item.first
                    previous.last = item.last
                    previous.is_last |= item.is_last
                else:
                    self._pending -= len(item.data)
                return

        segments.insert(pos, item)

        head = segments[0]
        if head.first == self._next_index:
            writer.push(head.data)
            self._pending -= len(head.data)
            self._next_index = head.last
            if head.is_last:
                writer.close()
            del segments[0]

    def count_bytes_pending(self) -> int:
        """Number of bytes stored in the reassembler but not yet written."""
        return self._pending

    def reader(self) -> Reader:
        return self._output.reader()

    def writer(self) -> Writer:
        return self._output.writer()