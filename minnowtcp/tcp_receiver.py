"""The receiving half of a TCP endpoint."""

from __future__ import annotations

from typing import Optional

from .byte_stream import Reader, Writer
from .messages import TCPReceiverMessage, TCPSenderMessage
from .reassembler import Reassembler
from .wrapping_integers import Wrap32

_UINT16_MAX = (1 << 16) - 1
_UINT32_MAX = (1 << 32) - 1


class TCPReceiver:
    """Inserts incoming segments into a Reassembler and produces acknowledgments."""

    def __init__(self, reassembler: Reassembler) -> None:
        self._reassembler = reassembler
        self._isn: Optional[Wrap32] = None

    def _checkpoint(self) -> int:
        return self._reassembler.writer().bytes_pushed() + int(self._isn is not None)

    def receive(self, message: TCPSenderMessage) -> None:
        """Process a segment from the peer's sender."""
        checkpoint = self._checkpoint()
        if message.rst:
            self._reassembler.reader().set_error()
        elif 0 < checkpoint < _UINT32_MAX and message.seqno == self._isn:
            return

        if self._isn is None:
            if not message.syn:
                return
            self._isn = message.seqno

        abs_seqno = message.seqno.unwrap(self._isn, checkpoint)
        stream_index = abs_seqno - 1 if abs_seqno else 0
        self._reassembler.insert(stream_index, message.payload, message.fin)

    def send(self) -> TCPReceiverMessage:
        """Build the acknowledgment and window advertisement for the peer."""
        writer = self._reassembler.writer()
        window_size = min(writer.available_capacity(), _UINT16_MAX)
        if self._isn is None:
            return TCPReceiverMessage(None, window_size, writer.has_error())
        ackno = Wrap32.wrap(self._checkpoint() + int(writer.is_closed()), self._isn)
        return TCPReceiverMessage(ackno, window_size, writer.has_error())

    def reassembler(self) -> Reassembler:
        return self._reassembler

    def reader(self) -> Reader:
        return self._reassembler.reader()

    def writer(self) -> Writer:
        return self._reassembler.writer()