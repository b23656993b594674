"""The sending half of a TCP endpoint."""

from __future__ import annotations

from collections import deque
from typing import Callable, Optional

from .byte_stream import ByteStream, Reader, Writer
from .messages import TCPReceiverMessage, TCPSenderMessage
from .wrapping_integers import Wrap32

MAX_PAYLOAD_SIZE = 1000

TransmitFunction = Callable[[TCPSenderMessage], None]


class TCPSender:
    """Segments an outbound stream, tracks outstanding data and retransmits it."""

    def __init__(self, input_stream: ByteStream, isn: Wrap32, initial_rto_ms: int) -> None:
        self._input = input_stream
        self._isn = isn
        self._initial_rto = initial_rto_ms
        self._rto = initial_rto_ms
        self._next_seqno = 0
        self._window_size = 1
        self._retransmissions = 0
        self._in_flight = 0
        self._now = 0
        self._expire_time: Optional[int] = initial_rto_ms
        self._outstanding: deque[TCPSenderMessage] = deque()
        self._ack = 0
        self._fin_sent = False

    def _available_window(self) -> int:
        window = self._window_size + int(self._window_size == 0)
        return max(0, window - self._in_flight)

    def push(self, transmit: TransmitFunction) -> None:
        """Send as much of the outbound stream as the peer's window allows."""
        reader = self._input.reader()
        available = self._available_window()
        while True:
            if self._fin_sent:
                return
            payload_size = min(reader.bytes_buffered(), MAX_PAYLOAD_SIZE)
            syn = self._next_seqno == 0
            seq_size = min(available, payload_size + int(syn))
            payload_size = max(0, seq_size - int(syn))
            rst = reader.has_error()

            payload = bytearray()
            while len(payload) < payload_size:
                front = reader.peek()
                chunk = front[: payload_size - len(payload)]
                payload += chunk
                reader.pop(len(chunk))

            fin = False
            if reader.is_finished() and seq_size < available:
                fin = True
                self._fin_sent = True

            msg = TCPSenderMessage(
                seqno=Wrap32.wrap(self._next_seqno, self._isn),
                syn=syn,
                payload=bytes(payload),
                fin=fin,
                rst=rst,
            )
            length = msg.sequence_length()
            if length == 0:
                return
            self._next_seqno += length
            self._in_flight += length
            self._outstanding.append(msg)
            transmit(msg)
            if self._expire_time is None:
                self._expire_time = self._now + self._rto

            available = self._available_window()
            if reader.bytes_buffered() == 0 or available == 0:
                return

    def make_empty_message(self) -> TCPSenderMessage:
        """A message carrying no sequence numbers, at the current seqno."""
        return TCPSenderMessage(
            seqno=Wrap32.wrap(self._next_seqno, self._isn),
            rst=self._input.reader().has_error(),
        )

    def receive(self, msg: TCPReceiverMessage) -> None:
        """Process an acknowledgment and window update from the peer's receiver."""
        if msg.ackno is not None:
            ackno = msg.ackno.unwrap(self._isn, self._ack)
            if self._ack < ackno <= self._next_seqno:
                self._ack = ackno
                self._rto = self._initial_rto
                self._expire_time = self._rto + self._now
                self._retransmissions = 0
                while self._outstanding:
                    front = self._outstanding[0]
                    end = front.seqno.unwrap(self._isn, self._ack) + front.sequence_length()
                    if end > self._ack:
                        break
                    self._in_flight -= front.sequence_length()
                    self._outstanding.popleft()
                if not self._outstanding:
                    self._expire_time = None
        self._window_size = msg.window_size
        if msg.rst:
            self._input.writer().set_error()

    def tick(self, ms_since_last_tick: int, transmit: TransmitFunction) -> None:
        """Advance time and retransmit the oldest outstanding message if it has expired."""
        self._now += ms_since_last_tick
        expire = self._expire_time
        if self._outstanding and expire is not None and expire != 0 and self._now >= expire:
            transmit(self._outstanding[0])
            if self._window_size != 0:
                self._retransmissions += 1
                self._rto *= 2
            self._expire_time = self._now + self._rto

    def sequence_numbers_in_flight(self) -> int:
        return self._in_flight

    def consecutive_retransmissions(self) -> int:
        return self._retransmissions

    def writer(self) -> Writer:
        return self._input.writer()

    def reader(self) -> Reader:
        return self._input.reader()