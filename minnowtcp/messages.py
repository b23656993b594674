"""Messages exchanged between a TCP sender and a TCP receiver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .wrapping_integers import Wrap32


@dataclass(frozen=True)
class TCPSenderMessage:
    """A segment sent by a TCP sender to the peer's receiver."""

    seqno: Wrap32 = field(default_factory=lambda: Wrap32(0))
    syn: bool = False
    payload: bytes = b""
    fin: bool = False
    rst: bool = False

    def sequence_length(self) -> int:
        """Number of sequence numbers this message occupies."""
        return int(self.syn) + len(self.payload) + int(self.fin)


@dataclass(frozen=True)
class TCPReceiverMessage:
    """An acknowledgment and window advertisement sent by a TCP receiver."""

    ackno: Optional[Wrap32] = None
    window_size: int = 0
    rst: bool = False