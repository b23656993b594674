"""A small user-space TCP: byte streams, reassembly, sequence numbers, receiver and sender."""

__version__ = "0.1.0"

__all__ = [
    "wrapping_integers",
    "byte_stream",
    "reassembler",
    "messages",
    "tcp_receiver",
    "tcp_sender",
]