# minnowtcp

minnowtcp is a small TCP written in pure Python. It has the parts that turn an
unreliable sequence of segments into a reliable byte stream, and the parts
that turn a byte stream back into segments.

## Components

- `minnowtcp.wrapping_integers.Wrap32` holds 32-bit sequence numbers. They
  start at an arbitrary zero point and wrap around.
  - `Wrap32.wrap(n, isn)` turns an absolute sequence number into a wrapped one.
  - `seqno.unwrap(isn, checkpoint)` turns a wrapped number back into an
    absolute one. It picks the absolute value closest to the checkpoint.
- `minnowtcp.byte_stream` has `ByteStream`, a bounded in-memory stream. Each
  stream has a `Writer` side and a `Reader` side.
  - The helper `read(reader, max_len)` peeks and pops up to `max_len` bytes.
  - `Reader.pop()` raises `ValueError` if you ask for more bytes than are
    buffered.
- `minnowtcp.reassembler.Reassembler` takes substrings that may arrive out of
  order and may overlap. It puts them back together. It writes bytes to a
  `ByteStream` as soon as the next ones are known.
- `minnowtcp.messages` has the two message types, `TCPSenderMessage` and
  `TCPReceiverMessage`.
- `minnowtcp.tcp_receiver.TCPReceiver` takes sender messages. It produces
  acknowledgements and window sizes.
- `minnowtcp.tcp_sender.TCPSender` does the sending:
  - It reads from an outbound stream and fills the peer's window.
  - It splits payloads into segments of at most `MAX_PAYLOAD_SIZE` (1000)
    bytes.
  - On timeout it retransmits the oldest outstanding segment, with
    exponential backoff.

## Installation

```
pip install .
```

To install and run the test suite:

```
pip install .[test]
pytest
```

## Example

```python
from minnowtcp.wrapping_integers import Wrap32
from minnowtcp.byte_stream import ByteStream, read
from minnowtcp.reassembler import Reassembler

isn = Wrap32(15)
assert Wrap32.wrap(3 * (1 << 32) + 17, isn) == Wrap32(32)

stream = ByteStream(16)
stream.writer().push(b"hello")
assert read(stream.reader(), 3) == b"hel"

r = Reassembler(ByteStream(64))
r.insert(3, b"def", False)
r.insert(0, b"abc", True)
assert read(r.reader(), 10) == b"abcdef"
assert r.reader().is_finished()
```

Data is passed and returned as `bytes`. You report an error on a stream with
`set_error()` and check for one with `has_error()`. These calls do not raise
exceptions.

## What it does not do

The package covers only the in-memory logic of the sender and the receiver.

- It does not open sockets or network interfaces.
- It does not parse or serialise TCP/IP headers or compute checksums.
- It does not put a sender and a receiver together into a full connection
  with a state machine.

Messages are handed back and forth as Python objects. With `TCPSender`, you
pass it a transmit callback.