from collections import deque

import pytest

from minnowtcp.byte_stream import ByteStream
from minnowtcp.messages import TCPReceiverMessage
from minnowtcp.tcp_sender import MAX_PAYLOAD_SIZE, TCPSender
from minnowtcp.wrapping_integers import Wrap32

DEFAULT_TEST_WINDOW = 137
RTO = 1000


class Harness:
    def __init__(self, isn=Wrap32(0), rto=RTO, capacity=64000):
        self.isn = isn
        self.sender = TCPSender(ByteStream(capacity), isn, rto)
        self.output = deque()

    def transmit(self, msg):
        self.output.append(msg)

    def push(self, data=b"", close=False):
        if data:
            self.sender.writer().push(data)
        if close:
            self.sender.writer().close()
        self.sender.push(self.transmit)

    def receive(self, ackno, win=DEFAULT_TEST_WINDOW, push=True):
        self.sender.receive(TCPReceiverMessage(ackno, win))
        if push:
            self.sender.push(self.transmit)

    def tick(self, ms):
        self.sender.tick(ms, self.transmit)

    def expect_message(self):
        assert self.output, "should have sent a message"
        msg = self.output.popleft()
        assert len(msg.payload) <= MAX_PAYLOAD_SIZE
        return msg

    def expect_no_segment(self):
        assert not self.output


@pytest.fixture(params=[0, 12345, (1 << 32) - 1])
def harness(request):
    return Harness(Wrap32(request.param))


def test_syn_sent_on_first_push(harness):
    harness.push()
    msg = harness.expect_message()
    assert msg.syn and not msg.fin and not msg.rst
    assert msg.seqno == harness.isn
    assert msg.payload == b""
    assert harness.sender.sequence_numbers_in_flight() == 1
    harness.expect_no_segment()


def test_syn_acked(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1)
    harness.expect_no_segment()
    assert harness.sender.sequence_numbers_in_flight() == 0
    assert harness.sender.make_empty_message().seqno == harness.isn + 1


def test_data_after_syn(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1)
    harness.push(b"abcd")
    msg = harness.expect_message()
    assert msg.seqno == harness.isn + 1
    assert msg.payload == b"abcd"
    assert not (msg.syn or msg.fin or msg.rst)
    assert harness.sender.sequence_numbers_in_flight() == 4


def test_fin_after_data(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1)
    harness.push(b"abcd")
    harness.expect_message()
    harness.push(close=True)
    msg = harness.expect_message()
    assert msg.fin and msg.payload == b""
    assert msg.seqno == harness.isn + 5
    assert harness.sender.sequence_numbers_in_flight() == 5
    harness.receive(harness.isn + 6)
    assert harness.sender.sequence_numbers_in_flight() == 0
    harness.push()
    harness.expect_no_segment()


def test_data_and_fin_together(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1)
    harness.push(b"abcd", close=True)
    msg = harness.expect_message()
    assert msg.payload == b"abcd" and msg.fin
    assert harness.sender.sequence_numbers_in_flight() == 5


def test_close_before_syn_waits_for_window(harness):
    harness.push(close=True)
    msg = harness.expect_message()
    assert msg.syn and not msg.fin
    harness.receive(harness.isn + 1)
    fin = harness.expect_message()
    assert fin.fin and fin.seqno == harness.isn + 1


def test_window_limits_payload(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1)
    harness.push(b"x" * 200)
    msg = harness.expect_message()
    assert len(msg.payload) == DEFAULT_TEST_WINDOW
    harness.expect_no_segment()
    assert harness.sender.sequence_numbers_in_flight() == DEFAULT_TEST_WINDOW


def test_large_write_is_split_into_max_payloads(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1, win=4000)
    data = bytes(range(256)) * 12
    harness.push(data)
    received = b""
    while harness.output:
        received += harness.expect_message().payload
    assert received == data
    assert harness.sender.sequence_numbers_in_flight() == len(data)


def test_retransmission_with_backoff(harness):
    harness.push()
    harness.expect_message()
    harness.tick(RTO - 1)
    harness.expect_no_segment()
    harness.tick(1)
    msg = harness.expect_message()
    assert msg.syn and msg.seqno == harness.isn
    assert harness.sender.consecutive_retransmissions() == 1
    harness.tick(2 * RTO - 1)
    harness.expect_no_segment()
    harness.tick(1)
    assert harness.expect_message().syn
    assert harness.sender.consecutive_retransmissions() == 2


def test_ack_resets_retransmission_count(harness):
    harness.push()
    harness.expect_message()
    harness.tick(RTO)
    harness.expect_message()
    assert harness.sender.consecutive_retransmissions() == 1
    harness.receive(harness.isn + 1)
    assert harness.sender.consecutive_retransmissions() == 0
    harness.tick(10 * RTO)
    harness.expect_no_segment()


def test_zero_window_probe_without_backoff(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 1, win=0)
    harness.expect_no_segment()
    harness.push(b"abc")
    msg = harness.expect_message()
    assert msg.payload == b"a"
    assert msg.seqno == harness.isn + 1
    harness.expect_no_segment()
    harness.tick(RTO)
    assert harness.expect_message().payload == b"a"
    assert harness.sender.consecutive_retransmissions() == 0
    harness.tick(RTO)
    assert harness.expect_message().payload == b"a"


def test_impossible_ackno_ignored(harness):
    harness.push()
    harness.expect_message()
    harness.receive(harness.isn + 2)
    assert harness.sender.sequence_numbers_in_flight() == 1


def test_set_error_marks_messages_rst(harness):
    harness.sender.writer().set_error()
    assert harness.sender.writer().has_error()
    assert harness.sender.make_empty_message().rst is True
    harness.push()
    assert harness.expect_message().rst is True


def test_received_rst_sets_error(harness):
    harness.sender.receive(TCPReceiverMessage(None, DEFAULT_TEST_WINDOW, True))
    assert harness.sender.writer().has_error()
    assert harness.sender.make_empty_message().rst is True


def test_empty_message_has_no_sequence_length(harness):
    msg = harness.sender.make_empty_message()
    assert msg.sequence_length() == 0
    assert msg.seqno == harness.isn