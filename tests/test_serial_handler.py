import struct
from types import SimpleNamespace
from unittest import mock

import pytest

from liveplotter.protocol import (
    MessageId,
    decode_power_frame,
    start_command,
    xor_checksum,
)
from liveplotter.serial_handler import (
    NOT_OPEN_MESSAGE,
    SEPARATOR,
    HandlerListener,
    SerialPortHandler,
)


class RecordingListener(HandlerListener):
    def __init__(self):
        self.events = []

    def port_status(self, message):
        self.events.append(("port_status", message))

    def data_received(self):
        self.events.append(("data_received",))

    def note(self, text):
        self.events.append(("note", text))

    def plot_data(self, chunk):
        self.events.append(("plot_data", chunk))

    def power_data(self, reading):
        self.events.append(("power_data", reading))

    def plot_completed(self):
        self.events.append(("plot_completed",))

    def of(self, kind):
        return [e[1:] for e in self.events if e[0] == kind]


class FakePort:
    def __init__(self, name):
        self.name = name
        self.is_open = True
        self.written = []
        self.pending = b""

    def write(self, data):
        self.written.append(bytes(data))

    @property
    def in_waiting(self):
        return len(self.pending)

    def read(self, n):
        data, self.pending = self.pending[:n], self.pending[n:]
        return data

    def close(self):
        self.is_open = False


def make_power_frame(words):
    body = bytes([0x54, 0x01]) + struct.pack(">7H", *words)
    return body + bytes([xor_checksum(body)])


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def ports():
    return []


@pytest.fixture
def handler(listener, ports):
    def factory(name):
        port = FakePort(name)
        ports.append(port)
        return port

    return SerialPortHandler(listener, factory)


def test_open_reports_success(handler, listener):
    assert handler.open("COM9") is True
    assert handler.is_open() is True
    assert listener.of("port_status") == [
        ("Serial port COM9 opened successfully at baud rate 921600",)
    ]


def test_open_reports_failure(listener):
    def failing(name):
        raise OSError("busy")

    handler = SerialPortHandler(listener, failing)
    assert handler.open("COM9") is False
    assert handler.is_open() is False
    assert listener.of("port_status") == [("Failed to open port COM9",)]


def test_reopen_closes_previous_port(handler, ports):
    assert handler.open("COM1") is True
    assert handler.open("COM2") is True
    assert handler.is_open() is True
    assert [p.is_open for p in ports] == [False, True]


def test_write_without_port_reports(handler, listener):
    handler.write(start_command())
    assert handler.is_open() is False
    assert listener.events == [("data_received",), ("port_status", NOT_OPEN_MESSAGE)]


def test_write_sends_to_port(handler, ports):
    handler.open("COM1")
    handler.write(start_command())
    assert ports[0].written == [start_command()]


def test_close_closes_port(handler, ports):
    handler.open("COM1")
    handler.close()
    assert handler.is_open() is False
    assert ports[0].is_open is False


def test_feed_empty_only_emits_separator(handler, listener):
    handler.set_message_id(MessageId.POWER)
    handler.feed(b"")
    assert handler.is_open() is False
    assert listener.events == [("port_status", SEPARATOR)]


def test_feed_without_message_id(handler, listener, ports):
    assert handler.open("COM1") is True
    ports[0].pending = b"\x01\x02"
    assert handler.read_available() == 2
    assert listener.of("note") == [("Fatal Error 404",)]
    assert listener.of("data_received") == [()]


def test_power_frame_decoded(handler, listener):
    frame = make_power_frame([4095, 0, 2048, 100, 4095, 0, 3000])
    handler.set_message_id(MessageId.POWER)
    handler.feed(frame)
    assert listener.of("power_data") == [(decode_power_frame(frame),)]
    assert listener.of("note") == [
        ("Power Card Data received bytes check: " + frame.hex(),)
    ]


def test_power_frame_in_pieces(handler, listener):
    frame = make_power_frame([1, 2, 3, 4, 5, 6, 7])
    handler.set_message_id(MessageId.POWER)
    handler.feed(frame[:5])
    assert listener.of("power_data") == []
    assert listener.of("note") == [
        ("Required 17 bytes Received bytes: 5 " + frame[:5].hex(),)
    ]
    handler.feed(frame[5:])
    assert listener.of("power_data") == [(decode_power_frame(frame),)]


def test_set_message_id_drops_buffer(handler, listener, ports):
    frame = make_power_frame([1, 2, 3, 4, 5, 6, 7])
    assert handler.open("COM1") is True
    handler.set_message_id(MessageId.POWER)
    ports[0].pending = frame[:5]
    assert handler.read_available() == 5
    handler.set_message_id(MessageId.POWER)
    ports[0].pending = frame[5:]
    assert handler.read_available() == 12
    assert listener.of("power_data") == []


def test_plot_chunk_delivered_and_repeated(handler, listener):
    chunk = bytes([0x10, 0x20, 0x30, 0x40, 0x50, 0x60])
    handler.set_message_id(MessageId.START)
    handler.feed(chunk)
    assert listener.of("plot_data") == [(chunk,), (chunk,)]
    assert listener.of("plot_completed") == []


def test_plot_multiple_chunks(handler, listener):
    first = bytes([1, 2, 3, 4, 5, 6])
    second = bytes([7, 8, 9, 10, 11, 12])
    handler.set_message_id(MessageId.START)
    handler.feed(first + second)
    assert listener.of("plot_data") == [(first,), (second,), (second,)]


def test_plot_partial_chunk_waits(handler, listener, ports):
    assert handler.open("COM1") is True
    handler.set_message_id(MessageId.START)
    ports[0].pending = bytes([1, 2, 3, 4])
    assert handler.read_available() == 4
    assert listener.of("plot_data") == []
    assert listener.of("note") == [("Start Command received Chunk Size 4",)]


def test_plot_end_marker_completes(handler, listener, ports):
    assert handler.open("COM1") is True
    handler.set_message_id(MessageId.START)
    ports[0].pending = bytes.fromhex("ffddff")
    assert handler.read_available() == 3
    assert listener.of("plot_completed") == [()]
    assert listener.of("note") == [("Start Command received bytes check: ffddff",)]


def test_read_available_feeds_pending_bytes(handler, listener, ports):
    frame = make_power_frame([9, 8, 7, 6, 5, 4, 3])
    handler.open("COM1")
    handler.set_message_id(MessageId.POWER)
    ports[0].pending = frame
    assert handler.read_available() == len(frame)
    assert listener.of("power_data") == [(decode_power_frame(frame),)]
    assert handler.read_available() == 0


def test_read_available_without_port(handler):
    assert handler.read_available() == 0


def test_available_ports_lists_devices(handler):
    infos = [SimpleNamespace(device="/dev/ttyUSB0"), SimpleNamespace(device="COM3")]
    with mock.patch("serial.tools.list_ports.comports", return_value=infos):
        assert handler.available_ports() == ["/dev/ttyUSB0", "COM3"]