"""Serial link to the board: port handling and reply reassembly."""

from __future__ import annotations

import threading
from typing import Any, Callable

import serial
from serial.tools import list_ports

from .protocol import (
    PLOT_CHUNK_SIZE,
    PLOT_END_MARKER,
    MessageId,
    PowerReading,
    decode_power_frame,
    is_power_frame,
)

BAUD_RATE = 921600
SEPARATOR = "-" * 84
NOT_OPEN_MESSAGE = "Serial object is not initialized/port not selected"


class HandlerListener:
    """Receives events from a :class:`SerialPortHandler`.

    Every method ignores its event; subclasses override the ones they need.
    """

    def port_status(self, message: str) -> None:
        """A human-readable status line about the port or incoming data."""

    def data_received(self) -> None:
        """Bytes arrived, or a write was dropped; any response wait is over."""

    def note(self, text: str) -> None:
        """A line meant for the debug notes."""

    def plot_data(self, chunk: bytes) -> None:
        """A six-byte live-plot chunk arrived."""

    def power_data(self, reading: PowerReading) -> None:
        """A complete power-card reading arrived."""

    def plot_completed(self) -> None:
        """The board signalled the end of a live-plot run."""


def _open_serial(port_name: str) -> Any:
    return serial.Serial(
        port=port_name,
        baudrate=BAUD_RATE,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=False,
        dsrdtr=False,
    )


class SerialPortHandler:
    """Owns the serial port and turns incoming bytes into listener events."""

    def __init__(
        self,
        listener: HandlerListener | None = None,
        port_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self.listener = listener if listener is not None else HandlerListener()
        self._port_factory = port_factory if port_factory is not None else _open_serial
        self._port: Any = None
        self._buffer = bytearray()
        self._processed = 0
        self._msg_id: int | None = None
        self._lock = threading.RLock()

    def available_ports(self) -> list[str]:
        """Names of the serial ports present on this machine."""
        return [info.device for info in list_ports.comports()]

    def open(self, port_name: str) -> bool:
        """Open ``port_name`` at 921600 8N1, closing any port already open."""
        with self._lock:
            self._buffer.clear()
        self.close()
        try:
            self._port = self._port_factory(port_name)
        except (OSError, serial.SerialException):
            self._port = None
            self.listener.port_status(f"Failed to open port {port_name}")
            return False
        self.listener.port_status(
            f"Serial port {port_name} opened successfully at baud rate {BAUD_RATE}"
        )
        return True

    def close(self) -> None:
        """Close the port if one is open."""
        if self._port is not None:
            if self._port.is_open:
                self._port.close()
            self._port = None

    def is_open(self) -> bool:
        return self._port is not None and bool(self._port.is_open)

    def write(self, data: bytes) -> None:
        """Send ``data``; with no open port, report that instead."""
        if not self.is_open():
            self.listener.data_received()
            self.listener.port_status(NOT_OPEN_MESSAGE)
            return
        with self._lock:
            self._buffer.clear()
        self._port.write(data)

    def set_message_id(self, msg_id: int) -> None:
        """Set which reply is expected next and drop any buffered bytes."""
        with self._lock:
            self._msg_id = msg_id
            self._buffer.clear()
            self._processed = 0

    def read_available(self) -> int:
        """Read whatever the port holds and process it; return the byte count."""
        if not self.is_open():
            return 0
        waiting = self._port.in_waiting
        if not waiting:
            return 0
        data = self._port.read(waiting)
        self.feed(data)
        return len(data)

    def feed(self, data: bytes) -> None:
        """Process bytes that arrived from the port."""
        listener = self.listener
        listener.port_status(SEPARATOR)
        if not data:
            return
        with self._lock:
            self._buffer.extend(data)
            if self._buffer:
                listener.data_received()

            if self._msg_id == MessageId.START:
                self._handle_plot_bytes()
            elif self._msg_id == MessageId.POWER:
                self._handle_power_bytes()
            else:
                listener.note("Fatal Error 404")

    def _handle_plot_bytes(self) -> None:
        listener = self.listener
        response: bytes | None = None
        while len(self._buffer) - self._processed >= len(PLOT_END_MARKER):
            chunk = bytes(self._buffer[self._processed :])
            if chunk.endswith(PLOT_END_MARKER):
                response = PLOT_END_MARKER
                listener.note("Start Command received bytes check: " + response.hex())
                self._processed = 0
                break
            if len(chunk) >= PLOT_CHUNK_SIZE:
                response = chunk[:PLOT_CHUNK_SIZE]
                self._processed += PLOT_CHUNK_SIZE
                listener.note(f"Start Command 6 bytes received: {len(response)}")
                listener.plot_data(response)
            else:
                listener.note(f"Start Command received Chunk Size {len(chunk)}")
                break

        if response is None:
            return
        if len(response) == len(PLOT_END_MARKER):
            listener.plot_completed()
        elif len(response) == PLOT_CHUNK_SIZE:
            # The last chunk of a read is delivered a second time.
            listener.plot_data(response)

    def _handle_power_bytes(self) -> None:
        listener = self.listener
        if is_power_frame(self._buffer):
            frame = bytes(self._buffer)
            self._buffer.clear()
            listener.note("Power Card Data received bytes check: " + frame.hex())
            listener.power_data(decode_power_frame(frame))
        else:
            listener.note(
                f"Required 17 bytes Received bytes: {len(self._buffer)} "
                + self._buffer.hex()
            )