"""Application logic behind the live plot: commands, plot data and alerts."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto

from .notes import NotesLog
from .protocol import (
    MessageId,
    PowerReading,
    decode_plot_chunk,
    hex_bytes,
    power_command,
    start_command,
)
from .serial_handler import BAUD_RATE, NOT_OPEN_MESSAGE, HandlerListener, SerialPortHandler

logger = logging.getLogger(__name__)

START_TIMEOUT = 4.0
POWER_TIMEOUT = 2.5


class StatusKind(Enum):
    """What a status line from the serial handler reports."""

    PORT_NOT_SELECTED = auto()
    PORT_OPENED = auto()
    OPEN_FAILED = auto()
    OTHER = auto()


class AlertLevel(Enum):
    INFORMATION = auto()
    WARNING = auto()
    CRITICAL = auto()


@dataclass(frozen=True)
class Alert:
    """A message the user should see."""

    level: AlertLevel
    title: str
    text: str


def classify_status(message: str) -> StatusKind:
    """Tell which kind of status line ``message`` is."""
    if message.startswith(NOT_OPEN_MESSAGE):
        return StatusKind.PORT_NOT_SELECTED
    if message.startswith("Serial port ") and message.endswith(
        f" opened successfully at baud rate {BAUD_RATE}"
    ):
        return StatusKind.PORT_OPENED
    if message.startswith("Failed to open port"):
        return StatusKind.OPEN_FAILED
    return StatusKind.OTHER


@dataclass
class PlotSeries:
    """Accumulated live-plot samples, numbered from zero."""

    x: list[float] = field(default_factory=list)
    y: list[float] = field(default_factory=list)
    sample_number: int = 0

    def clear(self) -> None:
        self.x.clear()
        self.y.clear()
        self.sample_number = 0

    def extend(self, values) -> None:
        """Append values, each under the next sample number."""
        for value in values:
            self.x.append(float(self.sample_number))
            self.y.append(value)
            self.sample_number += 1

    def x_range(self) -> tuple[int, int]:
        return 0, self.sample_number

    def y_range(self) -> tuple[float, float]:
        if not self.y:
            raise ValueError("no samples to take a range of")
        return min(self.y), max(self.y)


class LivePlotController(HandlerListener):
    """Drives the board through a serial handler and collects what it sends."""

    def __init__(self, handler: SerialPortHandler, notes: NotesLog) -> None:
        self.handler = handler
        handler.listener = self
        self.notes = notes
        self.stop_flag = True
        self.series = PlotSeries()
        self.power: PowerReading | None = None
        self.readings_received = 0
        self.plot_finished = False
        self.status_lines: list[str] = []
        self.alerts: list[Alert] = []
        self._deadline: float | None = None

    @property
    def waiting_for_response(self) -> bool:
        return self._deadline is not None

    def _alert(self, level: AlertLevel, title: str, text: str) -> None:
        self.alerts.append(Alert(level, title, text))

    def _send(self, command: bytes, msg_id: MessageId, label: str) -> None:
        text = f"{label} cmd sent : {hex_bytes(command)}"
        logger.debug(text)
        self.notes.write(text)
        self.handler.set_message_id(msg_id)
        self.handler.write(command)

    def start(self) -> None:
        """Clear the plot and ask the board for a live-plot run."""
        if not self.stop_flag:
            self._alert(
                AlertLevel.WARNING,
                "Error",
                "Already Get Power Is Running !\n Do you want to proceed",
            )
            self.stop_flag = True
        self.series.clear()
        self.plot_finished = False
        self._deadline = time.monotonic() + START_TIMEOUT
        self._send(start_command(), MessageId.START, "Start Command")

    def get_power(self) -> None:
        """Start requesting power-card readings until stopped."""
        self._deadline = time.monotonic() + POWER_TIMEOUT
        self.stop_flag = False
        self._send(power_command(), MessageId.POWER, "Power Card Data")

    def stop_power(self) -> None:
        self.stop_flag = True

    def select_port(self, port_name: str) -> bool:
        return self.handler.open(port_name)

    def port_status(self, message: str) -> None:
        kind = classify_status(message)
        if kind is StatusKind.PORT_NOT_SELECTED:
            self._alert(
                AlertLevel.CRITICAL, "Port Error", "Please Select Port Using Above Dropdown"
            )
        elif kind is StatusKind.PORT_OPENED:
            self._alert(AlertLevel.INFORMATION, "Success", message)
        elif kind is StatusKind.OPEN_FAILED:
            self._alert(AlertLevel.CRITICAL, "Error", message)
        self.status_lines.append(message)

    def data_received(self) -> None:
        self._deadline = None

    def note(self, text: str) -> None:
        self.notes.write(text)

    def plot_data(self, chunk: bytes) -> None:
        try:
            values = decode_plot_chunk(chunk)
        except ValueError as error:
            logger.warning("%s", error)
            return
        self.series.extend(values)

    def power_data(self, reading: PowerReading) -> None:
        self.power = reading
        self.readings_received += 1
        if not self.stop_flag:
            self._send(power_command(), MessageId.POWER, "Power Card Data")

    def plot_completed(self) -> None:
        self.plot_finished = True
        self._alert(AlertLevel.INFORMATION, "Completed", "Plot Completed Successfully")

    def response_overdue(self, now: float) -> bool:
        """True, once, when the board has not answered by its deadline."""
        if self._deadline is None or now < self._deadline:
            return False
        self._deadline = None
        self._alert(AlertLevel.WARNING, "Timeout", "Hardware Not Responding!")
        return True