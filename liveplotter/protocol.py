"""Wire format of the acquisition board: commands, checksums and frame decoding."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass
from enum import IntEnum

START_COMMAND = bytes([0xFF, 0x0A, 0xFF])
POWER_COMMAND_BODY = bytes([0x47, 0x01])
PLOT_END_MARKER = bytes.fromhex("ffddff")
PLOT_CHUNK_SIZE = 6
POWER_FRAME_SIZE = 17
POWER_FRAME_HEADER = bytes([0x54, 0x01])
POWER_PAYLOAD_SIZE = 14


class MessageId(IntEnum):
    """Identifies which reply the board is expected to send next."""

    START = 0x01
    POWER = 0x02


@dataclass(frozen=True)
class PowerReading:
    """Voltages reported by the power card, in volts."""

    pos28v: float
    pos15v: float
    neg15v: float
    ext10v: float
    pos5v: float
    neg5v: float
    pos3p3v: float

    def as_list(self) -> list[float]:
        """Return the rails in the order the board reports them."""
        return list(astuple(self))


def _to_float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _check_word(raw: int) -> None:
    if not 0 <= raw <= 0xFFFF:
        raise ValueError(f"raw value {raw} does not fit in 16 bits")


def xor_checksum(data: bytes) -> int:
    """XOR of every byte in ``data``."""
    checksum = 0
    for byte in data:
        checksum ^= byte
    return checksum


def frame_checksum(data: bytes) -> int:
    """XOR of every byte of a frame except its trailing checksum byte."""
    if len(data) < 2:
        raise ValueError("Data size must be at least 2 for checksum calculation.")
    return xor_checksum(data[:-1])


def hex_bytes(data: bytes) -> str:
    """Upper-case hex of ``data`` with a space between bytes."""
    return data.hex(" ").upper()


def bytes_to_float(data: bytes) -> float:
    """Interpret four bytes, most significant first, as an IEEE single."""
    if len(data) != 4:
        raise ValueError(f"expected 4 bytes for a float, got {len(data)}")
    return struct.unpack(">f", bytes(data))[0]


def scale_power_value(raw: int) -> float:
    """Scale a 12-bit ADC reading of a rail behind a divide-by-three network."""
    _check_word(raw)
    return _to_float32(((raw * 20.48) / 4095.0 - 10.24) * 3)


def scale_special_value(raw: int) -> float:
    """Scale a 12-bit ADC reading of a rail measured directly."""
    _check_word(raw)
    return _to_float32((raw * 20.48) / 4095.0 - 10.24)


def scale_plot_sample(raw: int) -> float:
    """Convert a raw live-plot word into the plotted value."""
    _check_word(raw)
    return 2.5 - (raw * 1.5259) / 10000.0


def decode_plot_chunk(chunk: bytes) -> list[float]:
    """Decode a six-byte live-plot chunk into its plotted samples.

    Only the leading big-endian word of a chunk carries a sample.
    """
    if len(chunk) != PLOT_CHUNK_SIZE:
        raise ValueError(
            f"Invalid data size, expected {PLOT_CHUNK_SIZE} bytes, got: {len(chunk)}"
        )
    words = struct.unpack_from(">H", chunk, 0)
    return [scale_plot_sample(word) for word in words]


def is_power_frame(buffer: bytes) -> bool:
    """True when ``buffer`` is exactly one valid power-card reply."""
    return (
        len(buffer) == POWER_FRAME_SIZE
        and bytes(buffer[:2]) == POWER_FRAME_HEADER
        and buffer[-1] == frame_checksum(buffer)
    )


def decode_power_frame(frame: bytes) -> PowerReading:
    """Decode a validated power-card reply into rail voltages."""
    if not is_power_frame(frame):
        raise ValueError("not a valid power card frame")
    payload = bytes(frame[2 : 2 + POWER_PAYLOAD_SIZE])
    words = struct.unpack(">7H", payload)
    scaled = [scale_power_value(word) for word in words[:4]]
    scaled += [scale_special_value(word) for word in words[4:]]
    return PowerReading(*scaled)


def start_command() -> bytes:
    """Command that starts a live-plot acquisition."""
    return START_COMMAND


def power_command() -> bytes:
    """Command that requests one power-card reading."""
    return POWER_COMMAND_BODY + bytes([xor_checksum(POWER_COMMAND_BODY)])