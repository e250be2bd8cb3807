"""Timestamped debug notes written to a plain text file."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, TextIO

logger = logging.getLogger(__name__)

DEFAULT_NOTES_PATH = "debug_notes.txt"


def _timestamp(moment: datetime) -> str:
    return f"{moment:%Y-%m-%d %H:%M:%S}.{moment.microsecond // 1000:03d}"


class NotesLog:
    """Append-only log of timestamped lines, flushed after every entry."""

    def __init__(
        self,
        path: str | Path = DEFAULT_NOTES_PATH,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.path = Path(path)
        self._clock = clock if clock is not None else datetime.now
        self._file: TextIO | None = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> None:
        """Open the file for appending unless it is already open."""
        if self._file is not None:
            return
        try:
            self._file = self.path.open("a", encoding="utf-8")
        except OSError:
            logger.critical("Failed to open log file.")
            self._file = None

    def reset(self) -> None:
        """Discard any previous notes and start a fresh file."""
        self.close()
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.critical("Failed to remove log file.")
        self.open()

    def write(self, text: str) -> None:
        """Append ``text`` under the current time; ignored when not open."""
        if self._file is None:
            logger.critical("Log file is not open.")
            return
        self._file.write(f"[{_timestamp(self._clock())}] {text}\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.flush()
            self._file.close()
            self._file = None

    def __enter__(self) -> NotesLog:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()