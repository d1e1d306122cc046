"""Splitting of a serial stream into raw text and framed defmt data."""

from __future__ import annotations

import enum
from dataclasses import dataclass

FRAME_START = b"\xff\x00"
FRAME_END = b"\x00"


class FrameKind(enum.Enum):
    """Kind of data carried by a frame."""

    DEFMT = "defmt"
    RAW = "raw"


@dataclass(frozen=True)
class Frame:
    """A chunk of the serial stream."""

    kind: FrameKind
    data: bytes


def _search(haystack: bytes, look_for_end: bool) -> tuple[bytes, int] | None:
    needle = FRAME_END if look_for_end else FRAME_START
    start = 0
    if look_for_end:
        start = next((i for i, byte in enumerate(haystack) if byte != 0), -1)
        if start < 0:
            return None
    end = haystack.find(needle, start)
    if end < 0:
        return None
    return haystack[start:end], end + len(needle)


class FrameDelimiter:
    """Separate defmt frames (``FF 00 ... 00``) from plain output."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._in_frame = False

    def feed(self, data: bytes) -> list[Frame]:
        """Consume ``data`` and return the frames completed by it, in order."""
        self._buffer.extend(data)
        frames = []

        while (found := _search(bytes(self._buffer), self._in_frame)) is not None:
            chunk, consumed = found
            if self._in_frame:
                frames.append(Frame(FrameKind.DEFMT, chunk))
            elif chunk:
                frames.append(Frame(FrameKind.RAW, chunk))
            self._in_frame = not self._in_frame
            del self._buffer[:consumed]

        if not self._in_frame:
            # A trailing 0xFF may begin the next frame, so hold it back.
            keep = 1 if self._buffer.endswith(b"\xff") else 0
            length = len(self._buffer) - keep
            if length > 0:
                frames.append(Frame(FrameKind.RAW, bytes(self._buffer[:length])))
                del self._buffer[:length]

        return frames