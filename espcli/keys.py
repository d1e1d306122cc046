"""Keyboard handling and log-format selection for the serial monitor."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

_log = logging.getLogger(__name__)

_DEFAULT_MONITOR_BAUD = 115_200
# 115_200 * 26 MHz / 40 MHz
_ESP32C2_26MHZ_MONITOR_BAUD = 74_880


class LogFormat(enum.Enum):
    """Encoding of the target's serial output."""

    DEFMT = "defmt"
    SERIAL = "serial"

    def __str__(self) -> str:
        return self.value


class KeyCode(enum.Enum):
    """Keys the monitor knows how to forward to the target."""

    BACKSPACE = "backspace"
    ENTER = "enter"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    UP = "up"
    DOWN = "down"
    TAB = "tab"
    DELETE = "delete"
    INSERT = "insert"
    ESC = "esc"
    CHAR = "char"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    FUNCTION = "function"


@dataclass(frozen=True)
class KeyEvent:
    """A key press, with the character for ``KeyCode.CHAR`` and the Control state."""

    code: KeyCode
    char: str | None = None
    control: bool = False

    def __post_init__(self) -> None:
        if self.code is KeyCode.CHAR:
            if self.char is None or len(self.char) != 1:
                raise ValueError("a CHAR key event needs exactly one character")
        elif self.char is not None:
            raise ValueError("only CHAR key events carry a character")


# Escape sequences as understood by common firmware line editors.
_SEQUENCES: dict[KeyCode, bytes] = {
    KeyCode.BACKSPACE: b"\x08",
    KeyCode.ENTER: b"\r",
    KeyCode.LEFT: b"\x1b[D",
    KeyCode.RIGHT: b"\x1b[C",
    KeyCode.HOME: b"\x1b[H",
    KeyCode.END: b"\x1b[F",
    KeyCode.UP: b"\x1b[A",
    KeyCode.DOWN: b"\x1b[B",
    KeyCode.TAB: b"\x09",
    KeyCode.DELETE: b"\x1b[3~",
    KeyCode.INSERT: b"\x1b[2~",
    KeyCode.ESC: b"\x1b",
}


def encode_key(event: KeyEvent) -> bytes | None:
    """Return the bytes to send over the serial line for a key event, if any."""
    if event.code is not KeyCode.CHAR:
        return _SEQUENCES.get(event.code)

    ch = event.char
    assert ch is not None
    if event.control:
        if ("a" <= ch <= "z") or ch == " ":
            return bytes([ord(ch) & 0x1F])
        if "4" <= ch <= "7":
            # Control-4 through 7 stand for \x1c through \x1f.
            return bytes([(ord(ch) + 8) & 0x1F])
    return ch.encode("utf-8")


def log_format_from_symbol(symbol: str | None) -> LogFormat:
    """Deduce the log format from the format name embedded in the firmware."""
    if symbol is None:
        return LogFormat.SERIAL
    if symbol == "defmt-espflash":
        return LogFormat.DEFMT
    if symbol == "serial":
        return LogFormat.SERIAL
    _log.warning("Unknown log format symbol: %s. Defaulting to serial.", symbol)
    return LogFormat.SERIAL


def monitor_baud(chip: str, xtal_mhz: int, baud: int) -> int:
    """Adjust the monitor baud rate for 26 MHz ESP32-C2 parts at the default rate."""
    if chip.lower() == "esp32c2" and xtal_mhz == 26 and baud == _DEFAULT_MONITOR_BAUD:
        return _ESP32C2_26MHZ_MONITOR_BAUD
    return baud