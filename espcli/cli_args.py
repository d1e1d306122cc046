"""Parsing of numeric command-line values and small image helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass

_U32_MAX = 0xFFFFFFFF
_U16_MAX = 0xFFFF
_DECIMAL = re.compile(r"\+?[0-9]+")
_HEX = re.compile(r"\+?[0-9a-fA-F]+")


class ChipRevError(ValueError):
    """Raised when a chip revision is not in ``major.minor`` format."""

    def __init__(self, chip_rev: str) -> None:
        super().__init__(
            f"Error while parsing chip revision: {chip_rev!r}, expected format: major.minor"
        )
        self.chip_rev = chip_rev


@dataclass(frozen=True)
class WriteTarget:
    """Where to write a binary: a flash address or a partition label."""

    address: int | None = None
    partition: str | None = None

    def __post_init__(self) -> None:
        if (self.address is None) == (self.partition is None):
            raise ValueError("exactly one of address or partition must be given")


def parse_u32(text: str) -> int:
    """Parse a decimal or ``0x``-prefixed hexadecimal u32; underscores are ignored."""
    cleaned = text.replace("_", "")
    if len(cleaned) > 2 and cleaned[:2] in ("0x", "0X"):
        digits, pattern, radix = cleaned[2:], _HEX, 16
    else:
        digits, pattern, radix = cleaned, _DECIMAL, 10
    if not pattern.fullmatch(digits):
        raise ValueError(f"invalid integer: {text!r}")
    value = int(digits, radix)
    if value > _U32_MAX:
        raise ValueError(f"integer out of range for u32: {text!r}")
    return value


def parse_write_target(text: str) -> WriteTarget:
    """Treat the text as an address if it parses as a u32, otherwise as a label."""
    try:
        return WriteTarget(address=parse_u32(text))
    except ValueError:
        return WriteTarget(partition=text)


def _parse_u16(part: str, chip_rev: str) -> int:
    if not _DECIMAL.fullmatch(part):
        raise ChipRevError(chip_rev)
    value = int(part)
    if value > _U16_MAX:
        raise ChipRevError(chip_rev)
    return value


def parse_chip_rev(text: str) -> int:
    """Parse ``major.minor`` into ``major * 100 + minor``."""
    parts = text.split(".")
    if len(parts) != 2:
        raise ChipRevError(text)
    major, minor = (_parse_u16(part, text) for part in parts)
    value = major * 100 + minor
    if value > _U16_MAX:
        raise ChipRevError(text)
    return value


def format_image_size(app_size: int, part_size: int | None) -> str:
    """Describe the application size, relative to its partition when known."""
    if part_size is not None:
        percent = app_size / part_size * 100.0
        return f"App/part. size:    {app_size:,}/{part_size:,} bytes, {percent:.2f}%"
    return f"App size:          {app_size:,} bytes"


def pad_to_word(data: bytes) -> bytes:
    """Pad data with 0xFF bytes up to a multiple of four bytes."""
    remainder = len(data) % 4
    if remainder == 0:
        return bytes(data)
    return bytes(data) + b"\xff" * (4 - remainder)