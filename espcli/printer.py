"""Serial output printing with UTF-8 reassembly and address resolution."""

from __future__ import annotations

import codecs
import re
from collections.abc import Iterable, Mapping
from typing import Protocol

from espcli.line_endings import normalized

_FN_ADDR = re.compile(r"0[xX][0-9a-fA-F]{8}")
_YELLOW = "\x1b[38;5;11m"
_RESET = "\x1b[0m"


class _TextWriter(Protocol):
    def write(self, text: str) -> object: ...

    def flush(self) -> object: ...


class _ByteSink(Protocol):
    def write(self, data: bytes) -> object: ...


class SymbolResolver:
    """Look up function names and source locations for addresses.

    ``symbols`` holds ``(address, size, name)`` entries, ``locations`` maps an
    address to a ``(file, line)`` pair, and ``segments`` holds ``(address, size)``
    ranges of loaded memory; addresses outside every segment have no name.
    """

    def __init__(
        self,
        symbols: Iterable[tuple[int, int, str]] = (),
        locations: Mapping[int, tuple[str, int]] | None = None,
        segments: Iterable[tuple[int, int]] | None = None,
    ) -> None:
        self._symbols = list(symbols)
        self._locations = dict(locations or {})
        self._segments = list(segments) if segments is not None else None

    def name(self, addr: int) -> str | None:
        """Return the name of the function containing ``addr``, if known."""
        if self._segments is not None and not any(
            start <= addr < start + size for start, size in self._segments
        ):
            return None
        for start, size, name in self._symbols:
            if start <= addr <= start + size:
                return name or None
        return None

    def location(self, addr: int) -> tuple[str, int] | None:
        """Return the file name and line number for ``addr``, if known."""
        return self._locations.get(addr)


def find_addresses(line: str) -> list[str]:
    """Return every 32-bit hexadecimal function address literal in ``line``."""
    return _FN_ADDR.findall(line)


def resolve_addresses(symbols: SymbolResolver, line: str) -> str:
    """Describe every resolvable address in ``line``, highlighted in yellow."""
    pieces = []
    stripped = line.strip()
    for matched in find_addresses(line):
        addr = int(matched[2:], 16)
        name = symbols.name(addr)
        if name is None:
            continue
        location = symbols.location(addr)
        where = f"{location[0]}:{location[1]}" if location is not None else "??:??"
        head = name if stripped == f"0x{addr:x}" else f"{matched} - {name}"
        pieces.append(f"{_YELLOW}{head}\r\n    at {where}\r\n{_RESET}")
    return "".join(pieces)


class Utf8Merger:
    """Decode a byte stream chunk by chunk, keeping split UTF-8 sequences intact."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def process(self, data: bytes) -> str:
        """Decode ``data`` with line endings normalised; invalid bytes become U+FFFD."""
        return self._decoder.decode(bytes(normalized(data)))


class ResolvingPrinter:
    """Print serial output, appending symbol information after complete lines."""

    def __init__(self, writer: _TextWriter, symbols: SymbolResolver | None = None) -> None:
        self._writer = writer
        self._symbols = symbols
        self._merger = Utf8Merger()
        self._fragment = ""

    def write(self, data: bytes) -> int:
        """Print ``data`` and return the number of bytes consumed."""
        text = self._merger.process(data)
        lines = text.split("\n")
        incomplete = lines.pop()
        for raw in lines:
            line = raw.removesuffix("\r")
            self._writer.write(line)
            full_line = self._fragment + line
            self._fragment = ""
            self._writer.write("\r\n")
            if self._symbols is not None:
                resolved = resolve_addresses(self._symbols, full_line)
                if resolved:
                    self._writer.write(resolved)
        if incomplete:
            self._writer.write(incomplete)
            self._fragment += incomplete
        return len(data)

    def flush(self) -> None:
        """Flush the underlying writer."""
        self._writer.flush()


class SerialParser:
    """Pass plain serial output through unchanged."""

    def feed(self, data: bytes, out: _ByteSink) -> None:
        """Write ``data`` to ``out`` as is."""
        out.write(data)