"""Normalisation of bare line feeds to CR LF."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

_CR = 0x0D
_LF = 0x0A


def normalized(data: Iterable[int]) -> Iterator[int]:
    """Yield the bytes of ``data`` with every LF not preceded by CR turned into CR LF."""
    prev_was_cr = False
    for byte in data:
        if byte == _LF and not prev_was_cr:
            yield _CR
            yield _LF
            prev_was_cr = False
        elif byte == _CR:
            prev_was_cr = True
            yield _CR
        else:
            prev_was_cr = False
            yield byte