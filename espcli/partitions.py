"""Partition selection for erasing, and tabular display of partition tables."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

_HEADERS = ("Name", "Type", "SubType", "Offset", "Size", "Encrypted")


class MissingPartitionTableError(LookupError):
    """Raised when an operation needs a partition table but none was given."""

    def __init__(self) -> None:
        super().__init__("No partition table could be found")


class MissingPartitionError(LookupError):
    """Raised when a partition label is not present in the partition table."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Missing partition: {label!r}")
        self.label = label


@dataclass(frozen=True)
class Partition:
    """One entry of a partition table."""

    name: str
    type: str
    subtype: str
    offset: int
    size: int
    encrypted: bool = False


def select_partitions_to_erase(
    partitions: Sequence[Partition] | None,
    labels: Iterable[str] | None = None,
    data_types: Iterable[str] | None = None,
) -> list[Partition]:
    """Return the partitions named by label or matching a data subtype.

    Each partition appears once, and the result is ordered by offset.
    """
    if partitions is None:
        raise MissingPartitionTableError()

    selected: dict[int, Partition] = {}

    for label in labels or ():
        part = next((p for p in partitions if p.name == label), None)
        if part is None:
            raise MissingPartitionError(label)
        selected[part.offset] = part

    # Several partitions may share a data subtype, e.g. multiple FAT partitions.
    for data_type in data_types or ():
        for part in partitions:
            if part.type == "data" and part.subtype == data_type:
                selected[part.offset] = part

    return [selected[offset] for offset in sorted(selected)]


def _row(part: Partition) -> tuple[str, ...]:
    return (
        part.name,
        part.type,
        part.subtype,
        f"{part.offset:#x}",
        f"{part.size:#x} ({part.size // 1024}KiB)",
        "true" if part.encrypted else "false",
    )


def _border(widths: Sequence[int], left: str, fill: str, middle: str, right: str) -> str:
    return left + middle.join(fill * (width + 2) for width in widths) + right


def _cells(values: Sequence[str], widths: Sequence[int]) -> str:
    return "│" + "│".join(f" {value.ljust(width)} " for value, width in zip(values, widths)) + "│"


def format_partition_table(partitions: Iterable[Partition]) -> str:
    """Render the partitions as a table with rounded UTF-8 borders."""
    rows = [_row(part) for part in partitions]
    widths = [
        max(len(header), *(len(row[column]) for row in rows))
        for column, header in enumerate(_HEADERS)
    ]

    lines = [
        _border(widths, "╭", "─", "┬", "╮"),
        _cells(_HEADERS, widths),
        _border(widths, "╞", "═", "╪", "╡"),
    ]
    for position, row in enumerate(rows):
        if position:
            lines.append(_border(widths, "├", "─", "┼", "┤"))
        lines.append(_cells(row, widths))
    lines.append(_border(widths, "╰", "─", "┴", "╯"))
    return "\n".join(lines)