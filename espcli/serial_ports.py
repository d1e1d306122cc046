"""Detection, filtering, selection and listing of serial ports."""

from __future__ import annotations

import enum
import logging
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from serial.tools import list_ports

from espcli.config import Config, UsbDevice

_log = logging.getLogger(__name__)

_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"

_CASE_SENSITIVE_PLATFORMS = ("freebsd", "dragonfly", "openbsd", "netbsd")

# USB UART adapters which are known to be on common development boards.
KNOWN_DEVICES: tuple[UsbDevice, ...] = (
    UsbDevice(vid=0x10C4, pid=0xEA60),  # Silicon Labs CP210x UART Bridge
    UsbDevice(vid=0x1A86, pid=0x7523),  # QinHeng Electronics CH340 serial converter
)

Ask = Callable[[str, "list[str] | None"], Any]


class SerialPortError(Exception):
    """Raised when no usable serial port can be found or chosen."""


class PortType(enum.Enum):
    """Kind of serial port."""

    USB = "usb"
    PCI = "pci"
    BLUETOOTH = "bluetooth"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PortInfo:
    """A detected serial port."""

    port_name: str
    port_type: PortType = PortType.UNKNOWN
    vid: int = 0
    pid: int = 0
    serial_number: str | None = None
    manufacturer: str | None = None
    product: str | None = None


def _classify(info: Any) -> PortType:
    if getattr(info, "vid", None) is not None:
        return PortType.USB
    subsystem = (getattr(info, "subsystem", None) or "").lower()
    if subsystem == "pci":
        return PortType.PCI
    text = f"{getattr(info, 'device', '')} {getattr(info, 'description', '')}".lower()
    if subsystem == "bluetooth" or "bluetooth" in text:
        return PortType.BLUETOOTH
    return PortType.UNKNOWN


def _from_list_port_info(info: Any) -> PortInfo:
    port_type = _classify(info)
    if port_type is PortType.USB:
        return PortInfo(
            port_name=info.device,
            port_type=port_type,
            vid=info.vid,
            pid=info.pid or 0,
            serial_number=getattr(info, "serial_number", None),
            manufacturer=getattr(info, "manufacturer", None),
            product=getattr(info, "product", None),
        )
    return PortInfo(port_name=info.device, port_type=port_type)


def detect_usb_serial_ports(list_all_ports: bool) -> list[PortInfo]:
    """Return the available serial ports.

    Only USB ports are returned unless ``list_all_ports`` is set, in which case
    PCI and unknown ports are included too. Bluetooth ports are never returned.
    """
    allowed = (
        {PortType.USB, PortType.PCI, PortType.UNKNOWN} if list_all_ports else {PortType.USB}
    )
    ports = (_from_list_port_info(info) for info in list_ports.comports())
    return [port for port in ports if port.port_type in allowed]


def known_ports_filter(port: PortInfo, config: Config) -> bool:
    """Whether the port is a configured or commonly used development board adapter."""
    if port.port_type is not PortType.USB:
        return False
    return any(dev.matches(port) for dev in (*config.usb_device, *KNOWN_DEVICES))


def find_serial_port(ports: Iterable[PortInfo], name: str) -> PortInfo:
    """Return the port whose name matches ``name``."""
    if not sys.platform.startswith("win"):
        try:
            name = str(Path(name).resolve(strict=True))
        except OSError as exc:
            raise SerialPortError(f"Serial port '{name}' not found") from exc

    if sys.platform.startswith(_CASE_SENSITIVE_PLATFORMS):
        found = next((port for port in ports if port.port_name == name), None)
    else:
        lowered = name.lower()
        found = next((port for port in ports if port.port_name.lower() == lowered), None)

    if found is None:
        raise SerialPortError(f"Serial port '{name}' not found")
    return found


def _display_name(port: PortInfo, config: Config) -> str:
    formatted = (
        f"{_BOLD}{port.port_name}{_RESET}" if known_ports_filter(port, config) else port.port_name
    )
    if port.port_type is PortType.USB and port.product:
        return f"{formatted} - {port.product}"
    return formatted


def select_serial_port(
    ports: Sequence[PortInfo],
    config: Config,
    force_confirm: bool,
    ask: Ask,
) -> tuple[PortInfo, bool]:
    """Choose a port, asking the user where needed.

    ``ask(prompt, choices)`` is called with a list of choices to pick from and
    must return the chosen index, or with ``None`` for a yes/no question and
    must return a bool. Returning ``None`` cancels. The result holds the port
    and whether it matches a known device.
    """
    known = [port for port in ports if known_ports_filter(port, config)]
    if len(known) == 1 and not force_confirm:
        return known[0], True

    if len(ports) > 1:
        _log.info("Detected %d serial ports", len(ports))
        _log.info("Ports which match a known common dev board are highlighted")
        _log.info("Please select a port")

        ordered = sorted(ports, key=lambda port: not known_ports_filter(port, config))
        names = [_display_name(port, config) for port in ordered]
        index = ask("Please select a port", names)
        if index is None:
            raise SerialPortError("Operation was cancelled by the user")
        if not 0 <= index < len(ordered):
            raise SerialPortError(f"Serial port '{index}' not found")
        chosen = ordered[index]
        return chosen, known_ports_filter(chosen, config)

    if len(ports) == 1:
        port = ports[0]
        product = port.product if port.port_type is PortType.USB else None
        prompt = (
            f"Use serial port '{port.port_name}' - {product}?"
            if product
            else f"Use serial port '{port.port_name}'?"
        )
        answer = ask(prompt, None)
        if answer is None:
            raise SerialPortError("Operation was cancelled by the user")
        if answer:
            return port, False
        raise SerialPortError(f"Serial port '{port.port_name}' not found")

    raise SerialPortError("No serial ports could be detected")


def format_port_listing(
    ports: Iterable[PortInfo],
    config: Config,
    list_all_ports: bool,
    name_only: bool,
) -> str:
    """Render the port listing printed by the list-ports command."""
    shown = [port for port in ports if list_all_ports or known_ports_filter(port, config)]
    if not shown:
        if name_only:
            return ""
        return f"No {'' if list_all_ports else 'known '}serial ports found.\n"

    name_width = max(len(port.port_name) for port in shown) + 2
    manufacturer_width = (
        max(
            (
                len(port.manufacturer)
                for port in shown
                if port.port_type is PortType.USB and port.manufacturer is not None
            ),
            default=15,
        )
        + 2
    )

    lines = []
    for port in sorted(shown, key=lambda port: port.port_name.lower()):
        if name_only:
            lines.append(port.port_name)
        elif port.port_type is PortType.USB:
            lines.append(
                f"{port.port_name.ljust(name_width)}{port.pid:04X}:{port.vid:04X}  "
                f"{(port.manufacturer or '').ljust(manufacturer_width)}{port.product or ''}"
            )
        else:
            description = {
                PortType.BLUETOOTH: "Bluetooth serial port",
                PortType.PCI: "PCI serial port",
                PortType.UNKNOWN: "Unknown type of port",
            }[port.port_type]
            lines.append(f"{port.port_name.ljust(name_width + 11)}{description}")
    return "\n".join(lines) + "\n"