"""Loading and saving of the user configuration file (``espflash.toml``)."""

from __future__ import annotations

import copy
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import platformdirs
import tomli_w

CONFIG_FILE_NAME = "espflash.toml"

_HEX_DIGITS = re.compile(r"\+?[0-9a-f]+")


class ConfigError(ValueError):
    """Raised when a configuration file or value is invalid."""


def deserialize_hex_to_u16(text: str) -> int:
    """Parse a hexadecimal string, with or without a ``0x`` prefix, into a u16."""
    if not isinstance(text, str):
        raise ConfigError(f"expected a hexadecimal string, got {text!r}")
    digits = text.lower()
    while digits.startswith("0x"):
        digits = digits[2:]
    if not _HEX_DIGITS.fullmatch(digits):
        raise ConfigError(f"invalid hexadecimal value: {text!r}")
    value = int(digits, 16)
    if value > 0xFFFF:
        raise ConfigError(f"hexadecimal value out of range for u16: {text!r}")
    return value


def serialize_u16_to_hex(value: int) -> str:
    """Format a u16 as a zero-padded, four-digit lowercase hexadecimal string."""
    return f"{value:04x}"


@dataclass
class Connection:
    """A configured, known serial connection."""

    serial: str | None = None


@dataclass
class UsbDevice:
    """A configured, known USB device."""

    vid: int = 0
    pid: int = 0

    def matches(self, port: Any) -> bool:
        """Check whether a USB port (anything with ``vid`` and ``pid``) is this device."""
        return self.vid == port.vid and self.pid == port.pid


@dataclass
class FlashSettings:
    """Flash mode, size and frequency preferences."""

    mode: str | None = None
    size: str | None = None
    freq: str | None = None


@dataclass
class Config:
    """Deserialized contents of a configuration file."""

    baudrate: int | None = None
    bootloader: Path | None = None
    connection: Connection = field(default_factory=Connection)
    partition_table: Path | None = None
    partition_table_offset: int | None = None
    usb_device: list[UsbDevice] = field(default_factory=list)
    flash: FlashSettings = field(default_factory=FlashSettings)
    save_path: Path | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_toml(cls, text: str) -> Config:
        """Parse configuration from TOML text."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse configuration: {exc}") from exc

        connection_data = _table(data, "connection")
        flash_data = _table(data, "flash")

        devices = data.get("usb_device", [])
        if not isinstance(devices, list):
            raise ConfigError("'usb_device' must be an array of tables")
        usb_devices = []
        for entry in devices:
            if not isinstance(entry, dict):
                raise ConfigError("'usb_device' entries must be tables")
            try:
                usb_devices.append(
                    UsbDevice(
                        vid=deserialize_hex_to_u16(entry["vid"]),
                        pid=deserialize_hex_to_u16(entry["pid"]),
                    )
                )
            except KeyError as exc:
                raise ConfigError(f"missing field {exc.args[0]!r} in 'usb_device'") from exc

        bootloader = _optional(data, "bootloader", str)
        partition_table = _optional(data, "partition_table", str)

        return cls(
            baudrate=_optional(data, "baudrate", int),
            bootloader=Path(bootloader) if bootloader is not None else None,
            connection=Connection(serial=_optional(connection_data, "serial", str)),
            partition_table=Path(partition_table) if partition_table is not None else None,
            partition_table_offset=_optional(data, "partition_table_offset", int),
            usb_device=usb_devices,
            flash=FlashSettings(
                mode=_optional(flash_data, "mode", str),
                size=_optional(flash_data, "size", str),
                freq=_optional(flash_data, "freq", str),
            ),
        )

    def to_toml(self) -> str:
        """Serialize the configuration to TOML text."""
        data: dict[str, Any] = {}
        if self.baudrate is not None:
            data["baudrate"] = self.baudrate
        if self.bootloader is not None:
            data["bootloader"] = str(self.bootloader)
        data["connection"] = (
            {"serial": self.connection.serial} if self.connection.serial is not None else {}
        )
        if self.partition_table is not None:
            data["partition_table"] = str(self.partition_table)
        if self.partition_table_offset is not None:
            data["partition_table_offset"] = self.partition_table_offset
        data["usb_device"] = [
            {"vid": serialize_u16_to_hex(dev.vid), "pid": serialize_u16_to_hex(dev.pid)}
            for dev in self.usb_device
        ]
        data["flash"] = {
            key: value
            for key, value in (
                ("mode", self.flash.mode),
                ("size", self.flash.size),
                ("freq", self.flash.freq),
            )
            if value is not None
        }
        return tomli_w.dumps(data)

    def save_with(self, modify: Callable[[Config], None]) -> None:
        """Write a modified copy of this configuration to its save path."""
        if self.save_path is None:
            raise ConfigError("Configuration has no save path")
        updated = copy.deepcopy(self)
        modify(updated)
        serialized = updated.to_toml()
        try:
            self.save_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError("Failed to create config directory") from exc
        try:
            self.save_path.write_text(serialized, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write config to {self.save_path}") from exc


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a table")
    return value


def _optional(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"'{key}' must be of type {kind.__name__}")
    if kind is int and not 0 <= value <= 0xFFFFFFFF:
        raise ConfigError(f"'{key}' is out of range")
    return value


def config_path(directory: Path | str | None = None) -> Path:
    """Locate the configuration file: local, then parent directory, then user config dir."""
    base = Path(directory) if directory is not None else Path.cwd()
    local = base / CONFIG_FILE_NAME
    if local.exists():
        return local
    if base.parent != base:
        workspace = base.parent / CONFIG_FILE_NAME
        if workspace.exists():
            return workspace
    return Path(platformdirs.user_config_dir("espflash", "esp")) / CONFIG_FILE_NAME


def load_config(directory: Path | str | None = None) -> Config:
    """Load the configuration, falling back to defaults when no file can be read."""
    path = config_path(directory)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        config = Config()
    else:
        config = Config.from_toml(text)

    if config.partition_table is not None and config.partition_table.suffix not in (
        ".bin",
        ".csv",
    ):
        raise ConfigError(
            "Partition table path must have a '.bin' or '.csv' extension"
        )
    if config.bootloader is not None and config.bootloader.suffix != ".bin":
        raise ConfigError("Bootloader path must have a '.bin' extension")

    config.save_path = path
    return config