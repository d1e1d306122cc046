from pathlib import Path
from types import SimpleNamespace

import pytest

from espcli.config import (
    Config,
    ConfigError,
    Connection,
    FlashSettings,
    UsbDevice,
    config_path,
    deserialize_hex_to_u16,
    load_config,
    serialize_u16_to_hex,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("aaaa", 0xAAAA),
        ("1234", 0x1234),
        ("a", 0x0A),
        ("10", 0x10),
        ("100", 0x0100),
        ("A1B2", 0xA1B2),
        ("1", 0x1),
        ("ff", 0xFF),
        ("b1a", 0xB1A),
        ("abc1", 0xABC1),
        ("0x303a", 0x303A),
    ],
)
def test_deserialize_hex_to_u16(text, expected):
    assert deserialize_hex_to_u16(text) == expected


@pytest.mark.parametrize("text", ["gg", "10gg", "xyz", "", "10000"])
def test_deserialize_hex_to_u16_invalid(text):
    with pytest.raises(ConfigError):
        deserialize_hex_to_u16(text)


def test_serialize_u16_to_hex_pads():
    assert serialize_u16_to_hex(0xA) == "000a"
    assert serialize_u16_to_hex(0xABC1) == "abc1"


def test_usb_device_from_toml_hex():
    config = Config.from_toml('[[usb_device]]\nvid = "A1B2"\npid = "a"\n')
    assert config.usb_device == [UsbDevice(vid=0xA1B2, pid=0x0A)]


def test_usb_device_invalid_hex_in_toml():
    with pytest.raises(ConfigError):
        Config.from_toml('[[usb_device]]\nvid = "gg"\npid = "1"\n')


def test_usb_device_matches():
    dev = UsbDevice(vid=0x10C4, pid=0xEA60)
    assert dev.matches(SimpleNamespace(vid=0x10C4, pid=0xEA60))
    assert not dev.matches(SimpleNamespace(vid=0x10C4, pid=0x0001))


def test_from_toml_defaults():
    config = Config.from_toml("")
    assert config == Config()
    assert config.connection == Connection(serial=None)
    assert config.flash == FlashSettings()


def test_from_toml_full():
    text = (
        "baudrate = 460800\n"
        'bootloader = "boot.bin"\n'
        'partition_table = "parts.csv"\n'
        "partition_table_offset = 32768\n"
        "[connection]\n"
        'serial = "/dev/ttyUSB0"\n'
        "[flash]\n"
        'mode = "dio"\n'
        'size = "4MB"\n'
    )
    config = Config.from_toml(text)
    assert config.baudrate == 460800
    assert config.bootloader == Path("boot.bin")
    assert config.partition_table == Path("parts.csv")
    assert config.partition_table_offset == 0x8000
    assert config.connection.serial == "/dev/ttyUSB0"
    assert config.flash == FlashSettings(mode="dio", size="4MB", freq=None)


def test_from_toml_bad_syntax():
    with pytest.raises(ConfigError):
        Config.from_toml("baudrate = = 1")


def test_from_toml_bad_type():
    with pytest.raises(ConfigError):
        Config.from_toml('baudrate = "fast"')


def test_round_trip():
    config = Config(
        baudrate=921600,
        connection=Connection(serial="COM4"),
        usb_device=[UsbDevice(vid=0x303A, pid=0x1001), UsbDevice(vid=0xA, pid=0xB)],
        flash=FlashSettings(freq="80MHz"),
    )
    text = config.to_toml()
    assert 'vid = "000a"' in text
    assert Config.from_toml(text) == config


def test_load_local_config(tmp_path):
    (tmp_path / "espflash.toml").write_text("baudrate = 115200\n")
    config = load_config(tmp_path)
    assert config.baudrate == 115200
    assert config.save_path == tmp_path / "espflash.toml"


def test_config_path_prefers_parent(tmp_path):
    child = tmp_path / "child"
    child.mkdir()
    (tmp_path / "espflash.toml").write_text("")
    assert config_path(child) == tmp_path / "espflash.toml"
    (child / "espflash.toml").write_text("")
    assert config_path(child) == child / "espflash.toml"


def test_invalid_partition_table_extension(tmp_path):
    (tmp_path / "espflash.toml").write_text('partition_table = "table.txt"\n')
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_bootloader_extension(tmp_path):
    (tmp_path / "espflash.toml").write_text('bootloader = "boot.elf"\n')
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_save_with_writes_modified_copy(tmp_path):
    (tmp_path / "espflash.toml").write_text("baudrate = 115200\n")
    config = load_config(tmp_path)
    config.save_with(lambda c: c.usb_device.append(UsbDevice(vid=0x1A86, pid=0x7523)))
    assert config.usb_device == []
    saved = load_config(tmp_path)
    assert saved.usb_device == [UsbDevice(vid=0x1A86, pid=0x7523)]
    assert saved.baudrate == 115200


def test_save_without_path_fails():
    with pytest.raises(ConfigError):
        Config().save_with(lambda c: None)