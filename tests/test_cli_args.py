import pytest

from espcli.cli_args import (
    ChipRevError,
    WriteTarget,
    format_image_size,
    pad_to_word,
    parse_chip_rev,
    parse_u32,
    parse_write_target,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0x1", 0x1),
        ("0X1234", 0x1234),
        ("0xaBcD", 0xABCD),
        ("1234", 1234),
        ("0", 0),
        ("12_34", 1234),
        ("0X12_34", 0x1234),
        ("0x8000", 0x8000),
        ("115_200", 115200),
    ],
)
def test_parse_u32(text, expected):
    assert parse_u32(text) == expected


@pytest.mark.parametrize("text", ["", "0x", "0xg", "-123", "12.34", "0x100000000"])
def test_parse_u32_errors(text):
    with pytest.raises(ValueError):
        parse_u32(text)


def test_parse_write_target_address():
    assert parse_write_target("0x10000") == WriteTarget(address=0x10000)


def test_parse_write_target_label():
    target = parse_write_target("nvs")
    assert target.partition == "nvs"
    assert target.address is None


def test_write_target_requires_one_field():
    with pytest.raises(ValueError):
        WriteTarget()


@pytest.mark.parametrize("text, expected", [("0.0", 0), ("1.3", 103), ("3.12", 312)])
def test_parse_chip_rev(text, expected):
    assert parse_chip_rev(text) == expected


@pytest.mark.parametrize("text", ["1", "1.2.3", "a.b", "1.", ".1", "-1.0"])
def test_parse_chip_rev_errors(text):
    with pytest.raises(ChipRevError) as info:
        parse_chip_rev(text)
    assert info.value.chip_rev == text


def test_format_image_size_without_partition():
    assert format_image_size(1234, None) == "App size:          1,234 bytes"


def test_format_image_size_with_partition():
    assert format_image_size(512, 1024) == "App/part. size:    512/1,024 bytes, 50.00%"


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", b""),
        (b"abcd", b"abcd"),
        (b"a", b"a\xff\xff\xff"),
        (b"abcde", b"abcde\xff\xff\xff"),
        (b"abc", b"abc\xff"),
    ],
)
def test_pad_to_word(data, expected):
    assert pad_to_word(data) == expected