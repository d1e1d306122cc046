# espcli

Building blocks for command-line tools that flash and monitor Espressif
(ESP32-family) devices. The package is a library. Each module supplies one
piece of such a tool and can be used and tested on its own.

## Modules

- **`espcli.config`**: the user configuration file `espflash.toml`.
  `config_path(directory)` looks for it in the given directory (by default
  the current one), then in that directory's parent, and otherwise returns
  its path in the per-user configuration directory. `load_config` reads it
  and falls back to defaults when no file can be read. It raises
  `ConfigError` when the partition table path does not end in `.bin` or
  `.csv`, or the bootloader path does not end in `.bin`.
  `Config` holds the baud rate, bootloader, partition table and its
  offset, the preferred serial port (`Connection`), known USB devices
  (`UsbDevice`) and `FlashSettings`. `Config.from_toml` and
  `Config.to_toml` convert it to and from TOML. `Config.save_with` writes
  a modified copy to the file it was loaded from. USB vendor and product
  IDs are stored as hex strings through `deserialize_hex_to_u16` and
  `serialize_u16_to_hex`.
- **`espcli.cli_args`**: argument parsing helpers.
  - `parse_u32` accepts decimal or `0x`/`0X`-prefixed hex, and ignores
    `_` separators.
  - `parse_write_target` returns a `WriteTarget` holding either an address
    or a partition label.
  - `parse_chip_rev` turns `major.minor` into `major * 100 + minor` and
    raises `ChipRevError` on bad input.
  - `format_image_size` describes an application's size, as a share of
    its partition when the partition size is known.
  - `pad_to_word` pads data with `0xFF` bytes to a multiple of four.
- **`espcli.line_endings`**: `normalized` rewrites every `\n` that does not
  follow `\r` as `\r\n`.
- **`espcli.printer`**: the monitor's output path.
  - `Utf8Merger` decodes output chunk by chunk and holds back UTF-8
    sequences that are split across reads. Invalid bytes become U+FFFD.
  - `ResolvingPrinter` writes the text to a writer line by line. After
    each complete line it prints the name and location of every
    `0x........` address found in it. It looks these up through a
    `SymbolResolver`, which is built from symbol, location and segment
    tables that you supply.
  - `find_addresses` and `resolve_addresses` are also available on their
    own.
  - `SerialParser` passes bytes through unchanged.
- **`espcli.framing`**: `FrameDelimiter.feed` splits a mixed serial stream
  into `Frame`s. Each frame is either defmt data enclosed in `FF 00 … 00`
  or raw text (`FrameKind`). Partial frames are kept until later input
  completes them.
- **`espcli.serial_ports`**: serial port handling.
  - `detect_usb_serial_ports` finds ports through pyserial. It returns USB
    ports only, or also PCI and unknown ports when `list_all_ports` is set.
  - `known_ports_filter` recognises configured devices and common
    development-board adapters.
  - `find_serial_port` finds a port by name.
  - `select_serial_port` chooses a port through a caller-supplied `ask`
    callback.
  - `format_port_listing` renders a port list as text.
  - Problems raise `SerialPortError`.
- **`espcli.partitions`**: partition handling.
  - `select_partitions_to_erase` picks `Partition`s by label or by data
    subtype. Each partition appears once in the result, ordered by offset.
    It raises `MissingPartitionTableError` or `MissingPartitionError`.
  - `format_partition_table` draws a table with rounded UTF-8 borders.
- **`espcli.processors`**: `ExternalProcessors` pipes monitor output
  through a comma-separated list of executables, run in the order given.
  Each executable receives the ELF path as its first argument when one is
  given. It raises `ProcessorLaunchError` if an executable cannot be
  started. It works as a context manager, and `close` terminates all the
  executables.
- **`espcli.keys`**: monitor input and settings.
  - `encode_key` turns a `KeyEvent` (a `KeyCode` plus an optional
    character and Control state) into the bytes to send to the device.
  - `log_format_from_symbol` chooses a `LogFormat`.
  - `monitor_baud` lowers the default 115200 baud to 74880 for 26 MHz
    ESP32-C2 parts.
- **`espcli.cargo_config`**: reads `.cargo/config` or `.cargo/config.toml`.
  The file without an extension wins. `load_cargo_config` prefers the
  package's file, then the workspace's, and otherwise returns defaults.
  `CargoConfig` exposes `target` and `has_build_std()`.

## Examples

```python
from espcli.cli_args import parse_u32, parse_chip_rev

assert parse_u32("0x1000") == 4096
assert parse_u32("12_34") == 1234
assert parse_chip_rev("1.2") == 102
```

```python
from espcli.printer import Utf8Merger

merger = Utf8Merger()
text = merger.process(b"Hello, \xf0\x9f\x99")  # "Hello, ": the partial character is held back
text += merger.process(b"\x88")                # the completed character follows
```

```python
from espcli.framing import FrameDelimiter

delimiter = FrameDelimiter()
frames = delimiter.feed(b"\xff\x00frame data\x00hello")
# [Frame(kind=FrameKind.DEFMT, data=b'frame data'), Frame(kind=FrameKind.RAW, data=b'hello')]
```

```python
from espcli.config import Config

config = Config.from_toml('[[usb_device]]\nvid = "10c4"\npid = "ea60"\n')
print(config.to_toml())
```

## What this package does not do

- It has no command-line program of its own.
- It does not talk to a chip: there is no flashing protocol, reset
  sequence or board-information query.
- It does not run `cargo build` or inspect Cargo workspaces beyond reading
  `.cargo/config`.
- It does not decode defmt frames. `FrameDelimiter` only separates them
  from plain text.
- It does not read ELF or DWARF data. `SymbolResolver` works from tables
  that you supply.
- It does not parse partition tables in binary or CSV form. `Partition`
  entries are supplied by the caller.

## Tests

The test suite uses pytest, available through the `test` extra.