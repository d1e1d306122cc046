"""Reading of the Cargo configuration (``.cargo/config[.toml]``)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class CargoConfigError(ValueError):
    """Raised when a Cargo configuration file cannot be parsed."""


@dataclass
class CargoConfig:
    """The parts of the Cargo configuration that matter for building."""

    build_std: list[str] = field(default_factory=list)
    target: str | None = None

    @classmethod
    def from_toml(cls, text: str) -> CargoConfig:
        """Parse a Cargo configuration from TOML text."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise CargoConfigError(f"Failed to parse toml: {exc}") from exc

        unstable = _table(data, "unstable")
        build = _table(data, "build")

        build_std = unstable.get("build-std", [])
        if not isinstance(build_std, list) or not all(isinstance(s, str) for s in build_std):
            raise CargoConfigError("Failed to parse toml: 'build-std' must be a list of strings")

        target = build.get("target")
        if target is not None and not isinstance(target, str):
            raise CargoConfigError("Failed to parse toml: 'build.target' must be a string")

        return cls(build_std=list(build_std), target=target)

    def has_build_std(self) -> bool:
        """Whether the unstable ``build-std`` feature is configured."""
        return bool(self.build_std)


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise CargoConfigError(f"Failed to parse toml: '{key}' must be a table")
    return value


def cargo_config_path(directory: Path | str) -> Path | None:
    """Return the Cargo configuration file in ``directory``, if any.

    The file without an extension takes precedence over ``config.toml``.
    """
    base = Path(directory)
    for name in ("config", "config.toml"):
        candidate = base / ".cargo" / name
        if candidate.exists():
            return candidate
    return None


def _load(directory: Path | str) -> CargoConfig | None:
    path = cargo_config_path(directory)
    if path is None:
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        return CargoConfig.from_toml(text)
    except CargoConfigError as exc:
        raise CargoConfigError(f"Failed to parse {path}: {exc}") from exc


def load_cargo_config(workspace_root: Path | str, package_root: Path | str) -> CargoConfig:
    """Load the package's configuration, else the workspace's, else the defaults."""
    for directory in (package_root, workspace_root):
        try:
            config = _load(directory)
        except CargoConfigError:
            continue
        if config is not None:
            return config
    return CargoConfig()