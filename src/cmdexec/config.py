"""Configuration models and loaders for cmdexec."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cmdexec.errors import ConfigError
from cmdexec.execution.base import CommandConfig

CONFIG_FILE_NAMES: tuple[str, ...] = ("cmdexec.yaml", "cmdexec.yml", "cmdexec.toml", "pyproject.toml")


@dataclass(frozen=True)
class CommandDefinition:
    """A named command as written in a configuration file.

    Attributes:
        name: Key under which the command is defined.
        command: Executable name or path.
        args: Default arguments, placed before any extra arguments.
        directory: Working directory, resolved against the config file.
        foreground: Block until the process exits.
        timeout_s: Optional wall-clock limit in seconds.
        out_placeholder: Non-empty to capture stdout.
        err_placeholder: Non-empty to capture stderr.
    """

    name: str
    command: str
    args: list[str] = field(default_factory=list)
    directory: Path | None = None
    foreground: bool = True
    timeout_s: float | None = None
    out_placeholder: str = ""
    err_placeholder: str = ""

    def to_command_config(self) -> CommandConfig:
        return CommandConfig(
            command=self.command,
            directory=self.directory,
            foreground=self.foreground,
            timeout_s=self.timeout_s,
            out_placeholder=self.out_placeholder,
            err_placeholder=self.err_placeholder,
        )


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration: a set of named commands."""

    commands: dict[str, CommandDefinition] = field(default_factory=dict)

    def get_command(self, name: str) -> CommandDefinition:
        try:
            return self.commands[name]
        except KeyError as exc:
            known = ", ".join(sorted(self.commands)) or "none"
            raise ConfigError(f"Unknown command {name!r} (known: {known}).") from exc


def load_config(path: Path | None = None) -> AppConfig:
    """Load command definitions from disk.

    Args:
        path: Optional path to a configuration file or a directory to search.

    Returns:
        Parsed AppConfig, empty when no config file exists.
    """

    config_path = _resolve_config_path(path)
    if config_path is None:
        return AppConfig()

    if config_path.suffix in {".yaml", ".yml", ".json"}:
        raw_data = _load_yaml(config_path)
    elif config_path.suffix == ".toml":
        raw_data = _load_toml(config_path)
    else:
        raise ConfigError(f"Unsupported config file type: {config_path}")

    return _parse_app_config(raw_data, base_path=config_path.parent)


def _resolve_config_path(path: Path | None) -> Path | None:
    if path is None:
        candidate_paths = [Path(name) for name in CONFIG_FILE_NAMES]
    elif path.is_dir():
        candidate_paths = [path / name for name in CONFIG_FILE_NAMES]
    else:
        candidate_paths = [path]

    for candidate in candidate_paths:
        if candidate.exists():
            return candidate
    return None


def _load_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        try:
            data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    if path.name == "pyproject.toml":
        tool_config = data.get("tool", {}).get("cmdexec", {})
        if not isinstance(tool_config, dict):
            raise ConfigError("tool.cmdexec must be a mapping.")
        return tool_config
    return data


def _load_yaml(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if data is None:
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML configuration must be a mapping.")
    return data


def _parse_app_config(raw_data: dict[str, Any], base_path: Path) -> AppConfig:
    raw_commands = raw_data.get("commands", {})
    if not isinstance(raw_commands, dict):
        raise ConfigError("commands must be a mapping of name to command definition.")
    commands = {
        str(name): _parse_command(str(name), raw, base_path)
        for name, raw in raw_commands.items()
    }
    return AppConfig(commands=commands)


def _parse_command(name: str, raw: Any, base_path: Path) -> CommandDefinition:
    if not isinstance(raw, dict):
        raise ConfigError(f"Command {name!r} must be a mapping.")
    command = str(raw.get("command") or "").strip()
    if not command:
        raise ConfigError(f"Command {name!r} requires 'command'.")

    args = raw.get("args", [])
    if not isinstance(args, list):
        raise ConfigError(f"Command {name!r}: args must be a list.")

    directory = _optional_str(raw.get("directory"))
    resolved_directory: Path | None = None
    if directory is not None:
        resolved_directory = Path(directory)
        if not resolved_directory.is_absolute():
            resolved_directory = (base_path / resolved_directory).resolve()

    return CommandDefinition(
        name=name,
        command=command,
        args=[str(item) for item in args],
        directory=resolved_directory,
        foreground=bool(raw.get("foreground", True)),
        timeout_s=_optional_float(raw.get("timeout_s"), name),
        out_placeholder=str(raw.get("out_placeholder") or ""),
        err_placeholder=str(raw.get("err_placeholder") or ""),
    )


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: Any, name: str) -> float | None:
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Command {name!r}: timeout_s must be a number.") from exc
    if timeout < 0:
        raise ConfigError(f"Command {name!r}: timeout_s must not be negative.")
    return timeout
