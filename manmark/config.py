"""Configuration loading and management."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

logger = logging.getLogger(__name__)


@dataclass
class ManmarkConfig:
    """Configuration for converting markup files.

    Attributes:
        max_file_size: Maximum input size in bytes that will be converted.
        source_date_epoch: Unix timestamp used for the ``.TH`` date. When
            None, the current day is used.

    Examples:
        ManmarkConfig(max_file_size=1024, source_date_epoch=0)
    """

    max_file_size: int = 10 * 1024 * 1024
    source_date_epoch: int | None = None


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_file_size` must be a positive integer")
    """


def load_config(search_path: Path) -> ManmarkConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.manmark]`` table from `pyproject.toml` and the ``[manmark]`` or
    ``[tool.manmark]`` table from `.manmark.toml` when present. Returns default
    values when no configuration is found. TOML files that cannot be read or
    decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        ManmarkConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If a matching table is not a mapping or contains unsupported keys.

    Examples:
        load_config(Path("doc"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "manmark")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".manmark.toml",
            table_paths=[("manmark",), ("tool", "manmark")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return ManmarkConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> ManmarkConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        logger.debug(f"Skipping unreadable config file {config_file}")
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        logger.debug(f"Using [{'.'.join(table_path)}] from {config_file}")
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> ManmarkConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return ManmarkConfig()

    try:
        return ManmarkConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: ManmarkConfig) -> None:
    """Validate a `ManmarkConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If the size limit is not a positive integer or the date
            epoch is not a non-negative integer.

    Examples:
        validate_config(ManmarkConfig(source_date_epoch=0))
    """
    _ensure_integers({"max_file_size": config.max_file_size})
    if config.max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")

    if config.source_date_epoch is not None:
        _ensure_integers({"source_date_epoch": config.source_date_epoch})
        if config.source_date_epoch < 0:
            raise ConfigError("`source_date_epoch` must not be negative")


def apply_overrides(config: ManmarkConfig, **overrides: object) -> ManmarkConfig:
    """Apply override values to a `ManmarkConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        ManmarkConfig: New configuration with the overrides applied, or the
        original configuration when nothing changes.

    Raises:
        TypeError: If an override name is not defined on `ManmarkConfig`.

    Examples:
        updated = apply_overrides(config, source_date_epoch=0)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> ManmarkConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        ManmarkConfig: Validated configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), source_date_epoch=0)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
