"""Filesystem helpers for manmark."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_MAX_FILE_SIZE

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_ENV_VAR = "MANMARK_MAX_FILE_SIZE"
SOURCE_DATE_EPOCH_ENV_VAR = "SOURCE_DATE_EPOCH"
NEW_FILE_PERMISSIONS = 0o644


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed input size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MANMARK_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if max_size <= 0:
        error_message = f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}."
        raise ValueError(error_message)

    return max_size


def get_source_date_epoch(default: int | None = None) -> int | None:
    """Resolve the timestamp used for the document date.

    Honors the reproducible-builds ``SOURCE_DATE_EPOCH`` variable. An empty
    value counts as unset.

    Args:
        default: Fallback timestamp when the environment variable is unset.

    Returns:
        int | None: Unix timestamp, or None to use the current day.

    Raises:
        ValueError: If the environment value is not a non-negative integer.

    Examples:
        os.environ["SOURCE_DATE_EPOCH"] = "0"
        get_source_date_epoch()  # 0
    """
    env_value = os.environ.get(SOURCE_DATE_EPOCH_ENV_VAR)
    if not env_value:
        return default

    try:
        timestamp = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {SOURCE_DATE_EPOCH_ENV_VAR}: {env_value} "
            "(expected non-negative integer)"
        )
        raise ValueError(error_message) from error

    if timestamp < 0:
        error_message = f"{SOURCE_DATE_EPOCH_ENV_VAR} must not be negative, got {timestamp}."
        raise ValueError(error_message)

    return timestamp


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a file while disallowing symlinks.

    Args:
        filepath: Path to the file.

    Returns:
        os.stat_result: File metadata gathered without following symlinks.

    Raises:
        IOError: If the path is inaccessible, a symlink, or not a regular file.

    Examples:
        stat_result = collect_file_stat(Path("ls.1.scd"))
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if stat.S_ISLNK(stat_result.st_mode):
        error_message = f"Symlinks are not supported: {filepath}."
        raise IOError(error_message)

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against files that exceed the configured maximum size.

    Raises:
        IOError: If `stat_result.st_size` exceeds `max_size`.

    Examples:
        enforce_file_size(os.stat("ls.1.scd"), 102400, Path("ls.1.scd"))
    """
    if stat_result.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise IOError(error_message)


def safe_read(filepath: Path) -> TextIO:
    """Open a file for reading with consistent error handling.

    Args:
        filepath: Path to the file.

    Returns:
        TextIO: File handle opened for reading in UTF-8.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.

    Examples:
        with safe_read(Path("ls.1.scd")) as handle:
            preamble = handle.readline()
    """
    try:
        return open(filepath, "r", encoding="UTF-8")
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def write_atomic(filepath: Path, text: str):
    """Write `text` to `filepath` by renaming a fully written temporary file.

    The destination is never left half-written: either the old contents or
    the new contents are visible. Permissions of an existing destination
    are kept.

    Args:
        filepath: Destination path.
        text: Contents to write.

    Raises:
        IOError: If the destination is a symlink or the file cannot be written.

    Examples:
        write_atomic(Path("ls.1"), roff)
    """
    if filepath.is_symlink():
        error_message = f"Symlinks are not supported: {filepath}."
        raise IOError(error_message)

    permissions = NEW_FILE_PERMISSIONS
    if filepath.exists():
        permissions = stat.S_IMODE(collect_file_stat(filepath).st_mode)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, permissions)

        os.replace(temp_path, filepath)
        logger.debug(f"Wrote {len(text)} characters to {filepath}")
    except OSError as error:
        error_message = f"Error writing {filepath}: {error}"
        raise IOError(error_message) from error
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
