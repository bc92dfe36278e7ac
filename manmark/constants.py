"""Constants used across the manmark package."""

from __future__ import annotations

import string

from .config import ManmarkConfig

DEFAULT_CONFIG = ManmarkConfig()
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size

# Character classes (ASCII only; anything else is treated as punctuation)
ALNUM = frozenset(string.ascii_letters + string.digits)
NAME_CHARACTERS = ALNUM | {"_", "-", "."}
PREAMBLE_WHITESPACE = frozenset(" \t")

# List item headers
BULLET_HEADER = ".IP \\(bu 4"
NUMBERED_HEADER = ".IP {n}. 4"

# Table cells are wrapped in T{ ... T} text blocks
CELL_OPEN = "T{"
CELL_CLOSE = "T}"
CELL_SEPARATOR = f"\n{CELL_CLOSE}\t{CELL_OPEN}\n"

# Table style markers mapped to their border prefix
TABLE_STYLES = {
    "[": "allbox;",
    "]": "box;",
    "|": "",
}
