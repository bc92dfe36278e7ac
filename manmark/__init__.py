"""
manmark: manual-page markup to roff converter.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    manmark ls.1.scd -o ls.1

Library Usage:
    from manmark import render

    roff = render("ls(1)\\n\\n# NAME\\n\\nls - list directory contents\\n", timestamp=0)
"""

from .exceptions import ConvertFileError, ErrorKind, ManmarkError, ParseError
from .models import Alignment, Preamble
from .parser import Parser, convert_file, generate, render

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "generate",
    "render",
    "convert_file",
    "Parser",
    # Data models
    "Alignment",
    "Preamble",
    # Exceptions
    "ErrorKind",
    "ManmarkError",
    "ParseError",
    "ConvertFileError",
    # Version
    "__version__",
]
