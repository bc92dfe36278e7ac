"""
Converts manual-page markup to roff.
Reads a file (or stdin) and writes the rendered page to stdout or to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from .config import ConfigError, build_config
from .exceptions import ConvertFileError, ParseError
from .filesystem import get_max_file_size, get_source_date_epoch, write_atomic
from .parser import convert_file, render

__all__ = ["cli"]

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(package_name="manmark")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write roff to this file instead of stdout",
)
@click.option("--source-date-epoch", type=int, help="Unix timestamp used for the page date")
@click.option("-v", "--verbose", is_flag=True, help="Log debug information to stderr")
@click.argument(
    "input_path",
    metavar="INPUT",
    required=False,
    default="-",
    type=click.Path(allow_dash=True, dir_okay=False),
)
def cli(
    input_path: str,
    output: Path | None = None,
    source_date_epoch: int | None = None,
    verbose: bool = False,
):
    """
    Render a manual page written in markup as roff.

    Args:
        input_path: Markup file to convert; ``-`` reads stdin.
        output: Destination file, replaced atomically on success.
        source_date_epoch: Timestamp fixing the ``.TH`` date.
        verbose: Whether to enable debug logging.

    Returns:
        None.

    Raises:
        click.BadParameter: If an option or configuration value is invalid.
        click.ClickException: If the input cannot be read, violates the
            markup grammar, or the output cannot be written.

    Examples:
        manmark ls.1.scd -o ls.1
        SOURCE_DATE_EPOCH=0 manmark < ls.1.scd
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    reading_stdin = input_path == "-"
    search_path = Path.cwd() if reading_stdin else Path(input_path).parent

    if source_date_epoch is not None and source_date_epoch < 0:
        raise click.BadParameter("must not be negative", param_hint="--source-date-epoch")

    try:
        env_epoch = get_source_date_epoch()
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        config = build_config(
            search_path,
            source_date_epoch=source_date_epoch if source_date_epoch is not None else env_epoch,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    logger.debug(f"Converting {input_path} with {config}")

    if reading_stdin:
        content = click.get_text_stream("stdin").read()
        if len(content.encode("UTF-8")) > max_file_size:
            raise click.ClickException(
                f"<stdin> exceeds the maximum allowed size of {max_file_size} bytes."
            )
        try:
            roff = render(content, timestamp=config.source_date_epoch)
        except ParseError as error:
            raise click.ClickException(
                f"<stdin>:{error.line}:{error.column}: {error.kind.description}"
            ) from error
    else:
        try:
            roff = convert_file(
                Path(input_path),
                timestamp=config.source_date_epoch,
                max_file_size=max_file_size,
            )
        except ConvertFileError as error:
            raise click.ClickException(str(error)) from error

    if output is None:
        click.echo(roff, nl=False)
        return

    try:
        write_atomic(output, roff)
    except IOError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
