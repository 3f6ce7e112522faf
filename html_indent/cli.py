"""
Indents an HTML (or HTML-like) document.
Prints the result to stdout, or rewrites the file with `--in-place`.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from .config import ConfigError, build_config
from .exceptions import IntegrityError, InvalidArgumentError
from .filesystem import (
    check_size,
    open_markup,
    resolve_markup_path,
    size_limit,
    stat_markup_file,
    write_in_place,
)
from .indenter import Indenter
from .models import ElementType, Token

__all__ = ["cli"]

STDIN_PATH = "-"


def format_token(token: Token) -> str:
    """Render a token log entry on one line.

    Examples:
        format_token(Token("<p>", Rule.INCREASE, 0, "opening_tag", 0))
        # "     0  increase  opening_tag       '<p>'"
    """
    return f"{token.offset:>6}  {token.rule.value:<8}  {token.matcher:<16}  {token.text!r}"


def _read_markup(filepath: Path) -> str:
    try:
        with open_markup(filepath) as file:
            return file.read()
    except UnicodeDecodeError as error:
        raise click.ClickException(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except IOError as error:
        raise click.ClickException(str(error)) from error


def _read_stdin(max_size: int) -> str:
    # A character is at least one byte.
    markup = click.get_text_stream("stdin").read(max_size + 1)
    try:
        check_size(len(markup.encode("utf-8", errors="surrogatepass")), max_size, "<stdin>")
    except IOError as error:
        raise click.ClickException(str(error)) from error
    return markup


@click.command()
@click.version_option()
@click.option("--indentation-unit", help="String written once per nesting level")
@click.option("--indent-spaces", type=int, help="Indent with this many spaces per level")
@click.option("--inline", "inline_tags", multiple=True, help="Treat TAG as inline (repeatable)")
@click.option("--block", "block_tags", multiple=True, help="Treat TAG as block (repeatable)")
@click.option("-i", "--in-place", is_flag=True, help="Rewrite FILEPATH instead of printing")
@click.option("--show-tokens", is_flag=True, help="Print the token log to stderr")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.argument("filepath", type=click.Path(dir_okay=False, allow_dash=True))
def cli(
    filepath: str,
    indentation_unit: str | None = None,
    indent_spaces: int | None = None,
    inline_tags: tuple[str, ...] = (),
    block_tags: tuple[str, ...] = (),
    in_place: bool = False,
    show_tokens: bool = False,
    verbose: bool = False,
):
    """
    Entry point for indenting a markup document.

    Args:
        filepath: Path to the document, or ``-`` to read stdin.
        indentation_unit: Override for the indentation string.
        indent_spaces: Override for the indentation width in spaces.
        inline_tags: Element names to treat as inline.
        block_tags: Element names to treat as block.
        in_place: Rewrite the file instead of printing the result.
        show_tokens: Print the token log of the run to stderr.
        verbose: Emit debug logging on stderr.

    Returns:
        None.

    Raises:
        click.BadParameter: If the path or an override is invalid.
        click.ClickException: If the document cannot be read, written, or
            reproduced exactly.

    Examples:
        html-indent index.html --indent-spaces 2 --block a
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    base_dir = Path.cwd().resolve()
    from_stdin = filepath == STDIN_PATH
    if from_stdin and in_place:
        raise click.BadParameter("--in-place cannot be used when reading stdin")

    if from_stdin:
        search_dir = base_dir
    else:
        try:
            filepath = resolve_markup_path(filepath, base_dir)
        except ValueError as error:
            raise click.BadParameter(str(error)) from error
        search_dir = filepath.parent

    try:
        config = build_config(
            search_dir,
            indentation_unit=indentation_unit,
            indent_spaces=indent_spaces,
        )
        indenter = Indenter(config)
        for tag in inline_tags:
            indenter.reclassify_tag(tag, ElementType.INLINE)
        for tag in block_tags:
            indenter.reclassify_tag(tag, ElementType.BLOCK)
    except (ConfigError, InvalidArgumentError) as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_size = size_limit(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    initial_stat = None
    if from_stdin:
        markup = _read_stdin(max_size)
    else:
        try:
            initial_stat = stat_markup_file(filepath)
            check_size(initial_stat.st_size, max_size, filepath)
        except IOError as error:
            raise click.ClickException(str(error)) from error

        markup = _read_markup(filepath)

    try:
        indented = indenter.indent(markup)
    except IntegrityError as error:
        raise click.ClickException(f"{filepath}: {error}") from error
    finally:
        if show_tokens:
            for token in indenter.last_operation_log():
                click.echo(format_token(token), err=True)

    # Rewrites the file
    if in_place:
        try:
            write_in_place(
                filepath,
                f"{indented}\n",
                initial_stat,
                warn=lambda message: click.echo(message, err=True),
            )
        except IOError as error:
            raise click.ClickException(str(error)) from error
    # Prints the result
    else:
        click.echo(indented)


if __name__ == "__main__":
    cli()
