"""Reading and rewriting markup files safely.

The CLI only touches regular files with a markup extension below the
working directory, never through a symlink, and refuses to rewrite a file
that changed while it was being indented.
"""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_MAX_FILE_SIZE, HTML_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "HTML_INDENT_MAX_FILE_SIZE"


def size_limit(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the input size limit in bytes.

    `HTML_INDENT_MAX_FILE_SIZE` takes precedence over `default`, which
    normally comes from the ``max_file_size`` setting.

    Raises:
        ValueError: If the variable is set to anything but a positive integer.

    Examples:
        size_limit(default=config.max_file_size)
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError:
        limit = 0
    if limit <= 0:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive number of bytes, got {raw_value!r}"
        )
    return limit


def find_symlink(path: Path) -> Path | None:
    """Return the first component of `path` that is a symlink, if any."""
    for component in (path, *path.parents):
        try:
            if component.is_symlink():
                return component
        except OSError:
            continue
    return None


def resolve_markup_path(raw_path: str, base_dir: Path) -> Path:
    """Turn a user-supplied path into the absolute path of a markup file.

    Args:
        raw_path: Path given on the command line; ``~`` is expanded.
        base_dir: Directory the file must live under.

    Returns:
        Path: Resolved path of the file.

    Raises:
        ValueError: If a path component is a symlink, the file is missing or
            not a regular file, it lies outside `base_dir`, or its extension
            is not one of `HTML_EXTENSIONS`.

    Examples:
        resolve_markup_path("templates/index.html", Path.cwd())
    """
    path = Path(raw_path).expanduser()

    link = find_symlink(path)
    if link is not None:
        raise ValueError(f"Symlinks are not followed: {link}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"No such markup file: {path}") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file")

    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}")

    suffix = resolved.suffix.lower()
    if suffix not in HTML_EXTENSIONS:
        raise ValueError(
            f"{resolved} is not a markup file (expected one of: {', '.join(HTML_EXTENSIONS)})"
        )

    return resolved


def stat_markup_file(filepath: Path) -> os.stat_result:
    """Stat `filepath` without following symlinks.

    Raises:
        IOError: If the file cannot be stat'ed or is not a regular file.
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error

    if stat.S_ISLNK(stat_result.st_mode):
        raise IOError(f"Symlinks are not followed: {filepath}")
    if not stat.S_ISREG(stat_result.st_mode):
        raise IOError(f"{filepath} is not a regular file")

    return stat_result


def check_size(size: int, limit: int, source: object):
    """Reject input of `size` bytes when it is larger than `limit`.

    Raises:
        IOError: If `size` exceeds `limit`.

    Examples:
        check_size(stat_result.st_size, size_limit(), filepath)
    """
    if size > limit:
        raise IOError(f"{source} is {size} bytes, over the {limit} byte limit")


def _fingerprint(stat_result: os.stat_result) -> tuple:
    return (
        getattr(stat_result, "st_ino", None),
        getattr(stat_result, "st_dev", None),
        stat_result.st_size,
        stat_result.st_mtime_ns,
    )


def ensure_unchanged(before: os.stat_result, after: os.stat_result, filepath: Path):
    """Raise `IOError` when `filepath` was replaced or modified in between."""
    if _fingerprint(before) != _fingerprint(after):
        raise IOError(f"{filepath} changed while it was being indented; not overwriting it")


def open_markup(filepath: Path) -> TextIO:
    """Open a markup file as UTF-8 text.

    Decoding errors surface when the handle is read, as `UnicodeDecodeError`.

    Raises:
        IOError: If the file cannot be opened.

    Examples:
        with open_markup(Path("index.html")) as handle:
            markup = handle.read()
    """
    try:
        return open(filepath, "r", encoding="UTF-8")
    except OSError as error:
        raise IOError(f"Cannot open {filepath}: {error}") from error


def write_in_place(
    filepath: Path,
    content: str,
    expected_stat: os.stat_result,
    warn: Callable[[str], None] | None = None,
):
    """Replace the content of `filepath` with `content` in one step.

    The new content is written to a sibling temporary file that takes over
    the original mode (and owner, where allowed) before it is renamed over
    the original.

    Args:
        filepath: Markup file to rewrite.
        content: Indented document.
        expected_stat: Stat taken before the file was read.
        warn: Called with a message when the owner cannot be kept.

    Raises:
        IOError: If the file changed since `expected_stat` was taken or the
            replacement fails.

    Examples:
        write_in_place(Path("index.html"), indented, stat_before)
    """
    ensure_unchanged(expected_stat, stat_markup_file(filepath), filepath)

    mode = stat.S_IMODE(expected_stat.st_mode)
    owner = (getattr(expected_stat, "st_uid", None), getattr(expected_stat, "st_gid", None))

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="UTF-8",
            dir=filepath.parent,
            prefix=f".{filepath.name}.",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())

        os.chmod(temp_path, mode)
        if None not in owner and hasattr(os, "chown"):
            try:
                os.chown(temp_path, *owner)
            except PermissionError:
                if warn is not None:
                    warn(
                        f"Warning: Could not preserve file ownership for {filepath.name} "
                        "(requires elevated privileges)"
                    )

        os.replace(temp_path, filepath)
        temp_path = None
    except OSError as error:
        raise IOError(f"Could not write {filepath}: {error}") from error
    finally:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
