from __future__ import annotations

import os
import stat
import time
import uuid
from pathlib import Path
from unittest import mock

import pytest

import html_indent.cli as cli_module
from html_indent.exceptions import IntegrityError
from html_indent.indenter import indent_html


def _write(tmp_path: Path, name: str, content: str) -> Path:
    target = tmp_path / name
    target.write_text(content, encoding="utf-8")
    return target


def _error_text(result) -> str:
    """Return combined stdout and exception text for assertions."""
    return f"{result.output}{result.exception}"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlink_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = _write(tmp_path, "source.html", "<p>x</p>")
    link = tmp_path / "alias.html"
    try:
        os.symlink(source, link, target_is_directory=False)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli_module.cli, ["--in-place", str(link)])
    assert result.exit_code != 0
    assert "Symlinks" in result.output
    assert source.read_text(encoding="utf-8") == "<p>x</p>"


def test_path_traversal_prevented(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    outside = tmp_path.parent / f"outside-{uuid.uuid4().hex}.html"
    outside.write_text("<p>x</p>", encoding="utf-8")

    try:
        result = cli_runner.invoke(cli_module.cli, [str(outside)])
        assert result.exit_code != 0
        assert "outside of the working directory" in result.output
    finally:
        outside.unlink(missing_ok=True)


def test_file_size_limit_enforced(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HTML_INDENT_MAX_FILE_SIZE", "10")
    target = _write(tmp_path, "large.html", "X" * 20)

    result = cli_runner.invoke(cli_module.cli, [str(target)])
    assert result.exit_code != 0
    error_text = _error_text(result)
    assert "over the 10 byte limit" in error_text


def test_file_size_within_limit_allowed(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HTML_INDENT_MAX_FILE_SIZE", "8")
    target = _write(tmp_path, "small.html", "<p>x</p>")

    result = cli_runner.invoke(cli_module.cli, [str(target)])
    assert result.exit_code == 0
    assert result.output == "<p>x</p>\n"


def test_permissions_preserved_on_update(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "permissions.html", "<div><p>x</p></div>")
    desired_mode = 0o640
    os.chmod(target, desired_mode)

    result = cli_runner.invoke(cli_module.cli, ["--in-place", str(target)])
    assert result.exit_code == 0
    assert stat.S_IMODE(target.stat().st_mode) == desired_mode


@pytest.mark.skipif(not hasattr(os, "chown"), reason="Requires os.chown support")
def test_ownership_fails_gracefully_when_unprivileged(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "ownership.html", "<div><p>x</p></div>")

    def mock_chown(*args, **kwargs):
        raise PermissionError("Operation not permitted")

    with mock.patch("os.chown", side_effect=mock_chown):
        result = cli_runner.invoke(cli_module.cli, ["--in-place", str(target)])

    # Should succeed despite chown failure
    assert result.exit_code == 0
    assert "Warning: Could not preserve file ownership" in result.output
    assert "requires elevated privileges" in result.output
    assert target.read_text(encoding="utf-8") == "<div>\n    <p>x</p>\n</div>\n"


def test_invalid_utf8_handling(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "broken.html"
    target.write_bytes(b"\xff\xfe<p>x</p>\n")

    result = cli_runner.invoke(cli_module.cli, [str(target)])
    assert result.exit_code != 0
    assert "Invalid UTF-8" in _error_text(result)


def test_race_condition_detection(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "race.html", "<div><p>x</p></div>")

    original_read = cli_module._read_markup

    def _read_and_mutate(path: Path):
        markup = original_read(path)
        path.write_text(markup + "<p>mutated</p>\n", encoding="utf-8")
        return markup

    monkeypatch.setattr(cli_module, "_read_markup", _read_and_mutate)
    result = cli_runner.invoke(cli_module.cli, ["--in-place", str(target)])

    assert result.exit_code != 0
    assert "changed while it was being indented" in _error_text(result)
    assert "mutated" in target.read_text(encoding="utf-8")


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="mkfifo not available")
def test_fifo_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    fifo = tmp_path / "pipe.html"
    try:
        os.mkfifo(fifo)
    except OSError:  # pragma: no cover
        pytest.skip("Unable to create FIFO")

    result = cli_runner.invoke(cli_module.cli, [str(fifo)])
    assert result.exit_code != 0
    assert "is not a regular file" in result.output


@pytest.mark.parametrize(
    "markup",
    [
        "<b " * 60000,
        "<a " * 60000 + ">",
        "<script " * 30000 + "</script>",
        "<script>" * 30000,
        "<" + "a" * 100000 + ">" + "x" * 100000,
        "".join(f"<b>{number}</b>" for number in range(30000)),
        "ᐃ" + "1" * 100000 + "<b>x</b>",
        "ᐃ1" * 50000 + "<i>y</i>",
    ],
    ids=[
        "unclosed-tags",
        "one-long-tag",
        "unclosed-script-tags",
        "script-openers",
        "long-name-and-text",
        "many-inline-runs",
        "long-marker-digits",
        "many-markers",
    ],
)
def test_large_hostile_input_is_handled_in_linear_time(markup):
    started = time.perf_counter()
    try:
        indent_html(markup)
    except IntegrityError:
        pass
    elapsed = time.perf_counter() - started

    assert elapsed < 5.0
