from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from html_indent.config import (
    ConfigError,
    IndenterConfig,
    apply_overrides,
    build_config,
    config_from_options,
    load_config,
    normalize_config,
    validate_config,
)
from html_indent.exceptions import InvalidArgumentError


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".html-indent.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "\\t"
        inline_elements = ["b", "em"]
        block_elements = ["em"]
        max_file_size = 1
        """,
    )

    config = load_config(tmp_path)

    assert config == IndenterConfig(
        indentation_unit="\t",
        inline_elements=("b", "em"),
        block_elements=("em",),
        max_file_size=1,
    )


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [html-indent]
        indentation_unit = "  "
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.indentation_unit == "  "


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.html-indent]
        block_elements = ["a"]
        """,
    )

    config = load_config(tmp_path)

    assert config.block_elements == ("a",)


def test_pyproject_wins_over_dotfile_in_same_directory(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "  "
        """,
    )
    _write_dotfile(
        tmp_path,
        """
        [html-indent]
        indentation_unit = "\\t"
        """,
    )

    config = load_config(tmp_path)

    assert config.indentation_unit == "  "


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.black]
        line-length = 100
        """,
    )
    _write_dotfile(
        tmp_path,
        """
        [html-indent]
        indent_spaces = 3
        """,
    )

    config = load_config(tmp_path)

    assert config.indentation_unit == "   "


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "\\t"
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    config = load_config(nested)

    assert config.indentation_unit == "\t"


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "\\t"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.html-indent]
        """,
    )

    config = load_config(child)

    assert config.indentation_unit == IndenterConfig().indentation_unit


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    config = load_config(tmp_path)

    assert config == IndenterConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "  "
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()
    config = load_config(nested)

    assert config.indentation_unit == "  "


def test_load_config_errors_on_unknown_key(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "  "
        unexpected = true
        """,
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_errors_on_non_table(tmp_path: Path):
    _write_dotfile(tmp_path, 'html-indent = "tabs"\n')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_errors_on_string_element_list(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        block_elements = "b"
        """,
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_partial_config_merges_with_defaults(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        block_elements = ["a", "img"]
        """,
    )

    config = load_config(tmp_path)

    assert config.block_elements == ("a", "img")
    # Defaults preserved
    defaults = IndenterConfig()
    assert config.indentation_unit == defaults.indentation_unit
    assert config.inline_elements == defaults.inline_elements


def test_indent_spaces_sets_indentation_unit(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indent_spaces = 2
        """,
    )

    config = load_config(tmp_path)

    assert config.indent_spaces == 2
    assert config.indentation_unit == "  "


@pytest.mark.parametrize(
    "config",
    [
        IndenterConfig(indentation_unit=""),
        IndenterConfig(indentation_unit=4),  # type: ignore[arg-type]
        IndenterConfig(inline_elements=("b", "")),
        IndenterConfig(inline_elements=("b", 3)),  # type: ignore[arg-type]
        IndenterConfig(block_elements="b"),  # type: ignore[arg-type]
        IndenterConfig(max_file_size=0),
        IndenterConfig(max_file_size=-1),
    ],
)
def test_validate_config_rejects_invalid_values(config: IndenterConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


@pytest.mark.parametrize(
    "config",
    [
        IndenterConfig(max_file_size="big"),  # type: ignore[arg-type]
        IndenterConfig(max_file_size=True),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_non_numeric_limits(config: IndenterConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


@pytest.mark.parametrize("spaces", [0, -2, "2"])
def test_normalize_config_rejects_invalid_indent_spaces(spaces):
    with pytest.raises(ConfigError):
        normalize_config(IndenterConfig(indent_spaces=spaces))


def test_apply_overrides_ignores_none():
    config = IndenterConfig(indentation_unit="\t")

    assert apply_overrides(config, indentation_unit=None, indent_spaces=None) is config


def test_apply_overrides_unit_replaces_configured_spaces():
    config = normalize_config(IndenterConfig(indent_spaces=2))

    updated = normalize_config(apply_overrides(config, indentation_unit="\t"))

    assert updated.indentation_unit == "\t"
    assert updated.indent_spaces is None


def test_apply_overrides_rejects_unknown_fields():
    with pytest.raises(ConfigError):
        apply_overrides(IndenterConfig(), colour="red")


def test_build_config_applies_overrides(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.html-indent]
        indentation_unit = "\\t"
        max_file_size = 10
        """,
    )

    config = build_config(tmp_path, indent_spaces=3)

    assert config.indentation_unit == "   "
    assert config.max_file_size == 10


def test_config_from_options_maps_legacy_key():
    config = config_from_options({"indentation_character": "  "})

    assert config.indentation_unit == "  "


def test_config_from_options_overrides_indent_spaces():
    base = normalize_config(IndenterConfig(indent_spaces=2))

    config = config_from_options({"indentation_unit": "\t"}, base)

    assert config.indentation_unit == "\t"
    assert base.indentation_unit == "  "


def test_config_from_options_rejects_unknown_key():
    with pytest.raises(InvalidArgumentError, match="Unrecognized option"):
        config_from_options({"indent_spaces": 2})


def test_config_from_options_without_options_returns_base():
    base = IndenterConfig(indentation_unit="\t")

    assert config_from_options(None, base) == base
