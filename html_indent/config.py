"""Configuration loading and management."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_INDENTATION_UNIT, DEFAULT_INLINE_ELEMENTS, DEFAULT_MAX_FILE_SIZE
from .exceptions import InvalidArgumentError


@dataclass
class IndenterConfig:
    """Configuration for indenting markup documents.

    Attributes:
        indentation_unit: String written once per nesting level.
        indent_spaces: Number of spaces per level; replaces
            `indentation_unit` when set.
        inline_elements: Element names whose text-only runs stay inline.
        block_elements: Element names removed from `inline_elements`.
        max_file_size: Maximum file size in bytes the CLI will process.

    Examples:
        IndenterConfig(indent_spaces=2, block_elements=("a",))
    """

    indentation_unit: str = DEFAULT_INDENTATION_UNIT
    indent_spaces: int | None = None
    inline_elements: tuple[str, ...] = DEFAULT_INLINE_ELEMENTS
    block_elements: tuple[str, ...] = ()

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(InvalidArgumentError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`indentation_unit` must not be empty")
    """


# Keys accepted by `configure`; the legacy name maps onto the same field.
OPTION_ALIASES = {
    "indentation_unit": "indentation_unit",
    "indentation_character": "indentation_unit",
}


def config_from_options(options: Mapping[str, object] | None, base: IndenterConfig | None = None):
    """Build a validated config from engine options.

    Args:
        options: Option mapping; only ``indentation_unit`` (or its legacy
            name ``indentation_character``) is recognized.
        base: Configuration the options are applied to. Defaults to a new
            `IndenterConfig`.

    Returns:
        IndenterConfig: New configuration; `base` is never modified.

    Raises:
        InvalidArgumentError: If an option key is unrecognized or a value is
            invalid.

    Examples:
        config_from_options({"indentation_unit": "\\t"})
    """
    base = base or IndenterConfig()
    changes: dict[str, object] = {}
    for name, value in (options or {}).items():
        field_name = OPTION_ALIASES.get(name)
        if field_name is None:
            raise InvalidArgumentError(f"Unrecognized option: {name!r}")
        changes[field_name] = value

    config = replace(base, indent_spaces=None, **changes) if changes else base
    config = normalize_config(config)
    validate_config(config)
    return config


def load_config(search_path: Path) -> IndenterConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.html-indent]`` table from `pyproject.toml` and the
    ``[html-indent]`` or ``[tool.html-indent]`` table from `.html-indent.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        IndenterConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("templates"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "html-indent")]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / ".html-indent.toml",
            table_paths=[("html-indent",), ("tool", "html-indent")],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return IndenterConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> IndenterConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
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
) -> IndenterConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return IndenterConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return IndenterConfig()

    try:
        return IndenterConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_config(config: IndenterConfig) -> IndenterConfig:
    indentation_unit = config.indentation_unit
    if config.indent_spaces is not None:
        _ensure_integers({"indent_spaces": config.indent_spaces})
        if config.indent_spaces <= 0:
            raise ConfigError("`indent_spaces` must be a positive integer")
        indentation_unit = " " * config.indent_spaces

    return replace(
        config,
        indentation_unit=indentation_unit,
        inline_elements=_as_names("inline_elements", config.inline_elements),
        block_elements=_as_names("block_elements", config.block_elements),
    )


def _as_names(key: str, names: object) -> tuple[str, ...]:
    if isinstance(names, str):
        raise ConfigError(f"`{key}` must be a list of element names")
    try:
        return tuple(names)
    except TypeError as error:
        raise ConfigError(f"`{key}` must be a list of element names") from error


def validate_config(config: IndenterConfig) -> None:
    """Validate an `IndenterConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the indentation unit is empty or not a string, an
            element name is empty or not a string, or the file size limit is
            not a positive integer.

    Examples:
        validate_config(IndenterConfig(indentation_unit="\\t"))
    """
    if not isinstance(config.indentation_unit, str) or not config.indentation_unit:
        raise ConfigError("`indentation_unit` must be a non-empty string")

    for key in ("inline_elements", "block_elements"):
        for name in _as_names(key, getattr(config, key)):
            if not isinstance(name, str) or not name:
                raise ConfigError(f"`{key}` entries must be non-empty strings")

    _ensure_integers({"max_file_size": config.max_file_size})
    _ensure_positive({"max_file_size": config.max_file_size})


def apply_overrides(config: IndenterConfig, **overrides: object) -> IndenterConfig:
    """Apply override values to an `IndenterConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        IndenterConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        ConfigError: If an override name is not defined on `IndenterConfig`.

    Examples:
        updated = apply_overrides(config, indentation_unit="\\t")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    known = {field.name for field in fields(IndenterConfig)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration field(s): {', '.join(unknown)}")
    if "indentation_unit" in changes and "indent_spaces" not in changes:
        changes["indent_spaces"] = None
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> IndenterConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        IndenterConfig: Validated configuration ready for indenting.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), indent_spaces=2)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
