"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar, cast

from tfdeps._dot import OutputFormat, RenderScope
from tfdeps._traverse import DEFAULT_MAX_DEPTH

DEFAULT_OUTPUT = Path("graph.dot")


class ConfigError(Exception):
    """Error in tfdeps configuration."""


@dataclass(slots=True, frozen=True)
class TfdepsConfig:
    """Defaults loaded from the ``[tool.tfdeps]`` table of pyproject.toml.

    Relative output paths are resolved from the project root (directory containing pyproject.toml).
    """

    output: Path = DEFAULT_OUTPUT
    format: str = OutputFormat.DOT
    depth: int = DEFAULT_MAX_DEPTH
    scope: str = RenderScope.ROOT
    recursive: bool = False
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


T = TypeVar("T")


def _expect(section: dict[str, object], key: str, expected: type[T], description: str) -> T | None:
    if key not in section:
        return None
    value = section[key]
    # bool is an int subclass, so it never counts as a depth
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        msg = f"Invalid [tool.tfdeps].{key}: expected {description}"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> TfdepsConfig:
    """Load and validate [tool.tfdeps] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed TfdepsConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    tool_section = data.get("tool", {})
    section = cast("dict[str, object]", tool_section.get("tfdeps", {}))

    if not section:
        return TfdepsConfig(project_root=project_root)

    output = DEFAULT_OUTPUT
    if (output_value := _expect(section, "output", str, "string path")) is not None:
        output = Path(output_value)
        if not output.is_absolute():
            output = project_root / output

    output_format = _expect(section, "format", str, "string") or OutputFormat.DOT
    if output_format not in OutputFormat:
        msg = f"Invalid [tool.tfdeps].format: unsupported format '{output_format}'"
        raise ConfigError(msg)

    depth = _expect(section, "depth", int, "non-negative integer")
    if depth is None:
        depth = DEFAULT_MAX_DEPTH
    elif depth < 0:
        msg = "Invalid [tool.tfdeps].depth: expected non-negative integer"
        raise ConfigError(msg)

    scope = _expect(section, "scope", str, "string") or RenderScope.ROOT
    if scope not in RenderScope:
        choices = ", ".join(RenderScope)
        msg = f"Invalid [tool.tfdeps].scope: expected one of {choices}"
        raise ConfigError(msg)

    recursive = _expect(section, "recursive", bool, "boolean")

    return TfdepsConfig(
        output=output,
        format=output_format,
        depth=depth,
        scope=scope,
        recursive=bool(recursive),
        project_root=project_root,
    )


def get_config() -> TfdepsConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        TfdepsConfig (defaults if no pyproject.toml or no [tool.tfdeps] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return TfdepsConfig()
    return load_config(pyproject_path)
