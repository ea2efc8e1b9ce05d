"""Tests for the configuration module."""

from pathlib import Path

import pytest

from tfdeps._cli.config import (
    DEFAULT_OUTPUT,
    ConfigError,
    TfdepsConfig,
    find_pyproject_toml,
    load_config,
)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        result = find_pyproject_toml(tmp_path)

        assert result == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        subdir = tmp_path / "infra" / "prod"
        subdir.mkdir(parents=True)

        result = find_pyproject_toml(subdir)

        assert result == pyproject


class TestLoadConfig:
    """Tests for loading [tool.tfdeps]."""

    def test_missing_section_gives_defaults(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        config = load_config(pyproject)

        assert config == TfdepsConfig(project_root=tmp_path)
        assert config.output == DEFAULT_OUTPUT
        assert config.depth == 3
        assert config.format == "dot"
        assert config.scope == "root"
        assert config.recursive is False

    def test_all_keys(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.tfdeps]
output = "docs/graph.dot"
format = "dot"
depth = 5
scope = "full"
recursive = true
""",
        )

        config = load_config(pyproject)

        assert config.output == tmp_path / "docs" / "graph.dot"
        assert config.depth == 5
        assert config.scope == "full"
        assert config.recursive is True

    def test_absolute_output_is_kept(self, tmp_path: Path) -> None:
        output = tmp_path / "out" / "graph.dot"
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f'[tool.tfdeps]\noutput = "{output.as_posix()}"\n')

        assert load_config(pyproject).output == output

    @pytest.mark.parametrize(
        ("body", "match"),
        [
            ("depth = -1", "depth"),
            ('depth = "3"', "depth"),
            ("depth = true", "depth"),
            ('format = "svg"', "unsupported format"),
            ('scope = "everything"', "scope"),
            ("output = 3", "output"),
            ('recursive = "yes"', "recursive"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str, match: str) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.tfdeps]\n{body}\n")

        with pytest.raises(ConfigError, match=match):
            load_config(pyproject)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.tfdeps\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)
