"""Tests for the command-line interface."""

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tfdeps._cli.main import app

WriteTree = Callable[[dict[str, str]], Path]

runner = CliRunner()

MAIN_TF = """
resource "aws_instance" "web" {
  ami       = data.aws_ami.latest.id
  user_data = var.user_data
  subnet_id = aws_subnet.main.id
}

data "aws_ami" "latest" {
  most_recent = true
}

resource "aws_subnet" "main" {
  vpc_id = aws_vpc.main.id
}
"""


@pytest.fixture
def project(write_tree: WriteTree, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = write_tree({"infra/main.tf": MAIN_TF})
    monkeypatch.chdir(root)
    return root


def _target(root: Path, name: str = "web") -> list[str]:
    return ["--path", str(root / "infra" / "main.tf"), "--type", "aws_instance", "--name", name]


class TestGraphCommand:
    def test_writes_dot_file(self, project: Path) -> None:
        output = project / "web.dot"

        result = runner.invoke(app, ["graph", *_target(project), "-o", str(output)])

        assert result.exit_code == 0, result.output
        content = output.read_text()
        assert content.startswith("digraph terraform {\n")
        assert '"aws_instance.web" [label="aws_instance.web' in content
        assert '"var.user_data" -> "aws_instance.web" [style=solid];' in content
        assert '"aws_subnet.main" -> "aws_instance.web" [style=solid];' in content

    def test_default_output_path(self, project: Path) -> None:
        result = runner.invoke(app, ["graph", *_target(project)])

        assert result.exit_code == 0, result.output
        assert (project / "graph.dot").is_file()

    def test_full_scope_with_depth(self, project: Path) -> None:
        output = project / "full.dot"

        result = runner.invoke(app, ["graph", *_target(project), "-o", str(output), "--scope", "full", "-d", "1"])

        assert result.exit_code == 0, result.output
        content = output.read_text()
        assert '"aws_subnet.main" [label=' in content
        assert '"aws_vpc.main" -> "aws_subnet.main" [style=solid];' in content

    def test_missing_target_still_succeeds(self, project: Path) -> None:
        output = project / "empty.dot"

        result = runner.invoke(app, ["graph", *_target(project, "missing"), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "color=red" not in output.read_text()

    @pytest.mark.parametrize(
        "args",
        [
            ["--type", "aws_instance", "--name", "web"],
            ["--path", "infra/main.tf", "--name", "web"],
            ["--path", "infra/main.tf", "--type", "aws_instance"],
        ],
    )
    def test_missing_required_argument(self, project: Path, args: list[str]) -> None:
        result = runner.invoke(app, ["graph", *args])

        assert result.exit_code == 1
        assert not (project / "graph.dot").exists()

    def test_nonexistent_path(self, project: Path) -> None:
        result = runner.invoke(app, ["graph", "--path", str(project / "nope.tf"), "--type", "a", "--name", "b"])
        assert result.exit_code == 1

    def test_unsupported_format(self, project: Path) -> None:
        result = runner.invoke(app, ["graph", *_target(project), "--format", "svg"])

        assert result.exit_code == 1
        assert not (project / "graph.dot").exists()

    def test_unsupported_scope(self, project: Path) -> None:
        result = runner.invoke(app, ["graph", *_target(project), "--scope", "everything"])
        assert result.exit_code == 1

    def test_negative_depth(self, project: Path) -> None:
        result = runner.invoke(app, ["graph", *_target(project), "--depth=-1"])
        assert result.exit_code == 1

    def test_write_failure(self, project: Path) -> None:
        result = runner.invoke(app, ["graph", *_target(project), "-o", str(project / "infra")])
        assert result.exit_code == 1

    def test_configuration_defaults(self, project: Path) -> None:
        (project / "pyproject.toml").write_text('[tool.tfdeps]\noutput = "docs/deps.dot"\nscope = "full"\n')
        (project / "docs").mkdir()

        result = runner.invoke(app, ["graph", *_target(project)])

        assert result.exit_code == 0, result.output
        assert '"aws_vpc.main" -> "aws_subnet.main"' in (project / "docs" / "deps.dot").read_text()

    def test_invalid_configuration(self, project: Path) -> None:
        (project / "pyproject.toml").write_text("[tool.tfdeps]\ndepth = -2\n")

        result = runner.invoke(app, ["graph", *_target(project)])

        assert result.exit_code == 1


class TestNodesCommand:
    def test_lists_discovered_nodes(self, project: Path) -> None:
        result = runner.invoke(app, ["nodes", *_target(project)])

        assert result.exit_code == 0, result.output
        assert "aws_instance.web" in result.output
        assert "data.aws_ami.latest" in result.output
        assert "aws_subnet.main" in result.output

    def test_missing_required_argument(self, project: Path) -> None:  # noqa: ARG002
        result = runner.invoke(app, ["nodes", "--type", "aws_instance"])
        assert result.exit_code == 1
