"""Tests for module call resolution."""

from collections.abc import Callable
from pathlib import Path

from tfdeps._models import Category
from tfdeps._modules import is_module_reference, module_name, resolve_module
from tfdeps._source import SourceLoader

WriteTree = Callable[[dict[str, str]], Path]


class TestModuleNames:
    def test_is_module_reference(self) -> None:
        assert is_module_reference("module.net")
        assert is_module_reference("module.net.vpc_id")
        assert not is_module_reference("aws_instance.module")

    def test_module_name_drops_attribute(self) -> None:
        assert module_name("module.net") == "net"
        assert module_name("module.net.vpc_id") == "net"


class TestResolveModule:
    def test_relative_source(self, write_tree: WriteTree) -> None:
        root = write_tree(
            {
                "main.tf": """
                module "net" {
                  source = "./modules/net"
                  cidr   = var.cidr
                  vpc_id = aws_vpc.main.id
                }
                """,
                "modules/net/main.tf": 'resource "aws_subnet" "s" {}\n',
            },
        )

        resolution = resolve_module(SourceLoader(), root, "module.net.subnet_id")

        assert resolution is not None
        assert resolution.call_id == "module.net"
        assert resolution.directory == root / "modules" / "net"

        node = resolution.node(depth=1)
        assert node.id == "module.net"
        assert node.depth == 1
        assert node.path == root / "main.tf"
        assert [ref.id for ref in node.references[Category.VARIABLE]] == ["var.cidr"]
        assert [ref.id for ref in node.references[Category.RESOURCE]] == ["aws_vpc.main"]

    def test_parent_relative_source(self, write_tree: WriteTree) -> None:
        root = write_tree(
            {
                "envs/prod/main.tf": 'module "net" {\n  source = "../../modules/net"\n}\n',
                "modules/net/main.tf": 'resource "aws_subnet" "s" {}\n',
            },
        )

        resolution = resolve_module(SourceLoader(), root / "envs" / "prod", "module.net")

        assert resolution is not None
        assert resolution.directory == root / "modules" / "net"

    def test_registry_source_is_unresolved(self, write_tree: WriteTree) -> None:
        root = write_tree({"main.tf": 'module "net" {\n  source = "registry.example.com/ns/net"\n}\n'})
        assert resolve_module(SourceLoader(), root, "module.net") is None

    def test_missing_directory_is_unresolved(self, write_tree: WriteTree) -> None:
        root = write_tree({"main.tf": 'module "net" {\n  source = "./modules/missing"\n}\n'})
        assert resolve_module(SourceLoader(), root, "module.net") is None

    def test_computed_source_is_unresolved(self, write_tree: WriteTree) -> None:
        root = write_tree(
            {
                "main.tf": 'module "net" {\n  source = "./modules/${var.flavor}"\n}\n',
                "modules/a/main.tf": 'resource "aws_subnet" "s" {}\n',
            },
        )
        assert resolve_module(SourceLoader(), root, "module.net") is None

    def test_missing_module_call(self, write_tree: WriteTree) -> None:
        root = write_tree({"main.tf": 'resource "aws_instance" "web" {}\n'})
        assert resolve_module(SourceLoader(), root, "module.net") is None
