"""Filesystem helpers shared by tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Union

TreeValue = Union[str, bytes, "Tree", None]
Tree = Mapping[str, TreeValue]


def build_tree(base: Path, tree: Tree) -> None:
    """Create files/directories under ``base`` from a nested mapping.

    Strings and bytes become file contents, ``None`` an empty directory and
    nested mappings subdirectories.
    """

    for name, value in tree.items():
        path = base / name
        if isinstance(value, Mapping):
            path.mkdir(parents=True, exist_ok=True)
            build_tree(path, value)  # type: ignore[arg-type]
        elif value is None:
            path.mkdir(parents=True, exist_ok=True)
        else:
            _write(path, value)


def _write(path: Path, content: Union[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@dataclass
class WorkspaceBuilder:
    """Helper bound to a tmp directory for documents and config files."""

    root: Path

    def create(self, tree: Tree) -> Path:
        build_tree(self.root, tree)
        return self.root

    def write(
        self, relative: Union[str, Path], content: Union[str, bytes]
    ) -> Path:
        return _write(self.root / Path(relative), content)

    def document(self, content: str, name: str = "bank.md") -> Path:
        return self.write(Path("docs") / name, content)

    def config(self, content: str, name: str = "mdquiz.toml") -> Path:
        return self.write(Path("conf") / name, content)
