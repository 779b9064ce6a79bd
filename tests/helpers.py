"""Builders shared by the test suite: markdown repositories and sample documents."""

from pathlib import Path

import pygit2

from tableplane.index.flatten import flatten
from tableplane.index.parser import MarkdownParser

SUB_PATH = "db"

DUNE = "# Dune\n\n- Frank Herbert\n- 1965\n"
NEUROMANCER = "# Neuromancer\n\n- William Gibson\n- 1984\n"
TEMPLATE = "# Title\n\n- Author\n- Year\n"


class MarkdownRepo:
    """A pygit2 working tree whose ``db/`` directory holds tables of markdown files."""

    def __init__(self, path: Path, sub_path: str = SUB_PATH) -> None:
        self.path = path
        self.sub_path = sub_path
        self.repo = pygit2.init_repository(str(path), initial_head="main")
        self.repo.config["user.name"] = "Test User"
        self.repo.config["user.email"] = "test@example.com"

    @property
    def root(self) -> Path:
        return self.path / self.sub_path if self.sub_path else self.path

    def write(self, rel: str, text: str, *, under_root: bool = True) -> Path:
        target = (self.root if under_root else self.path) / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text)
        return target

    def remove(self, rel: str) -> None:
        (self.root / rel).unlink()

    def commit(self, message: str = "update") -> str:
        index = self.repo.index
        index.add_all()
        for entry in list(index):
            if not (self.path / entry.path).exists():
                index.remove(entry.path)
        index.write()
        tree = index.write_tree()
        sig = pygit2.Signature("Test User", "test@example.com")
        parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
        return str(self.repo.create_commit("HEAD", sig, sig, message, tree, parents))


def path_of(text: str, value: str) -> str:
    """Structural path of the node carrying ``value`` in a parsed document."""
    parser = MarkdownParser()
    for path, fact in flatten(parser.tree(parser.parse(text))):
        if fact == value:
            return path
    raise AssertionError(f"{value!r} not found in document")


def book_columns() -> dict[str, str]:
    """Paths of a book's title, author and year, keyed to their column names."""
    return {
        path_of(DUNE, "Dune"): "Title",
        path_of(DUNE, "Frank Herbert"): "Author",
        path_of(DUNE, "1965"): "Year",
    }


ORDER = "# Widget\n\n- 3\n- $2.50\n- =PRODUCT(B2,C2)\n"


def order_view() -> dict[str, object]:
    """View over ORDER: item, quantity, unit price and a computed total."""
    return {
        "version": 2,
        "options": {"formula": {"precisionRounding": 4}},
        "columns": {
            path_of(ORDER, "Widget"): "Item",
            path_of(ORDER, "3"): "Qty",
            path_of(ORDER, "$2.50"): "Price",
            path_of(ORDER, "=PRODUCT(B2,C2)"): "Total",
        },
    }
