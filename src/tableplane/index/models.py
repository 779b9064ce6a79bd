"""SQLModel definitions for the document index, plus the parsed-tree node type.

Three logical collections back every query:
- FileIndex: one parsed document per (table, file, indexing_version)
- FileNode: flattened (path, value) facts derived from a FileIndex
- IndexTracker: last indexed revision per indexing_version

IndexLock is an advisory row that serializes indexing runs across processes.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, Index, UniqueConstraint
from sqlmodel import Field, SQLModel

# ============================================================================
# TABLES
# ============================================================================


class FileIndex(SQLModel, table=True):
    """Persisted parse result for one markdown file."""

    __tablename__ = "file_index"
    __table_args__ = (
        UniqueConstraint("table_name", "file", "indexing_version", name="uq_file_index_key"),
    )

    id: int | None = Field(default=None, primary_key=True)
    table_name: str = Field(index=True)
    file: str
    data: bool = Field(default=True)
    git_hash: str
    sha256: str
    record: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    indexing_version: str = Field(index=True)
    date: datetime


class FileNode(SQLModel, table=True):
    """One flattened fact: a structural path and its optional literal value."""

    __tablename__ = "file_nodes"
    __table_args__ = (
        UniqueConstraint(
            "table_name", "file", "path", "indexing_version", name="uq_file_node_key"
        ),
        Index("idx_file_nodes_table_path", "table_name", "path", "indexing_version"),
    )

    id: int | None = Field(default=None, primary_key=True)
    table_name: str
    file: str
    path: str
    value: str | None = None  # None means the node has no literal value
    indexing_version: str
    date: datetime


class IndexTracker(SQLModel, table=True):
    """Last successfully indexed revision (one row per indexing_version)."""

    __tablename__ = "index_tracker"

    indexing_version: str = Field(primary_key=True)
    git_hash: str
    changes: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    failed: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    date: datetime


class IndexLock(SQLModel, table=True):
    """Advisory lock row held for the duration of an indexing run."""

    __tablename__ = "index_lock"

    name: str = Field(primary_key=True)
    owner: str
    acquired_at: float


# ============================================================================
# NON-TABLE MODELS
# ============================================================================


@dataclass(frozen=True, slots=True)
class MarkdownNode:
    """Closed node variant of a parsed document.

    ``value`` is the literal text a node carries (text, code, html...);
    ``checked`` is set only on task list items. Everything else about a
    token stays in the stored record and is only needed for rendering.
    """

    kind: str
    value: str | None = None
    checked: bool | None = None
    children: tuple["MarkdownNode", ...] = ()

    @property
    def fact(self) -> str | None:
        """The string recorded on this node's FileNode, or None for no value."""
        if self.value is not None:
            return self.value
        if self.checked is not None:
            return "true" if self.checked else "false"
        return None

    @classmethod
    def from_token(cls, token: dict[str, Any]) -> "MarkdownNode":
        """Build a node from a stored parser token."""
        raw = token.get("raw")
        attrs = token.get("attrs") or {}
        checked = attrs.get("checked")
        return cls(
            kind=str(token["type"]),
            value=raw if isinstance(raw, str) else None,
            checked=checked if isinstance(checked, bool) else None,
            children=tuple(cls.from_token(child) for child in token.get("children") or ()),
        )


@dataclass(frozen=True, slots=True)
class ChangedFile:
    """A file scheduled for (re)indexing in one run."""

    table: str
    file: str
    git_hash: str
    sha256: str

    @property
    def key(self) -> str:
        return f"{self.table}/{self.file}"

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
