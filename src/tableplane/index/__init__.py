"""Index module - incremental markdown indexing into the document store.

Public API:
- IndexEngine: change determination, per-file indexing and pruning
- DocumentStore: FileIndex / FileNode / IndexTracker collections
- MarkdownParser, flatten: document tree and its flattened facts
- TableLayout: live tables and files in the working tree
"""

from tableplane.index._internal.db import BulkWriter, Database
from tableplane.index.flatten import flatten
from tableplane.index.layout import TableLayout, compare_names, is_data_file
from tableplane.index.models import (
    ChangedFile,
    FileIndex,
    FileNode,
    IndexLock,
    IndexTracker,
    MarkdownNode,
)
from tableplane.index.ops import FileFailure, IndexEngine, IndexPlan, IndexStats, split_path
from tableplane.index.parser import MarkdownParser
from tableplane.index.store import DocumentStore

__all__ = [
    "BulkWriter",
    "ChangedFile",
    "Database",
    "DocumentStore",
    "FileFailure",
    "FileIndex",
    "FileNode",
    "IndexEngine",
    "IndexLock",
    "IndexPlan",
    "IndexStats",
    "IndexTracker",
    "MarkdownNode",
    "MarkdownParser",
    "TableLayout",
    "compare_names",
    "flatten",
    "is_data_file",
    "split_path",
]
