"""Configuration constants.

Values that are part of the on-disk and on-store contract and are not
user-configurable.
"""

INDEXING_VERSION = "0.0.0"
"""Default schema-compatibility tag stamped on every indexed record."""

DEFAULT_CONFIG_FILE = "tableplane.yaml"
"""Config file looked up in the working directory."""

DEFAULT_DB_PATH = ".tableplane/index.db"
"""SQLite location, relative to the repository root."""

MARKDOWN_SUFFIX = ".md"

VIEW_FILE_NAME = "view.json"
"""Per-table view definition file."""

VIEW_VERSION = 2

NON_DATA_FILES = frozenset({"template.md", "README.md"})
NON_DATA_SUFFIX = ".template.md"

ROOT_PATH = "root"
"""Path of the document root node; children extend it with .<index>.<kind>."""

ERROR_SENTINEL = "#ERROR"
"""Replaces a formula cell whose evaluation raised."""

CURRENCY_FORMAT = '"$"#,##0.00'

INDEX_LOCK_NAME = "index-run"
