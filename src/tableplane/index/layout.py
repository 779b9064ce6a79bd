"""Working-tree layout: tables are directories, files are markdown documents."""

from __future__ import annotations

import re
from datetime import date, datetime
from functools import cmp_to_key
from pathlib import Path

import structlog

from tableplane.config.constants import (
    MARKDOWN_SUFFIX,
    NON_DATA_FILES,
    NON_DATA_SUFFIX,
    VIEW_FILE_NAME,
)
from tableplane.core.errors import NotFoundError

logger = structlog.get_logger()

TOP_FILE = "_top.md"
BOTTOM_FILE = "_bottom.md"

_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})|(\d{2}-\d{2}-\d{4})")
_LAST_NUMBER_RE = re.compile(r"\d+(?!.*\d)")
_DATE_FORMATS = ("%Y-%m-%d", "%m-%d-%Y")


def is_data_file(name: str) -> bool:
    """Templates and READMEs are indexed but never projected into views."""
    return name not in NON_DATA_FILES and not name.endswith(NON_DATA_SUFFIX)


def _embedded_date(name: str) -> date | None:
    match = _DATE_RE.search(name)
    if match is None:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(match.group(0), fmt).date()
        except ValueError:
            continue
    return None


def _last_number(name: str) -> int | None:
    match = _LAST_NUMBER_RE.search(_DATE_RE.sub("", name, count=1))
    return int(match.group(0)) if match else None


def _text_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def compare_names(a: str, b: str) -> int:
    """Natural ordering for table files.

    ``_top.md`` sorts first and ``_bottom.md`` last; otherwise names are
    compared by embedded date, then by their last number, then as text.
    """
    if a == b:
        return 0
    if a == TOP_FILE or b == BOTTOM_FILE:
        return -1
    if b == TOP_FILE or a == BOTTOM_FILE:
        return 1

    a_date, b_date = _embedded_date(a), _embedded_date(b)
    if a_date is not None and b_date is not None and a_date != b_date:
        return -1 if a_date < b_date else 1

    a_number, b_number = _last_number(a), _last_number(b)
    if a_number is not None and b_number is not None and a_number != b_number:
        return -1 if a_number < b_number else 1

    a_key, b_key = _text_key(a), _text_key(b)
    return (a_key > b_key) - (a_key < b_key)


natural_key = cmp_to_key(compare_names)


class TableLayout:
    """Enumerates the live tables and files under a database root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def tables(self) -> list[str]:
        if not self.root.is_dir():
            return []
        names = [
            entry.name
            for entry in self.root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        ]
        return sorted(names, key=_text_key)

    def has_table(self, table: str) -> bool:
        return not table.startswith(".") and (self.root / table).is_dir()

    def table_files(self, table: str) -> list[str]:
        table_dir = self.root / table
        if not self.has_table(table):
            raise NotFoundError.table_missing(table)

        files: list[str] = []
        for entry in table_dir.iterdir():
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                logger.debug("nested_directory_ignored", table=table, directory=entry.name)
            elif entry.name.endswith(MARKDOWN_SUFFIX):
                files.append(entry.name)
        return sorted(files, key=natural_key)

    def view_path(self, table: str) -> Path:
        return self.root / table / VIEW_FILE_NAME
