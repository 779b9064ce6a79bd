"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides the shared markdown-database fixtures.
"""

import json
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local tableplane package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from tableplane.config.models import (  # noqa: E402
    DatabaseConfig,
    RepositoryConfig,
    ServerConfig,
    TablePlaneConfig,
)
from tableplane.git import GitOps  # noqa: E402
from tableplane.index._internal.db import Database  # noqa: E402
from tableplane.index.layout import TableLayout  # noqa: E402
from tableplane.index.ops import IndexEngine  # noqa: E402
from tableplane.index.store import DocumentStore  # noqa: E402
from tableplane.query.ops import QueryService  # noqa: E402
from tableplane.runtime import Runtime  # noqa: E402
from tests.helpers import DUNE, NEUROMANCER, TEMPLATE, MarkdownRepo, book_columns  # noqa: E402


@pytest.fixture
def md_repo(tmp_path: Path) -> MarkdownRepo:
    """Empty repository with a README outside the database directory."""
    md = MarkdownRepo(tmp_path / "repo")
    md.write("README.md", "# Library\n", under_root=False)
    return md


@pytest.fixture
def books_repo(md_repo: MarkdownRepo) -> MarkdownRepo:
    """A ``books`` table (two books, a template, a view) and an ``authors`` table."""
    md_repo.write("books/dune.md", DUNE)
    md_repo.write("books/neuromancer.md", NEUROMANCER)
    md_repo.write("books/template.md", TEMPLATE)
    md_repo.write("books/view.json", json.dumps({"version": 2, "columns": book_columns()}))
    md_repo.write("authors/herbert.md", "# Frank Herbert\n")
    md_repo.commit("Initial library")
    return md_repo


@pytest.fixture
def temp_db(tmp_path: Path) -> Generator[Database, None, None]:
    """Temporary SQLite database with schema, outside any repository."""
    db = Database(tmp_path / "store" / "index.db")
    db.create_all()
    yield db
    db.engine.dispose()


@pytest.fixture
def store(temp_db: Database) -> DocumentStore:
    return DocumentStore(temp_db)


@pytest.fixture
def indexed_store(books_repo: MarkdownRepo, store: DocumentStore) -> DocumentStore:
    """Store after one full index run over the sample library."""
    IndexEngine(store, GitOps(books_repo.path, books_repo.sub_path)).run()
    return store


@pytest.fixture
def queries(books_repo: MarkdownRepo, indexed_store: DocumentStore) -> QueryService:
    return QueryService(indexed_store, TableLayout(books_repo.root))


@pytest.fixture
def library_config(books_repo: MarkdownRepo, tmp_path: Path) -> TablePlaneConfig:
    """Config pointing at the sample library, with the database outside the repository."""
    return TablePlaneConfig(
        repository=RepositoryConfig(path=str(books_repo.path), sub_path=books_repo.sub_path),
        server=ServerConfig(index_on_start=False),
        database=DatabaseConfig(path=str(tmp_path / "runtime" / "index.db")),
    )


@pytest.fixture
def runtime(library_config: TablePlaneConfig) -> Generator[Runtime, None, None]:
    rt = Runtime.from_config(library_config)
    yield rt
    rt.close()
