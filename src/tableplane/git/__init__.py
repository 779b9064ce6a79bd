"""Git module - repository facts for the indexer."""

from tableplane.git.errors import GitError, NotARepositoryError, RefNotFoundError
from tableplane.git.ops import GitOps

__all__ = [
    "GitOps",
    "GitError",
    "NotARepositoryError",
    "RefNotFoundError",
]
