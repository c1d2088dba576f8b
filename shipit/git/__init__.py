"""Git operations used by the release pipeline.

Usage:
    from shipit.git import Repository

    repo = Repository(Path("."))
    if repo.tag_exists("v1.3.0"):
        ...
"""

from shipit.git.repository import (
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
)

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]
