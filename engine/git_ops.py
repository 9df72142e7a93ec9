"""Local repository helper for validating the checkout and selecting files."""
from __future__ import annotations

import fnmatch
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pygit2
from pygit2.enums import FileStatus

from models.run import FileSelection

logger = logging.getLogger(__name__)

STAGED_MASK = (
    FileStatus.INDEX_NEW
    | FileStatus.INDEX_MODIFIED
    | FileStatus.INDEX_DELETED
    | FileStatus.INDEX_RENAMED
    | FileStatus.INDEX_TYPECHANGE
)
WORKTREE_MASK = (
    FileStatus.WT_NEW
    | FileStatus.WT_MODIFIED
    | FileStatus.WT_DELETED
    | FileStatus.WT_RENAMED
    | FileStatus.WT_TYPECHANGE
)
DELETED_MASK = FileStatus.WT_DELETED | FileStatus.INDEX_DELETED

# https://host/owner/name(.git), ssh://git@host/owner/name.git, git@host:owner/name.git
_REMOTE_PATTERN = re.compile(
    r"^(?:[a-z+]+://)?(?:[^@/]+@)?[^/:]+(?::\d+)?[:/](?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


class PreconditionError(Exception):
    """Raised when a run cannot start: bad checkout, bad flags, or nothing to commit."""

    pass


def parse_remote_url(url: str) -> Tuple[str, str]:
    """Extract owner and repository name from a remote URL.

    Args:
        url: Remote URL in HTTPS, SSH or scp-like form

    Returns:
        Tuple of (owner, name)

    Raises:
        PreconditionError: If the URL does not name an owner/repository
    """
    match = _REMOTE_PATTERN.match(url.strip())
    if not match:
        raise PreconditionError(f"Cannot determine repository from remote URL {url}")
    return match.group("owner"), match.group("name")


class GitOps:
    """Helper class for local Git operations using pygit2."""

    def __init__(self, repo_path: str | Path) -> None:
        """Open the repository enclosing repo_path.

        Args:
            repo_path: Any path inside the working tree

        Raises:
            PreconditionError: If repo_path is not inside a non-bare repository
        """
        discovered = pygit2.discover_repository(str(repo_path))
        if discovered is None:
            raise PreconditionError("not a git repository")

        self.repo = pygit2.Repository(discovered)
        if self.repo.is_bare or self.repo.workdir is None:
            raise PreconditionError("not a git repository")

        self.root = Path(self.repo.workdir)

    def validate_remote(self) -> None:
        """Ensure at least one remote exists.

        Raises:
            PreconditionError: If no remote is configured
        """
        if not list(self.repo.remotes):
            raise PreconditionError("git repository has no remotes configured")

    def remote_repository(self, remote: str = "origin") -> Tuple[str, str]:
        """Return (owner, name) of the forge repository behind a remote.

        Falls back to the first configured remote when `remote` is missing.
        """
        self.validate_remote()
        try:
            url = self.repo.remotes[remote].url
        except KeyError:
            url = list(self.repo.remotes)[0].url
        return parse_remote_url(url)

    def _status(self) -> Dict[str, int]:
        return dict(sorted(self.repo.status().items()))

    def staged_files(self) -> List[str]:
        return [path for path, flags in self._status().items() if flags & STAGED_MASK]

    def untracked_files(self) -> List[str]:
        return [
            path for path, flags in self._status().items() if flags & FileStatus.WT_NEW
        ]

    def deleted_files(self) -> List[str]:
        return [path for path, flags in self._status().items() if flags & DELETED_MASK]

    def changed_files(self, patterns: Optional[Sequence[str]] = None) -> List[str]:
        """List working tree changes, optionally filtered by pathspec-like patterns.

        Args:
            patterns: Glob patterns or directory prefixes relative to the root

        Returns:
            Sorted repository-relative paths with unstaged changes
        """
        changed = [
            path for path, flags in self._status().items() if flags & WORKTREE_MASK
        ]
        if not patterns:
            return changed
        return [path for path in changed if any(_matches(path, p) for p in patterns)]

    def select_files(
        self,
        paths: Sequence[str],
        commit_all: bool = False,
        include_untracked: bool = False,
    ) -> FileSelection:
        """Resolve the files to commit.

        Args:
            paths: Explicit paths or patterns given on the command line
            commit_all: Select every changed file
            include_untracked: With commit_all, also select untracked files

        Returns:
            The ordered selection, with staged files appended

        Raises:
            PreconditionError: If the flags conflict, nothing matches, or a
                selected path is a directory
        """
        if (commit_all or include_untracked) and paths:
            raise PreconditionError(
                "`all` and `untracked` cannot be used with explicit file selection"
            )

        if not paths:
            logger.warning("No explicit file selection")
            if not commit_all:
                raise PreconditionError("No files were selected for commit")

        staged = self.staged_files()
        if staged:
            logger.warning(f"{len(staged)} file(s) are already staged for commit")

        if commit_all:
            selected = self.changed_files()
            if not include_untracked:
                untracked = set(self.untracked_files())
                selected = [path for path in selected if path not in untracked]
        else:
            selected = self.changed_files(paths)
            if not selected and not staged:
                raise PreconditionError("the pattern(s) did not match any files")

        ordered = list(dict.fromkeys([*selected, *staged]))
        directories = [
            path for path in ordered
            if path.endswith("/") or (self.root / path).is_dir()
        ]
        if directories:
            raise PreconditionError(
                f"Cannot commit {directories[0].rstrip('/')}: it is a directory "
                "(nested repositories are not supported)"
            )
        deleted = set(self.deleted_files())

        logger.info(f"Selected {len(ordered)} file(s) for commit")
        return FileSelection(
            paths=ordered,
            deleted=[path for path in ordered if path in deleted],
        )


def _matches(path: str, pattern: str) -> bool:
    pattern = pattern.replace("\\", "/")
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if pattern in ("", ".", "*"):
        return True
    prefix = pattern.rstrip("/")
    return (
        path == prefix
        or path.startswith(prefix + "/")
        or fnmatch.fnmatch(path, pattern)
    )
