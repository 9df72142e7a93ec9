"""Models describing a single commit run and its outcome."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.dataclasses import dataclass

from models.pull_request import PullRequest, PullRequestSpec


@dataclass(frozen=True)
class FileSelection:
    """Files chosen for the commit.

    Attributes:
        paths: Repository-relative paths in commit order
        deleted: Subset of paths that the working tree reports as deleted
    """

    paths: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)

    @property
    def additions(self) -> List[str]:
        deleted = set(self.deleted)
        return [path for path in self.paths if path not in deleted]

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class CommitSettings:
    """What to commit and where.

    Attributes:
        message: Commit message
        branch: Branch the commit lands on (the head ref in PR mode)
    """

    message: str
    branch: str


@dataclass(frozen=True)
class RunSettings:
    """Fully resolved configuration for one run.

    Attributes:
        commit: Commit message and destination branch
        files: Repository-relative paths to commit
        pull_request: Pull request to open, or None to commit directly
        dry_run: Only show the selection, never mutate the forge
    """

    commit: CommitSettings
    files: List[str] = Field(default_factory=list)
    pull_request: Optional[PullRequestSpec] = None
    dry_run: bool = False

    @property
    def uses_pull_request(self) -> bool:
        return self.pull_request is not None


class RunResult(BaseModel):
    """Outcome of a completed run."""

    commit_sha: str
    branch: str
    pull_request: Optional[PullRequest] = None
