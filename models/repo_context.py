"""Repository identity and branch pointer models."""
from __future__ import annotations

from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class RepoContext:
    """Target repository, resolved once per run.

    Attributes:
        owner: Repository owner (user or organisation)
        name: Repository name
        default_branch: Name of the repository's default branch
        default_branch_sha: Commit SHA at the tip of the default branch
    """

    owner: str
    name: str
    default_branch: str
    default_branch_sha: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class BranchRef:
    """A named pointer to a commit.

    Attributes:
        name: Branch name without the refs/heads/ prefix
        sha: SHA of the commit the branch points at
    """

    name: str
    sha: str
