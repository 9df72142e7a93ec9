from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from engine.outputs import OutputExporter
from forge.client import ForgeClient
from models.git_objects import CommitObject
from models.repo_context import BranchRef

logger = logging.getLogger(__name__)

class CommitResult(BaseModel):
    """Result of a commit operation."""
    commit_sha: str
    tree_sha: str
    parent_sha: str
    branch: str

async def create_commit(
    client: ForgeClient,
    parent_sha: str,
    tree_sha: str,
    message: str,
) -> CommitObject:
    """Create a commit with a single parent.

    Args:
        client: Forge client bound to the target repository.
        parent_sha: The commit the new commit extends.
        tree_sha: The tree the commit points at.
        message: The commit message.

    Returns:
        The created commit object.
    """
    commit = await client.create_commit(message, tree_sha, [parent_sha])
    logger.info(
        "Created commit",
        extra={
            "commit_sha": commit.sha,
            "tree_sha": tree_sha,
            "parent_sha": parent_sha,
        }
    )
    return commit

async def advance_ref(client: ForgeClient, branch: str, commit_sha: str) -> BranchRef:
    """Point a branch at a new commit.

    The forge rejects the update with a ConflictError when the commit does not
    descend from the branch tip. That error is not retried.

    Args:
        client: Forge client bound to the target repository.
        branch: Branch to move.
        commit_sha: The new tip.

    Returns:
        The branch at its new position.
    """
    ref = await client.update_ref(branch, commit_sha)
    logger.info(f"Advanced {branch} to {commit_sha}")
    return ref

class CommitAssembler:
    """Creates a commit on a branch tip and moves the branch to it."""

    def __init__(
        self,
        client: ForgeClient,
        exporter: Optional[OutputExporter] = None,
    ) -> None:
        self.client = client
        self.exporter = exporter or OutputExporter()

    async def commit(self, branch: BranchRef, tree_sha: str, message: str) -> CommitResult:
        """Commit tree_sha on top of branch and advance the branch.

        Args:
            branch: The branch and the tip the commit is parented on.
            tree_sha: The tree for the new commit.
            message: The commit message.

        Returns:
            A CommitResult describing the new commit.
        """
        commit = await create_commit(self.client, branch.sha, tree_sha, message)
        await advance_ref(self.client, branch.name, commit.sha)

        self.exporter.export("sha", commit.sha)

        return CommitResult(
            commit_sha=commit.sha,
            tree_sha=tree_sha,
            parent_sha=branch.sha,
            branch=branch.name,
        )
