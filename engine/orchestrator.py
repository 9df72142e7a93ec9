"""Sequence the branch, tree, commit and pull request steps of a run."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from engine.branches import ensure_branch, ensure_branches
from engine.commit import CommitAssembler, CommitResult
from engine.git_ops import PreconditionError
from engine.outputs import OutputExporter
from engine.pull_request import PullRequestPublisher
from engine.tree import build_blobs, build_tree
from forge.client import ForgeClient
from forge.errors import NotFoundError
from models.repo_context import BranchRef, RepoContext
from models.run import RunResult, RunSettings

logger = logging.getLogger(__name__)


async def resolve_repo_context(client: ForgeClient) -> RepoContext:
    """Read the repository's default branch and its tip.

    Raises:
        PreconditionError: If the default branch has no commit yet
        ForgeError: If the repository cannot be described
    """
    repository = await client.get_repository()
    try:
        default = await client.get_branch(repository.default_branch)
    except NotFoundError as e:
        raise PreconditionError(
            "Committing through the API requires the repository to already "
            f"have an initial commit ({e})"
        ) from e

    return RepoContext(
        owner=client.owner,
        name=client.name,
        default_branch=default.name,
        default_branch_sha=default.sha,
    )


class RunOrchestrator:
    """Runs the direct-commit or pull-request workflow against one repository."""

    def __init__(
        self,
        client: ForgeClient,
        repo: RepoContext,
        root: Path,
        exporter: Optional[OutputExporter] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: Forge client bound to the repository in `repo`
            repo: Resolved repository context
            root: Working tree root that file paths are relative to
            exporter: CI output exporter shared by the commit and PR steps
        """
        self.client = client
        self.repo = repo
        self.root = Path(root)
        self.exporter = exporter or OutputExporter()
        self.assembler = CommitAssembler(client, self.exporter)
        self.publisher = PullRequestPublisher(client, self.exporter)

    async def execute(self, settings: RunSettings) -> RunResult:
        """Commit the selected files, and open a pull request if requested.

        No rollback is attempted: objects created before a failure stay
        unreferenced on the forge.

        Raises:
            PreconditionError: If no files are selected
            MissingLabelError: If a requested label does not exist
            ForgeError: If any forge call fails
        """
        if not settings.files:
            raise PreconditionError("No files were selected for commit")

        if not settings.uses_pull_request:
            return await self._commit_direct(settings)
        return await self._commit_with_pull_request(settings)

    async def _commit_direct(self, settings: RunSettings) -> RunResult:
        target = await ensure_branch(
            self.client, settings.commit.branch, self.repo.default_branch_sha
        )
        result = await self._commit_on(target, settings)
        return RunResult(commit_sha=result.commit_sha, branch=result.branch)

    async def _commit_with_pull_request(self, settings: RunSettings) -> RunResult:
        spec = settings.pull_request
        _, head = await ensure_branches(
            self.client, self.repo, spec.base_ref, spec.head_ref
        )
        result = await self._commit_on(head, settings)
        pr = await self.publisher.publish(spec)
        return RunResult(commit_sha=result.commit_sha, branch=result.branch, pull_request=pr)

    async def _commit_on(self, branch: BranchRef, settings: RunSettings) -> CommitResult:
        tip = await self.client.get_commit(branch.sha)
        entries = await build_blobs(self.client, settings.files, self.root)
        tree = await build_tree(self.client, tip.tree, entries)
        result = await self.assembler.commit(branch, tree.sha, settings.commit.message)
        logger.info(
            f"Committed {len(entries)} file(s) to {branch.name}",
            extra={"commit_sha": result.commit_sha, "repository": self.repo.full_name},
        )
        return result
