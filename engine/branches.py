"""Make sure the branches a run writes to exist on the forge."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from forge.client import ForgeClient
from forge.errors import NotFoundError
from models.repo_context import BranchRef, RepoContext

logger = logging.getLogger(__name__)


async def ensure_branch(client: ForgeClient, name: str, fallback_sha: str) -> BranchRef:
    """Return the branch tip, creating the branch at fallback_sha if it is missing.

    Args:
        client: Forge client bound to the target repository
        name: Branch name
        fallback_sha: Commit to start the branch from when it does not exist

    Returns:
        The branch and its current tip

    Raises:
        ForgeError: For any failure other than the branch being absent
    """
    try:
        branch = await client.get_branch(name)
        logger.debug(f"Branch {name} exists at {branch.sha}")
        return branch
    except NotFoundError:
        logger.info(f"Branch {name} not found, creating it from {fallback_sha}")

    return await client.create_ref(name, fallback_sha)


async def ensure_branches(
    client: ForgeClient,
    repo: RepoContext,
    base: str,
    head: Optional[str] = None,
) -> Tuple[BranchRef, Optional[BranchRef]]:
    """Resolve the base branch and, for pull requests, the head branch.

    The base branch starts from the default branch tip if it is new. The head
    branch starts from the base branch's resolved tip.

    Returns:
        Tuple of (base branch, head branch or None)
    """
    base_ref = await ensure_branch(client, base, repo.default_branch_sha)
    if head is None:
        return base_ref, None

    head_ref = await ensure_branch(client, head, base_ref.sha)
    return base_ref, head_ref
