"""Build blobs and a tree from local files."""
from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import List, Sequence

from engine.git_ops import PreconditionError
from forge.client import ForgeClient
from models.git_objects import BlobEntry, TreeNode

logger = logging.getLogger(__name__)


async def build_blobs(
    client: ForgeClient, paths: Sequence[str], root: Path
) -> List[BlobEntry]:
    """Create one blob per existing file and a deletion entry per missing one.

    Files are uploaded one at a time in the given order.

    Args:
        client: Forge client bound to the target repository
        paths: Repository-relative file paths
        root: Working tree root the paths are relative to

    Returns:
        One entry per path, in the same order

    Raises:
        PreconditionError: If an existing path cannot be read as a file
    """
    entries: List[BlobEntry] = []
    for path in paths:
        repo_path = PurePath(path).as_posix()
        local_path = root / path

        if not local_path.exists():
            logger.info(f"Marking {repo_path} as deleted")
            entries.append(BlobEntry(path=repo_path, sha=None))
            continue

        try:
            content = local_path.read_bytes()
        except OSError as e:
            raise PreconditionError(f"Cannot read {repo_path}: {e}") from e

        sha = await client.create_blob(content, path=repo_path)
        logger.debug(f"Created blob {sha} for {repo_path}")
        entries.append(BlobEntry(path=repo_path, sha=sha))

    return entries


async def build_tree(
    client: ForgeClient, base_tree_sha: str, entries: Sequence[BlobEntry]
) -> TreeNode:
    """Layer entries on top of a base tree.

    Paths not listed are kept from the base tree by the forge.

    Raises:
        ValueError: If there are no entries
    """
    if not entries:
        raise ValueError("Cannot build a tree without entries")

    tree = await client.create_tree(base_tree_sha, entries)
    logger.info(
        f"Created tree {tree.sha}",
        extra={"base_tree": base_tree_sha, "entries": len(entries)},
    )
    return tree
