"""Models for the git objects created through the forge API."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field
from pydantic.dataclasses import dataclass

REGULAR_FILE_MODE = "100644"


@dataclass(frozen=True)
class BlobEntry:
    """One file's content hash, or a deletion marker.

    Attributes:
        path: Repository-relative path using forward slashes
        mode: Git file mode, always a regular non-executable file
        type: Git object type
        sha: Server-assigned blob SHA; None marks the path as deleted
    """

    path: str
    sha: Optional[str]
    mode: Literal["100644"] = REGULAR_FILE_MODE
    type: Literal["blob"] = "blob"

    @property
    def is_deletion(self) -> bool:
        return self.sha is None


@dataclass(frozen=True)
class TreeNode:
    """A tree created on top of a base tree.

    Attributes:
        sha: Server-assigned tree SHA
        base_tree: SHA of the tree the entries were layered on
        entries: Entries that were added, replaced or removed
    """

    sha: str
    base_tree: str
    entries: List[BlobEntry] = Field(default_factory=list)


@dataclass(frozen=True)
class CommitObject:
    """A commit object.

    Attributes:
        sha: Server-assigned commit SHA
        tree: SHA of the commit's tree
        parents: Parent commit SHAs
        message: Commit message
    """

    sha: str
    tree: str
    parents: List[str] = Field(default_factory=list)
    message: str = ""
