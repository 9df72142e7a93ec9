"""Pull request models."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class PullRequestSpec:
    """Desired pull request metadata.

    Attributes:
        base_ref: Branch the pull request merges into
        head_ref: Branch carrying the new commit
        title: Pull request title
        description: Pull request body
        labels: Labels to attach once the pull request exists
    """

    base_ref: str
    head_ref: str
    title: str
    description: str
    labels: List[str] = Field(default_factory=list)


class PullRequest(BaseModel):
    """Model representing a created pull request."""

    number: int = Field(description="PR number")
    url: str = Field(description="PR URL")
    title: str = Field(description="PR title")
    body: str = Field(description="PR description")
    head: str = Field(description="Head branch name")
    base: str = Field(description="Base branch name")
    labels: List[str] = Field(default_factory=list, description="Attached labels")
