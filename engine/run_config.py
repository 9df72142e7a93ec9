"""Turn command-line choices into RunSettings."""
from __future__ import annotations

import uuid
from typing import Optional, Sequence

from engine.git_ops import PreconditionError
from models.pull_request import PullRequestSpec
from models.run import CommitSettings, RunSettings


def generate_head_ref(base: str) -> str:
    """Name a fresh head branch as <base>-<unique suffix>."""
    return f"{base}-{uuid.uuid4()}"


def configure_run(
    files: Sequence[str],
    branch: str,
    message: str,
    use_pr: bool = False,
    head_ref: Optional[str] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    labels: Optional[Sequence[str]] = None,
    dry_run: bool = False,
) -> RunSettings:
    """Build the settings for one run.

    In pull request mode the commit lands on the head branch, which is
    generated from the base branch name when not given. Title and description
    default to the commit message.

    Raises:
        PreconditionError: If branch or message is empty
    """
    if not branch or not message:
        raise PreconditionError("--message and --branch are both required")

    if not use_pr:
        return RunSettings(
            commit=CommitSettings(message=message, branch=branch),
            files=list(files),
            dry_run=dry_run,
        )

    head = (head_ref or "").strip() or generate_head_ref(branch)
    spec = PullRequestSpec(
        base_ref=branch,
        head_ref=head,
        title=(title or "").strip() or message,
        description=(description or "").strip() or message,
        labels=list(labels or []),
    )
    return RunSettings(
        commit=CommitSettings(message=message, branch=head),
        files=list(files),
        pull_request=spec,
        dry_run=dry_run,
    )
