"""Command-line entry point: commit local files through the forge API."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import httpx
from tabulate import tabulate

from engine.git_ops import GitOps, PreconditionError
from engine.orchestrator import RunOrchestrator, resolve_repo_context
from engine.outputs import OutputExporter
from engine.pull_request import MissingLabelError, validate_labels
from engine.run_config import configure_run
from forge import __version__
from forge.client import ForgeClient
from forge.config import ForgeSettings
from forge.errors import ForgeError
from models.run import FileSelection, RunSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gh-commit",
        description=(
            "Commit files using the GitHub API. Commits made through the API "
            "appear as signed when run in a GitHub Actions runner."
        ),
    )
    parser.add_argument("files", nargs="*", help="Files or patterns to commit")
    parser.add_argument(
        "-B", "--branch", required=True,
        help=(
            "Target branch of the commit. With --use-pr, the base ref of the PR; "
            "otherwise the commit is pushed directly to this branch."
        ),
    )
    parser.add_argument(
        "-m", "--message", required=True,
        help="Commit message; also the default PR title and description",
    )
    parser.add_argument(
        "-P", "--use-pr", action="store_true",
        help="Create a PR rather than committing directly to the branch",
    )
    parser.add_argument(
        "-H", "--head-ref",
        help="Head branch for the PR (default: <branch>-<random suffix>)",
    )
    parser.add_argument("-T", "--title", help="PR title (default: commit message)")
    parser.add_argument(
        "-D", "--pr-description", help="PR description (default: commit message)"
    )
    parser.add_argument(
        "-l", "--label", action="append", default=[],
        help="Label to add to the PR; repeat or comma-separate for several",
    )
    parser.add_argument(
        "-A", "--all", action="store_true",
        help="Commit all tracked files that have changed",
    )
    parser.add_argument(
        "-U", "--untracked", action="store_true",
        help="Include untracked files; only with --all",
    )
    parser.add_argument(
        "-d", "--dry-run", action="store_true",
        help="Show which files would be committed",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def split_labels(values: Sequence[str]) -> List[str]:
    labels = []
    for value in values:
        labels.extend(label.strip() for label in value.split(",") if label.strip())
    return list(dict.fromkeys(labels))


def repository_name(settings: ForgeSettings, git: GitOps) -> Tuple[str, str]:
    """Use GH_REPO when set, otherwise the repository behind the local remote."""
    if settings.repository:
        owner, _, name = settings.repository.partition("/")
        if not owner or not name:
            raise PreconditionError(
                f"Expected owner/name for the repository, got {settings.repository}"
            )
        return owner, name
    return git.remote_repository()


def print_selection(selection: FileSelection) -> None:
    deleted = set(selection.deleted)
    rows = [
        [f"{i}.", path, "delete" if path in deleted else "add"]
        for i, path in enumerate(selection.paths, start=1)
    ]
    print(tabulate(rows, headers=["#", "File", "Change"], tablefmt="simple"))


async def execute_dry_run(client: ForgeClient, settings: RunSettings, selection: FileSelection) -> None:
    if settings.uses_pull_request:
        await validate_labels(client, settings.pull_request.labels)
        print(f"Would open a PR from {settings.pull_request.head_ref} into {settings.pull_request.base_ref}")
    print("The following files would be committed:\n")
    print_selection(selection)


async def run(
    args: argparse.Namespace,
    settings: Optional[ForgeSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    cwd: Optional[Path] = None,
    exporter: Optional[OutputExporter] = None,
) -> int:
    """Run one commit from parsed arguments.

    Local validation and file selection happen before any network call.

    Returns:
        Process exit code
    """
    settings = settings or ForgeSettings()

    try:
        git = GitOps(cwd or Path.cwd())
        git.validate_remote()
        selection = git.select_files(args.files, args.all, args.untracked)
        if not selection.paths:
            print("Nothing to commit")
            return 0
        owner, name = repository_name(settings, git)
        run_settings = configure_run(
            selection.paths,
            branch=args.branch,
            message=args.message,
            use_pr=args.use_pr,
            head_ref=args.head_ref,
            title=args.title,
            description=args.pr_description,
            labels=split_labels(args.label),
            dry_run=args.dry_run,
        )
        print(
            f"Selected {len(selection)} file(s) for commit: "
            f"{len(selection.additions)} to add, {len(selection.deleted)} to delete"
        )

        async with ForgeClient.from_settings(settings, owner, name, transport=transport) as client:
            repo = await resolve_repo_context(client)

            if run_settings.dry_run:
                await execute_dry_run(client, run_settings, selection)
                return 0

            orchestrator = RunOrchestrator(client, repo, git.root, exporter)
            result = await orchestrator.execute(run_settings)

    except (PreconditionError, MissingLabelError, ForgeError, ValueError) as e:
        logger.error(str(e))
        return 1

    print(f"Commit: {result.commit_sha} on {result.branch}")
    if result.pull_request is not None:
        print(f"Pull Request URL: {result.pull_request.url}")
        print(f"Pull Request number: {result.pull_request.number}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
