"""Typed async client for the forge's git data and pull request endpoints."""
from __future__ import annotations

import base64
import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from forge.config import ForgeSettings
from forge.errors import TransientError, error_for_status
from forge.schema import (
    AddLabelsRequest,
    BranchResponse,
    CommitResponse,
    CreateBlobRequest,
    CreateCommitRequest,
    CreatePullRequestRequest,
    CreateRefRequest,
    CreateTreeRequest,
    LabelResponse,
    PullRequestResponse,
    RefResponse,
    RepositoryResponse,
    ShaResponse,
    TreeEntry,
    UpdateRefRequest,
)
from models.git_objects import BlobEntry, CommitObject, TreeNode
from models.pull_request import PullRequest
from models.repo_context import BranchRef

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

DEFAULT_HEADERS = {
    "Accept": "application/vnd.github.v3+json",
}


class ForgeClient:
    """Client for one repository on the forge.

    Every method performs exactly one HTTP request and raises a ForgeError
    subclass on failure. Nothing is retried here.
    """

    def __init__(self, owner: str, name: str, http: httpx.AsyncClient) -> None:
        """Bind the client to a repository.

        Args:
            owner: Repository owner
            name: Repository name
            http: Authenticated HTTP client whose base URL is the API root
        """
        self.owner = owner
        self.name = name
        self.http = http

    @classmethod
    def from_settings(
        cls,
        settings: ForgeSettings,
        owner: str,
        name: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ForgeClient":
        """Build a client with an authenticated httpx.AsyncClient.

        Raises:
            ValueError: If no token is configured
        """
        if not settings.token:
            raise ValueError(
                "GitHub token required; set GITHUB_TOKEN, GH_TOKEN or GH_COMMIT_TOKEN"
            )

        http = httpx.AsyncClient(
            base_url=settings.api_url,
            headers={**DEFAULT_HEADERS, "Authorization": f"token {settings.token}"},
            timeout=settings.timeout,
            follow_redirects=True,
            transport=transport,
        )
        return cls(owner, name, http)

    async def __aenter__(self) -> "ForgeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    @property
    def repo_path(self) -> str:
        return f"repos/{quote(self.owner, safe='')}/{quote(self.name, safe='')}"

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        target: str,
        body: Optional[BaseModel] = None,
        response_model: Optional[Type[ResponseT]] = None,
    ) -> Optional[ResponseT]:
        """Send one request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to the repository endpoint
            operation: Operation name used in error messages
            target: Object name used in error messages
            body: Request model, serialized as the JSON body
            response_model: Model to decode a successful response into

        Returns:
            The decoded response, or None if no response model was given

        Raises:
            ForgeError: Subclass matching the failure
        """
        url = f"{self.repo_path}/{path}" if path else self.repo_path
        payload = body.model_dump(mode="json") if body is not None else None

        logger.debug(f"{method} {url}", extra={"operation": operation, "target": target})

        try:
            response = await self.http.request(method, url, json=payload)
        except httpx.HTTPError as e:
            raise TransientError(operation, target, str(e)) from e

        if not response.is_success:
            raise error_for_status(
                response.status_code, operation, target, _error_message(response)
            )

        if response_model is None:
            return None

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransientError(
                operation,
                target,
                f"unexpected response: {e}",
                status_code=response.status_code,
            ) from e

    async def get_repository(self) -> RepositoryResponse:
        return await self._request(
            "GET", "", "describe repository", f"{self.owner}/{self.name}",
            response_model=RepositoryResponse,
        )

    async def get_branch(self, name: str) -> BranchRef:
        """Look up a branch and return its tip."""
        branch = await self._request(
            "GET", f"branches/{_quote_ref(name)}", "get branch", name,
            response_model=BranchResponse,
        )
        return BranchRef(name=branch.name, sha=branch.commit.sha)

    async def get_commit(self, sha: str) -> CommitObject:
        commit = await self._request(
            "GET", f"git/commits/{sha}", "get commit", sha,
            response_model=CommitResponse,
        )
        return _commit_object(commit)

    async def create_ref(self, name: str, sha: str) -> BranchRef:
        """Create refs/heads/<name> pointing at sha."""
        ref = await self._request(
            "POST", "git/refs", "create the ref", name,
            body=CreateRefRequest(ref=f"refs/heads/{name}", sha=sha),
            response_model=RefResponse,
        )
        return BranchRef(name=name, sha=ref.object.sha)

    async def create_blob(self, content: bytes, path: str = "") -> str:
        """Upload file bytes as a base64 blob and return the blob SHA."""
        encoded = base64.b64encode(content).decode("ascii")
        blob = await self._request(
            "POST", "git/blobs", "create blob for", path or "<content>",
            body=CreateBlobRequest(content=encoded),
            response_model=ShaResponse,
        )
        return blob.sha

    async def create_tree(self, base_tree: str, entries: Sequence[BlobEntry]) -> TreeNode:
        request = CreateTreeRequest(
            base_tree=base_tree,
            tree=[
                TreeEntry(path=entry.path, mode=entry.mode, type=entry.type, sha=entry.sha)
                for entry in entries
            ],
        )
        tree = await self._request(
            "POST", "git/trees", "create tree on", base_tree,
            body=request,
            response_model=ShaResponse,
        )
        return TreeNode(sha=tree.sha, base_tree=base_tree, entries=list(entries))

    async def create_commit(
        self, message: str, tree: str, parents: Sequence[str]
    ) -> CommitObject:
        commit = await self._request(
            "POST", "git/commits", "create commit on tree", tree,
            body=CreateCommitRequest(message=message, tree=tree, parents=list(parents)),
            response_model=CommitResponse,
        )
        return _commit_object(commit)

    async def update_ref(self, name: str, sha: str) -> BranchRef:
        """Move refs/heads/<name> to sha. The forge rejects non-fast-forward moves."""
        ref = await self._request(
            "PATCH", f"git/refs/heads/{_quote_ref(name)}", "update the branch", name,
            body=UpdateRefRequest(sha=sha),
            response_model=RefResponse,
        )
        return BranchRef(name=name, sha=ref.object.sha)

    async def get_label(self, name: str) -> str:
        label = await self._request(
            "GET", f"labels/{quote(name, safe='')}", "get label", name,
            response_model=LabelResponse,
        )
        return label.name

    async def create_pull_request(
        self, title: str, body: str, head: str, base: str
    ) -> PullRequest:
        pr = await self._request(
            "POST", "pulls", "create a pull request from", f"{head} into {base}",
            body=CreatePullRequestRequest(title=title, body=body, head=head, base=base),
            response_model=PullRequestResponse,
        )
        return PullRequest(
            number=pr.number,
            url=pr.html_url,
            title=pr.title,
            body=pr.body or "",
            head=pr.head.ref,
            base=pr.base.ref,
        )

    async def add_labels(self, number: int, labels: List[str]) -> None:
        await self._request(
            "POST", f"issues/{number}/labels", "add labels to pull request", f"#{number}",
            body=AddLabelsRequest(labels=labels),
        )


def _quote_ref(name: str) -> str:
    return quote(name, safe="/")


def _commit_object(commit: CommitResponse) -> CommitObject:
    return CommitObject(
        sha=commit.sha,
        tree=commit.tree.sha,
        parents=[parent.sha for parent in commit.parents],
        message=commit.message,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return ""
