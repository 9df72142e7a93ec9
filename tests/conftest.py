"""Shared fixtures: an in-memory forge served through httpx.MockTransport."""
from __future__ import annotations

import base64
import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Set, Tuple

import httpx
import pygit2
import pytest

from forge.client import ForgeClient
from models.repo_context import RepoContext

API_URL = "https://api.github.com"


def _sha(*parts: Any) -> str:
    return hashlib.sha1(json.dumps(parts, sort_keys=True).encode()).hexdigest()


class FakeForge:
    """Minimal stand-in for the forge's git data, label and pull endpoints.

    Every request is recorded as (method, path, body) with the path relative to
    repos/{owner}/{name}. Entries in `failures` force a status for a given
    (method, path).
    """

    def __init__(self, owner: str = "octo", name: str = "repo", default_branch: str = "main"):
        self.owner = owner
        self.name = name
        self.default_branch = default_branch
        self.branches: Dict[str, str] = {}
        self.commits: Dict[str, Dict[str, Any]] = {}
        self.blobs: Dict[str, bytes] = {}
        self.trees: Dict[str, Dict[str, Any]] = {}
        self.labels: Set[str] = set()
        self.pulls: List[Dict[str, Any]] = []
        self.issue_labels: Dict[int, List[str]] = {}
        self.requests: List[Tuple[str, str, Optional[Any]]] = []
        self.failures: Dict[Tuple[str, str], Tuple[int, str]] = {}

    def add_branch(self, name: str, sha: str, tree: str = "tree0") -> None:
        self.branches[name] = sha
        self.commits.setdefault(sha, {"tree": tree, "parents": [], "message": "initial"})

    def calls(self, method: str, prefix: str = "") -> List[Optional[Any]]:
        return [
            body for m, path, body in self.requests
            if m == method and path.startswith(prefix)
        ]

    def client(self) -> ForgeClient:
        http = httpx.AsyncClient(
            base_url=API_URL,
            headers={"Authorization": "token test-token"},
            transport=httpx.MockTransport(self.handler),
        )
        return ForgeClient(self.owner, self.name, http)

    def handler(self, request: httpx.Request) -> httpx.Response:
        prefix = f"/repos/{self.owner}/{self.name}"
        path = request.url.path[len(prefix):].lstrip("/")
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        if (request.method, path) in self.failures:
            status, message = self.failures[(request.method, path)]
            return httpx.Response(status, json={"message": message})

        return self._route(request.method, path, body)

    def _route(self, method: str, path: str, body: Any) -> httpx.Response:
        if method == "GET" and path == "":
            return httpx.Response(
                200,
                json={"full_name": f"{self.owner}/{self.name}", "default_branch": self.default_branch},
            )

        if method == "GET" and path.startswith("branches/"):
            name = path[len("branches/"):]
            if name not in self.branches:
                return _not_found("Branch not found")
            return httpx.Response(200, json={"name": name, "commit": {"sha": self.branches[name]}})

        if method == "GET" and path.startswith("git/commits/"):
            sha = path[len("git/commits/"):]
            if sha not in self.commits:
                return _not_found()
            return httpx.Response(200, json=self._commit_json(sha))

        if method == "POST" and path == "git/refs":
            name = body["ref"][len("refs/heads/"):]
            if name in self.branches:
                return httpx.Response(422, json={"message": "Reference already exists"})
            self.branches[name] = body["sha"]
            return httpx.Response(201, json=self._ref_json(name))

        if method == "POST" and path == "git/blobs":
            content = base64.b64decode(body["content"])
            sha = hashlib.sha1(b"blob " + content).hexdigest()
            self.blobs[sha] = content
            return httpx.Response(201, json={"sha": sha})

        if method == "POST" and path == "git/trees":
            sha = _sha("tree", body)
            self.trees[sha] = body
            return httpx.Response(201, json={"sha": sha})

        if method == "POST" and path == "git/commits":
            sha = _sha("commit", body)
            self.commits[sha] = {
                "tree": body["tree"],
                "parents": body["parents"],
                "message": body["message"],
            }
            return httpx.Response(201, json=self._commit_json(sha))

        if method == "PATCH" and path.startswith("git/refs/heads/"):
            name = path[len("git/refs/heads/"):]
            if name not in self.branches:
                return httpx.Response(422, json={"message": "Reference does not exist"})
            commit = self.commits.get(body["sha"])
            if commit is None:
                return httpx.Response(422, json={"message": "Object does not exist"})
            if not body.get("force") and self.branches[name] not in commit["parents"]:
                return httpx.Response(422, json={"message": "Update is not a fast forward"})
            self.branches[name] = body["sha"]
            return httpx.Response(200, json=self._ref_json(name))

        if method == "GET" and path.startswith("labels/"):
            name = path[len("labels/"):]
            if name not in self.labels:
                return _not_found()
            return httpx.Response(200, json={"name": name, "color": "ededed"})

        if method == "POST" and path == "pulls":
            number = len(self.pulls) + 1
            pr = {
                "number": number,
                "html_url": f"https://github.com/{self.owner}/{self.name}/pull/{number}",
                "title": body["title"],
                "body": body["body"],
                "head": {"ref": body["head"]},
                "base": {"ref": body["base"]},
            }
            self.pulls.append(pr)
            return httpx.Response(201, json=pr)

        if method == "POST" and path.startswith("issues/") and path.endswith("/labels"):
            number = int(path.split("/")[1])
            self.issue_labels.setdefault(number, []).extend(body["labels"])
            return httpx.Response(200, json=[{"name": label} for label in body["labels"]])

        return _not_found()

    def _commit_json(self, sha: str) -> Dict[str, Any]:
        commit = self.commits[sha]
        return {
            "sha": sha,
            "message": commit["message"],
            "tree": {"sha": commit["tree"]},
            "parents": [{"sha": parent} for parent in commit["parents"]],
        }

    def _ref_json(self, name: str) -> Dict[str, Any]:
        return {
            "ref": f"refs/heads/{name}",
            "object": {"sha": self.branches[name], "type": "commit"},
        }


def _not_found(message: str = "Not Found") -> httpx.Response:
    return httpx.Response(404, json={"message": message})


@pytest.fixture
def fake_forge() -> FakeForge:
    """A forge whose default branch main points at abc123."""
    forge = FakeForge()
    forge.add_branch("main", "abc123", tree="tree0")
    return forge


@pytest.fixture
def repo_context(fake_forge: FakeForge) -> RepoContext:
    return RepoContext(
        owner=fake_forge.owner,
        name=fake_forge.name,
        default_branch="main",
        default_branch_sha="abc123",
    )


def commit_paths(repo: pygit2.Repository, paths: List[str], message: str) -> None:
    index = repo.index
    for path in paths:
        index.add(path)
    index.write()
    tree_id = index.write_tree()
    author = pygit2.Signature("Test User", "test@example.com")
    parents = [] if repo.head_is_unborn else [repo.head.target]
    repo.create_commit("HEAD", author, author, message, tree_id, parents)


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary Git repository with one commit and an origin remote.

    Yields:
        Path to the temporary repository
    """
    repo_path = tmp_path / "test_repo"
    repo_path.mkdir()
    repo = pygit2.init_repository(str(repo_path))

    (repo_path / "test.txt").write_text("test content")
    (repo_path / "old.txt").write_text("old content")
    (repo_path / "docs").mkdir()
    (repo_path / "docs" / "guide.md").write_text("# Guide")
    commit_paths(repo, ["test.txt", "old.txt", "docs/guide.md"], "Initial commit")

    repo.remotes.create("origin", "https://github.com/test-org/test-repo.git")

    yield repo_path
