"""Request and response models for the forge REST endpoints."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


# Requests

class CreateRefRequest(BaseModel):
    """Body for POST /git/refs."""
    ref: str
    sha: str


class CreateBlobRequest(BaseModel):
    """Body for POST /git/blobs."""
    content: str
    encoding: str = "base64"


class TreeEntry(BaseModel):
    """One entry of a tree request. A null sha deletes the path."""
    path: str
    mode: str
    type: str
    sha: Optional[str]


class CreateTreeRequest(BaseModel):
    """Body for POST /git/trees."""
    base_tree: str
    tree: List[TreeEntry]


class CreateCommitRequest(BaseModel):
    """Body for POST /git/commits."""
    message: str
    tree: str
    parents: List[str]


class UpdateRefRequest(BaseModel):
    """Body for PATCH /git/refs/heads/{branch}."""
    sha: str
    force: bool = False


class CreatePullRequestRequest(BaseModel):
    """Body for POST /pulls."""
    title: str
    body: str
    head: str
    base: str


class AddLabelsRequest(BaseModel):
    """Body for POST /issues/{number}/labels."""
    labels: List[str]


# Responses

class ShaResponse(BaseModel):
    sha: str


class RepositoryResponse(BaseModel):
    full_name: str
    default_branch: str


class BranchResponse(BaseModel):
    name: str
    commit: ShaResponse


class RefObject(BaseModel):
    sha: str
    type: str


class RefResponse(BaseModel):
    ref: str
    object: RefObject


class CommitResponse(BaseModel):
    sha: str
    message: str = ""
    tree: ShaResponse
    parents: List[ShaResponse] = []


class LabelResponse(BaseModel):
    name: str


class PullRequestRef(BaseModel):
    ref: str


class PullRequestResponse(BaseModel):
    number: int
    html_url: str
    title: str
    body: Optional[str] = None
    head: PullRequestRef
    base: PullRequestRef
