"""Tests for the branch resolver."""
from __future__ import annotations

import pytest

from engine.branches import ensure_branch, ensure_branches
from forge.errors import TransientError, UnauthorizedError


@pytest.mark.asyncio
async def test_ensure_branch_existing(fake_forge):
    async with fake_forge.client() as client:
        branch = await ensure_branch(client, "main", "fallback")

    assert branch.sha == "abc123"
    assert fake_forge.calls("POST", "git/refs") == []


@pytest.mark.asyncio
async def test_ensure_branch_creates_missing(fake_forge):
    async with fake_forge.client() as client:
        branch = await ensure_branch(client, "feature/x", "abc123")

    assert branch.name == "feature/x"
    assert branch.sha == "abc123"
    assert fake_forge.calls("POST", "git/refs") == [
        {"ref": "refs/heads/feature/x", "sha": "abc123"}
    ]
    assert fake_forge.branches["feature/x"] == "abc123"


@pytest.mark.asyncio
async def test_ensure_branch_is_idempotent(fake_forge):
    async with fake_forge.client() as client:
        first = await ensure_branch(client, "release", "abc123")
        second = await ensure_branch(client, "release", "abc123")

    assert first == second
    assert len(fake_forge.calls("POST", "git/refs")) == 1


@pytest.mark.asyncio
async def test_ensure_branch_unauthorized_create(fake_forge):
    fake_forge.failures[("POST", "git/refs")] = (403, "Resource not accessible by integration")

    async with fake_forge.client() as client:
        with pytest.raises(UnauthorizedError, match="not authorized to create the ref release"):
            await ensure_branch(client, "release", "abc123")


@pytest.mark.asyncio
async def test_ensure_branch_lookup_failure_is_fatal(fake_forge):
    fake_forge.failures[("GET", "branches/main")] = (500, "Server Error")

    async with fake_forge.client() as client:
        with pytest.raises(TransientError):
            await ensure_branch(client, "main", "abc123")

    assert fake_forge.calls("POST", "git/refs") == []


@pytest.mark.asyncio
async def test_ensure_branches_head_from_new_base(fake_forge, repo_context):
    async with fake_forge.client() as client:
        base, head = await ensure_branches(client, repo_context, "develop", "develop-1")

    assert base.sha == "abc123"
    assert head.sha == base.sha
    assert fake_forge.calls("POST", "git/refs") == [
        {"ref": "refs/heads/develop", "sha": "abc123"},
        {"ref": "refs/heads/develop-1", "sha": "abc123"},
    ]


@pytest.mark.asyncio
async def test_ensure_branches_head_from_existing_base_tip(fake_forge, repo_context):
    fake_forge.add_branch("develop", "def456")

    async with fake_forge.client() as client:
        base, head = await ensure_branches(client, repo_context, "develop", "develop-1")

    assert head.sha == "def456"
    assert fake_forge.calls("POST", "git/refs") == [
        {"ref": "refs/heads/develop-1", "sha": "def456"},
    ]


@pytest.mark.asyncio
async def test_ensure_branches_without_head(fake_forge, repo_context):
    async with fake_forge.client() as client:
        base, head = await ensure_branches(client, repo_context, "main")

    assert base.sha == "abc123"
    assert head is None
