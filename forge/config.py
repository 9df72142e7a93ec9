"""Forge connection settings."""
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForgeSettings(BaseSettings):
    """Settings for talking to the forge REST API.

    The token is read from GH_COMMIT_TOKEN, GITHUB_TOKEN or GH_TOKEN, in that
    order. GH_REPO ("owner/name") overrides the repository taken from the
    local remote.
    """

    model_config = SettingsConfigDict(env_prefix="GH_COMMIT_", populate_by_name=True)

    token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GH_COMMIT_TOKEN", "GITHUB_TOKEN", "GH_TOKEN"),
    )
    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    repository: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GH_COMMIT_REPOSITORY", "GH_REPO"),
    )
