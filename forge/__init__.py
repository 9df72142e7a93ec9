"""Forge REST client package."""
from __future__ import annotations

from forge.client import ForgeClient
from forge.config import ForgeSettings
from forge.errors import (
    ConflictError,
    ForgeError,
    NotFoundError,
    TransientError,
    UnauthorizedError,
)

__version__ = "0.1.0"

__all__ = [
    "ForgeClient",
    "ForgeSettings",
    "ForgeError",
    "NotFoundError",
    "UnauthorizedError",
    "ConflictError",
    "TransientError",
]
