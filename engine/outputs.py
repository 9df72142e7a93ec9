"""Export run results as GitHub Actions step outputs."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class CISettings(BaseSettings):
    """GitHub Actions environment."""

    github_actions: bool = False
    github_output: Optional[Path] = None


class OutputExporter:
    """Appends key=value lines to the file named by $GITHUB_OUTPUT."""

    def __init__(self, settings: Optional[CISettings] = None) -> None:
        self.settings = settings or CISettings()

    @property
    def enabled(self) -> bool:
        return self.settings.github_actions and self.settings.github_output is not None

    def export(self, key: str, value: str) -> bool:
        """Write one output. Failures are logged and never raised.

        Returns:
            True if the output was written
        """
        if not self.enabled:
            return False

        try:
            with open(self.settings.github_output, "a", encoding="utf-8") as f:
                f.write(f"{key}={value}\n")
        except OSError as e:
            logger.warning(
                "Failed to export CI output",
                extra={"key": key, "error": str(e)},
            )
            return False

        logger.debug(f"Exported {key}={value}")
        return True
