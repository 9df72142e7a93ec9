"""Open a pull request for the committed head branch and label it."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from engine.outputs import OutputExporter
from forge.client import ForgeClient
from forge.errors import NotFoundError
from models.pull_request import PullRequest, PullRequestSpec

logger = logging.getLogger(__name__)


class MissingLabelError(Exception):
    """Raised when a requested label does not exist on the repository."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Label {label} not found. Create the label first")


async def validate_labels(client: ForgeClient, labels: Sequence[str]) -> None:
    """Confirm that every label exists.

    Raises:
        MissingLabelError: On the first label the repository does not have
        ForgeError: For any other lookup failure
    """
    for label in labels:
        try:
            await client.get_label(label)
        except NotFoundError as e:
            raise MissingLabelError(label) from e


class PullRequestPublisher:
    """Validates labels, opens the pull request, then attaches the labels."""

    def __init__(
        self,
        client: ForgeClient,
        exporter: Optional[OutputExporter] = None,
    ) -> None:
        self.client = client
        self.exporter = exporter or OutputExporter()

    async def publish(self, spec: PullRequestSpec) -> PullRequest:
        """Create the pull request described by spec.

        Args:
            spec: Base and head refs, title, description and labels

        Returns:
            The created pull request

        Raises:
            MissingLabelError: If a label is missing; no pull request is created
            ForgeError: If creating the pull request or adding labels fails
        """
        await validate_labels(self.client, spec.labels)

        pr = await self.client.create_pull_request(
            title=spec.title,
            body=spec.description,
            head=spec.head_ref,
            base=spec.base_ref,
        )
        logger.info(f"Created PR #{pr.number}: {spec.title}", extra={"pr_url": pr.url})

        if spec.labels:
            await self.client.add_labels(pr.number, list(spec.labels))
            pr = pr.model_copy(update={"labels": list(spec.labels)})
            logger.info(f"Added labels to PR #{pr.number}", extra={"labels": spec.labels})

        self.exporter.export("pr-number", str(pr.number))
        self.exporter.export("branch", spec.head_ref)
        return pr
