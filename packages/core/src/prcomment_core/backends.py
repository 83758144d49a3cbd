"""Backend handles: one capability interface over every provider.

The orchestrator only ever talks to a BackendHandle. HarnessBackend wraps
the Harness Code REST client; GenericBackend wraps one of the generic SCM
drivers. new_backend() is the single place that decides which one a
provider identity gets.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from prcomment_core.config import PluginConfig
from prcomment_core.errors import RemoteAPIError, UnsupportedOperationError
from prcomment_core.harness.client import HarnessClient, HarnessConfig
from prcomment_core.models import CommentRequest, ReviewItem, StatusRequest
from prcomment_core.scm.drivers.base import BaseDriver, ReviewInput, StatusInput
from prcomment_core.scm.factory import Provider, new_client
from prcomment_core.state import map_status_state

logger = logging.getLogger(__name__)


class BackendHandle(ABC):
    @abstractmethod
    def post_comment(self, repo: str, pr_number: int, body: str) -> None:
        """Post a plain pull request comment."""

    @abstractmethod
    def post_inline_comment(
        self, repo: str, pr_number: int, file_path: str, line: int, body: str, commit_sha: str = ""
    ) -> None:
        """Post a comment anchored to one line of one file."""

    @abstractmethod
    def post_status(self, repo: str, status: StatusRequest) -> None:
        """Create a commit status check."""

    @abstractmethod
    def post_batch(self, repo: str, pr_number: int, reviews: Sequence[ReviewItem], commit_sha: str = "") -> int:
        """Post every review best-effort and return how many were posted.

        Failures of individual items are logged and skipped. Only a failure
        to prepare the batch (e.g. resolving commit SHAs) propagates.
        """

    def close(self) -> None:
        """Release the underlying HTTP client."""


class HarnessBackend(BackendHandle):
    def __init__(self, client: HarnessClient):
        self.client = client

    def post_comment(self, repo: str, pr_number: int, body: str) -> None:
        self.client.create_comment(repo, pr_number, body)

    def post_inline_comment(
        self, repo: str, pr_number: int, file_path: str, line: int, body: str, commit_sha: str = ""
    ) -> None:
        # Harness anchors on the PR's own source/merge-base pair, not on commit_sha.
        self.client.create_inline_comment(repo, pr_number, file_path, line, body)

    def post_status(self, repo: str, status: StatusRequest) -> None:
        self.client.create_status(
            repo, status.commit_sha, status.state, status.context, status.description, status.target_url
        )

    def post_batch(self, repo: str, pr_number: int, reviews: Sequence[ReviewItem], commit_sha: str = "") -> int:
        anchor = self.client.get_pull_request(repo, pr_number)
        comments = [
            CommentRequest(
                text=item.text,
                path=item.file_path,
                line_start=item.line_start,
                line_end=item.line_end,
                source_commit_sha=anchor.source_sha,
                target_commit_sha=anchor.target_sha,
            )
            for item in reviews
        ]
        return self.client.create_code_comments(repo, pr_number, comments)

    def close(self) -> None:
        self.client.close()


class GenericBackend(BackendHandle):
    def __init__(self, driver: BaseDriver, log: logging.Logger | None = None):
        self.driver = driver
        self.log = log or logger

    def post_comment(self, repo: str, pr_number: int, body: str) -> None:
        comment_id = self.driver.create_comment(repo, pr_number, body)
        self.log.info("Created comment %s on %s#%d", comment_id, repo, pr_number)

    def post_inline_comment(
        self, repo: str, pr_number: int, file_path: str, line: int, body: str, commit_sha: str = ""
    ) -> None:
        sha = self._resolve_sha(repo, pr_number, commit_sha)
        self.driver.create_review_comment(repo, pr_number, ReviewInput(body=body, path=file_path, line=line, sha=sha))
        self.log.info("Created inline comment at %s:%d", file_path, line)

    def post_status(self, repo: str, status: StatusRequest) -> None:
        status_input = StatusInput(
            state=map_status_state(status.state),
            label=status.context,
            desc=status.description,
            target=status.target_url,
        )
        self.driver.create_status(repo, status.commit_sha, status_input)
        self.log.info("Created status %r: %s", status.context, status.state)

    def post_batch(self, repo: str, pr_number: int, reviews: Sequence[ReviewItem], commit_sha: str = "") -> int:
        try:
            sha = self._resolve_sha(repo, pr_number, commit_sha)
        except UnsupportedOperationError as e:
            # Each item is still attempted and fails or posts on its own.
            self.log.warning("Cannot resolve PR head for %s#%d: %s", repo, pr_number, e)
            sha = commit_sha
        posted = 0
        for i, item in enumerate(reviews):
            review = ReviewInput(body=item.text, path=item.file_path, line=item.line_end, sha=sha)
            try:
                self.driver.create_review_comment(repo, pr_number, review)
            except (RemoteAPIError, UnsupportedOperationError) as e:
                self.log.warning("Failed to create review comment %d (%s): %s", i, item.file_path, e)
                continue
            posted += 1
        self.log.info("Posted %d of %d review comment(s) on %s#%d", posted, len(reviews), repo, pr_number)
        return posted

    def close(self) -> None:
        self.driver.close()

    def _resolve_sha(self, repo: str, pr_number: int, commit_sha: str) -> str:
        if commit_sha:
            return commit_sha
        anchor = self.driver.find_pull_request(repo, pr_number)
        self.log.debug("No commit SHA configured; using PR head %s", anchor.source_sha)
        return anchor.source_sha


def new_backend(config: PluginConfig, log: logging.Logger | None = None) -> BackendHandle:
    """Build the backend handle for the configured provider."""
    provider = Provider.parse(config.scm_provider)
    if provider is Provider.HARNESS:
        client = HarnessClient(
            HarnessConfig(
                endpoint=config.scm_endpoint,
                token=config.token,
                account_id=config.harness_account_id,
                org_id=config.harness_org_id,
                project_id=config.harness_project_id,
            ),
            log=log,
        )
        return HarnessBackend(client)

    driver = new_client(provider, endpoint=config.scm_endpoint, token=config.token, log=log)
    return GenericBackend(driver, log=log)
