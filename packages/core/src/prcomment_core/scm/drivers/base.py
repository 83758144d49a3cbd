"""Base driver for the generic SCM backends.

Every driver exposes the same four operations the backend handle needs:

    create_comment()        top-level pull request comment
    create_review_comment() comment anchored to a file and line
    create_status()         commit status
    find_pull_request()     head/base commit SHAs of a pull request

The httpx-backed drivers share ``_request`` here, which turns non-2xx
responses, transport failures and undecodable bodies into RemoteAPIError.
Subclasses only describe each backend's endpoints and payloads.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from prcomment_core.errors import ConfigError, RemoteAPIError
from prcomment_core.models import PullRequestAnchor
from prcomment_core.state import State

logger = logging.getLogger(__name__)


@dataclass
class ReviewInput:
    body: str
    path: str
    line: int
    sha: str


@dataclass
class StatusInput:
    state: State
    label: str
    desc: str = ""
    target: str = ""


def parse_repo(repo: str) -> tuple[str, str]:
    """Split ``owner/name`` into its two halves."""
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name:
        raise ConfigError(f"invalid repository format: {repo} (expected owner/repo)")
    return owner, name


class BaseDriver(ABC):
    name: str = "scm"

    def __init__(self, http: httpx.Client | None = None, log: logging.Logger | None = None):
        self.http = http
        self.log = log or logger

    @abstractmethod
    def create_comment(self, repo: str, pr_number: int, body: str) -> Any:
        """Post a comment on the pull request and return its id."""

    @abstractmethod
    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput) -> Any:
        """Post a comment anchored to ``review.path``/``review.line`` and return its id."""

    @abstractmethod
    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        """Create a commit status on ``sha``."""

    @abstractmethod
    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        """Return the head and base commit SHAs of the pull request."""

    def close(self) -> None:
        if self.http is not None:
            self.http.close()

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        """Send one request and return the decoded JSON body (None when empty)."""
        self.log.debug("%s %s %s", self.name, method, path)
        if payload is not None:
            self.log.debug("Request payload: %s", json.dumps(payload))
        try:
            resp = self.http.request(method, path, json=payload)
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"{self.name}: {method} {path} failed: {e}") from e

        if not resp.is_success:
            raise RemoteAPIError(f"{self.name}: {method} {path}", status_code=resp.status_code, body=resp.text)
        if not resp.content:
            return None
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise RemoteAPIError(f"{self.name}: could not decode response of {method} {path}: {e}") from e
