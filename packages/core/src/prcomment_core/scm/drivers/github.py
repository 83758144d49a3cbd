from __future__ import annotations

import logging
from contextlib import contextmanager

from github import Auth, Github, GithubException
from github.GithubObject import NotSet
from requests.exceptions import RequestException

from prcomment_core.errors import RemoteAPIError
from prcomment_core.models import PullRequestAnchor
from prcomment_core.scm.drivers.base import BaseDriver, ReviewInput, StatusInput
from prcomment_core.state import State

DEFAULT_BASE_URL = "https://api.github.com"

# GitHub has no running or unknown state.
_STATES = {
    State.SUCCESS: "success",
    State.FAILURE: "failure",
    State.ERROR: "error",
    State.PENDING: "pending",
    State.RUNNING: "pending",
}


@contextmanager
def _remote_errors(action: str):
    """Re-raise PyGithub API errors and requests transport errors as RemoteAPIError."""
    try:
        yield
    except GithubException as e:
        raise RemoteAPIError(f"github: {action}", status_code=e.status, body=str(e.data)) from e
    except RequestException as e:
        raise RemoteAPIError(f"github: {action} failed: {e}") from e


class GitHubDriver(BaseDriver):
    """GitHub and GitHub Enterprise, via PyGithub.

    PyGithub's own retry and write throttling are switched off: every
    operation is a single attempt bounded by ``timeout``.
    """

    name = "github"

    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: str = "", timeout: float = 30.0,
                 log: logging.Logger | None = None):
        super().__init__(log=log)
        auth = Auth.Token(token) if token else None
        self.gh = Github(
            base_url=base_url.rstrip("/"),
            auth=auth,
            timeout=int(timeout),
            retry=None,
            seconds_between_requests=None,
            seconds_between_writes=None,
        )

    def create_comment(self, repo: str, pr_number: int, body: str):
        with _remote_errors("create comment"):
            comment = self.gh.get_repo(repo).get_pull(pr_number).create_issue_comment(body)
        return comment.id

    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput):
        with _remote_errors("create review comment"):
            gh_repo = self.gh.get_repo(repo)
            commit = gh_repo.get_commit(review.sha)
            comment = gh_repo.get_pull(pr_number).create_review_comment(
                review.body, commit, review.path, line=review.line
            )
        return comment.id

    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        with _remote_errors("create status"):
            self.gh.get_repo(repo).get_commit(sha).create_status(
                state=_STATES.get(status.state, "error"),
                target_url=status.target or NotSet,
                description=status.desc or NotSet,
                context=status.label or NotSet,
            )

    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        with _remote_errors("get pull request"):
            pr = self.gh.get_repo(repo).get_pull(pr_number)
        return PullRequestAnchor(source_sha=pr.head.sha, target_sha=pr.base.sha)

    def close(self) -> None:
        self.gh.close()
