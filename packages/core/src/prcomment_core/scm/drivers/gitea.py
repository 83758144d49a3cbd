from __future__ import annotations

from prcomment_core.errors import RemoteAPIError, UnsupportedOperationError
from prcomment_core.models import PullRequestAnchor
from prcomment_core.scm.drivers.base import BaseDriver, ReviewInput, StatusInput, parse_repo
from prcomment_core.state import State

_STATES = {
    State.SUCCESS: "success",
    State.FAILURE: "failure",
    State.ERROR: "error",
    State.PENDING: "pending",
    State.RUNNING: "pending",
}


class GiteaDriver(BaseDriver):
    """Gitea through its /api/v1 REST API."""

    name = "gitea"

    def create_comment(self, repo: str, pr_number: int, body: str):
        # Pull requests share the issue index, so PR comments are issue comments.
        comment = self._request("POST", f"{self._repo(repo)}/issues/{pr_number}/comments", {"body": body})
        return (comment or {}).get("id")

    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput):
        payload = {
            "body": "",
            "commit_id": review.sha,
            "event": "COMMENT",
            "comments": [{"path": review.path, "body": review.body, "new_position": review.line}],
        }
        result = self._request("POST", f"{self._repo(repo)}/pulls/{pr_number}/reviews", payload)
        return (result or {}).get("id")

    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        payload = {
            "state": _STATES.get(status.state, "error"),
            "context": status.label,
            "description": status.desc,
            "target_url": status.target,
        }
        self._request("POST", f"{self._repo(repo)}/statuses/{sha}", payload)

    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        pr = self._request("GET", f"{self._repo(repo)}/pulls/{pr_number}") or {}
        try:
            return PullRequestAnchor(source_sha=pr["head"]["sha"], target_sha=pr["base"]["sha"])
        except (KeyError, TypeError) as e:
            raise RemoteAPIError(f"{self.name}: unexpected pull request payload for {repo}#{pr_number}") from e

    @staticmethod
    def _repo(repo: str) -> str:
        owner, name = parse_repo(repo)
        return f"repos/{owner}/{name}"


class GogsDriver(GiteaDriver):
    """Gogs shares Gitea's comment endpoint but has no reviews, statuses or pull API."""

    name = "gogs"

    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput):
        raise UnsupportedOperationError("gogs does not support review comments")

    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        raise UnsupportedOperationError("gogs does not support commit statuses")

    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        raise UnsupportedOperationError("gogs does not expose pull requests")
