from __future__ import annotations

from urllib.parse import quote

from prcomment_core.errors import RemoteAPIError
from prcomment_core.models import PullRequestAnchor
from prcomment_core.scm.drivers.base import BaseDriver, ReviewInput, StatusInput
from prcomment_core.state import State

DEFAULT_ENDPOINT = "https://gitlab.com"

_STATES = {
    State.SUCCESS: "success",
    State.FAILURE: "failed",
    State.ERROR: "failed",
    State.PENDING: "pending",
    State.RUNNING: "running",
}


def _project(repo: str) -> str:
    # GitLab accepts the URL-encoded namespace path wherever a project id goes.
    return "projects/" + quote(repo, safe="")


class GitLabDriver(BaseDriver):
    """GitLab merge requests through the v4 REST API."""

    name = "gitlab"

    def create_comment(self, repo: str, pr_number: int, body: str):
        note = self._request("POST", f"{_project(repo)}/merge_requests/{pr_number}/notes", {"body": body})
        return (note or {}).get("id")

    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput):
        refs = self._diff_refs(repo, pr_number)
        payload = {
            "body": review.body,
            "position": {
                "position_type": "text",
                "base_sha": refs["base_sha"],
                "start_sha": refs["start_sha"],
                "head_sha": review.sha or refs["head_sha"],
                "old_path": review.path,
                "new_path": review.path,
                "new_line": review.line,
            },
        }
        discussion = self._request("POST", f"{_project(repo)}/merge_requests/{pr_number}/discussions", payload)
        return (discussion or {}).get("id")

    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        payload = {
            "state": _STATES.get(status.state, "failed"),
            "name": status.label,
            "description": status.desc,
        }
        if status.target:
            payload["target_url"] = status.target
        self._request("POST", f"{_project(repo)}/statuses/{sha}", payload)

    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        refs = self._diff_refs(repo, pr_number)
        return PullRequestAnchor(source_sha=refs["head_sha"], target_sha=refs["base_sha"])

    def _diff_refs(self, repo: str, pr_number: int) -> dict:
        mr = self._request("GET", f"{_project(repo)}/merge_requests/{pr_number}") or {}
        refs = mr.get("diff_refs")
        if not refs:
            raise RemoteAPIError(f"gitlab: merge request {repo}!{pr_number} has no diff_refs")
        return refs
