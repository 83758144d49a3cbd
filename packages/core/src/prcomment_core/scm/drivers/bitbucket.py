"""Bitbucket Cloud and Bitbucket Server (Stash) drivers.

The two products share a name and little else: Cloud speaks the 2.0 API
with workspace/slug repositories, Server speaks rest/api/1.0 with
PROJECT/slug repositories and keeps build statuses under a separate API.
"""

from __future__ import annotations

from prcomment_core.errors import RemoteAPIError
from prcomment_core.models import PullRequestAnchor
from prcomment_core.scm.drivers.base import BaseDriver, ReviewInput, StatusInput, parse_repo
from prcomment_core.state import State

DEFAULT_ENDPOINT = "https://api.bitbucket.org/2.0"

_STATES = {
    State.SUCCESS: "SUCCESSFUL",
    State.FAILURE: "FAILED",
    State.ERROR: "FAILED",
    State.PENDING: "INPROGRESS",
    State.RUNNING: "INPROGRESS",
}


def _status_payload(status: StatusInput, unknown: str) -> dict:
    return {
        "state": _STATES.get(status.state, unknown),
        "key": status.label,
        "name": status.label,
        "url": status.target,
        "description": status.desc,
    }


class BitbucketDriver(BaseDriver):
    name = "bitbucket"

    def create_comment(self, repo: str, pr_number: int, body: str):
        comment = self._request("POST", self._pr(repo, pr_number, "comments"), {"content": {"raw": body}})
        return (comment or {}).get("id")

    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput):
        payload = {
            "content": {"raw": review.body},
            "inline": {"path": review.path, "to": review.line},
        }
        comment = self._request("POST", self._pr(repo, pr_number, "comments"), payload)
        return (comment or {}).get("id")

    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        self._request("POST", f"repositories/{repo}/commit/{sha}/statuses/build", _status_payload(status, "STOPPED"))

    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        pr = self._request("GET", self._pr(repo, pr_number)) or {}
        try:
            return PullRequestAnchor(
                source_sha=pr["source"]["commit"]["hash"],
                target_sha=pr["destination"]["commit"]["hash"],
            )
        except (KeyError, TypeError) as e:
            raise RemoteAPIError(f"bitbucket: unexpected pull request payload for {repo}#{pr_number}") from e

    @staticmethod
    def _pr(repo: str, pr_number: int, suffix: str = "") -> str:
        path = f"repositories/{repo}/pullrequests/{pr_number}"
        return f"{path}/{suffix}" if suffix else path


class BitbucketServerDriver(BaseDriver):
    name = "bitbucket-server"

    def create_comment(self, repo: str, pr_number: int, body: str):
        comment = self._request("POST", self._pr(repo, pr_number, "comments"), {"text": body})
        return (comment or {}).get("id")

    def create_review_comment(self, repo: str, pr_number: int, review: ReviewInput):
        payload = {
            "text": review.body,
            "anchor": {
                "path": review.path,
                "line": review.line,
                "lineType": "ADDED",
                "fileType": "TO",
            },
        }
        comment = self._request("POST", self._pr(repo, pr_number, "comments"), payload)
        return (comment or {}).get("id")

    def create_status(self, repo: str, sha: str, status: StatusInput) -> None:
        self._request("POST", f"rest/build-status/1.0/commits/{sha}", _status_payload(status, "FAILED"))

    def find_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        pr = self._request("GET", self._pr(repo, pr_number)) or {}
        try:
            return PullRequestAnchor(
                source_sha=pr["fromRef"]["latestCommit"],
                target_sha=pr["toRef"]["latestCommit"],
            )
        except (KeyError, TypeError) as e:
            raise RemoteAPIError(f"bitbucket-server: unexpected pull request payload for {repo}#{pr_number}") from e

    @staticmethod
    def _pr(repo: str, pr_number: int, suffix: str = "") -> str:
        project, slug = parse_repo(repo)
        path = f"rest/api/1.0/projects/{project}/repos/{slug}/pull-requests/{pr_number}"
        return f"{path}/{suffix}" if suffix else path
