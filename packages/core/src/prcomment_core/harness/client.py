"""HTTP client for the Harness Code pull request API.

Harness Code is not GitHub-compatible enough to go through the generic
drivers: code comments must be anchored to a source/merge-base commit pair
and repositories are addressed through an org/project hierarchy, so this
client builds every request itself.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import quote, quote_plus

import httpx

from prcomment_core.config import mask_token
from prcomment_core.errors import ConfigError, RemoteAPIError
from prcomment_core.harness.paths import build_repo_path
from prcomment_core.models import CommentRequest, PullRequestAnchor, format_review_text
from prcomment_core.state import map_harness_state

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.harness.io"
DEFAULT_TIMEOUT = 30.0
_API_ROOT = "gateway/code/api/v1/repos"


@dataclass
class HarnessConfig:
    endpoint: str = ""
    token: str = ""
    account_id: str = ""
    org_id: str = ""
    project_id: str = ""


class HarnessClient:
    """Posts comments and checks to Harness Code.

    The client is stateless apart from its configuration, so a single
    instance can serve every request of one invocation.
    """

    def __init__(
        self,
        config: HarnessConfig,
        http: httpx.Client | None = None,
        log: logging.Logger | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not config.token:
            raise ConfigError("token is required for Harness Code")

        self.config = config
        self.base_url = (config.endpoint or DEFAULT_BASE_URL).rstrip("/")
        self.log = log or logger
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=timeout)

        self.log.info(
            "Initialized Harness Code client: base_url=%s account=%s org=%s project=%s token=%s",
            self.base_url,
            config.account_id,
            config.org_id,
            config.project_id,
            mask_token(config.token),
        )

    # ------------------------------------------------------------------ #
    # Comments                                                             #
    # ------------------------------------------------------------------ #

    def create_comment(self, repo: str, pr_number: int, body: str) -> None:
        """Post a plain, non-code comment on a pull request."""
        self.log.info("Creating comment on %s#%d", repo, pr_number)
        self._post_comment(repo, pr_number, CommentRequest(text=body), "failed to create comment")
        self.log.info("Created comment on %s#%d", repo, pr_number)

    def create_inline_comment(self, repo: str, pr_number: int, file_path: str, line: int, body: str) -> None:
        """Post a single-line code comment, resolving the PR commit SHAs first."""
        self.log.info("Creating inline comment on %s#%d at %s:%d", repo, pr_number, file_path, line)
        anchor = self.get_pull_request(repo, pr_number)
        comment = CommentRequest(
            text=body,
            path=file_path,
            line_start=line,
            line_end=line,
            source_commit_sha=anchor.source_sha,
            target_commit_sha=anchor.target_sha,
        )
        self._post_comment(repo, pr_number, comment, "failed to create inline comment")
        self.log.info("Created inline comment at %s:%d", file_path, line)

    def create_code_comment(self, repo: str, pr_number: int, comment: CommentRequest) -> None:
        """Post a code comment with an explicit line range and commit pair.

        Set ``comment.parent_id`` to reply in an existing thread.
        """
        self.log.debug(
            "Creating code comment on %s#%d at %s:%s-%s",
            repo,
            pr_number,
            comment.path,
            comment.line_start,
            comment.line_end,
        )
        self._post_comment(repo, pr_number, comment, "failed to create code comment")

    def create_review_comment(
        self,
        repo: str,
        pr_number: int,
        file_path: str,
        line_start: int,
        line_end: int,
        category: str,
        text: str,
        source_sha: str,
        target_sha: str,
    ) -> None:
        comment = CommentRequest(
            text=format_review_text(category, text),
            path=file_path,
            line_start=line_start,
            line_end=line_end,
            source_commit_sha=source_sha,
            target_commit_sha=target_sha,
        )
        self.create_code_comment(repo, pr_number, comment)
        self.log.info("Created review comment at %s:%d-%d (%s)", file_path, line_start, line_end, category)

    def create_code_comments(self, repo: str, pr_number: int, comments: Iterable[CommentRequest]) -> int:
        """Post each comment independently and return how many succeeded.

        A failed comment is logged and skipped; the rest are still posted.
        """
        posted = 0
        total = 0
        for i, comment in enumerate(comments):
            total += 1
            try:
                self.create_code_comment(repo, pr_number, comment)
            except RemoteAPIError as e:
                self.log.warning("Failed to create code comment %d (%s): %s", i, comment.path, e)
                continue
            posted += 1
        self.log.info("Posted %d of %d code comment(s) on %s#%d", posted, total, repo, pr_number)
        return posted

    def get_pull_request(self, repo: str, pr_number: int) -> PullRequestAnchor:
        """Fetch the source and merge-base SHAs code comments are anchored to."""
        self.log.debug("Fetching pull request %s#%d", repo, pr_number)
        resp = self._request("GET", self.api_path(repo, f"pullreq/{pr_number}"))
        self._check_response(resp, "failed to get pull request")
        try:
            data = resp.json()
            anchor = PullRequestAnchor(source_sha=data["source_sha"], target_sha=data["merge_base_sha"])
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise RemoteAPIError(f"failed to decode pull request {repo}#{pr_number}: {e}") from e
        self.log.debug("Pull request SHAs: source=%s merge_base=%s", anchor.source_sha, anchor.target_sha)
        return anchor

    # ------------------------------------------------------------------ #
    # Status checks                                                        #
    # ------------------------------------------------------------------ #

    def create_status(
        self,
        repo: str,
        commit_sha: str,
        state: str,
        context: str,
        description: str,
        target_url: str = "",
    ) -> None:
        """Create or update the check identified by ``context`` on a commit."""
        self.log.info("Creating status %r (%s) on %s@%s", context, state, repo, commit_sha)
        payload = {
            "identifier": context,
            "status": map_harness_state(state),
            "summary": description,
        }
        if target_url:
            payload["link"] = target_url
        resp = self._request("PUT", self.api_path(repo, f"commits/{commit_sha}/checks"), payload)
        self._check_response(resp, "failed to create status")
        self.log.info("Created status %r: %s", context, state)

    # ------------------------------------------------------------------ #
    # Request plumbing                                                     #
    # ------------------------------------------------------------------ #

    def api_path(self, repo: str, suffix: str) -> str:
        repo_path = build_repo_path(repo, self.config.org_id, self.config.project_id)
        # The slashes in the repo path address the org/project hierarchy and
        # must survive escaping.
        url = f"{self.base_url}/{_API_ROOT}/{quote(repo_path, safe='/+')}/{suffix}"
        if self.config.account_id:
            url = f"{url}?routingId={quote_plus(self.config.account_id)}"
        self.log.debug("API URL for %s: %s", repo, url)
        return url

    def _headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.config.token,
        }
        if self.config.account_id:
            headers["Harness-Account"] = self.config.account_id
        return headers

    def _post_comment(self, repo: str, pr_number: int, comment: CommentRequest, what: str) -> None:
        resp = self._request("POST", self.api_path(repo, f"pullreq/{pr_number}/comments"), comment.to_payload())
        self._check_response(resp, what)

    def _request(self, method: str, url: str, payload: dict | None = None) -> httpx.Response:
        if payload is not None:
            self.log.debug("Request payload: %s", json.dumps(payload))
        self.log.debug("%s %s", method, url)
        try:
            resp = self._http.request(method, url, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            self.log.error("API request failed: %s", e)
            raise RemoteAPIError(f"{method} {url} failed: {e}") from e
        self.log.debug("Response status: %d", resp.status_code)
        return resp

    def _check_response(self, resp: httpx.Response, what: str) -> None:
        if resp.is_success:
            return
        self.log.error("API request returned %d: %s", resp.status_code, resp.text)
        raise RemoteAPIError(what, status_code=resp.status_code, body=resp.text)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> HarnessClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
