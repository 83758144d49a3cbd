"""Tests for the Harness Code REST client."""

import json

import httpx
import pytest

from prcomment_core.errors import ConfigError, RemoteAPIError
from prcomment_core.harness.client import HarnessClient, HarnessConfig
from prcomment_core.models import CommentRequest

SOURCE_SHA = "a" * 40
MERGE_BASE_SHA = "b" * 40


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, responses=None):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses or [])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return httpx.Response(200, json={})

    @property
    def methods(self):
        return [r.method for r in self.requests]

    def payload(self, i):
        return json.loads(self.requests[i].content)


def _client(recorder, **config):
    config.setdefault("token", "pat.secret-token")
    http = httpx.Client(transport=httpx.MockTransport(recorder))
    return HarnessClient(HarnessConfig(**config), http=http)


def _pr_response():
    return httpx.Response(200, json={"source_sha": SOURCE_SHA, "merge_base_sha": MERGE_BASE_SHA, "number": 1})


class TestConstruction:
    def test_requires_token(self):
        with pytest.raises(ConfigError):
            HarnessClient(HarnessConfig())

    def test_defaults_base_url(self):
        client = HarnessClient(HarnessConfig(token="t"))
        assert client.base_url == "https://app.harness.io"
        client.close()

    def test_strips_trailing_slash(self):
        client = HarnessClient(HarnessConfig(token="t", endpoint="https://qa.harness.io/"))
        assert client.base_url == "https://qa.harness.io"
        client.close()

    def test_does_not_close_injected_http_client(self):
        http = httpx.Client(transport=httpx.MockTransport(Recorder()))
        HarnessClient(HarnessConfig(token="t"), http=http).close()
        assert not http.is_closed


class TestApiPath:
    def test_includes_routing_id_when_account_configured(self):
        client = _client(Recorder(), org_id="org", project_id="proj", account_id="acc")
        path = client.api_path("repo", "pullreq/1/comments")
        assert path == (
            "https://app.harness.io/gateway/code/api/v1/repos/org/proj/+/repos/repo/pullreq/1/comments?routingId=acc"
        )

    def test_no_routing_id_without_account(self):
        client = _client(Recorder(), org_id="org", project_id="proj")
        path = client.api_path("repo", "pullreq/1/comments")
        assert "routingId" not in path
        assert "?" not in path

    def test_account_level_repo_in_path(self):
        client = _client(Recorder(), account_id="acc")
        path = client.api_path("my-repo", "pullreq/1/comments")
        assert "/repos/my-repo/pullreq/1/comments" in path

    def test_routing_id_is_query_escaped(self):
        client = _client(Recorder(), account_id="a b&c")
        assert client.api_path("repo", "x").endswith("?routingId=a+b%26c")

    def test_repo_path_slashes_are_preserved(self):
        client = _client(Recorder(), org_id="org", project_id="proj")
        path = client.api_path("other/my repo", "x")
        assert "/repos/org/other/+/repos/my%20repo/x" in path


class TestComments:
    def test_create_comment_posts_text_only(self):
        rec = Recorder([httpx.Response(201, json={"id": 7})])
        _client(rec).create_comment("repo", 3, "hello")

        assert rec.methods == ["POST"]
        assert rec.requests[0].url.path.endswith("/repos/repo/pullreq/3/comments")
        assert rec.payload(0) == {"text": "hello"}

    def test_requests_carry_auth_headers(self):
        rec = Recorder()
        _client(rec, account_id="acc").create_comment("repo", 1, "hi")

        headers = rec.requests[0].headers
        assert headers["x-api-key"] == "pat.secret-token"
        assert headers["Harness-Account"] == "acc"
        assert headers["Content-Type"] == "application/json"

    def test_no_account_header_without_account(self):
        rec = Recorder()
        _client(rec).create_comment("repo", 1, "hi")
        assert "Harness-Account" not in rec.requests[0].headers

    def test_inline_comment_resolves_shas_then_posts(self):
        rec = Recorder([_pr_response(), httpx.Response(201, json={})])
        _client(rec).create_inline_comment("repo", 5, "src/app.py", 42, "nit")

        assert rec.methods == ["GET", "POST"]
        assert rec.requests[0].url.path.endswith("/repos/repo/pullreq/5")
        assert rec.payload(1) == {
            "text": "nit",
            "path": "src/app.py",
            "line_start": 42,
            "line_end": 42,
            "source_commit_sha": SOURCE_SHA,
            "target_commit_sha": MERGE_BASE_SHA,
        }

    def test_inline_comment_propagates_pr_lookup_failure(self):
        rec = Recorder([httpx.Response(404, text="not found")])
        with pytest.raises(RemoteAPIError) as exc:
            _client(rec).create_inline_comment("repo", 5, "a.py", 1, "x")

        assert exc.value.status_code == 404
        assert rec.methods == ["GET"]

    def test_code_comment_omits_parent_when_absent(self):
        rec = Recorder()
        comment = CommentRequest(text="t", path="a.py", line_start=1, line_end=3,
                                 source_commit_sha="s", target_commit_sha="m")
        _client(rec).create_code_comment("repo", 1, comment)
        assert "parent_id" not in rec.payload(0)

    def test_code_comment_sends_parent_for_replies(self):
        rec = Recorder()
        _client(rec).create_code_comment("repo", 1, CommentRequest(text="t", parent_id=12))
        assert rec.payload(0)["parent_id"] == 12

    def test_review_comment_prefixes_category(self):
        rec = Recorder()
        _client(rec).create_review_comment("repo", 1, "a.py", 3, 5, "bug", "off by one", "s", "m")

        payload = rec.payload(0)
        assert payload["text"] == "**bug:** off by one"
        assert (payload["line_start"], payload["line_end"]) == (3, 5)
        assert (payload["source_commit_sha"], payload["target_commit_sha"]) == ("s", "m")

    def test_review_comment_without_category_uses_raw_text(self):
        rec = Recorder()
        _client(rec).create_review_comment("repo", 1, "a.py", 3, 3, "", "plain", "s", "m")
        assert rec.payload(0)["text"] == "plain"

    def test_non_2xx_raises_remote_api_error(self):
        rec = Recorder([httpx.Response(500, text="boom")])
        with pytest.raises(RemoteAPIError) as exc:
            _client(rec).create_comment("repo", 1, "x")

        assert exc.value.status_code == 500
        assert exc.value.body == "boom"

    def test_transport_error_is_wrapped(self):
        rec = Recorder([httpx.ConnectError("connection refused")])
        with pytest.raises(RemoteAPIError) as exc:
            _client(rec).create_comment("repo", 1, "x")
        assert exc.value.status_code is None


class TestGetPullRequest:
    def test_decodes_shas(self):
        anchor = _client(Recorder([_pr_response()])).get_pull_request("repo", 1)
        assert anchor.source_sha == SOURCE_SHA
        assert anchor.target_sha == MERGE_BASE_SHA

    def test_malformed_body_raises(self):
        with pytest.raises(RemoteAPIError):
            _client(Recorder([httpx.Response(200, text="<html>")])).get_pull_request("repo", 1)

    def test_missing_fields_raise(self):
        with pytest.raises(RemoteAPIError):
            _client(Recorder([httpx.Response(200, json={"number": 1})])).get_pull_request("repo", 1)


class TestCreateCodeComments:
    def test_continues_after_a_failure(self):
        rec = Recorder([
            httpx.Response(201, json={}),
            httpx.Response(201, json={}),
            httpx.Response(422, text="line outside diff"),
            httpx.Response(201, json={}),
            httpx.Response(201, json={}),
        ])
        comments = [CommentRequest(text=f"c{i}", path="a.py", line_start=i, line_end=i) for i in range(5)]

        posted = _client(rec).create_code_comments("repo", 1, comments)

        assert posted == 4
        assert len(rec.requests) == 5
        assert [rec.payload(i)["text"] for i in range(5)] == ["c0", "c1", "c2", "c3", "c4"]

    def test_empty_sequence_makes_no_requests(self):
        rec = Recorder()
        assert _client(rec).create_code_comments("repo", 1, []) == 0
        assert rec.requests == []


class TestCreateStatus:
    def test_puts_check(self):
        rec = Recorder()
        _client(rec).create_status("repo", "abc123", "FAILED", "lint", "2 errors")

        assert rec.methods == ["PUT"]
        assert rec.requests[0].url.path.endswith("/repos/repo/commits/abc123/checks")
        assert rec.payload(0) == {"identifier": "lint", "status": "failure", "summary": "2 errors"}

    def test_includes_link_when_target_url_set(self):
        rec = Recorder()
        _client(rec).create_status("repo", "abc", "success", "ci", "ok", "https://ci.example.com/1")
        assert rec.payload(0)["link"] == "https://ci.example.com/1"

    def test_unknown_state_defaults_to_pending(self):
        rec = Recorder()
        _client(rec).create_status("repo", "abc", "queued", "ci", "")
        assert rec.payload(0)["status"] == "pending"
